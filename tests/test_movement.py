import pytest

from vector_racetrack.core.errors import InvalidAccelerationError
from vector_racetrack.core.geometry import Direction, PositionVector
from vector_racetrack.core.space import SpaceType
from vector_racetrack.engine.movement import (
    Continuing,
    Crashed,
    Won,
    calculate_path,
    is_winning_crossing,
    resolve_turn,
)
from vector_racetrack.engine.track import Track
from tests.test_utils import STRAIGHT_TRACK


def P(x: int, y: int) -> PositionVector:
    return PositionVector(x, y)


@pytest.fixture
def track() -> Track:
    return Track.from_text(STRAIGHT_TRACK)


def test_path_horizontal_and_reverse():
    assert calculate_path(P(1, 1), P(4, 1)) == [P(1, 1), P(2, 1), P(3, 1), P(4, 1)]
    assert calculate_path(P(4, 1), P(1, 1)) == [P(4, 1), P(3, 1), P(2, 1), P(1, 1)]


def test_path_single_cell():
    assert calculate_path(P(2, 2), P(2, 2)) == [P(2, 2)]


def test_path_diagonal():
    assert calculate_path(P(0, 0), P(3, 3)) == [P(0, 0), P(1, 1), P(2, 2), P(3, 3)]


def test_path_steep_line_has_one_cell_per_row():
    path = calculate_path(P(0, 0), P(1, 3))

    assert path == [P(0, 0), P(0, 1), P(1, 2), P(1, 3)]


def test_path_length_and_contiguity():
    start, end = P(7, 2), P(-4, 9)
    path = calculate_path(start, end)

    assert path[0] == start
    assert path[-1] == end
    assert len(path) == max(abs(end.x - start.x), abs(end.y - start.y)) + 1
    for a, b in zip(path, path[1:]):
        assert max(abs(a.x - b.x), abs(a.y - b.y)) == 1


def test_none_acceleration_is_rejected(track: Track):
    car = track.cars["a"]

    with pytest.raises(InvalidAccelerationError):
        resolve_turn(car, None, track, track.car_list)
    assert car.velocity == P(0, 0)


def test_move_on_track(track: Track):
    car = track.cars["a"]

    outcome = resolve_turn(car, Direction.RIGHT, track, track.car_list)

    assert outcome == Continuing()
    assert car.velocity == P(1, 0)
    assert car.position == P(2, 1)


def test_velocity_keeps_its_momentum(track: Track):
    car = track.cars["a"]

    resolve_turn(car, Direction.RIGHT, track, track.car_list)
    resolve_turn(car, Direction.NONE, track, track.car_list)

    assert car.velocity == P(1, 0)
    assert car.position == P(3, 1)


def test_wall_crash_keeps_start_position(track: Track):
    car = track.cars["a"]

    outcome = resolve_turn(car, Direction.UP, track, track.car_list)

    assert outcome == Crashed(reason="wall collision", position=P(1, 0))
    assert car.crashed
    assert car.position == P(1, 1)
    assert car.velocity == P(0, -1)


def test_crash_into_another_car(track: Track):
    car = track.cars["a"]
    car.velocity = P(0, 1)

    outcome = resolve_turn(car, Direction.DOWN, track, track.car_list)

    assert outcome == Crashed(reason="car collision", position=P(1, 3))
    assert car.crashed
    assert car.position == P(1, 1)
    assert not track.cars["b"].crashed


def test_crashed_cars_are_not_obstacles(track: Track):
    car = track.cars["a"]
    track.cars["b"].crash("wall collision", P(0, 3))
    car.velocity = P(0, 1)

    outcome = resolve_turn(car, Direction.DOWN, track, track.car_list)

    assert outcome == Continuing()
    assert car.position == P(1, 3)


def test_crashed_car_stays_frozen(track: Track):
    car = track.cars["a"]
    resolve_turn(car, Direction.UP, track, track.car_list)

    outcome = resolve_turn(car, Direction.DOWN_RIGHT, track, track.car_list)

    assert outcome == Crashed(reason="wall collision", position=P(1, 0))
    assert car.crashed
    assert car.position == P(1, 1)
    assert car.velocity == P(0, -1)


def test_forward_crossing_on_last_lap_wins(track: Track):
    car = track.cars["a"]
    car.position = P(4, 1)

    outcome = resolve_turn(car, Direction.RIGHT, track, track.car_list)

    assert outcome == Won()
    assert car.position == P(5, 1)
    assert car.remaining_laps == 1


def test_winning_car_still_moves_to_its_end_position(track: Track):
    car = track.cars["a"]
    car.position = P(3, 1)
    car.velocity = P(2, 0)

    outcome = resolve_turn(car, Direction.RIGHT, track, track.car_list)

    assert outcome == Won()
    assert car.position == P(6, 1)


def test_backward_crossing_adds_a_lap(track: Track):
    car = track.cars["a"]
    car.position = P(6, 1)

    outcome = resolve_turn(car, Direction.LEFT, track, track.car_list)

    assert outcome == Continuing()
    assert car.position == P(5, 1)
    assert car.remaining_laps == 2


def test_forward_crossing_with_laps_left(track: Track):
    car = track.cars["a"]
    car.remaining_laps = 2
    car.position = P(4, 1)
    car.velocity = P(2, 0)

    outcome = resolve_turn(car, Direction.NONE, track, track.car_list)

    assert outcome == Continuing()
    assert car.remaining_laps == 1
    assert car.position == P(6, 1)


def test_winning_crossing_rule():
    assert is_winning_crossing(SpaceType.FINISH_RIGHT, P(1, 0), 1)
    assert not is_winning_crossing(SpaceType.FINISH_RIGHT, P(1, 0), 2)
    assert not is_winning_crossing(SpaceType.FINISH_RIGHT, P(-1, 0), 1)
    assert not is_winning_crossing(SpaceType.TRACK, P(1, 0), 1)
