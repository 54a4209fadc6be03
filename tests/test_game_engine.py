from unittest.mock import MagicMock

import pytest

from vector_racetrack.ai.strategies import DoNotMoveStrategy
from vector_racetrack.core.agent import QUIT
from vector_racetrack.core.errors import InvalidAccelerationError
from vector_racetrack.core.geometry import Direction, PositionVector
from vector_racetrack.core.state import NO_WINNER
from vector_racetrack.engine.game_engine import GameEngine
from vector_racetrack.engine.track import Track
from tests.test_utils import STRAIGHT_TRACK, scripted_strategy

R = Direction.RIGHT
N = Direction.NONE

THREE_CARS = "\n".join(
    [
        "#########",
        "#a   >  #",
        "#b   >  #",
        "#c   >  #",
        "#########",
    ]
)


def test_new_race(scenario):
    game = scenario()

    assert game.engine.car_count == 2
    assert game.engine.current_car.id == "a"
    assert game.engine.winner == NO_WINNER
    assert not game.engine.is_finished


def test_turns_alternate(scenario):
    game = scenario(moves={"a": [R], "b": [R]})

    game.run_turn()
    assert game.get_car("a").position == PositionVector(2, 1)
    assert game.engine.current_car.id == "b"

    game.run_turn()
    assert game.get_car("b").position == PositionVector(2, 3)
    assert game.engine.current_car.id == "a"


def test_race_is_won_by_a_forward_crossing(scenario):
    # a: (1,1) -> (2,1) -> (4,1) -> through the finish at (5,1) to (6,1)
    game = scenario(moves={"a": [R, R, N]})

    result = game.engine.run_race()

    assert result.winner_idx == 0
    assert result.winner_id == "a"
    assert result.has_winner
    assert result.turns == 5
    assert game.get_car("a").position == PositionVector(6, 1)
    # The winner keeps the turn
    assert game.engine.current_car.id == "a"


def test_no_turns_after_the_race_is_won(scenario):
    game = scenario(moves={"a": [R, R, N]})
    game.run_turns(5)
    b_position = game.get_car("b").position

    game.run_turns(3)

    assert game.engine.winner == 0
    assert game.get_car("b").position == b_position


def test_backward_crossing_does_not_win(scenario):
    game = scenario(moves={"a": [Direction.LEFT]})
    game.place("a", 6, 1)

    game.run_turn()

    assert game.engine.winner == NO_WINNER
    assert game.get_car("a").remaining_laps == 2
    assert game.get_car("a").position == PositionVector(5, 1)


def test_last_car_standing_wins(scenario):
    game = scenario(moves={"a": [Direction.UP]})

    game.run_turn()

    assert game.get_car("a").crashed
    assert game.engine.winner == 1
    assert game.engine.is_finished


def test_crashed_cars_lose_their_turn(scenario):
    b_strategy = scripted_strategy()
    game = scenario(
        THREE_CARS,
        moves={"a": [R, R], "c": [R, R]},
        strategies={"b": b_strategy},
    )
    game.get_car("b").crash("wall collision", PositionVector(0, 2))

    game.run_turn()
    assert game.engine.current_car.id == "c"

    game.run_turn()
    assert game.engine.current_car.id == "a"
    b_strategy.next_move.assert_not_called()


def test_crashed_current_car_is_skipped(scenario):
    game = scenario(THREE_CARS)
    game.get_car("a").crash("wall collision", PositionVector(0, 1))

    game.run_turn()

    assert game.engine.current_car.id == "b"
    assert game.get_car("a").position == PositionVector(1, 1)


def test_all_cars_crashed_ends_without_winner(scenario):
    track = "\n".join(["####", "#a #", "####"])
    game = scenario(track, moves={"a": [Direction.UP]})

    result = game.engine.run_race()

    assert result.winner_idx == NO_WINNER
    assert result.winner_id is None
    assert not result.has_winner
    assert game.engine.is_finished


def test_lone_car_wins_after_its_first_clean_turn(scenario):
    track = "\n".join(["#####", "#a  #", "#####"])
    game = scenario(track, moves={"a": [R]})

    game.run_turn()

    assert game.get_car("a").position == PositionVector(2, 1)
    assert game.engine.winner == 0
    assert game.engine.is_finished
    assert game.engine.current_car.id == "a"


def test_advance_turn_terminates_when_everyone_crashed(scenario):
    game = scenario(THREE_CARS)
    game.state.current_car_idx = 1
    for car in game.track.car_list:
        car.crash("wall collision", car.position)

    game.engine.advance_turn()

    assert game.engine.current_car.id == "b"


def test_advance_turn_wraps_and_counts_rounds(scenario):
    game = scenario()

    game.engine.advance_turn()
    assert game.state.current_car_idx == 1
    assert game.engine.log_context.total_turn == 0

    game.engine.advance_turn()
    assert game.state.current_car_idx == 0
    assert game.engine.log_context.total_turn == 1


def test_quit_aborts_the_race(scenario):
    game = scenario(strategies={"b": scripted_strategy(QUIT)})

    result = game.engine.run_race()

    assert result.aborted
    assert result.winner_idx == NO_WINNER
    assert result.turns == 2
    assert game.engine.is_finished


def test_turn_limit(scenario):
    game = scenario()

    result = game.engine.run_race(max_turns=4)

    assert result.turns == 4
    assert not result.has_winner
    assert not result.aborted


def test_strategy_sees_its_own_car(scenario):
    strategy = scripted_strategy(N)
    game = scenario(strategies={"b": strategy})

    game.run_turns(2)

    strategy.next_move.assert_called_once_with(game.get_car("b"))


def test_do_car_turn_rejects_missing_acceleration(scenario):
    game = scenario()

    with pytest.raises(InvalidAccelerationError):
        game.engine.do_car_turn(None)


def test_engine_logs_through_rich_handler():
    track = Track.from_text(STRAIGHT_TRACK)
    engine = GameEngine.for_track(
        track, {0: DoNotMoveStrategy(), 1: DoNotMoveStrategy()}
    )
    other = GameEngine.for_track(
        Track.from_text(STRAIGHT_TRACK), logging_enabled=False
    )

    engine.run_turn()

    assert engine.logging_enabled
    assert engine.log_context.engine_id != other.log_context.engine_id
    assert engine.log_context.turn_log_count > 0


def test_set_strategy_replaces_the_driver(scenario):
    game = scenario()
    replacement = MagicMock()
    replacement.next_move.return_value = R

    game.engine.set_strategy(0, replacement)
    game.run_turn()

    assert game.get_car("a").position == PositionVector(2, 1)
