from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from vector_racetrack.core.errors import InvalidAccelerationError
from vector_racetrack.core.geometry import PositionVector
from vector_racetrack.core.space import SpaceType

if TYPE_CHECKING:
    from collections.abc import Sequence

    from vector_racetrack.core.geometry import Direction
    from vector_racetrack.core.state import CarState
    from vector_racetrack.core.types import CrashReason
    from vector_racetrack.engine.track import Track

logger = logging.getLogger("vector_racetrack")


@dataclass(frozen=True, slots=True)
class Continuing:
    pass


@dataclass(frozen=True, slots=True)
class Crashed:
    reason: CrashReason
    position: PositionVector


@dataclass(frozen=True, slots=True)
class Won:
    pass


type TurnOutcome = Continuing | Crashed | Won


def calculate_path(start: PositionVector, end: PositionVector) -> list[PositionVector]:
    """
    All grid cells on the line from `start` to `end`, both included,
    using Bresenham's line algorithm.
    """
    x0, y0 = start.x, start.y
    x1, y1 = end.x, end.y
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    path: list[PositionVector] = []
    while True:
        path.append(PositionVector(x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy
    return path


def is_forward_crossing(space: SpaceType, velocity: PositionVector) -> bool:
    return space.is_finish and space.is_forward(velocity)


def is_winning_crossing(space: SpaceType, velocity: PositionVector, remaining_laps: int) -> bool:
    """A forward crossing on the last lap wins the race."""
    return is_forward_crossing(space, velocity) and remaining_laps == 1


def cross_finish_line(car: CarState, space: SpaceType) -> bool:
    """
    Apply the lap rule for `car` entering finish cell `space`.
    Returns True if this crossing wins the race.
    """
    if is_forward_crossing(space, car.velocity):
        if car.remaining_laps == 1:
            return True
        car.crosses_finish_forward()
        logger.info(f"Finish: {car.repr} completes a lap, {car.remaining_laps} to go")
    else:
        car.crosses_finish_backward()
        logger.info(
            f"Finish: {car.repr} crosses backwards, {car.remaining_laps} laps to go"
        )
    return False


def _collides_with_other_car(
    car: CarState, position: PositionVector, cars: Sequence[CarState]
) -> bool:
    return any(
        other.idx != car.idx and not other.crashed and other.position == position
        for other in cars
    )


def resolve_turn(
    car: CarState,
    acceleration: Direction | None,
    track: Track,
    cars: Sequence[CarState],
) -> TurnOutcome:
    """
    Accelerate `car` and move it along its path for one turn.

    The car only ever stops early on a crash or a win; a crash leaves it on
    its starting cell.
    """
    if acceleration is None:
        raise InvalidAccelerationError("Illegal acceleration: acceleration cannot be None")

    if car.crashed:
        # Crashed cars never move again
        return Crashed(
            reason=car.crash_reason or "wall collision",
            position=car.crash_position or car.position,
        )

    car.accelerate(acceleration)
    start = car.position
    end = car.next_position()

    for position in calculate_path(start, end):
        if _collides_with_other_car(car, position, cars):
            return _crash(car, "car collision", position)

        space = track.space_type_at(position)
        match space:
            case SpaceType.WALL:
                return _crash(car, "wall collision", position)
            case SpaceType.TRACK:
                continue
            case (
                SpaceType.FINISH_LEFT
                | SpaceType.FINISH_RIGHT
                | SpaceType.FINISH_UP
                | SpaceType.FINISH_DOWN
            ):
                if cross_finish_line(car, space):
                    car.position = end
                    logger.info(f"Finish: {car.repr} crosses the finish line at {position}")
                    return Won()

    car.position = end
    logger.info(f"Move: {car.repr} {start}->{end} velocity {car.velocity}")
    return Continuing()


def _crash(car: CarState, reason: CrashReason, position: PositionVector) -> Crashed:
    car.crash(reason, position)
    logger.info(f"Crash: {car.repr} crashed at position {position}: {reason}")
    return Crashed(reason=reason, position=position)
