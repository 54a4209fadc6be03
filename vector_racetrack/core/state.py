from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from vector_racetrack.core.geometry import Direction, PositionVector

if TYPE_CHECKING:
    from vector_racetrack.core.types import CarId, CrashReason

NO_WINNER = -1


@dataclass(slots=True)
class CarState:
    idx: int
    id: CarId
    position: PositionVector
    velocity: PositionVector = Direction.NONE.vector
    crashed: bool = False
    remaining_laps: int = 1

    crash_reason: CrashReason | None = None
    crash_position: PositionVector | None = None

    @property
    def repr(self) -> str:
        return f"{self.idx}:{self.id}"

    @property
    def active(self) -> bool:
        return not self.crashed

    def accelerate(self, acceleration: Direction) -> None:
        self.velocity = self.velocity + acceleration.vector

    def next_position(self) -> PositionVector:
        return self.position + self.velocity

    def crash(self, reason: CrashReason, position: PositionVector) -> None:
        # Position and velocity stay frozen from here on
        self.crashed = True
        self.crash_reason = reason
        self.crash_position = position

    def crosses_finish_forward(self) -> None:
        self.remaining_laps -= 1

    def crosses_finish_backward(self) -> None:
        self.remaining_laps += 1


@dataclass(slots=True)
class GameState:
    cars: list[CarState]
    current_car_idx: int = 0
    winner: int = NO_WINNER
    aborted: bool = False

    @property
    def finished(self) -> bool:
        return self.winner != NO_WINNER or self.aborted or not self.active_cars()

    def active_cars(self) -> list[CarState]:
        return [c for c in self.cars if c.active]


@dataclass(slots=True)
class LogContext:
    """Per-engine logging state, injected into log records by ContextFilter."""

    engine_id: int = 0
    total_turn: int = 0
    turn_log_count: int = 0
    current_car_repr: str = "_"

    def new_round(self) -> None:
        self.total_turn += 1

    def start_turn_log(self, car_repr: str) -> None:
        self.turn_log_count = 0
        self.current_car_repr = car_repr

    def inc_log_count(self) -> None:
        self.turn_log_count += 1
