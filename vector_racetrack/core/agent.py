from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from vector_racetrack.core.geometry import Direction
    from vector_racetrack.core.state import CarState
    from vector_racetrack.core.types import StrategyName


@dataclass(frozen=True, slots=True)
class QuitSignal:
    """Returned by a strategy instead of a Direction to end the game."""


QUIT = QuitSignal()

type MoveDecision = Direction | QuitSignal


class MoveStrategy(ABC):
    """Decides the acceleration of one car, one turn at a time."""

    name: ClassVar[StrategyName]

    @abstractmethod
    def next_move(self, car: CarState) -> MoveDecision:
        """
        Return the acceleration for `car`'s next turn, or QUIT to stop the game.
        `car` is the car this strategy was installed for.
        """
