from __future__ import annotations

import logging
from collections import deque
from pathlib import Path
from typing import TYPE_CHECKING, override

from rich.console import Console
from rich.prompt import Prompt

from vector_racetrack.ai.path_finder import PathFinderStrategy
from vector_racetrack.core.agent import QUIT, MoveDecision, MoveStrategy
from vector_racetrack.core.errors import (
    ConfigurationError,
    WaypointFormatError,
    WaypointsExhaustedError,
)
from vector_racetrack.core.geometry import Direction, PositionVector

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from vector_racetrack.core.state import CarState
    from vector_racetrack.core.types import StrategyName
    from vector_racetrack.engine.track import Track
    from vector_racetrack.simulation.config import RacetrackConfig

logger = logging.getLogger("vector_racetrack")

QUIT_COMMAND = "QUIT"
DIRECTION_CHOICES = ", ".join(d.name for d in Direction)


class DoNotMoveStrategy(MoveStrategy):
    name: StrategyName = "do_not_move"

    @override
    def next_move(self, car: CarState) -> Direction:
        return Direction.NONE


class UserMoveStrategy(MoveStrategy):
    """Asks a human for every move. Typing QUIT ends the game."""

    name: StrategyName = "user"

    def __init__(
        self,
        console: Console | None = None,
        ask: Callable[[str], str] | None = None,
    ) -> None:
        self.console: Console = console if console is not None else Console()
        self._ask: Callable[[str], str] = (
            ask
            if ask is not None
            else lambda prompt: Prompt.ask(prompt, console=self.console)
        )

    @override
    def next_move(self, car: CarState) -> MoveDecision:
        while True:
            answer = self._ask(f"Next acceleration for car {car.id} ({DIRECTION_CHOICES}, QUIT)")
            decision = self.parse_answer(answer)
            if decision is not None:
                return decision
            self.console.print(f"Invalid direction {answer!r}. Please enter one of {DIRECTION_CHOICES} or QUIT.")

    @staticmethod
    def parse_answer(answer: str) -> MoveDecision | None:
        if answer.strip().upper() == QUIT_COMMAND:
            return QUIT
        return Direction.parse(answer)


class MoveListStrategy(MoveStrategy):
    """Replays a fixed list of accelerations, then stands still."""

    name: StrategyName = "move_list"

    def __init__(self, moves: Iterable[Direction]) -> None:
        self.moves: deque[Direction] = deque(moves)

    @override
    def next_move(self, car: CarState) -> Direction:
        if not self.moves:
            return Direction.NONE
        return self.moves.popleft()

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> MoveListStrategy:
        moves: list[Direction] = []
        for line in lines:
            direction = Direction.parse(line)
            if direction is None:
                if line.strip():
                    logger.debug(f"Skipping unparseable move line {line.strip()!r}")
                continue
            moves.append(direction)
        return cls(moves)

    @classmethod
    def from_file(cls, path: Path | str) -> MoveListStrategy:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read move file {path}: {e}") from e
        return cls.from_lines(text.splitlines())


class PathFollowerStrategy(MoveStrategy):
    """
    Moves the car straight onto the next recorded waypoint every turn.

    The car is teleported and NONE is reported, so collision and finish line
    rules never see these moves.
    """

    name: StrategyName = "path_follower"

    def __init__(self, waypoints: Iterable[PositionVector]) -> None:
        self.waypoints: list[PositionVector] = list(waypoints)
        self.current_waypoint: int = 0

    @override
    def next_move(self, car: CarState) -> Direction:
        if self.current_waypoint >= len(self.waypoints):
            raise WaypointsExhaustedError(
                f"Waypoint list ended after {len(self.waypoints)} waypoints"
            )
        car.position = self.waypoints[self.current_waypoint]
        self.current_waypoint += 1
        return Direction.NONE

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> PathFollowerStrategy:
        waypoints: list[PositionVector] = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                waypoints.append(PositionVector.parse(line))
            except ValueError as e:
                raise WaypointFormatError(f"Invalid waypoint on line {lineno}: {line.strip()!r}") from e
        return cls(waypoints)

    @classmethod
    def from_file(cls, path: Path | str) -> PathFollowerStrategy:
        path = Path(path)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read waypoint file {path}: {e}") from e
        return cls.from_lines(text.splitlines())


def build_strategy(
    name: StrategyName,
    track: Track,
    config: RacetrackConfig,
    *,
    move_file: Path | None = None,
    waypoint_file: Path | None = None,
    console: Console | None = None,
) -> MoveStrategy:
    """Create the strategy `name`; file based strategies resolve relative paths in the configured directories."""
    match name:
        case "do_not_move":
            return DoNotMoveStrategy()
        case "user":
            return UserMoveStrategy(console=console)
        case "move_list":
            if move_file is None:
                raise ConfigurationError("The move_list strategy needs a move file")
            return MoveListStrategy.from_file(config.resolve_move_file(move_file))
        case "path_follower":
            if waypoint_file is None:
                raise ConfigurationError("The path_follower strategy needs a waypoint file")
            return PathFollowerStrategy.from_file(config.resolve_follower_file(waypoint_file))
        case "path_finder":
            return PathFinderStrategy(
                track,
                max_expansions=config.path_finder_max_expansions,
                trace_lines=config.path_finder_trace_lines,
            )
