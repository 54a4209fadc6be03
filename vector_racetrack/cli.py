"""Command-line interface for playing races and batch path finding."""

import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Annotated, cast, get_args

import cappa
from rich.console import Console
from rich.prompt import Prompt
from tqdm import tqdm

from vector_racetrack.ai.path_finder import find_path
from vector_racetrack.ai.strategies import build_strategy
from vector_racetrack.core.agent import MoveStrategy
from vector_racetrack.core.errors import (
    ConfigurationError,
    FormatError,
    NoPathFoundError,
    RacetrackError,
)
from vector_racetrack.core.types import StrategyName
from vector_racetrack.engine.game_engine import GameEngine
from vector_racetrack.engine.logging import LOGGER_NAME, configure_logging
from vector_racetrack.engine.track import Track
from vector_racetrack.simulation.config import RacetrackConfig


STRATEGY_NAMES: list[str] = list(get_args(StrategyName))


def load_config(path: Path | None) -> RacetrackConfig:
    if path is None:
        return RacetrackConfig()
    return RacetrackConfig.from_toml(path)


def parse_assignments(values: list[str], what: str) -> dict[str, str]:
    """Parse repeated `ID=VALUE` options into a mapping keyed by car id."""
    assignments: dict[str, str] = {}
    for value in values:
        car_id, sep, target = value.partition("=")
        if not sep or len(car_id) != 1 or not target:
            raise ConfigurationError(f"Invalid {what} assignment {value!r}, expected ID=VALUE")
        assignments[car_id] = target
    return assignments


@cappa.command(name="play")
@dataclass
class Play:
    """Play a race on a track, one turn per car at a time."""

    track: str
    """Track file, either a path or a file name inside the track directory"""

    strategy: Annotated[list[str], cappa.Arg(long=True, short=True)] = field(default_factory=list)
    """Strategy per car as ID=NAME; cars without one are asked for interactively"""

    move_file: Annotated[list[str], cappa.Arg(long=True)] = field(default_factory=list)
    """Move list file per car as ID=FILE"""

    waypoint_file: Annotated[list[str], cappa.Arg(long=True)] = field(default_factory=list)
    """Waypoint file per car as ID=FILE"""

    config: Annotated[Path | None, cappa.Arg(long=True)] = None
    """Path to TOML configuration file"""

    max_turns: Annotated[int | None, cappa.Arg(long=True)] = None
    """Override: abort races exceeding this many turns"""

    def __call__(self) -> int:
        console = Console()
        try:
            config = load_config(self.config)
            config.validate_directories()
            configure_logging(config.log_level)
            track = Track.from_file(config.resolve_track_file(self.track))
            strategies = self.build_strategies(track, config, console)
            engine = GameEngine.for_track(track, strategies)
            max_turns = self.max_turns if self.max_turns is not None else config.max_turns
            return self.run(engine, console, max_turns)
        except RacetrackError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    def build_strategies(
        self, track: Track, config: RacetrackConfig, console: Console
    ) -> dict[int, MoveStrategy]:
        chosen = parse_assignments(self.strategy, "strategy")
        move_files = parse_assignments(self.move_file, "move file")
        waypoint_files = parse_assignments(self.waypoint_file, "waypoint file")

        unknown = set(chosen) - set(track.cars)
        if unknown:
            raise ConfigurationError(f"No car with id {', '.join(sorted(unknown))} on this track")

        strategies: dict[int, MoveStrategy] = {}
        for car in track.car_list:
            name = chosen.get(car.id)
            if name is None:
                name = Prompt.ask(
                    f"Move strategy for car {car.id}",
                    choices=STRATEGY_NAMES,
                    default="do_not_move",
                    console=console,
                )
            if name not in STRATEGY_NAMES:
                raise ConfigurationError(
                    f"Unknown strategy {name!r}, choose one of {', '.join(STRATEGY_NAMES)}"
                )
            move_file = move_files.get(car.id)
            waypoint_file = waypoint_files.get(car.id)
            strategies[car.idx] = build_strategy(
                cast(StrategyName, name),
                track,
                config,
                move_file=Path(move_file) if move_file else None,
                waypoint_file=Path(waypoint_file) if waypoint_file else None,
                console=console,
            )
        return strategies

    @staticmethod
    def run(engine: GameEngine, console: Console, max_turns: int | None) -> int:
        turns = 0
        while not engine.is_finished:
            if max_turns is not None and turns >= max_turns:
                console.print(f"Race aborted after {turns} turns without a winner.")
                return 0
            console.print(engine.track.render(), markup=False, highlight=False)
            console.print(f"Current turn: {engine.current_car.id}")
            engine.run_turn()
            turns += 1

        console.print("Final game status:")
        console.print(engine.track.render(), markup=False, highlight=False)
        if engine.state.aborted:
            console.print("Game aborted.")
        elif engine.winner >= 0:
            console.print(f"Car <{engine.get_car(engine.winner).id}> wins the game!")
        else:
            console.print("All cars crashed, nobody wins.")
        return 0


@cappa.command(name="solve")
@dataclass
class Solve:
    """Run the path finder for the first car of every track in the track directory."""

    config: Annotated[Path | None, cappa.Arg(long=True)] = None
    """Path to TOML configuration file"""

    max_expansions: Annotated[int | None, cappa.Arg(long=True)] = None
    """Override: search budget per track"""

    trace_lines: Annotated[bool, cappa.Arg(long=True)] = False
    """Reject moves whose whole line, not just the destination, touches a wall"""

    def __call__(self) -> int:
        try:
            config = load_config(self.config)
            tracks = config.list_tracks()
        except RacetrackError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

        max_expansions = (
            self.max_expansions
            if self.max_expansions is not None
            else config.path_finder_max_expansions
        )
        trace_lines = self.trace_lines or config.path_finder_trace_lines

        race_logger = logging.getLogger(LOGGER_NAME)
        previous_level = race_logger.level
        race_logger.setLevel(logging.WARNING)
        try:
            solved = self.solve_all(tracks, max_expansions, trace_lines)
        finally:
            race_logger.setLevel(previous_level)

        print(f"\nSolved: {solved}/{len(tracks)}")
        return 0

    @staticmethod
    def solve_all(tracks: list[Path], max_expansions: int, trace_lines: bool) -> int:
        solved = 0
        with tqdm(tracks, desc="Solving", unit="track") as pbar:
            for track_file in pbar:
                try:
                    track = Track.from_file(track_file)
                except (FormatError, OSError) as e:
                    tqdm.write(f"[{track_file.name}] INVALID: {e}")
                    continue

                car = track.get_car(0)
                try:
                    plan = find_path(
                        track,
                        car.position,
                        car.velocity,
                        max_expansions=max_expansions,
                        trace_lines=trace_lines,
                    )
                except NoPathFoundError as e:
                    tqdm.write(f"[{track_file.name}] NO PATH after {e.expansions} expansions")
                    continue

                solved += 1
                tqdm.write(
                    f"[{track_file.name}] car {car.id}: {len(plan)} moves "
                    f"({plan.expansions} expansions)"
                )
        return solved


@dataclass
class Racetrack:
    """Grid based vector race."""

    command: cappa.Subcommands[Play | Solve]


def main():
    """Entry point for CLI."""
    return cappa.invoke(Racetrack)


if __name__ == "__main__":
    sys.exit(main())
