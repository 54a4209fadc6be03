"""Configuration schema for races and path finder batches using msgspec."""

from __future__ import annotations

from pathlib import Path

import msgspec

from vector_racetrack.core.errors import ConfigurationError


class RacetrackConfig(msgspec.Struct, forbid_unknown_fields=True):
    """
    TOML-backed configuration.

    Directories are resolved relative to the working directory, which is
    where the bundled `tracks/`, `moves/` and `follower/` folders live.
    """

    track_directory: str = "tracks"
    move_directory: str = "moves"
    follower_directory: str = "follower"

    # Execution limits
    max_turns: int | None = None
    path_finder_max_expansions: int = 200_000
    path_finder_trace_lines: bool = False

    log_level: str = "INFO"

    @classmethod
    def from_toml(cls, path: Path | str) -> RacetrackConfig:
        """Load configuration from a TOML file path."""
        path = Path(path)
        try:
            with path.open("rb") as f:
                return msgspec.toml.decode(f.read(), type=cls)
        except OSError as e:
            raise ConfigurationError(f"Cannot read config file {path}: {e}") from e
        except msgspec.DecodeError as e:
            raise ConfigurationError(f"Invalid config file {path}: {e}") from e

    @property
    def track_path(self) -> Path:
        return Path(self.track_directory)

    @property
    def move_path(self) -> Path:
        return Path(self.move_directory)

    @property
    def follower_path(self) -> Path:
        return Path(self.follower_directory)

    def validate_directories(self) -> None:
        for directory in (self.track_path, self.move_path, self.follower_path):
            check_existing_directory(directory)

    def list_tracks(self) -> list[Path]:
        check_existing_directory(self.track_path)
        return sorted(p for p in self.track_path.glob("*.txt") if p.is_file())

    def resolve_track_file(self, name: Path | str) -> Path:
        return _resolve_in(self.track_path, name)

    def resolve_move_file(self, name: Path | str) -> Path:
        return _resolve_in(self.move_path, name)

    def resolve_follower_file(self, name: Path | str) -> Path:
        return _resolve_in(self.follower_path, name)


def check_existing_directory(directory: Path) -> Path:
    if not directory.exists():
        raise ConfigurationError(f"{directory.absolute()} does not exist")
    if not directory.is_dir():
        raise ConfigurationError(f"{directory.absolute()} is not a directory")
    return directory


def _resolve_in(directory: Path, name: Path | str) -> Path:
    """Use `name` as given if it exists, otherwise look it up in `directory`."""
    path = Path(name)
    if path.exists() or path.is_absolute():
        return path
    return directory / path
