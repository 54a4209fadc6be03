from pathlib import Path


class RacetrackError(Exception):
    """Base class for all errors raised by vector_racetrack."""


class FormatError(RacetrackError):
    """Invalid content in a track or waypoint file."""


class TrackFormatError(FormatError):
    pass


class WaypointFormatError(FormatError):
    pass


class TrackReadError(RacetrackError, OSError):
    """Underlying I/O failure while reading a track file."""

    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Failed to read the track file {path}: {cause}")
        self.path: Path = path


class ConfigurationError(RacetrackError):
    """Missing or invalid configuration file or resource directory."""


class InvalidAccelerationError(RacetrackError, ValueError):
    pass


class NoPathFoundError(RacetrackError):
    """The path finder exhausted its search without reaching the finish line."""

    def __init__(self, message: str, *, expansions: int) -> None:
        super().__init__(message)
        self.expansions: int = expansions


class WaypointsExhaustedError(RacetrackError):
    pass
