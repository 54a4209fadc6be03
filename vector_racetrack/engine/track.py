from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, override

from vector_racetrack.core.errors import TrackFormatError, TrackReadError
from vector_racetrack.core.geometry import PositionVector
from vector_racetrack.core.space import SpaceType
from vector_racetrack.core.state import CarState

if TYPE_CHECKING:
    from collections.abc import Iterable

    from vector_racetrack.core.types import CarId

MAX_CARS = 9
CRASH_INDICATOR = "X"


@dataclass(slots=True)
class Track:
    """
    Rectangular grid of spaces plus the registry of cars racing on it.

    The origin is the top-left cell, x grows to the right and y downwards.
    Cars are kept in discovery order (row by row), which is also the turn order.
    """

    grid: list[list[SpaceType]]
    cars: dict[CarId, CarState] = field(default_factory=dict)

    @property
    def height(self) -> int:
        return len(self.grid)

    @property
    def width(self) -> int:
        return len(self.grid[0])

    @property
    def car_count(self) -> int:
        return len(self.cars)

    @property
    def car_list(self) -> list[CarState]:
        return list(self.cars.values())

    def get_car(self, idx: int) -> CarState:
        return self.car_list[idx]

    def in_bounds(self, position: PositionVector) -> bool:
        return 0 <= position.x < self.width and 0 <= position.y < self.height

    def space_type_at(self, position: PositionVector) -> SpaceType:
        """Space at `position`; everything outside the grid is a wall."""
        if not self.in_bounds(position):
            return SpaceType.WALL
        return self.grid[position.y][position.x]

    def char_at(self, row: int, col: int) -> str:
        for car in self.cars.values():
            if car.position.x == col and car.position.y == row:
                return CRASH_INDICATOR if car.crashed else car.id
        return self.grid[row][col].space_char

    def render(self) -> str:
        return "".join(
            "".join(self.char_at(row, col) for col in range(self.width)) + "\n"
            for row in range(self.height)
        )

    @override
    def __str__(self) -> str:
        return self.render()

    # ---------- Loading ----------

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> Track:
        """
        Build a track from the lines of a track file.

        Leading blank lines are skipped and the track ends at the first blank
        line after it (or at the end of input).
        """
        track_lines: list[str] = []
        for raw in lines:
            line = raw.rstrip("\r\n")
            if not line.strip():
                if track_lines:
                    break
                continue
            if track_lines and len(line) != len(track_lines[0]):
                raise TrackFormatError(
                    f"Inconsistent track line length in row {len(track_lines)}: "
                    f"expected {len(track_lines[0])}, got {len(line)}"
                )
            track_lines.append(line)

        if not track_lines:
            raise TrackFormatError("The track file contains no track lines.")

        grid: list[list[SpaceType]] = []
        cars: dict[CarId, CarState] = {}
        for row, line in enumerate(track_lines):
            grid_row: list[SpaceType] = []
            for col, char in enumerate(line):
                space = SpaceType.from_char(char)
                if space is None:
                    # Anything else is a car standing on track
                    if char in cars:
                        raise TrackFormatError(f"Duplicate car id: {char!r}")
                    if len(cars) >= MAX_CARS:
                        raise TrackFormatError(
                            f"Amount of cars exceeds the maximum of {MAX_CARS}"
                        )
                    cars[char] = CarState(
                        idx=len(cars), id=char, position=PositionVector(col, row)
                    )
                    space = SpaceType.TRACK
                grid_row.append(space)
            grid.append(grid_row)

        if not cars:
            raise TrackFormatError("The track file contains no cars.")

        return cls(grid=grid, cars=cars)

    @classmethod
    def from_text(cls, text: str) -> Track:
        return cls.from_lines(text.splitlines())

    @classmethod
    def from_file(cls, path: Path | str) -> Track:
        path = Path(path)
        try:
            with path.open(encoding="utf-8") as f:
                lines = f.readlines()
        except OSError as e:
            raise TrackReadError(path, e) from e
        return cls.from_lines(lines)
