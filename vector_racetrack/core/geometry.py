import re
from dataclasses import dataclass
from enum import Enum
from typing import override

POSITION_VECTOR_PATTERN = re.compile(r"\(X:(\d+), Y:(\d+)\)")


@dataclass(frozen=True, slots=True)
class PositionVector:
    """
    Integer grid vector.
    Used both as an absolute position (origin top-left, y pointing down)
    and as a velocity or acceleration delta.
    """

    x: int = 0
    y: int = 0

    def __add__(self, other: "PositionVector") -> "PositionVector":
        return PositionVector(self.x + other.x, self.y + other.y)

    def __sub__(self, other: "PositionVector") -> "PositionVector":
        return PositionVector(self.x - other.x, self.y - other.y)

    @override
    def __str__(self) -> str:
        return f"(X:{self.x}, Y:{self.y})"

    @classmethod
    def parse(cls, text: str) -> "PositionVector":
        """Parse the `(X:1, Y:2)` form produced by `str()`."""
        match = POSITION_VECTOR_PATTERN.fullmatch(text.strip())
        if match is None:
            raise ValueError(f"String does not match position vector pattern: {text!r}")
        return cls(int(match.group(1)), int(match.group(2)))


class Direction(Enum):
    """The nine accelerations a car can choose from each turn."""

    DOWN_LEFT = PositionVector(-1, 1)
    DOWN = PositionVector(0, 1)
    DOWN_RIGHT = PositionVector(1, 1)
    LEFT = PositionVector(-1, 0)
    NONE = PositionVector(0, 0)
    RIGHT = PositionVector(1, 0)
    UP_LEFT = PositionVector(-1, -1)
    UP = PositionVector(0, -1)
    UP_RIGHT = PositionVector(1, -1)

    @property
    def vector(self) -> PositionVector:
        return self.value

    @classmethod
    def parse(cls, text: str | None) -> "Direction | None":
        if not text:
            return None
        return cls.__members__.get(text.strip().upper())
