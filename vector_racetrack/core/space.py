from enum import Enum

from vector_racetrack.core.geometry import PositionVector


class SpaceType(Enum):
    """Kinds of cells on the track grid, valued by their track-file character."""

    WALL = "#"
    TRACK = " "
    FINISH_LEFT = "<"
    FINISH_RIGHT = ">"
    FINISH_UP = "^"
    FINISH_DOWN = "v"

    @property
    def space_char(self) -> str:
        return self.value

    @property
    def is_finish(self) -> bool:
        match self:
            case (
                SpaceType.FINISH_LEFT
                | SpaceType.FINISH_RIGHT
                | SpaceType.FINISH_UP
                | SpaceType.FINISH_DOWN
            ):
                return True
            case SpaceType.WALL | SpaceType.TRACK:
                return False

    def is_forward(self, velocity: PositionVector) -> bool:
        """
        True if `velocity` crosses this finish cell in its required direction.
        Must only be called on finish spaces.
        """
        match self:
            case SpaceType.FINISH_LEFT:
                return velocity.x < 0
            case SpaceType.FINISH_RIGHT:
                return velocity.x > 0
            case SpaceType.FINISH_UP:
                return velocity.y < 0
            case SpaceType.FINISH_DOWN:
                return velocity.y > 0
            case SpaceType.WALL | SpaceType.TRACK:
                raise ValueError(f"{self.name} is not a finish space")

    @classmethod
    def from_char(cls, char: str) -> "SpaceType | None":
        try:
            return cls(char)
        except ValueError:
            return None
