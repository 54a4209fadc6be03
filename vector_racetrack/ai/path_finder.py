from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, override

from vector_racetrack.core.agent import MoveStrategy
from vector_racetrack.core.errors import NoPathFoundError
from vector_racetrack.core.geometry import Direction, PositionVector
from vector_racetrack.core.space import SpaceType
from vector_racetrack.engine.movement import calculate_path, is_forward_crossing

if TYPE_CHECKING:
    from vector_racetrack.core.state import CarState
    from vector_racetrack.core.types import StrategyName
    from vector_racetrack.engine.track import Track

logger = logging.getLogger("vector_racetrack")

DEFAULT_MAX_EXPANSIONS = 200_000

# Order in which accelerations are tried from every node
SEARCH_ORDER: tuple[Direction, ...] = tuple(Direction)


@dataclass(slots=True)
class SearchNode:
    position: PositionVector
    velocity: PositionVector
    direction: Direction
    depth: int
    parent: SearchNode | None = None
    # Index into SEARCH_ORDER of the next acceleration to try from here
    next_choice: int = 0

    def child(self, direction: Direction) -> SearchNode:
        velocity = self.velocity + direction.vector
        return SearchNode(
            position=self.position + velocity,
            velocity=velocity,
            direction=direction,
            depth=self.depth + 1,
            parent=self,
        )

    def directions(self) -> list[Direction]:
        """Accelerations leading from the root to this node."""
        moves: list[Direction] = []
        node: SearchNode | None = self
        while node is not None and node.parent is not None:
            moves.append(node.direction)
            node = node.parent
        moves.reverse()
        return moves


@dataclass(frozen=True, slots=True)
class PathPlan:
    directions: list[Direction]
    positions: list[PositionVector] = field(default_factory=list)
    expansions: int = 0

    def __len__(self) -> int:
        return len(self.directions)


def _blocked(track: Track, start: PositionVector, end: PositionVector, trace_lines: bool) -> bool:
    if not trace_lines:
        return track.space_type_at(end) is SpaceType.WALL
    return any(
        track.space_type_at(cell) is SpaceType.WALL for cell in calculate_path(start, end)
    )


def find_path(
    track: Track,
    start_position: PositionVector,
    start_velocity: PositionVector = Direction.NONE.vector,
    *,
    max_expansions: int = DEFAULT_MAX_EXPANSIONS,
    trace_lines: bool = False,
) -> PathPlan:
    """
    Depth-first backtracking search for a sequence of accelerations that
    crosses a finish line in its required direction without hitting a wall.

    Candidates are judged by their destination cell only, unless
    `trace_lines` is set, in which case every cell on the way must be free
    of walls. Positions that were committed once stay visited, even after
    backtracking, so the search always terminates. Other cars are ignored.

    Raises NoPathFoundError when the search space or the expansion budget
    is exhausted.
    """
    root = SearchNode(start_position, start_velocity, Direction.NONE, depth=0)
    stack: list[SearchNode] = [root]
    visited: set[PositionVector] = {start_position}
    expansions = 0

    while stack:
        frontier = stack[-1]
        accepted: SearchNode | None = None
        accepted_space = SpaceType.TRACK

        while frontier.next_choice < len(SEARCH_ORDER):
            direction = SEARCH_ORDER[frontier.next_choice]
            frontier.next_choice += 1

            expansions += 1
            if expansions > max_expansions:
                raise NoPathFoundError(
                    f"No path found within {max_expansions} expansions",
                    expansions=expansions - 1,
                )

            candidate = frontier.child(direction)
            if candidate.position in visited:
                continue
            if _blocked(track, frontier.position, candidate.position, trace_lines):
                continue
            accepted = candidate
            accepted_space = track.space_type_at(candidate.position)
            break

        if accepted is None:
            # Dead end, resume from the parent's next untried acceleration
            stack.pop()
            continue

        stack.append(accepted)
        visited.add(accepted.position)

        if accepted_space.is_finish and is_forward_crossing(accepted_space, accepted.velocity):
            logger.debug(
                f"PathFinder: reached {accepted.position} at depth {accepted.depth} "
                f"after {expansions} expansions"
            )
            return PathPlan(
                directions=accepted.directions(),
                positions=[node.position for node in stack[1:]],
                expansions=expansions,
            )

    raise NoPathFoundError(
        f"No path to the finish line from {start_position}",
        expansions=expansions,
    )


class PathFinderStrategy(MoveStrategy):
    """Plans the whole race on the first call and replays the plan afterwards."""

    name: StrategyName = "path_finder"

    def __init__(
        self,
        track: Track,
        *,
        max_expansions: int = DEFAULT_MAX_EXPANSIONS,
        trace_lines: bool = False,
    ) -> None:
        self.track: Track = track
        self.max_expansions: int = max_expansions
        self.trace_lines: bool = trace_lines
        self.plan: PathPlan | None = None
        self._pending: deque[Direction] = deque()

    @override
    def next_move(self, car: CarState) -> Direction:
        if self.plan is None:
            self.plan = find_path(
                self.track,
                car.position,
                car.velocity,
                max_expansions=self.max_expansions,
                trace_lines=self.trace_lines,
            )
            self._pending.extend(self.plan.directions)
            logger.info(
                f"PathFinder: planned {len(self.plan)} moves for {car.repr} "
                f"({self.plan.expansions} expansions)"
            )

        if not self._pending:
            return Direction.NONE
        return self._pending.popleft()
