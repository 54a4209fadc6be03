from __future__ import annotations  # noqa: INP001

from pathlib import Path
from typing import TYPE_CHECKING

from vector_racetrack.ai.path_finder import PathFinderStrategy
from vector_racetrack.ai.strategies import DoNotMoveStrategy
from vector_racetrack.engine.game_engine import GameEngine
from vector_racetrack.engine.track import Track

if TYPE_CHECKING:
    from vector_racetrack.core.agent import MoveStrategy

TRACK_FILE = Path(__file__).parent.parent / "tracks" / "quarter-mile.txt"

if __name__ == "__main__":
    track = Track.from_file(TRACK_FILE)
    strategies: dict[int, MoveStrategy] = {
        0: PathFinderStrategy(track),
        1: DoNotMoveStrategy(),
    }
    eng = GameEngine.for_track(track, strategies)

    result = eng.run_race(max_turns=200)
    print(track.render())
    print(f"Winner: {result.winner_id} after {result.turns} turns")
