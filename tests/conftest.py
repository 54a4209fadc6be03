import logging
from collections.abc import Iterator
from typing import Callable

import pytest

from vector_racetrack.core.agent import MoveStrategy
from vector_racetrack.core.geometry import Direction
from vector_racetrack.engine.logging import LOGGER_NAME
from tests.test_utils import STRAIGHT_TRACK, GameScenario


@pytest.fixture
def scenario() -> Callable[..., GameScenario]:
    """Factory fixture to create scenarios."""

    def _builder(
        track_text: str = STRAIGHT_TRACK,
        moves: dict[str, list[Direction]] | None = None,
        strategies: dict[str, MoveStrategy] | None = None,
    ) -> GameScenario:
        return GameScenario(track_text, moves, strategies)

    return _builder


@pytest.fixture(autouse=True)
def reset_race_logger() -> Iterator[None]:
    """Engines with logging enabled install a handler on the package logger."""
    yield
    race_logger = logging.getLogger(LOGGER_NAME)
    race_logger.handlers.clear()
    race_logger.propagate = True
    race_logger.setLevel(logging.NOTSET)
