from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING, override

from rich.logging import RichHandler

if TYPE_CHECKING:
    from vector_racetrack.core.state import LogContext
    from vector_racetrack.engine.game_engine import GameEngine

LOGGER_NAME = "vector_racetrack"

# Car reprs look like "0:a"
CAR_PATTERN = re.compile(r"\b(\d+:\S)(?=\s|$|[,.)])")


# Simple color theme for Rich
COLOR = {
    "move": "bold green",
    "crash": "bold red",
    "finish": "bold magenta",
    "warning": "bold red",
    "car": "yellow",
    "prefix": "dim",
    "level": "bold",
}


class ContextFilter(logging.Filter):
    """Inject per-engine runtime context into every log record."""

    def __init__(self, engine: GameEngine, name: str = "") -> None:
        super().__init__(name)  # name is for logger-name filtering; keep default
        self.engine: GameEngine = engine

    @override
    def filter(self, record: logging.LogRecord) -> bool:
        logctx: LogContext = self.engine.log_context
        record.total_turn = logctx.total_turn
        record.turn_log_count = logctx.turn_log_count
        record.car_repr = logctx.current_car_repr
        record.engine_id = logctx.engine_id
        logctx.inc_log_count()
        return True


class RichMarkupFormatter(logging.Formatter):
    @override
    def format(self, record: logging.LogRecord) -> str:
        total_turn = getattr(record, "total_turn", 0)
        turn_log_count = getattr(record, "turn_log_count", 0)
        car_repr = getattr(record, "car_repr", "_")
        engine_id = getattr(record, "engine_id", 0)
        prefix = f"{engine_id} {total_turn}.{car_repr}.{turn_log_count}"

        message = record.getMessage()
        # Board renderings and user text may contain "[" which rich reads as markup
        styled = message.replace("[", r"\[")

        styled = re.sub(r"\bMove\b", f"[{COLOR['move']}]Move[/{COLOR['move']}]", styled)
        styled = re.sub(
            r"\bCrash\b", f"[{COLOR['crash']}]Crash[/{COLOR['crash']}]", styled
        )
        styled = re.sub(
            r"\bFinish\b", f"[{COLOR['finish']}]Finish[/{COLOR['finish']}]", styled
        )
        styled = re.sub(
            r"\bWinner\b", f"[{COLOR['finish']}]Winner[/{COLOR['finish']}]", styled
        )
        styled = re.sub(r"!!!", f"[{COLOR['warning']}]!!![/{COLOR['warning']}]", styled)

        styled = CAR_PATTERN.sub(rf"[{COLOR['car']}]\1[/{COLOR['car']}]", styled)

        if record.levelno >= logging.WARNING:
            styled = f"[{COLOR['warning']}]{styled}[/{COLOR['warning']}]"

        return f"[{COLOR['prefix']}]{prefix}[/{COLOR['prefix']}]  {styled}"


def build_rich_handler() -> RichHandler:
    handler = RichHandler(markup=True, show_path=False, show_time=False)
    handler.setFormatter(RichMarkupFormatter())
    return handler


def configure_logging(level: int | str = logging.INFO) -> None:
    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()
    logger.addHandler(build_rich_handler())
    logger.propagate = False
