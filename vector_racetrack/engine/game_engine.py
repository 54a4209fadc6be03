from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from vector_racetrack.core.agent import QuitSignal
from vector_racetrack.core.geometry import Direction
from vector_racetrack.core.state import NO_WINNER, CarState, GameState, LogContext
from vector_racetrack.engine import ENGINE_ID_COUNTER
from vector_racetrack.engine.logging import LOGGER_NAME, ContextFilter, build_rich_handler
from vector_racetrack.engine.movement import Continuing, Crashed, Won, resolve_turn

if TYPE_CHECKING:
    from vector_racetrack.core.agent import MoveDecision, MoveStrategy
    from vector_racetrack.engine.track import Track

logger = logging.getLogger(LOGGER_NAME)


@dataclass(frozen=True, slots=True)
class RaceResult:
    winner_idx: int
    winner_id: str | None
    aborted: bool
    turns: int

    @property
    def has_winner(self) -> bool:
        return self.winner_idx != NO_WINNER


@dataclass
class GameEngine:
    """
    Runs the race: asks the active car's strategy for an acceleration,
    resolves the move and hands the turn to the next car still in the race.
    """

    state: GameState
    track: Track
    strategies: dict[int, MoveStrategy] = field(default_factory=dict)

    logging_enabled: bool = True
    log_context: LogContext = field(default_factory=LogContext)

    def __post_init__(self) -> None:
        if self.logging_enabled:
            rich_handler = build_rich_handler()
            rich_handler.addFilter(ContextFilter(self))
            logger.handlers.clear()
            logger.addHandler(rich_handler)
            logger.propagate = False

    @classmethod
    def for_track(
        cls,
        track: Track,
        strategies: dict[int, MoveStrategy] | None = None,
        *,
        logging_enabled: bool = True,
    ) -> GameEngine:
        return cls(
            state=GameState(cars=track.car_list),
            track=track,
            strategies=strategies if strategies is not None else {},
            logging_enabled=logging_enabled,
            log_context=LogContext(engine_id=next(ENGINE_ID_COUNTER)),
        )

    def log_info(self, msg: str) -> None:
        if self.logging_enabled:
            logger.info(msg)

    # ---------- Accessors ----------

    @property
    def car_count(self) -> int:
        return len(self.state.cars)

    @property
    def current_car(self) -> CarState:
        return self.state.cars[self.state.current_car_idx]

    @property
    def winner(self) -> int:
        return self.state.winner

    @property
    def is_finished(self) -> bool:
        return self.state.finished

    def get_car(self, idx: int) -> CarState:
        return self.state.cars[idx]

    def set_strategy(self, car_idx: int, strategy: MoveStrategy) -> None:
        self.strategies[car_idx] = strategy

    def next_car_move(self, car_idx: int) -> MoveDecision:
        return self.strategies[car_idx].next_move(self.get_car(car_idx))

    # ---------- Main Loop ----------

    def run_race(self, max_turns: int | None = None) -> RaceResult:
        turns = 0
        while not self.state.finished:
            if max_turns is not None and turns >= max_turns:
                logger.warning(f"Race aborted after {turns} turns without a winner")
                break
            self.run_turn()
            turns += 1

        self._log_final_standings()
        winner_id = self.get_car(self.winner).id if self.winner != NO_WINNER else None
        return RaceResult(
            winner_idx=self.winner,
            winner_id=winner_id,
            aborted=self.state.aborted,
            turns=turns,
        )

    def run_turn(self) -> None:
        if self.state.finished:
            return

        car = self.current_car
        self.log_context.start_turn_log(car.repr)

        if car.crashed:
            self.log_info(f"{car.repr} is crashed; skipping turn")
            self.advance_turn()
            return

        self.log_info(f"=== START TURN: {car.repr} ===")
        decision = self.next_car_move(car.idx)
        match decision:
            case QuitSignal():
                self.log_info(f"{car.repr} quits the game")
                self.state.aborted = True
            case Direction():
                self.do_car_turn(decision)

    def do_car_turn(self, acceleration: Direction | None) -> None:
        """Move the active car with `acceleration` and settle the turn."""
        car = self.current_car
        if car.crashed:
            self.advance_turn()
            return

        outcome = resolve_turn(car, acceleration, self.track, self.state.cars)
        match outcome:
            case Won():
                self.state.winner = car.idx
                self.log_info(f"!!! Winner: {car.repr} !!!")
            case Crashed():
                pass
            case Continuing():
                pass

        active = self.state.active_cars()
        if len(active) == 1 and self.state.winner == NO_WINNER:
            self.state.winner = active[0].idx
            self.log_info(f"!!! Winner: {active[0].repr} is the last car standing !!!")
        elif not active:
            self.log_info("All cars crashed; the race ends without a winner")

        if self.state.winner == NO_WINNER:
            self.advance_turn()

    def advance_turn(self) -> None:
        """
        Hand the turn to the next car that has not crashed.
        Stops on the recorded winner, or after one full cycle.
        """
        n = self.car_count
        start = self.state.current_car_idx
        idx = start
        while True:
            idx = (idx + 1) % n
            if not self.state.cars[idx].crashed:
                break
            if idx == self.state.winner or idx == start:
                break
        if idx <= start:
            self.log_context.new_round()
        self.state.current_car_idx = idx

    def _log_final_standings(self) -> None:
        if not self.logging_enabled:
            return
        self.log_info("=== FINAL STANDINGS ===")
        for car in self.state.cars:
            if car.idx == self.winner:
                status = "Winner"
            elif car.crashed:
                status = "crashed"
            else:
                status = "racing"
            self.log_info(
                f"Result: {car.repr} pos={car.position} laps_left={car.remaining_laps} {status}"
            )
