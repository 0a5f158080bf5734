from __future__ import annotations

from collections.abc import Callable
from typing import Any

import structlog

from . import reducer
from .types import INITIAL_SESSION_STATE, GameResult, MatchState, SessionState

logger = structlog.get_logger(__name__)

SessionListener = Callable[[SessionState, SessionState], None]


class MatchSessionStore:
    """Single owner of the client's view of the active match.

    Screens read ``state`` and call the operations below; nothing else
    replaces the state. Listeners receive ``(previous, current)`` after every
    transition that produced a new state object.
    """

    def __init__(self, initial: SessionState = INITIAL_SESSION_STATE) -> None:
        self._state = initial
        self._version = 0
        self._listeners: list[SessionListener] = []

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def version(self) -> int:
        return self._version

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _apply(self, transition: Callable[..., SessionState], *args: Any) -> SessionState:
        previous = self._state
        current = transition(previous, *args)
        if current is previous:
            return current
        self._state = current
        self._version += 1
        if previous.phase != current.phase or previous.match_id != current.match_id:
            logger.info(
                "match_session_phase_changed",
                match_id=current.match_id,
                previous_phase=previous.phase,
                phase=current.phase,
            )
        for listener in list(self._listeners):
            listener(previous, current)
        return current

    def init_match(self, match: MatchState) -> SessionState:
        return self._apply(reducer.init_match, match)

    def set_loading(self, loading: bool) -> SessionState:
        return self._apply(reducer.set_loading, loading)

    def select_answer(self, index: int) -> SessionState:
        return self._apply(reducer.select_answer, index)

    def lock_answer(
        self,
        correct: bool,
        correct_index: int,
        score_delta: int,
        opponent_score: int,
    ) -> SessionState:
        return self._apply(reducer.lock_answer, correct, correct_index, score_delta, opponent_score)

    def apply_late_resolution(self, score_delta: int, opponent_score: int) -> SessionState:
        return self._apply(reducer.apply_late_resolution, score_delta, opponent_score)

    def next_question(self) -> SessionState:
        return self._apply(reducer.next_question)

    def advance_to_question(self, index: int) -> SessionState:
        return self._apply(reducer.advance_to_question, index)

    def finish_match(self, result: GameResult | None) -> SessionState:
        return self._apply(reducer.finish_match, result)

    def sync_opponent_state(self, match: MatchState, my_user_id: str) -> SessionState:
        return self._apply(reducer.sync_opponent_state, match, my_user_id)

    def reset(self) -> SessionState:
        return self._apply(reducer.reset)
