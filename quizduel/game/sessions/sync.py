from __future__ import annotations

from collections.abc import Callable

import structlog

from quizduel.core.errors import QuizDuelApiError
from quizduel.services.api_client import DuelApiClient
from quizduel.workers.scheduler import PeriodicTask

from .constants import MATCH_STATUS_FINISHED, PHASE_FINISHED, SYNC_PHASES
from .store import MatchSessionStore
from .types import SessionState

logger = structlog.get_logger(__name__)


class MatchSyncPoller:
    """Background poll that folds the server's match view into the session.

    The timer runs only while the session is waiting or playing. Responses
    are keyed by the match id they were requested for; a response that
    arrives after the session moved to another match (or was reset) is
    dropped.
    """

    def __init__(
        self,
        *,
        api: DuelApiClient,
        store: MatchSessionStore,
        user_id: str,
        interval_seconds: float,
        follow_server_round: bool = True,
    ) -> None:
        self._api = api
        self._store = store
        self._user_id = user_id
        self._follow_server_round = follow_server_round
        self._task = PeriodicTask(
            name="match_sync",
            interval_seconds=interval_seconds,
            callback=self.poll_once,
        )
        self._finishing_match_id: str | None = None
        self._unsubscribe: Callable[[], None] | None = None

    @property
    def is_running(self) -> bool:
        return self._task.is_running

    def attach(self) -> None:
        if self._unsubscribe is not None:
            return
        self._unsubscribe = self._store.subscribe(self._on_session_change)
        self._on_session_change(self._store.state, self._store.state)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._task.stop()

    async def aclose(self) -> None:
        self.detach()
        await self._task.aclose()

    def _on_session_change(self, previous: SessionState, current: SessionState) -> None:
        if current.phase not in SYNC_PHASES:
            self._task.stop()
            return
        if previous.match_id != current.match_id:
            # Drop timers and in-flight requests that belong to the old match.
            self._task.stop()
            self._finishing_match_id = None
        self._task.start()

    async def poll_once(self) -> None:
        state = self._store.state
        match_id = state.match_id
        if match_id is None or state.phase not in SYNC_PHASES:
            return

        try:
            match = await self._api.get_match(match_id)
        except QuizDuelApiError:
            logger.warning("match_sync_poll_failed", match_id=match_id, exc_info=True)
            return

        if self._store.state.match_id != match_id:
            logger.info("match_sync_stale_response_dropped", match_id=match_id)
            return

        self._store.sync_opponent_state(match, self._user_id)
        if self._follow_server_round:
            self._store.advance_to_question(match.current_question_index)

        if match.status == MATCH_STATUS_FINISHED and self._store.state.phase != PHASE_FINISHED:
            await self._finish(match_id)

    async def _finish(self, match_id: str) -> None:
        if self._finishing_match_id == match_id:
            return
        self._finishing_match_id = match_id

        try:
            result = await self._api.finish_match(match_id, user_id=self._user_id)
        except QuizDuelApiError:
            logger.warning("match_sync_finish_failed", match_id=match_id, exc_info=True)
            result = None

        if self._store.state.match_id != match_id:
            return
        self._store.finish_match(result)
        logger.info("match_sync_server_finished", match_id=match_id, has_result=result is not None)
