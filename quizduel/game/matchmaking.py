from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog

from quizduel.core.errors import (
    InvalidJoinCodeError,
    MatchJoinError,
    MatchmakingCancelledError,
    QuizDuelApiError,
)
from quizduel.game.sessions.constants import JOIN_CODE_LENGTH
from quizduel.game.sessions.store import MatchSessionStore
from quizduel.game.sessions.types import MatchState
from quizduel.services.api_client import DuelApiClient
from quizduel.workers.scheduler import PeriodicTask

logger = structlog.get_logger(__name__)


def normalize_join_code(code: str) -> str:
    normalized = code.strip().upper()
    if len(normalized) != JOIN_CODE_LENGTH or not normalized.isalnum():
        raise InvalidJoinCodeError(f"Code must be {JOIN_CODE_LENGTH} characters")
    return normalized


class Matchmaker:
    """Every way of getting into a match; each one ends in ``init_match``."""

    def __init__(
        self,
        *,
        api: DuelApiClient,
        store: MatchSessionStore,
        user_id: str,
        queue_poll_interval_seconds: float,
    ) -> None:
        self._api = api
        self._store = store
        self._user_id = user_id
        self._queue_poll_interval_seconds = queue_poll_interval_seconds
        self._queue_task: PeriodicTask | None = None
        self._queue_category_id: str | None = None
        self._queue_result: asyncio.Future[str] | None = None

    @property
    def queued_category_id(self) -> str | None:
        return self._queue_category_id

    async def _enter(self, request: Callable[[], Awaitable[MatchState]], *, action: str) -> MatchState:
        self._store.set_loading(True)
        try:
            match = await request()
        except QuizDuelApiError as exc:
            logger.warning("matchmaking_failed", action=action, user_id=self._user_id, exc_info=True)
            self._store.set_loading(False)
            raise MatchJoinError(str(exc) or "Failed to join match") from exc
        self._store.init_match(match)
        logger.info("matchmaking_match_entered", action=action, match_id=match.id, status=match.status)
        return match

    async def start_practice(self, category_id: str) -> MatchState:
        return await self._enter(
            lambda: self._api.start_match(user_id=self._user_id, category_id=category_id),
            action="practice",
        )

    async def start_daily(self) -> MatchState:
        return await self._enter(
            lambda: self._api.start_daily(user_id=self._user_id),
            action="daily",
        )

    async def create_private_match(self, category_id: str) -> MatchState:
        return await self._enter(
            lambda: self._api.create_private_match(user_id=self._user_id, category_id=category_id),
            action="private_create",
        )

    async def join_private_match(self, code: str) -> MatchState:
        normalized = normalize_join_code(code)
        return await self._enter(
            lambda: self._api.join_private_match(user_id=self._user_id, code=normalized),
            action="private_join",
        )

    async def challenge(self, *, opponent_id: str, category_id: str) -> MatchState:
        return await self._enter(
            lambda: self._api.create_challenge(
                user_id=self._user_id,
                opponent_id=opponent_id,
                category_id=category_id,
            ),
            action="challenge",
        )

    async def join_match(self, match_id: str) -> MatchState:
        return await self._enter(
            lambda: self._api.join_match(match_id, user_id=self._user_id),
            action="join",
        )

    async def start_ranked(self, category_id: str) -> MatchState:
        """Queue for a ranked opponent and wait until the server pairs us."""

        if self._queue_task is not None:
            await self.cancel_queue()

        self._store.set_loading(True)
        try:
            match_id = await self._api.join_queue(user_id=self._user_id, category_id=category_id)
        except QuizDuelApiError as exc:
            logger.warning("matchmaking_queue_join_failed", category_id=category_id, exc_info=True)
            self._store.set_loading(False)
            raise MatchJoinError("Failed to join. Please try again.") from exc

        if match_id is None:
            logger.info("matchmaking_queued", category_id=category_id, user_id=self._user_id)
            match_id = await self._wait_for_assignment(category_id)

        return await self._enter(lambda: self._api.get_match(match_id), action="ranked")

    async def _wait_for_assignment(self, category_id: str) -> str:
        loop = asyncio.get_running_loop()
        assigned: asyncio.Future[str] = loop.create_future()

        async def poll() -> None:
            try:
                match_id = await self._api.queue_status(user_id=self._user_id, category_id=category_id)
            except QuizDuelApiError:
                logger.warning("matchmaking_queue_poll_failed", category_id=category_id, exc_info=True)
                return
            if match_id is not None and not assigned.done():
                assigned.set_result(match_id)

        self._queue_category_id = category_id
        self._queue_result = assigned
        self._queue_task = PeriodicTask(
            name="queue_status",
            interval_seconds=self._queue_poll_interval_seconds,
            callback=poll,
        )
        self._queue_task.start()
        try:
            return await assigned
        finally:
            self._queue_task.stop()
            self._queue_task = None
            self._queue_category_id = None
            self._queue_result = None

    async def cancel_queue(self) -> None:
        category_id = self._queue_category_id
        if self._queue_task is not None:
            self._queue_task.stop()
        if self._queue_result is not None and not self._queue_result.done():
            self._queue_result.set_exception(MatchmakingCancelledError("Matchmaking cancelled"))
        self._store.set_loading(False)
        if category_id is None:
            return
        try:
            await self._api.leave_queue(user_id=self._user_id, category_id=category_id)
        except QuizDuelApiError:
            logger.warning("matchmaking_queue_leave_failed", category_id=category_id, exc_info=True)
        logger.info("matchmaking_queue_cancelled", category_id=category_id)
