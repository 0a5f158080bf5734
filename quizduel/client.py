from __future__ import annotations

from types import TracebackType

import structlog

from quizduel.core.config import Settings, get_settings
from quizduel.core.logging import configure_logging
from quizduel.game.matchmaking import Matchmaker
from quizduel.game.sessions.arena import ArenaController
from quizduel.game.sessions.store import MatchSessionStore
from quizduel.game.sessions.sync import MatchSyncPoller
from quizduel.notifications.reconciler import NotificationReconciler
from quizduel.services.api_client import DuelApiClient

logger = structlog.get_logger(__name__)


class DuelClient:
    """Per-user wiring of the session store, pollers and actions.

    Built when a user signs in and closed on sign-out; closing stops every
    background poll and returns the session to idle.
    """

    def __init__(self, *, user_id: str, api: DuelApiClient, settings: Settings) -> None:
        self.user_id = user_id
        self.api = api
        self.session = MatchSessionStore()
        self.match_sync = MatchSyncPoller(
            api=api,
            store=self.session,
            user_id=user_id,
            interval_seconds=settings.match_sync_interval_seconds,
            follow_server_round=settings.match_sync_follow_server_round,
        )
        self.notifications = NotificationReconciler(
            api=api,
            user_id=user_id,
            poll_interval_seconds=settings.notification_poll_interval_seconds,
            session_store=self.session,
        )
        self.matchmaker = Matchmaker(
            api=api,
            store=self.session,
            user_id=user_id,
            queue_poll_interval_seconds=settings.queue_poll_interval_seconds,
        )
        self.arena = ArenaController(api=api, store=self.session, user_id=user_id)
        self._started = False

    @classmethod
    def from_settings(cls, *, user_id: str, settings: Settings | None = None) -> DuelClient:
        resolved = settings or get_settings()
        configure_logging(resolved.log_level)
        return cls(user_id=user_id, api=DuelApiClient.from_settings(resolved), settings=resolved)

    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self.match_sync.attach()
        self.notifications.start()
        logger.info("duel_client_started", user_id=self.user_id)

    async def aclose(self) -> None:
        await self.matchmaker.cancel_queue()
        await self.match_sync.aclose()
        await self.notifications.aclose()
        self.session.reset()
        await self.api.aclose()
        self._started = False
        logger.info("duel_client_closed", user_id=self.user_id)

    async def __aenter__(self) -> DuelClient:
        self.start()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
