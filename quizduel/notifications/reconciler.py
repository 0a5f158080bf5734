from __future__ import annotations

import structlog

from quizduel.core.errors import (
    ChallengeJoinError,
    NotificationClearError,
    NotificationNotFoundError,
    QuizDuelApiError,
)
from quizduel.game.sessions.constants import NOTIFICATION_TYPE_CHALLENGE
from quizduel.game.sessions.store import MatchSessionStore
from quizduel.game.sessions.types import MatchState, Notification
from quizduel.services.api_client import DuelApiClient
from quizduel.workers.scheduler import PeriodicTask

logger = structlog.get_logger(__name__)


class NotificationReconciler:
    """Pending notifications for one user, kept in step with the server by polling.

    The cached tuple is only replaced when a fetch returns a list that differs
    by value, so identical polls leave both the tuple object and ``version``
    untouched. Local removals are optimistic; when the server rejects one the
    list is re-fetched instead of undone.
    """

    def __init__(
        self,
        *,
        api: DuelApiClient,
        user_id: str,
        poll_interval_seconds: float,
        session_store: MatchSessionStore | None = None,
    ) -> None:
        self._api = api
        self._user_id = user_id
        self._session_store = session_store
        self._notifications: tuple[Notification, ...] = ()
        self._version = 0
        self._announced_ids: set[str] = set()
        self._task = PeriodicTask(
            name="notifications_poll",
            interval_seconds=poll_interval_seconds,
            callback=self.refresh,
        )

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return self._notifications

    @property
    def version(self) -> int:
        return self._version

    @property
    def is_polling(self) -> bool:
        return self._task.is_running

    def start(self) -> None:
        self._task.start()

    def stop(self) -> None:
        self._task.stop()

    async def aclose(self) -> None:
        await self._task.aclose()

    def _replace(self, notifications: tuple[Notification, ...]) -> None:
        self._notifications = notifications
        self._version += 1

    def get(self, notification_id: str) -> Notification:
        for notification in self._notifications:
            if notification.id == notification_id:
                return notification
        raise NotificationNotFoundError(notification_id)

    async def refresh(self) -> bool:
        try:
            fetched = tuple(await self._api.list_notifications(user_id=self._user_id))
        except QuizDuelApiError:
            logger.warning("notifications_fetch_failed", user_id=self._user_id, exc_info=True)
            return False
        if fetched == self._notifications:
            return False
        self._replace(fetched)
        return True

    def drain_new_challenges(self) -> list[Notification]:
        fresh = [
            notification
            for notification in self._notifications
            if notification.type == NOTIFICATION_TYPE_CHALLENGE
            and notification.id not in self._announced_ids
        ]
        self._announced_ids.update(notification.id for notification in fresh)
        return fresh

    async def clear_notification(self, notification_id: str) -> None:
        remaining = tuple(n for n in self._notifications if n.id != notification_id)
        if len(remaining) != len(self._notifications):
            self._replace(remaining)

        try:
            await self._api.clear_notifications(
                user_id=self._user_id,
                notification_ids=[notification_id],
            )
        except QuizDuelApiError as exc:
            logger.warning(
                "notification_clear_failed",
                user_id=self._user_id,
                notification_id=notification_id,
                exc_info=True,
            )
            await self.refresh()
            raise NotificationClearError("Failed to clear notification") from exc

    async def accept_challenge(self, notification_id: str) -> MatchState:
        notification = self.get(notification_id)
        try:
            match = await self._api.join_match(notification.match_id, user_id=self._user_id)
        except QuizDuelApiError as exc:
            logger.warning(
                "challenge_join_failed",
                user_id=self._user_id,
                notification_id=notification_id,
                match_id=notification.match_id,
                exc_info=True,
            )
            # A dead invite cannot be retried; drop it either way.
            try:
                await self.clear_notification(notification_id)
            except NotificationClearError:
                logger.info("challenge_dead_invite_clear_failed", notification_id=notification_id)
            raise ChallengeJoinError("Failed to join match. It may have expired.") from exc

        try:
            await self.clear_notification(notification_id)
        except NotificationClearError:
            logger.warning("challenge_clear_after_join_failed", notification_id=notification_id)

        if self._session_store is not None:
            self._session_store.init_match(match)
        logger.info("challenge_accepted", user_id=self._user_id, match_id=match.id)
        return match

    async def decline_challenge(self, notification_id: str) -> None:
        await self.clear_notification(notification_id)
        logger.info("challenge_declined", user_id=self._user_id, notification_id=notification_id)
