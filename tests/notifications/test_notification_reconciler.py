from __future__ import annotations

import asyncio

import pytest

from quizduel.core.errors import (
    ApiError,
    ChallengeJoinError,
    NetworkError,
    NotificationClearError,
    NotificationNotFoundError,
)
from quizduel.game.sessions.store import MatchSessionStore
from quizduel.game.sessions.types import MatchState, Notification
from quizduel.notifications.reconciler import NotificationReconciler
from tests.game.session_fixtures import MY_ID, make_match


def _notification(notification_id: str, *, match_id: str = "match-1", timestamp: int = 1) -> Notification:
    return Notification(
        id=notification_id,
        type="challenge",
        from_user_id="user-opp",
        from_user_name="Rival",
        match_id=match_id,
        category_id="science",
        category_name="Science",
        timestamp=timestamp,
    )


class _FakeApi:
    def __init__(self, server_list: list[Notification] | None = None) -> None:
        self.server_list = list(server_list or [])
        self.list_calls = 0
        self.cleared: list[list[str]] = []
        self.joined: list[str] = []
        self.fail_list = False
        self.fail_clear = False
        self.fail_join = False

    async def list_notifications(self, *, user_id: str) -> list[Notification]:
        del user_id
        self.list_calls += 1
        if self.fail_list:
            raise NetworkError("offline")
        # Fresh objects on every call, equal by value.
        return [n.model_copy() for n in self.server_list]

    async def clear_notifications(self, *, user_id: str, notification_ids) -> None:
        del user_id
        ids = list(notification_ids)
        self.cleared.append(ids)
        if self.fail_clear:
            raise ApiError("Request failed with status 500: Internal Server Error", status_code=500)
        self.server_list = [n for n in self.server_list if n.id not in ids]

    async def join_match(self, match_id: str, *, user_id: str) -> MatchState:
        del user_id
        self.joined.append(match_id)
        if self.fail_join:
            raise ApiError("Match not found", status_code=404)
        return make_match(match_id=match_id)


def _reconciler(api: _FakeApi, store: MatchSessionStore | None = None) -> NotificationReconciler:
    return NotificationReconciler(
        api=api,  # type: ignore[arg-type]
        user_id=MY_ID,
        poll_interval_seconds=60,
        session_store=store,
    )


@pytest.mark.asyncio
async def test_refresh_replaces_list_when_server_changed() -> None:
    api = _FakeApi([_notification("n1")])
    reconciler = _reconciler(api)

    assert await reconciler.refresh() is True
    assert [n.id for n in reconciler.notifications] == ["n1"]
    assert reconciler.version == 1


@pytest.mark.asyncio
async def test_identical_fetches_keep_reference_and_version() -> None:
    api = _FakeApi([_notification("n1"), _notification("n2")])
    reconciler = _reconciler(api)
    await reconciler.refresh()
    cached = reconciler.notifications
    version = reconciler.version

    assert await reconciler.refresh() is False

    assert reconciler.notifications is cached
    assert reconciler.version == version
    assert api.list_calls == 2


@pytest.mark.asyncio
async def test_failed_fetch_keeps_existing_notifications() -> None:
    api = _FakeApi([_notification("n1")])
    reconciler = _reconciler(api)
    await reconciler.refresh()
    cached = reconciler.notifications

    api.fail_list = True
    assert await reconciler.refresh() is False
    assert reconciler.notifications is cached


@pytest.mark.asyncio
async def test_clear_notification_is_optimistic() -> None:
    api = _FakeApi([_notification("n1"), _notification("n2")])
    reconciler = _reconciler(api)
    await reconciler.refresh()

    await reconciler.clear_notification("n1")

    assert [n.id for n in reconciler.notifications] == ["n2"]
    assert api.cleared == [["n1"]]
    assert api.list_calls == 1


@pytest.mark.asyncio
async def test_clear_failure_resyncs_from_server() -> None:
    api = _FakeApi([_notification("n1"), _notification("n2")])
    reconciler = _reconciler(api)
    await reconciler.refresh()
    api.fail_clear = True

    with pytest.raises(NotificationClearError):
        await reconciler.clear_notification("n1")

    assert [n.id for n in reconciler.notifications] == ["n1", "n2"]
    assert api.list_calls == 2


@pytest.mark.asyncio
async def test_accept_challenge_joins_clears_and_seeds_session() -> None:
    api = _FakeApi([_notification("n1", match_id="match-5")])
    store = MatchSessionStore()
    reconciler = _reconciler(api, store)
    await reconciler.refresh()

    match = await reconciler.accept_challenge("n1")

    assert match.id == "match-5"
    assert api.joined == ["match-5"]
    assert api.cleared == [["n1"]]
    assert reconciler.notifications == ()
    assert store.state.match_id == "match-5"
    assert store.state.phase == "playing"


@pytest.mark.asyncio
async def test_accept_expired_challenge_clears_and_raises() -> None:
    api = _FakeApi([_notification("n1")])
    api.fail_join = True
    store = MatchSessionStore()
    reconciler = _reconciler(api, store)
    await reconciler.refresh()

    with pytest.raises(ChallengeJoinError):
        await reconciler.accept_challenge("n1")

    assert api.cleared == [["n1"]]
    assert reconciler.notifications == ()
    assert store.state.phase == "idle"


@pytest.mark.asyncio
async def test_accept_unknown_notification_raises() -> None:
    reconciler = _reconciler(_FakeApi())
    with pytest.raises(NotificationNotFoundError):
        await reconciler.accept_challenge("missing")


@pytest.mark.asyncio
async def test_decline_challenge_clears_notification() -> None:
    api = _FakeApi([_notification("n1")])
    reconciler = _reconciler(api)
    await reconciler.refresh()

    await reconciler.decline_challenge("n1")

    assert reconciler.notifications == ()
    assert api.joined == []


@pytest.mark.asyncio
async def test_drain_new_challenges_announces_each_once() -> None:
    api = _FakeApi([_notification("n1")])
    reconciler = _reconciler(api)
    await reconciler.refresh()

    assert [n.id for n in reconciler.drain_new_challenges()] == ["n1"]
    assert reconciler.drain_new_challenges() == []

    api.server_list.append(_notification("n2", timestamp=2))
    await reconciler.refresh()
    assert [n.id for n in reconciler.drain_new_challenges()] == ["n2"]


@pytest.mark.asyncio
async def test_polling_picks_up_new_notifications() -> None:
    api = _FakeApi([_notification("n1")])
    reconciler = NotificationReconciler(
        api=api,  # type: ignore[arg-type]
        user_id=MY_ID,
        poll_interval_seconds=0.01,
    )

    reconciler.start()
    assert reconciler.is_polling is True
    await asyncio.sleep(0.05)
    reconciler.stop()

    assert reconciler.is_polling is False
    assert [n.id for n in reconciler.notifications] == ["n1"]
    assert reconciler.version == 1
    await reconciler.aclose()
