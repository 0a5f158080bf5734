from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import httpx
import structlog

from quizduel.core.config import Settings, get_settings
from quizduel.core.errors import ApiError, NetworkError
from quizduel.game.sessions.types import (
    AnswerResolution,
    GameResult,
    MatchState,
    Notification,
)

logger = structlog.get_logger(__name__)


def _unwrap_envelope(response: httpx.Response, *, path: str) -> Any:
    body: dict[str, Any] | None = None
    text = response.text
    if text:
        try:
            body = response.json()
        except ValueError:
            logger.warning(
                "api_response_not_json",
                path=path,
                status_code=response.status_code,
                body_preview=text[:200],
            )
            raise ApiError(
                f"API Error {response.status_code}: {response.reason_phrase or 'Invalid Response'}",
                status_code=response.status_code,
            ) from None

    if not response.is_success:
        if isinstance(body, dict) and body.get("error"):
            raise ApiError(str(body["error"]), status_code=response.status_code)
        raise ApiError(
            f"Request failed with status {response.status_code}: {response.reason_phrase}",
            status_code=response.status_code,
        )

    if isinstance(body, dict) and not body.get("success", False):
        raise ApiError(str(body.get("error") or "Request failed"), status_code=response.status_code)

    if not isinstance(body, dict):
        return None
    return body.get("data")


class DuelApiClient:
    """Typed access to the duel server's JSON endpoints."""

    def __init__(self, client: httpx.AsyncClient) -> None:
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> DuelApiClient:
        resolved = settings or get_settings()
        client = httpx.AsyncClient(
            base_url=resolved.api_base_url,
            timeout=resolved.http_timeout_seconds,
            headers={"Content-Type": "application/json"},
        )
        return cls(client)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        *,
        body: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        try:
            response = await self._client.request(method, path, json=body, params=params)
        except httpx.HTTPError as exc:
            logger.warning("api_network_error", method=method, path=path, error=str(exc))
            raise NetworkError("Network error: Failed to connect to server") from exc
        return _unwrap_envelope(response, path=path)

    # Matchmaking

    async def join_queue(self, *, user_id: str, category_id: str) -> str | None:
        data = await self._request(
            "POST",
            "/api/queue/join",
            body={"userId": user_id, "categoryId": category_id},
        )
        return (data or {}).get("matchId")

    async def leave_queue(self, *, user_id: str, category_id: str) -> None:
        await self._request(
            "POST",
            "/api/queue/leave",
            body={"userId": user_id, "categoryId": category_id},
        )

    async def queue_status(self, *, user_id: str, category_id: str) -> str | None:
        data = await self._request(
            "GET",
            "/api/queue/status",
            params={"userId": user_id, "categoryId": category_id},
        )
        return (data or {}).get("matchId")

    async def start_match(self, *, user_id: str, category_id: str) -> MatchState:
        data = await self._request(
            "POST",
            "/api/match/start",
            body={"userId": user_id, "categoryId": category_id},
        )
        return MatchState.model_validate(data)

    async def start_daily(self, *, user_id: str) -> MatchState:
        data = await self._request("POST", "/api/daily/start", body={"userId": user_id})
        return MatchState.model_validate(data)

    async def create_private_match(self, *, user_id: str, category_id: str) -> MatchState:
        data = await self._request(
            "POST",
            "/api/match/private/create",
            body={"userId": user_id, "categoryId": category_id},
        )
        return MatchState.model_validate(data)

    async def join_private_match(self, *, user_id: str, code: str) -> MatchState:
        data = await self._request(
            "POST",
            "/api/match/private/join",
            body={"userId": user_id, "code": code},
        )
        return MatchState.model_validate(data)

    async def create_challenge(
        self,
        *,
        user_id: str,
        opponent_id: str,
        category_id: str,
    ) -> MatchState:
        data = await self._request(
            "POST",
            "/api/challenge",
            body={"userId": user_id, "opponentId": opponent_id, "categoryId": category_id},
        )
        return MatchState.model_validate(data)

    # Match

    async def join_match(self, match_id: str, *, user_id: str) -> MatchState:
        data = await self._request("POST", f"/api/match/{match_id}/join", body={"userId": user_id})
        return MatchState.model_validate(data)

    async def get_match(self, match_id: str) -> MatchState:
        data = await self._request("GET", f"/api/match/{match_id}")
        return MatchState.model_validate(data)

    async def submit_answer(
        self,
        match_id: str,
        *,
        user_id: str,
        question_index: int,
        answer_index: int,
        time_remaining_ms: int,
    ) -> AnswerResolution:
        data = await self._request(
            "POST",
            f"/api/match/{match_id}/answer",
            body={
                "userId": user_id,
                "questionIndex": question_index,
                "answerIndex": answer_index,
                "timeRemainingMs": time_remaining_ms,
            },
        )
        return AnswerResolution.model_validate(data)

    async def send_emote(self, match_id: str, *, user_id: str, emoji: str) -> None:
        await self._request(
            "POST",
            f"/api/match/{match_id}/emote",
            body={"userId": user_id, "emoji": emoji},
        )

    async def finish_match(self, match_id: str, *, user_id: str) -> GameResult:
        data = await self._request("POST", f"/api/match/{match_id}/finish", body={"userId": user_id})
        return GameResult.model_validate(data)

    async def report_question(
        self,
        *,
        user_id: str,
        question_id: str,
        question_text: str,
        reason: str,
    ) -> None:
        await self._request(
            "POST",
            "/api/reports",
            body={
                "userId": user_id,
                "questionId": question_id,
                "questionText": question_text,
                "reason": reason,
            },
        )

    # Notifications

    async def list_notifications(self, *, user_id: str) -> list[Notification]:
        data = await self._request("GET", "/api/notifications", params={"userId": user_id})
        return [Notification.model_validate(item) for item in data or []]

    async def clear_notifications(self, *, user_id: str, notification_ids: Iterable[str]) -> None:
        await self._request(
            "POST",
            "/api/notifications/clear",
            body={"userId": user_id, "notificationIds": list(notification_ids)},
        )
