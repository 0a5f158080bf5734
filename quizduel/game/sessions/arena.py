from __future__ import annotations

import structlog

from quizduel.core.errors import AnswerSubmissionError, GameSessionError, QuizDuelApiError
from quizduel.services.api_client import DuelApiClient

from .constants import EMOTE_MAX_LENGTH, PHASE_PLAYING, TIMEOUT_ANSWER_INDEX
from .store import MatchSessionStore
from .types import AnswerResolution, GameResult

logger = structlog.get_logger(__name__)


class ArenaController:
    """Player actions inside a running match.

    Answer resolution is the point where the opponent score is taken from the
    server synchronously; the background poll only corrects drift between
    locks.
    """

    def __init__(self, *, api: DuelApiClient, store: MatchSessionStore, user_id: str) -> None:
        self._api = api
        self._store = store
        self._user_id = user_id
        self._submitting = False

    @property
    def is_submitting(self) -> bool:
        return self._submitting

    async def submit_answer(
        self,
        answer_index: int,
        *,
        time_remaining_ms: int,
    ) -> AnswerResolution | None:
        state = self._store.state
        if (
            state.match_id is None
            or state.phase != PHASE_PLAYING
            or state.is_answer_locked
            or self._submitting
        ):
            return None

        match_id = state.match_id
        question_index = state.current_question_index
        self._submitting = True
        self._store.select_answer(answer_index)
        try:
            resolution = await self._api.submit_answer(
                match_id,
                user_id=self._user_id,
                question_index=question_index,
                answer_index=answer_index,
                time_remaining_ms=max(0, time_remaining_ms),
            )
        except QuizDuelApiError as exc:
            logger.warning(
                "arena_answer_submit_failed",
                match_id=match_id,
                question_index=question_index,
                exc_info=True,
            )
            raise AnswerSubmissionError("Connection error") from exc
        finally:
            self._submitting = False

        current = self._store.state
        if current.match_id != match_id:
            logger.info(
                "arena_answer_resolution_dropped",
                match_id=match_id,
                question_index=question_index,
            )
            return resolution
        if current.current_question_index != question_index:
            # The round closed while the answer was in flight.
            self._store.apply_late_resolution(resolution.score_delta, resolution.opponent_score)
            logger.info(
                "arena_answer_resolved_after_round_change",
                match_id=match_id,
                question_index=question_index,
                current_question_index=current.current_question_index,
            )
            return resolution

        self._store.lock_answer(
            resolution.correct,
            resolution.correct_index,
            resolution.score_delta,
            resolution.opponent_score,
        )
        return resolution

    async def submit_timeout(self) -> AnswerResolution | None:
        return await self.submit_answer(TIMEOUT_ANSWER_INDEX, time_remaining_ms=0)

    async def send_emote(self, symbol: str) -> bool:
        match_id = self._store.state.match_id
        if match_id is None:
            return False
        if not symbol or len(symbol) > EMOTE_MAX_LENGTH:
            raise GameSessionError("Invalid emote")
        try:
            await self._api.send_emote(match_id, user_id=self._user_id, emoji=symbol)
        except QuizDuelApiError:
            logger.warning("arena_emote_send_failed", match_id=match_id, exc_info=True)
            return False
        return True

    async def finish(self) -> GameResult:
        match_id = self._store.state.match_id
        if match_id is None:
            raise GameSessionError("No active match")
        result = await self._api.finish_match(match_id, user_id=self._user_id)
        if self._store.state.match_id == match_id:
            self._store.finish_match(result)
        return result

    async def report_question(self, reason: str) -> None:
        question = self._store.state.current_question
        if question is None:
            raise GameSessionError("No question to report")
        await self._api.report_question(
            user_id=self._user_id,
            question_id=question.id,
            question_text=question.text,
            reason=reason,
        )
        logger.info("arena_question_reported", question_id=question.id)
