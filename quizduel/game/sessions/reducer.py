"""Pure transitions of the client-side match session.

Every function takes the prior ``SessionState`` and returns the next one. A
transition that changes nothing returns the very same object so callers can
detect no-ops by identity.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from .constants import (
    MATCH_STATUS_PLAYING,
    PHASE_FINISHED,
    PHASE_IDLE,
    PHASE_LOADING,
    PHASE_PLAYING,
    PHASE_WAITING,
)
from .types import INITIAL_SESSION_STATE, GameResult, MatchState, SessionState


def _cleared_question_fields() -> dict[str, Any]:
    return {
        "selected_answer_index": None,
        "is_answer_locked": False,
        "last_answer_correct": None,
        "correct_answer_index": None,
    }


def init_match(state: SessionState, match: MatchState) -> SessionState:
    del state
    return SessionState(
        match_id=match.id,
        category_id=match.category_id,
        mode=match.mode,
        questions=match.questions,
        code=match.code or None,
        is_private=match.is_private,
        phase=match.status,
    )


def set_loading(state: SessionState, loading: bool) -> SessionState:
    if loading:
        if state.phase == PHASE_LOADING:
            return state
        return replace(state, phase=PHASE_LOADING)
    if state.phase != PHASE_LOADING:
        return state
    return replace(state, phase=PHASE_IDLE)


def select_answer(state: SessionState, index: int) -> SessionState:
    if state.is_answer_locked or state.selected_answer_index == index:
        return state
    return replace(state, selected_answer_index=index)


def lock_answer(
    state: SessionState,
    correct: bool,
    correct_index: int,
    score_delta: int,
    opponent_score: int,
) -> SessionState:
    if state.is_answer_locked:
        return state
    return replace(
        state,
        is_answer_locked=True,
        last_answer_correct=correct,
        correct_answer_index=correct_index,
        my_score=state.my_score + score_delta,
        opponent_score=opponent_score,
    )


def apply_late_resolution(state: SessionState, score_delta: int, opponent_score: int) -> SessionState:
    """Credits an answer whose round was closed before its resolution arrived.

    The question it belonged to is no longer current, so nothing is locked.
    """

    changes: dict[str, Any] = {}
    if score_delta:
        changes["my_score"] = state.my_score + score_delta
    if opponent_score > state.opponent_score:
        changes["opponent_score"] = opponent_score
    if not changes:
        return state
    return replace(state, **changes)


def next_question(state: SessionState) -> SessionState:
    if state.current_question_index < len(state.questions) - 1:
        return replace(
            state,
            current_question_index=state.current_question_index + 1,
            **_cleared_question_fields(),
        )
    if state.phase == PHASE_FINISHED:
        return state
    return replace(state, phase=PHASE_FINISHED)


def advance_to_question(state: SessionState, index: int) -> SessionState:
    if state.phase != PHASE_PLAYING:
        return state
    if index <= state.current_question_index or index >= len(state.questions):
        return state
    return replace(state, current_question_index=index, **_cleared_question_fields())


def finish_match(state: SessionState, result: GameResult | None) -> SessionState:
    if state.phase == PHASE_FINISHED and state.game_result == result:
        return state
    return replace(state, phase=PHASE_FINISHED, game_result=result)


def sync_opponent_state(state: SessionState, match: MatchState, my_user_id: str) -> SessionState:
    changes: dict[str, Any] = {}

    opponent_id = next((user_id for user_id in match.players if user_id != my_user_id), None)
    if opponent_id is not None:
        opponent = match.players[opponent_id]
        # Server scores only grow; an older snapshot never lowers the held value.
        if opponent.score > state.opponent_score:
            changes["opponent_score"] = opponent.score

        incoming_emote = opponent.last_emote
        held_emote = state.opponent_last_emote
        if incoming_emote is not None and (
            held_emote is None or incoming_emote.timestamp > held_emote.timestamp
        ):
            changes["opponent_last_emote"] = incoming_emote

    # One-directional: waiting -> playing only. Question index, selection and
    # lock are driven by local interaction and never taken from a poll.
    if state.phase == PHASE_WAITING and match.status == MATCH_STATUS_PLAYING:
        changes["phase"] = PHASE_PLAYING

    if not changes:
        return state
    return replace(state, **changes)


def reset(state: SessionState) -> SessionState:
    del state
    return INITIAL_SESSION_STATE
