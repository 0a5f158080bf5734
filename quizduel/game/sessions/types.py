from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .constants import MODE_RANKED, PHASE_IDLE

MatchMode = Literal["ranked", "daily", "practice"]
MatchStatus = Literal["waiting", "playing", "finished"]
SessionPhase = Literal["idle", "loading", "waiting", "playing", "finished"]


class _Snapshot(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


class Question(_Snapshot):
    id: str
    text: str
    options: tuple[str, ...]
    correct_index: int
    category_id: str | None = None


class Emote(_Snapshot):
    symbol: str = Field(alias="emoji")
    timestamp: int


class AnswerRecord(_Snapshot):
    question_id: str
    time_ms: int = 0
    correct: bool = False
    selected_index: int | None = None


class PlayerStats(_Snapshot):
    score: int = 0
    user_id: str | None = None
    name: str | None = None
    correct_count: int = 0
    answers: tuple[AnswerRecord, ...] = ()
    last_emote: Emote | None = None


class MatchState(_Snapshot):
    id: str
    category_id: str
    mode: MatchMode = MODE_RANKED
    status: MatchStatus
    questions: tuple[Question, ...] = ()
    players: dict[str, PlayerStats] = Field(default_factory=dict)
    current_question_index: int = 0
    start_time: int = 0
    round_end_time: int = 0
    code: str | None = None
    is_private: bool = False
    winner_id: str | None = None


class AnswerResolution(_Snapshot):
    correct: bool
    correct_index: int
    score_delta: int
    opponent_score: int


class GameResult(_Snapshot):
    """Match outcome as reported by the server. Kept for display only."""

    model_config = ConfigDict(extra="allow")

    match_id: str | None = None
    won: bool = False
    score: int = 0
    opponent_score: int = 0
    xp_earned: int = 0
    coins_earned: int = 0
    level_up: bool = False
    new_level: int | None = None


class Notification(_Snapshot):
    id: str
    type: str
    from_user_name: str
    match_id: str
    timestamp: int
    from_user_id: str | None = None
    category_id: str | None = None
    category_name: str | None = None


@dataclass(frozen=True, slots=True)
class SessionState:
    match_id: str | None = None
    category_id: str | None = None
    mode: MatchMode = MODE_RANKED
    questions: tuple[Question, ...] = ()
    code: str | None = None
    is_private: bool = False
    phase: SessionPhase = PHASE_IDLE
    current_question_index: int = 0
    selected_answer_index: int | None = None
    is_answer_locked: bool = False
    last_answer_correct: bool | None = None
    correct_answer_index: int | None = None
    my_score: int = 0
    opponent_score: int = 0
    opponent_last_emote: Emote | None = None
    game_result: GameResult | None = None

    @property
    def current_question(self) -> Question | None:
        if 0 <= self.current_question_index < len(self.questions):
            return self.questions[self.current_question_index]
        return None

    @property
    def is_last_question(self) -> bool:
        return self.current_question_index >= len(self.questions) - 1


INITIAL_SESSION_STATE = SessionState()
