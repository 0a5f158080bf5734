from __future__ import annotations


class QuizDuelError(Exception):
    pass


class QuizDuelApiError(QuizDuelError):
    pass


class NetworkError(QuizDuelApiError):
    pass


class ApiError(QuizDuelApiError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GameSessionError(QuizDuelError):
    pass


class InvalidJoinCodeError(GameSessionError):
    pass


class MatchJoinError(GameSessionError):
    pass


class AnswerSubmissionError(GameSessionError):
    pass


class ChallengeJoinError(GameSessionError):
    pass


class NotificationClearError(GameSessionError):
    pass


class NotificationNotFoundError(GameSessionError):
    pass


class MatchmakingCancelledError(GameSessionError):
    pass
