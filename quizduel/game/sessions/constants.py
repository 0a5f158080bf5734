from __future__ import annotations

PHASE_IDLE = "idle"
PHASE_LOADING = "loading"
PHASE_WAITING = "waiting"
PHASE_PLAYING = "playing"
PHASE_FINISHED = "finished"

MATCH_STATUS_PLAYING = "playing"
MATCH_STATUS_FINISHED = "finished"

MODE_RANKED = "ranked"

# Phases during which the server view of the match is polled.
SYNC_PHASES: frozenset[str] = frozenset({PHASE_WAITING, PHASE_PLAYING})

NOTIFICATION_TYPE_CHALLENGE = "challenge"

JOIN_CODE_LENGTH = 6
EMOTE_MAX_LENGTH = 10
TIMEOUT_ANSWER_INDEX = -1
