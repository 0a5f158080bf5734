from __future__ import annotations

BASE_XP_PER_LEVEL = 100
XP_INCREMENT_PER_LEVEL = 50

XP_PER_CORRECT_ANSWER = 20
XP_PER_FAST_ANSWER = 5
XP_PER_PERFECT_ROUND = 20
XP_MATCH_WIN = 50
XP_MATCH_LOSS = 20
XP_MATCH_DRAW = 35
XP_DAILY_WIN_BONUS = 100

# Login streak XP is base + increment * streak, capped.
XP_LOGIN_BASE = 30
XP_LOGIN_INCREMENT = 20
XP_LOGIN_MAX = 150

COINS_PER_CORRECT_ANSWER = 2
COINS_PER_FASTEST_ANSWER = 3
COINS_MATCH_WIN = 20
COINS_MATCH_LOSS = 8
COINS_MATCH_DRAW = 12
COINS_DAILY_LOGIN = 10
COINS_LEVEL_UP = 50
