from quizduel.game.progression.levels import (
    LevelProgress,
    level_from_xp,
    level_up_steps,
    login_streak_xp,
    total_xp_for_level,
    xp_required_for_next_level,
)

__all__ = [
    "LevelProgress",
    "level_from_xp",
    "level_up_steps",
    "login_streak_xp",
    "total_xp_for_level",
    "xp_required_for_next_level",
]
