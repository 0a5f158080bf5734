from __future__ import annotations

from dataclasses import dataclass

from .constants import (
    BASE_XP_PER_LEVEL,
    XP_INCREMENT_PER_LEVEL,
    XP_LOGIN_BASE,
    XP_LOGIN_INCREMENT,
    XP_LOGIN_MAX,
)


@dataclass(frozen=True, slots=True)
class LevelProgress:
    """Position of a cumulative XP total on the level ladder."""

    level: int
    current_level_xp: int
    next_level_xp: int
    progress_percent: int


def xp_required_for_next_level(level: int) -> int:
    if level < 1:
        raise ValueError(f"level must be >= 1, got {level}")
    return BASE_XP_PER_LEVEL + (level - 1) * XP_INCREMENT_PER_LEVEL


def total_xp_for_level(target_level: int) -> int:
    """Total XP needed to reach ``target_level`` starting from level 1."""

    return sum(xp_required_for_next_level(level) for level in range(1, target_level))


def level_from_xp(total_xp: int) -> LevelProgress:
    if total_xp < 0:
        raise ValueError(f"total_xp must be >= 0, got {total_xp}")

    level = 1
    remaining = total_xp
    required = xp_required_for_next_level(level)
    while remaining >= required:
        remaining -= required
        level += 1
        required = xp_required_for_next_level(level)

    return LevelProgress(
        level=level,
        current_level_xp=remaining,
        next_level_xp=required,
        progress_percent=remaining * 100 // required,
    )


def level_up_steps(previous_xp: int, new_xp: int) -> list[LevelProgress]:
    """Frames an XP bar passes through when animating from one total to another.

    One full-bar frame per level boundary crossed, then the final position.
    """

    if new_xp <= previous_xp:
        return []

    start = level_from_xp(previous_xp)
    end = level_from_xp(new_xp)
    steps: list[LevelProgress] = []
    for level in range(start.level, end.level):
        required = xp_required_for_next_level(level)
        steps.append(
            LevelProgress(
                level=level,
                current_level_xp=required,
                next_level_xp=required,
                progress_percent=100,
            )
        )
    steps.append(end)
    return steps


def login_streak_xp(streak: int) -> int:
    return min(XP_LOGIN_BASE + XP_LOGIN_INCREMENT * max(0, streak), XP_LOGIN_MAX)
