import pytest

from quizduel.game.progression import (
    LevelProgress,
    level_from_xp,
    level_up_steps,
    login_streak_xp,
    total_xp_for_level,
    xp_required_for_next_level,
)


def test_xp_required_grows_by_fifty_per_level() -> None:
    assert xp_required_for_next_level(1) == 100
    assert xp_required_for_next_level(2) == 150
    assert xp_required_for_next_level(3) == 200
    assert xp_required_for_next_level(10) == 550


def test_xp_required_rejects_level_below_one() -> None:
    with pytest.raises(ValueError):
        xp_required_for_next_level(0)


def test_total_xp_for_level_sums_lower_levels() -> None:
    assert total_xp_for_level(1) == 0
    assert total_xp_for_level(2) == 100
    assert total_xp_for_level(3) == 250
    assert total_xp_for_level(4) == 450


def test_level_from_zero_xp() -> None:
    assert level_from_xp(0) == LevelProgress(
        level=1,
        current_level_xp=0,
        next_level_xp=100,
        progress_percent=0,
    )


def test_level_from_xp_exactly_consumed_lands_on_next_level() -> None:
    assert level_from_xp(250) == LevelProgress(
        level=3,
        current_level_xp=0,
        next_level_xp=200,
        progress_percent=0,
    )


def test_level_from_xp_floors_progress_percent() -> None:
    assert level_from_xp(120) == LevelProgress(
        level=2,
        current_level_xp=20,
        next_level_xp=150,
        progress_percent=13,
    )


def test_level_from_xp_remainder_always_below_requirement() -> None:
    for xp in range(0, 5000, 7):
        progress = level_from_xp(xp)
        assert 0 <= progress.current_level_xp < progress.next_level_xp
        assert 0 <= progress.progress_percent < 100
        assert total_xp_for_level(progress.level) + progress.current_level_xp == xp


def test_level_from_xp_rejects_negative_total() -> None:
    with pytest.raises(ValueError):
        level_from_xp(-1)


def test_level_up_steps_without_gain_is_empty() -> None:
    assert level_up_steps(300, 300) == []
    assert level_up_steps(300, 200) == []


def test_level_up_steps_within_level_returns_final_position_only() -> None:
    assert level_up_steps(10, 60) == [level_from_xp(60)]


def test_level_up_steps_emits_full_bar_per_crossed_level() -> None:
    steps = level_up_steps(90, 260)

    assert [step.level for step in steps] == [1, 2, 3]
    assert steps[0].progress_percent == 100
    assert steps[1] == LevelProgress(level=2, current_level_xp=150, next_level_xp=150, progress_percent=100)
    assert steps[-1] == level_from_xp(260)


def test_login_streak_xp_is_capped() -> None:
    assert login_streak_xp(0) == 30
    assert login_streak_xp(3) == 90
    assert login_streak_xp(50) == 150
