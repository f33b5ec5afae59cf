import pytest

from codecase.schemas.stats import PlayerStatsSchema
from codecase.services.progression import apply_case_completion, apply_hint_reward


def test_first_completion_awards_points() -> None:
    stats = PlayerStatsSchema(user_id="u1", hints=4)
    outcome = apply_case_completion(stats, "case-1", points=1800, time_spent=420, clues_found=3, hints_used=1)

    assert outcome.is_repeat is False
    assert outcome.points_awarded == 1800
    updated = outcome.stats
    assert updated.completed_cases == ["case-1"]
    assert updated.total_points == 1800
    assert updated.level == 2
    assert updated.evidence_count == 3
    assert updated.hints_used == 1
    assert updated.current_streak == 1
    assert updated.best_streak == 1
    assert updated.total_time_spent == 420
    assert updated.average_case_time == 420.0
    # balance is not progression's business
    assert updated.hints == 4
    # input is left alone
    assert stats.completed_cases == []
    assert stats.total_points == 0


def test_repeat_completion_only_adds_time() -> None:
    stats = PlayerStatsSchema(user_id="u1")
    first = apply_case_completion(stats, "case-1", points=1800, time_spent=420, clues_found=3).stats
    outcome = apply_case_completion(first, "case-1", points=2000, time_spent=180, clues_found=3)

    assert outcome.is_repeat is True
    assert outcome.points_awarded == 0
    assert outcome.stats.total_points == 1800
    assert outcome.stats.evidence_count == 3
    assert outcome.stats.current_streak == 1
    assert outcome.stats.total_time_spent == 600
    assert outcome.stats.average_case_time == 600.0


def test_streak_and_best_streak_grow_with_new_cases() -> None:
    stats = PlayerStatsSchema(user_id="u1", best_streak=5)
    for case_id in ("case-1", "case-2", "case-vanishing-blogger"):
        stats = apply_case_completion(stats, case_id, points=500, time_spent=60, clues_found=1).stats
    assert stats.current_streak == 3
    assert stats.best_streak == 5
    assert stats.level == 2
    assert stats.average_case_time == 60.0


def test_negative_values_rejected() -> None:
    with pytest.raises(ValueError):
        apply_case_completion(PlayerStatsSchema(user_id="u1"), "case-1", points=-1, time_spent=0, clues_found=0)


def test_hint_reward_adds_points_and_level() -> None:
    stats = PlayerStatsSchema(user_id="u1", total_points=997)
    rewarded = apply_hint_reward(stats, 5)
    assert rewarded.total_points == 1002
    assert rewarded.level == 2
    assert stats.total_points == 997
    assert apply_hint_reward(rewarded, 0) is rewarded
    with pytest.raises(ValueError, match="negative"):
        apply_hint_reward(stats, -1)
