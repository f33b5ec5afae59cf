from codecase.schemas.stats import PlayerStatsSchema
from codecase.schemas.validation import ObjectiveSchema, ObjectiveStatus
from codecase.services.scoring import (
    ACHIEVEMENTS,
    achievements_view,
    apply_balance_delta,
    compute_level,
    finalize_score,
    pending_achievements,
)


def test_finalize_score_is_capped() -> None:
    assert finalize_score(3, 2, base_points=1500, per_clue_points=200, max_cap=2000, per_hint_penalty=5) == 2000


def test_finalize_score_penalty_cap_and_floor() -> None:
    # 200 hints * 5 = 1000, capped at 30% of 1500
    assert finalize_score(0, 200, 1500, 200, 2000, per_hint_penalty=5, max_penalty_ratio=0.3) == 1050
    assert finalize_score(0, 10, 100, 0, 2000, per_hint_penalty=50) == 0
    assert finalize_score(0, 10, 100, 0, 2000, per_hint_penalty=50, min_score=20) == 20


def test_finalize_score_counts_only_complete_objectives() -> None:
    objectives = [
        ObjectiveSchema(id="a", title="A", description="", points=25, status=ObjectiveStatus.COMPLETE),
        ObjectiveSchema(id="b", title="B", description="", points=25, status=ObjectiveStatus.PARTIAL),
        ObjectiveSchema(id="c", title="C", description="", points=25, status=ObjectiveStatus.COMPLETE),
    ]
    assert finalize_score(objectives, 0, 1000, 100, 5000) == 1200


def test_compute_level_per_thousand_points() -> None:
    assert compute_level(0) == 1
    assert compute_level(999) == 1
    assert compute_level(1000) == 2
    assert compute_level(4500) == 5


def test_apply_balance_delta_clamps() -> None:
    assert apply_balance_delta(98, 5, 99) == 99
    assert apply_balance_delta(2, -3) == 0
    assert apply_balance_delta(2, 5) == 7


def test_pending_achievements_after_first_case() -> None:
    stats = PlayerStatsSchema(
        user_id="u1",
        completed_cases=["case-vanishing-blogger"],
        current_streak=1,
        total_time_spent=300,
        average_case_time=300.0,
    )
    assert pending_achievements(stats) == [
        "first-detective",
        "tutorial-master",
        "vanishing-blogger-solved",
        "speed-demon",
        "no-hints-hero",
    ]

    owned = stats.model_copy(update={"achievements": ["first-detective", "speed-demon"]})
    assert "first-detective" not in pending_achievements(owned)
    assert "speed-demon" not in pending_achievements(owned)


def test_no_achievements_for_new_player() -> None:
    assert pending_achievements(PlayerStatsSchema(user_id="u1")) == []


def test_achievements_view_marks_owned() -> None:
    stats = PlayerStatsSchema(user_id="u1", achievements=["streak-master"])
    view = achievements_view(stats)
    assert len(view) == len(ACHIEVEMENTS)
    assert [item.id for item in view if item.unlocked] == ["streak-master"]


def test_speed_demon_needs_recorded_time() -> None:
    untimed = PlayerStatsSchema(user_id="u1", completed_cases=["case-1"], current_streak=1)
    assert "speed-demon" not in pending_achievements(untimed)

    timed = untimed.model_copy(update={"total_time_spent": 240, "average_case_time": 240.0})
    assert "speed-demon" in pending_achievements(timed)
