"""Final case score, player level, hint balance arithmetic and achievements."""
from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass

from codecase.schemas.stats import AchievementSchema, PlayerStatsSchema
from codecase.schemas.validation import ObjectiveSchema, ObjectiveStatus
from codecase.services.conditions import newly_satisfied

POINTS_PER_LEVEL = 1000
SPEED_CASE_SECONDS = 600


def _count_clues(clues_found: int | Iterable[ObjectiveSchema]) -> int:
    if isinstance(clues_found, int):
        return max(0, clues_found)
    return sum(1 for objective in clues_found if objective.status is ObjectiveStatus.COMPLETE)


def finalize_score(
    clues_found: int | Collection[ObjectiveSchema],
    hints_used: int,
    base_points: int,
    per_clue_points: int,
    max_cap: int,
    per_hint_penalty: int = 0,
    max_penalty_ratio: float | None = None,
    min_score: int = 0,
) -> int:
    """Score for a finished case.

    ``base + per_clue * clues - penalty``, where the hint penalty is
    ``hints_used * per_hint_penalty`` capped at ``base * max_penalty_ratio``
    when a ratio is given. The result is clamped to
    ``[max(0, min_score), max_cap]``. ``clues_found`` may be a count or the
    objectives of a validation result; only complete objectives count.
    """
    clues = _count_clues(clues_found)
    penalty = max(0, hints_used) * per_hint_penalty
    if max_penalty_ratio is not None:
        penalty = min(penalty, int(base_points * max_penalty_ratio))
    raw = base_points + per_clue_points * clues - penalty
    floor = max(0, min_score)
    return max(floor, min(max_cap, raw))


def compute_level(total_points: int) -> int:
    """Level 1 at zero points, one more per 1000."""
    return max(0, total_points) // POINTS_PER_LEVEL + 1


def apply_balance_delta(balance: int, delta: int, cap: int | None = None) -> int:
    """Apply delta to a hint balance and clamp to 0..cap."""
    updated = max(0, balance + delta)
    if cap is not None:
        updated = min(cap, updated)
    return updated


@dataclass(frozen=True)
class Achievement:
    id: str
    name: str
    description: str
    points: int
    category: str
    rarity: str
    condition: Callable[[PlayerStatsSchema], bool]


def _completed(case_id: str) -> Callable[[PlayerStatsSchema], bool]:
    return lambda stats: case_id in stats.completed_cases


def _cases_at_least(count: int) -> Callable[[PlayerStatsSchema], bool]:
    return lambda stats: len(stats.completed_cases) >= count


ACHIEVEMENTS = [
    # Getting started
    Achievement("first-detective", "First Detective", "Completed your first case", 50, "Getting Started", "common",
                _cases_at_least(1)),
    Achievement("tutorial-master", "Tutorial Master", "Completed the tutorial case", 100, "Getting Started", "common",
                _completed("case-vanishing-blogger")),
    # Cases
    Achievement("vanishing-blogger-solved", "Vanishing Blogger Detective", "Solved the Vanishing Blogger case", 200,
                "Cases", "common", _completed("case-vanishing-blogger")),
    Achievement("layout-rookie", "Layout Rookie", "Solved the Missing Navigation Mystery", 200, "Cases", "common",
                _completed("case-1")),
    Achievement("interaction-analyst", "Interaction Analyst", "Solved the Broken Button Caper", 300, "Cases", "uncommon",
                _completed("case-2")),
    # Milestones
    Achievement("hint-master", "Hint Master", "Held 10 hints at once", 200, "Milestones", "uncommon",
                lambda stats: stats.hints >= 10),
    Achievement("detective-expert", "Detective Expert", "Completed 3 cases", 500, "Milestones", "rare",
                _cases_at_least(3)),
    Achievement("case-closer", "Case Closer", "Completed 5 cases", 1000, "Milestones", "rare", _cases_at_least(5)),
    # Skills
    Achievement("evidence-collector", "Evidence Collector", "Collected 10 pieces of evidence", 750, "Skills", "rare",
                lambda stats: stats.evidence_count >= 10),
    Achievement("speed-demon", "Speed Demon", "Average case time under 10 minutes", 1500, "Skills", "epic",
                lambda stats: stats.total_time_spent > 0 and stats.average_case_time < SPEED_CASE_SECONDS),
    Achievement("no-hints-hero", "No Hints Hero", "Completed cases without buying hints", 1200, "Skills", "epic",
                lambda stats: bool(stats.completed_cases) and stats.hints_used == 0),
    Achievement("streak-master", "Streak Master", "Completed 3 cases in a row", 800, "Skills", "rare",
                lambda stats: stats.current_streak >= 3),
    # Progression
    Achievement("code-buster-pro", "CodeCase Pro", "Reached level 5", 1000, "Progression", "epic",
                lambda stats: stats.level >= 5),
    Achievement("elite-investigator", "Elite Investigator", "Reached level 10", 2500, "Progression", "legendary",
                lambda stats: stats.level >= 10),
    Achievement("point-collector", "Point Collector", "Earned 5000 total points", 500, "Progression", "rare",
                lambda stats: stats.total_points >= 5000),
    Achievement("veteran-detective", "Veteran Detective", "Earned 10000 total points", 1000, "Progression", "epic",
                lambda stats: stats.total_points >= 10000),
]

ACHIEVEMENTS_BY_ID = {achievement.id: achievement for achievement in ACHIEVEMENTS}


def pending_achievements(stats: PlayerStatsSchema) -> list[str]:
    """Ids of achievements whose condition now holds and that the player does not have yet."""
    rules = [(achievement.id, achievement.condition) for achievement in ACHIEVEMENTS]
    return newly_satisfied(rules, stats, stats.achievements)


def achievement_schema(achievement: Achievement, unlocked: bool) -> AchievementSchema:
    return AchievementSchema(
        id=achievement.id,
        name=achievement.name,
        description=achievement.description,
        points=achievement.points,
        category=achievement.category,
        rarity=achievement.rarity,
        unlocked=unlocked,
    )


def achievements_view(stats: PlayerStatsSchema) -> list[AchievementSchema]:
    """Every achievement in declaration order with the player's unlocked flag."""
    owned = set(stats.achievements)
    return [achievement_schema(achievement, achievement.id in owned) for achievement in ACHIEVEMENTS]
