"""Player progression on case completion: points, level, streaks and time."""
import logging
from dataclasses import dataclass

from codecase.schemas.stats import PlayerStatsSchema
from codecase.services.scoring import compute_level

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CompletionOutcome:
    stats: PlayerStatsSchema
    points_awarded: int
    is_repeat: bool


def apply_case_completion(
    stats: PlayerStatsSchema,
    case_id: str,
    points: int,
    time_spent: int,
    clues_found: int,
    hints_used: int = 0,
) -> CompletionOutcome:
    """Fold one case completion into ``stats`` and return the new stats.

    Points, evidence, streak and the completed list only move on the first
    completion of a case, so replays cannot farm points. Time spent is
    always added; the average divides by first completions.
    """
    if points < 0 or time_spent < 0 or clues_found < 0 or hints_used < 0:
        raise ValueError("Completion values cannot be negative.")

    is_repeat = case_id in stats.completed_cases
    total_time = stats.total_time_spent + time_spent

    if is_repeat:
        completed_count = len(stats.completed_cases)
        updated = stats.model_copy(
            update={
                "total_time_spent": total_time,
                "average_case_time": total_time / completed_count if completed_count else float(time_spent),
            }
        )
        logger.info("user %s replayed %s; no points awarded", stats.user_id, case_id)
        return CompletionOutcome(stats=updated, points_awarded=0, is_repeat=True)

    completed = [*stats.completed_cases, case_id]
    total_points = stats.total_points + points
    streak = stats.current_streak + 1
    updated = stats.model_copy(
        update={
            "completed_cases": completed,
            "total_points": total_points,
            "level": compute_level(total_points),
            "evidence_count": stats.evidence_count + clues_found,
            "hints_used": stats.hints_used + hints_used,
            "current_streak": streak,
            "best_streak": max(stats.best_streak, streak),
            "total_time_spent": total_time,
            "average_case_time": total_time / len(completed),
        }
    )
    logger.info("user %s completed %s for %d points", stats.user_id, case_id, points)
    return CompletionOutcome(stats=updated, points_awarded=points, is_repeat=False)


def apply_hint_reward(stats: PlayerStatsSchema, points: int) -> PlayerStatsSchema:
    """Auto-unlocked hint steps also count toward total points and level."""
    if points < 0:
        raise ValueError("Reward cannot be negative.")
    if points == 0:
        return stats
    total_points = stats.total_points + points
    return stats.model_copy(update={"total_points": total_points, "level": compute_level(total_points)})
