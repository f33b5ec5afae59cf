"""Pydantic schemas for player stats, achievements and case completion."""
from pydantic import BaseModel, Field


class AchievementSchema(BaseModel):
    id: str
    name: str
    description: str
    points: int
    category: str
    rarity: str
    unlocked: bool


class PlayerStatsSchema(BaseModel):
    user_id: str
    hints: int = 0
    total_points: int = 0
    level: int = 1
    completed_cases: list[str] = []
    evidence_count: int = 0
    hints_used: int = 0  # purchased hints across first completions
    current_streak: int = 0
    best_streak: int = 0
    total_time_spent: int = 0
    average_case_time: float = 0.0
    achievements: list[str] = []


class CaseCompleteSchema(BaseModel):
    clues_found: int = Field(ge=0)
    time_spent: int = Field(ge=0)  # seconds
    hints_used: int | None = Field(default=None, ge=0)  # defaults to purchased hints in the ledger


class CompletionOutSchema(BaseModel):
    case_id: str
    score: int
    points_awarded: int
    is_repeat: bool
    hints_used: int
    cleared_unlocks: int
    new_achievements: list[AchievementSchema]
    stats: PlayerStatsSchema


class StatsOutSchema(BaseModel):
    stats: PlayerStatsSchema
    achievements: list[AchievementSchema]
