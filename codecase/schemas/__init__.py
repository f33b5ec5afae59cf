from codecase.schemas.content import CaseContent, HintStep, Mission, ObjectiveTemplate, Puzzle
from codecase.schemas.hints import PurchaseResultSchema, UnlockMethod, UnlockOutcomeSchema, UnlockRecordSchema
from codecase.schemas.stats import AchievementSchema, PlayerStatsSchema
from codecase.schemas.validation import ObjectiveSchema, ObjectiveStatus, ValidationResultSchema

__all__ = [
    "AchievementSchema",
    "CaseContent",
    "HintStep",
    "Mission",
    "ObjectiveSchema",
    "ObjectiveStatus",
    "ObjectiveTemplate",
    "PlayerStatsSchema",
    "Puzzle",
    "PurchaseResultSchema",
    "UnlockMethod",
    "UnlockOutcomeSchema",
    "UnlockRecordSchema",
    "ValidationResultSchema",
]
