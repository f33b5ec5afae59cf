"""Pydantic schemas for validation results."""
from enum import Enum

from pydantic import BaseModel, Field


class ObjectiveStatus(str, Enum):
    COMPLETE = "complete"
    PARTIAL = "partial"
    ABSENT = "absent"


class ObjectiveSchema(BaseModel):
    id: str
    title: str
    description: str
    points: int = Field(gt=0)
    status: ObjectiveStatus

    @property
    def earned(self) -> int:
        """Points this objective contributes; partial credit is always half, rounded down."""
        if self.status is ObjectiveStatus.COMPLETE:
            return self.points
        if self.status is ObjectiveStatus.PARTIAL:
            return self.points // 2
        return 0


class ValidationResultSchema(BaseModel):
    case_id: str
    score: int = Field(ge=0)
    max_score: int = Field(gt=0)
    feedback: list[str]
    objectives: list[ObjectiveSchema]


class MissionValidationSchema(BaseModel):
    mission_id: str
    is_completed: bool
    clue_unlocked: bool
    completed_conditions: list[str]
    remaining_conditions: list[str]
    score: int
    max_score: int = 100
    feedback: list[str]


class PuzzleResultSchema(BaseModel):
    puzzle_id: str
    solved: bool
    feedback: str


class CodeSubmitSchema(BaseModel):
    html: str = ""
    css: str = ""


class SnippetSubmitSchema(BaseModel):
    code: str = ""
