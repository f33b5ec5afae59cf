"""Pydantic schemas for static case content (objectives, missions, hint steps, puzzles)."""
from typing import Any, Literal, Union

from pydantic import BaseModel, Field

# A predicate reference is a library name or a composite of references:
# {"all": [...]}, {"any": [...]} or {"not": ref}. Structure is checked when resolved.
PredicateRef = Union[str, dict[str, Any]]


class ObjectiveFeedback(BaseModel):
    complete: str
    partial: str = ""
    absent: str


class ObjectiveTemplate(BaseModel):
    id: str
    title: str
    description: str = ""
    points: int = Field(gt=0)
    complete: PredicateRef
    partial: PredicateRef | None = None
    feedback: ObjectiveFeedback


class HintStep(BaseModel):
    id: str
    condition: str
    hint: str
    points: int = Field(gt=0)


class Mission(BaseModel):
    id: str
    title: str
    description: str = ""
    objective: str = ""
    success_conditions: list[str] = []
    clue_revealed: str = ""
    clue_unlock_condition: str = ""
    hints_steps: list[HintStep] = []


class Puzzle(BaseModel):
    """Single-snippet evidence puzzle; its hint is gated like a hint step."""

    id: str
    name: str
    description: str = ""
    language: Literal["html", "css"]
    broken_code: str = ""
    solve: PredicateRef
    hint: str
    points: int = Field(default=3, gt=0)
    evidence_title: str
    evidence_description: str = ""
    failure_message: str = "That's not quite right."


class CaseScoring(BaseModel):
    base_points: int = Field(default=1500, ge=0)
    per_clue_points: int = Field(default=200, ge=0)
    max_score: int = Field(default=2000, gt=0)
    per_hint_penalty: int = Field(default=5, ge=0)
    max_penalty_ratio: float | None = Field(default=0.3, ge=0)
    min_score: int = Field(default=0, ge=0)


class CaseContent(BaseModel):
    id: str
    title: str
    description: str = ""
    difficulty: Literal["Beginner", "Intermediate", "Advanced"] = "Beginner"
    clue_points: int = Field(default=0, ge=0)
    content_version: int = 1
    scoring: CaseScoring = CaseScoring()
    objectives: list[ObjectiveTemplate] = []
    missions: list[Mission] = []
    puzzles: list[Puzzle] = []

    def mission(self, mission_id: str) -> Mission | None:
        for mission in self.missions:
            if mission.id == mission_id:
                return mission
        return None

    def puzzle(self, puzzle_id: str) -> Puzzle | None:
        for puzzle in self.puzzles:
            if puzzle.id == puzzle_id:
                return puzzle
        return None


class CaseSummarySchema(BaseModel):
    id: str
    title: str
    difficulty: str
    clue_points: int
    objective_count: int
    mission_ids: list[str]
    puzzle_ids: list[str]
