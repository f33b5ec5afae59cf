"""Pydantic schemas for hint unlocks and the hint balance."""
from enum import Enum

from pydantic import BaseModel, Field


class UnlockMethod(str, Enum):
    AUTO = "auto"
    PURCHASED = "purchased"


class PurchaseFailure(str, Enum):
    INSUFFICIENT_FUNDS = "insufficient_funds"
    ALREADY_UNLOCKED = "already_unlocked"


class StepState(str, Enum):
    REVEALED = "revealed"
    COMPLETED = "completed"  # condition met, not yet recorded in the ledger
    LOCKED = "locked"


class UnlockRecordSchema(BaseModel):
    user_id: str
    case_id: str
    unlock_id: str
    unlocked: bool = True
    method: UnlockMethod


class UnlockOutcomeSchema(BaseModel):
    unlock_id: str
    changed: bool
    method: UnlockMethod
    hint_text: str
    credited: int = 0
    balance: int = Field(ge=0)


class PurchaseResultSchema(BaseModel):
    unlock_id: str
    success: bool
    failure: PurchaseFailure | None = None
    cost: int
    balance: int = Field(ge=0)
    hint_text: str | None = None


class HintStepStatusSchema(BaseModel):
    step_id: str
    condition: str
    points: int
    state: StepState


class UnlockedHintSchema(BaseModel):
    unlock_id: str
    method: UnlockMethod
    hint_text: str


class LedgerViewSchema(BaseModel):
    user_id: str
    case_id: str
    balance: int
    records: list[UnlockRecordSchema]
    hints: list[UnlockedHintSchema] = []  # text of every unlocked hint, for reloads


class HintEvaluationSchema(BaseModel):
    mission_id: str
    revealed: list[UnlockOutcomeSchema]
    steps: list[HintStepStatusSchema]
    next_task: str | None = None
    balance: int


class ResetResultSchema(BaseModel):
    user_id: str
    case_id: str
    cleared: int
    balance: int
