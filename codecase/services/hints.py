"""Hint condition evaluation for mission hint steps."""
from collections.abc import Collection
from functools import partial

from codecase.schemas.content import HintStep, Mission
from codecase.schemas.hints import HintStepStatusSchema, StepState
from codecase.services.conditions import newly_satisfied
from codecase.services.predicates import check_condition


def _step_met(step: HintStep, code: tuple[str, str]) -> bool:
    html, css = code
    return check_condition(step.condition, html, css)


def evaluate_conditions(mission: Mission, html: str, css: str, already_revealed: Collection[str]) -> list[str]:
    """Return ids of hint steps whose condition now holds and that are not revealed yet.

    Order follows ``mission.hints_steps``. Stateless: callers diff against the
    ledger so a step that stays true across edits is only credited once.
    """
    rules = [(step.id, partial(_step_met, step)) for step in mission.hints_steps]
    return newly_satisfied(rules, (html or "", css or ""), already_revealed)


def step_statuses(mission: Mission, html: str, css: str, revealed: Collection[str]) -> list[HintStepStatusSchema]:
    statuses: list[HintStepStatusSchema] = []
    for step in mission.hints_steps:
        if step.id in revealed:
            state = StepState.REVEALED
        elif check_condition(step.condition, html or "", css or ""):
            state = StepState.COMPLETED
        else:
            state = StepState.LOCKED
        statuses.append(
            HintStepStatusSchema(step_id=step.id, condition=step.condition, points=step.points, state=state)
        )
    return statuses


def next_locked_step(mission: Mission, html: str, css: str, revealed: Collection[str]) -> HintStep | None:
    """First step that is neither revealed nor satisfied: the learner's next task."""
    for step in mission.hints_steps:
        if step.id not in revealed and not check_condition(step.condition, html or "", css or ""):
            return step
    return None
