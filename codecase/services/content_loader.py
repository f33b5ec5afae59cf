"""Load declarative case content from bundled JSON resources."""
import json
import logging
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any

from codecase.schemas.content import CaseContent, Mission, ObjectiveTemplate, Puzzle
from codecase.services.predicates import Predicate, is_known_condition, resolve_predicate

logger = logging.getLogger(__name__)

CONTENT_PACKAGE = "codecase.content.cases"


@dataclass(frozen=True)
class CompiledObjective:
    """Objective template with its predicates resolved."""

    template: ObjectiveTemplate
    complete: Predicate
    partial: Predicate | None


@dataclass(frozen=True)
class Unlockable:
    """Anything the ledger can unlock: a mission hint step or a puzzle hint."""

    unlock_id: str
    case_id: str
    kind: str  # "hint_step" | "puzzle"
    hint_text: str
    points: int


class ContentCatalog:
    """Read-only view over loaded cases, with predicates compiled once."""

    def __init__(self, cases: dict[str, CaseContent]) -> None:
        self.cases = cases
        self._objectives = {case.id: _compile_objectives(case) for case in cases.values()}
        self._puzzle_predicates = {
            puzzle.id: _compile(case.id, puzzle.id, puzzle.solve) for case in cases.values() for puzzle in case.puzzles
        }
        self._unlockables = _index_unlockables(cases)

    def case(self, case_id: str) -> CaseContent | None:
        return self.cases.get(case_id)

    def mission(self, case_id: str, mission_id: str) -> Mission | None:
        case = self.cases.get(case_id)
        if case is None:
            return None
        return case.mission(mission_id)

    def puzzle(self, case_id: str, puzzle_id: str) -> Puzzle | None:
        case = self.cases.get(case_id)
        if case is None:
            return None
        return case.puzzle(puzzle_id)

    def objectives(self, case_id: str) -> list[CompiledObjective] | None:
        return self._objectives.get(case_id)

    def puzzle_predicate(self, puzzle_id: str) -> Predicate:
        return self._puzzle_predicates[puzzle_id]

    def unlockable(self, unlock_id: str) -> Unlockable | None:
        return self._unlockables.get(unlock_id)

    def unlock_ids(self, case_id: str) -> list[str]:
        return [item.unlock_id for item in self._unlockables.values() if item.case_id == case_id]

    def clue_count(self, case_id: str) -> int:
        """Clues a case can yield: its missions and puzzles, or its objectives when it has neither."""
        case = self.cases.get(case_id)
        if case is None:
            return 0
        return len(case.missions) + len(case.puzzles) or len(case.objectives)


def _case_from_dict(raw: dict[str, Any]) -> CaseContent:
    case = CaseContent.model_validate(raw)
    for mission in case.missions:
        for step in mission.hints_steps:
            if not is_known_condition(step.condition):
                logger.warning(
                    "Case %s hint step %s uses unrecognized condition %r; it will stay locked until bought.",
                    case.id,
                    step.id,
                    step.condition,
                )
    return case


def _compile(case_id: str, owner_id: str, ref: Any) -> Predicate:
    try:
        return resolve_predicate(ref)
    except KeyError as exc:
        raise ValueError(f"Case '{case_id}' item '{owner_id}' references unknown predicate {exc}.") from exc


def _compile_objectives(case: CaseContent) -> list[CompiledObjective]:
    return [
        CompiledObjective(
            template=template,
            complete=_compile(case.id, template.id, template.complete),
            partial=_compile(case.id, template.id, template.partial) if template.partial is not None else None,
        )
        for template in case.objectives
    ]


def _index_unlockables(cases: dict[str, CaseContent]) -> dict[str, Unlockable]:
    """Index hint steps and puzzles by id; ids must be unique across all cases."""
    index: dict[str, Unlockable] = {}

    def add(item: Unlockable) -> None:
        previous = index.get(item.unlock_id)
        if previous is not None:
            raise ValueError(f"Duplicate unlock id: {item.unlock_id} (in {previous.case_id} and {item.case_id})")
        index[item.unlock_id] = item

    for case in cases.values():
        for mission in case.missions:
            for step in mission.hints_steps:
                add(Unlockable(step.id, case.id, "hint_step", step.hint, step.points))
        for puzzle in case.puzzles:
            add(Unlockable(puzzle.id, case.id, "puzzle", puzzle.hint, puzzle.points))
    return index


def _add_case(cases: dict[str, CaseContent], raw: dict[str, Any]) -> None:
    case = _case_from_dict(raw)
    if case.id in cases:
        raise ValueError(f"Duplicate case id: {case.id}")
    cases[case.id] = case


def load_catalog() -> ContentCatalog:
    """Load bundled cases."""
    cases: dict[str, CaseContent] = {}
    entries = sorted(resources.files(CONTENT_PACKAGE).iterdir(), key=lambda entry: entry.name)
    for entry in entries:
        if entry.name.endswith(".json"):
            _add_case(cases, json.loads(entry.read_text(encoding="utf-8-sig")))
    logger.info("Loaded %d bundled cases", len(cases))
    return ContentCatalog(cases)


def load_catalog_from_dir(path: Path) -> ContentCatalog:
    """Load cases from a directory for tests/tools."""
    cases: dict[str, CaseContent] = {}
    for file_path in sorted(path.glob("*.json")):
        _add_case(cases, json.loads(file_path.read_text(encoding="utf-8-sig")))
    logger.info("Loaded %d cases from %s", len(cases), path)
    return ContentCatalog(cases)
