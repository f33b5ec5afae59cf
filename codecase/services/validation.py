"""Objective scoring, mission success checks and puzzle checks over learner code.

Everything here is pure: no state, no I/O, and input errors degrade to
zero-credit results instead of raising, since callers run these on every
keystroke.
"""
import logging
import re

from codecase.schemas.content import Mission, Puzzle
from codecase.schemas.validation import (
    MissionValidationSchema,
    ObjectiveSchema,
    ObjectiveStatus,
    PuzzleResultSchema,
    ValidationResultSchema,
)
from codecase.services.content_loader import ContentCatalog
from codecase.services.predicates import check_condition

logger = logging.getLogger(__name__)

# Max score reported when there is nothing to score against
FALLBACK_MAX_SCORE = 100
MISSION_MAX_SCORE = 100

_OPEN_TAG_RE = re.compile(r"<[^/][^>]*>")
_CLOSE_TAG_RE = re.compile(r"</[^>]*>")
_SELF_CLOSING_RE = re.compile(r"<[^>]*/>")
_EMPTY_VISIBILITY_RE = re.compile(r"(?<![\w-])(display|visibility)\s*:\s*(;|$)", re.MULTILINE)


def _text(value: object) -> str:
    return value if isinstance(value, str) else ""


def _zero_result(case_id: str, message: str) -> ValidationResultSchema:
    return ValidationResultSchema(
        case_id=case_id,
        score=0,
        max_score=FALLBACK_MAX_SCORE,
        feedback=[message],
        objectives=[],
    )


class CaseValidator:
    """Scores learner code against a case's objective templates."""

    def __init__(self, catalog: ContentCatalog) -> None:
        self.catalog = catalog

    def validate(self, case_id: str, html: str, css: str) -> ValidationResultSchema:
        """Run every objective of ``case_id`` in declaration order.

        Complete earns full points, partial earns half (rounded down),
        absent earns nothing; each objective adds one feedback line.
        Unknown cases return a zero score with one flagging line.
        """
        compiled = self.catalog.objectives(case_id)
        if compiled is None:
            logger.debug("validate called for unknown case %r", case_id)
            return _zero_result(str(case_id), f"Unknown case: {case_id}")
        if not compiled:
            return _zero_result(case_id, f"Case {case_id} has no scored objectives.")

        html, css = _text(html), _text(css)
        objectives: list[ObjectiveSchema] = []
        feedback: list[str] = []
        for item in compiled:
            template = item.template
            if item.complete(html, css):
                status = ObjectiveStatus.COMPLETE
                feedback.append(template.feedback.complete)
            elif item.partial is not None and item.partial(html, css):
                status = ObjectiveStatus.PARTIAL
                feedback.append(template.feedback.partial)
            else:
                status = ObjectiveStatus.ABSENT
                feedback.append(template.feedback.absent)
            objectives.append(
                ObjectiveSchema(
                    id=template.id,
                    title=template.title,
                    description=template.description,
                    points=template.points,
                    status=status,
                )
            )

        return ValidationResultSchema(
            case_id=case_id,
            score=sum(objective.earned for objective in objectives),
            max_score=sum(objective.points for objective in objectives),
            feedback=feedback,
            objectives=objectives,
        )


def validate(catalog: ContentCatalog, case_id: str, html: str, css: str) -> ValidationResultSchema:
    return CaseValidator(catalog).validate(case_id, html, css)


def is_code_settled(html: str, css: str) -> bool:
    """Heuristic: is the learner between edits rather than mid-way through typing a tag or rule?"""
    html, css = _text(html), _text(css)
    open_tags = len(_OPEN_TAG_RE.findall(html))
    close_tags = len(_CLOSE_TAG_RE.findall(html))
    self_closing = len(_SELF_CLOSING_RE.findall(html))
    # Doctype/meta/void tags leave a little slack
    if abs(open_tags - close_tags - self_closing) > 2:
        return False
    if css.count("{") != css.count("}"):
        return False
    if "<" in html and html.rfind("<") > html.rfind(">"):
        return False
    if html.count('"') % 2 != 0:
        return False
    if "{" in css and css.rfind("{") > css.rfind("}"):
        return False
    return True


def has_css_error(css: str) -> bool:
    """Empty display/visibility values or unbalanced braces."""
    css = _text(css)
    if _EMPTY_VISIBILITY_RE.search(css):
        return True
    return css.count("{") != css.count("}")


def validate_mission(
    mission: Mission, html: str, css: str, require_settled: bool = False
) -> MissionValidationSchema:
    """Check a mission's success conditions; each one is worth an equal share of 100.

    With ``require_settled`` the mission cannot complete while the code looks
    mid-edit or holds an empty display/visibility value, but partial progress
    is still reported.
    """
    html, css = _text(html), _text(css)
    completed: list[str] = []
    remaining: list[str] = []
    feedback: list[str] = []
    for condition in mission.success_conditions:
        if check_condition(condition, html, css):
            completed.append(condition)
            feedback.append(f"✅ {condition}")
        else:
            remaining.append(condition)
            feedback.append(f"❌ {condition}")

    total = len(mission.success_conditions)
    score = round(MISSION_MAX_SCORE * len(completed) / total) if total else 0
    is_completed = total > 0 and not remaining
    if is_completed and require_settled and (not is_code_settled(html, css) or has_css_error(css)):
        is_completed = False

    return MissionValidationSchema(
        mission_id=mission.id,
        is_completed=is_completed,
        clue_unlocked=is_completed,
        completed_conditions=completed,
        remaining_conditions=remaining,
        score=score,
        max_score=MISSION_MAX_SCORE,
        feedback=feedback,
    )


def validate_puzzle(catalog: ContentCatalog, puzzle: Puzzle, code: str) -> PuzzleResultSchema:
    """Check a puzzle snippet; the snippet fills the html or css slot per the puzzle's language."""
    code = _text(code)
    predicate = catalog.puzzle_predicate(puzzle.id)
    solved = predicate(code, "") if puzzle.language == "html" else predicate("", code)
    feedback = f"Evidence discovered: {puzzle.evidence_title}" if solved else puzzle.failure_message
    return PuzzleResultSchema(puzzle_id=puzzle.id, solved=solved, feedback=feedback)
