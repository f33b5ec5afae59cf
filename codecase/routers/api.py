"""API routes: case validation, hint ledger, case completion and player stats."""
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from codecase.core.config import get_settings
from codecase.db.session import get_db
from codecase.schemas.content import CaseContent, CaseSummarySchema, Mission
from codecase.schemas.hints import (
    HintEvaluationSchema,
    LedgerViewSchema,
    PurchaseResultSchema,
    ResetResultSchema,
    UnlockedHintSchema,
)
from codecase.schemas.stats import CaseCompleteSchema, CompletionOutSchema, StatsOutSchema
from codecase.schemas.validation import (
    CodeSubmitSchema,
    MissionValidationSchema,
    PuzzleResultSchema,
    SnippetSubmitSchema,
    ValidationResultSchema,
)
from codecase.services.content_loader import ContentCatalog
from codecase.services.hints import next_locked_step, step_statuses
from codecase.services.ledger import UnknownUnlockError, load_ledger, save_ledger
from codecase.services.progression import apply_case_completion, apply_hint_reward
from codecase.services.scoring import (
    ACHIEVEMENTS_BY_ID,
    achievement_schema,
    achievements_view,
    finalize_score,
    pending_achievements,
)
from codecase.services.unlock_store import (
    SqlUnlockStore,
    apply_stats,
    get_or_create_player,
    player_stats,
    record_completion,
)
from codecase.services.validation import validate, validate_mission, validate_puzzle

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])
settings = get_settings()


def get_catalog(request: Request) -> ContentCatalog:
    return request.app.state.catalog


def get_store(db: Annotated[AsyncSession, Depends(get_db)]) -> SqlUnlockStore:
    return SqlUnlockStore(db, starting_hints=settings.starting_hints)


def require_case(catalog: ContentCatalog, case_id: str) -> CaseContent:
    case = catalog.case(case_id)
    if case is None:
        raise HTTPException(status_code=404, detail="Case not found")
    return case


def require_mission(catalog: ContentCatalog, case_id: str, mission_id: str) -> Mission:
    mission = catalog.mission(case_id, mission_id)
    if mission is None:
        raise HTTPException(status_code=404, detail="Mission not found")
    return mission


@router.get("/cases", response_model=list[CaseSummarySchema])
async def list_cases(catalog: Annotated[ContentCatalog, Depends(get_catalog)]):
    """List loaded cases."""
    return [
        CaseSummarySchema(
            id=case.id,
            title=case.title,
            difficulty=case.difficulty,
            clue_points=case.clue_points,
            objective_count=len(case.objectives),
            mission_ids=[mission.id for mission in case.missions],
            puzzle_ids=[puzzle.id for puzzle in case.puzzles],
        )
        for case in catalog.cases.values()
    ]


@router.post("/cases/{case_id}/validate", response_model=ValidationResultSchema)
async def validate_case(
    case_id: str,
    body: CodeSubmitSchema,
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
):
    """Score code against the case objectives; unknown cases score zero."""
    return validate(catalog, case_id, body.html, body.css)


@router.post("/cases/{case_id}/missions/{mission_id}/validate", response_model=MissionValidationSchema)
async def validate_case_mission(
    case_id: str,
    mission_id: str,
    body: CodeSubmitSchema,
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
):
    mission = require_mission(catalog, case_id, mission_id)
    return validate_mission(mission, body.html, body.css, require_settled=True)


@router.post("/cases/{case_id}/puzzles/{puzzle_id}/check", response_model=PuzzleResultSchema)
async def check_puzzle(
    case_id: str,
    puzzle_id: str,
    body: SnippetSubmitSchema,
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
):
    puzzle = catalog.puzzle(case_id, puzzle_id)
    if puzzle is None:
        raise HTTPException(status_code=404, detail="Puzzle not found")
    return validate_puzzle(catalog, puzzle, body.code)


@router.get("/users/{user_id}/cases/{case_id}/hints", response_model=LedgerViewSchema)
async def get_hint_ledger(
    user_id: str,
    case_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
    store: Annotated[SqlUnlockStore, Depends(get_store)],
):
    """Unlocked hints for one case, with their text, plus the user's balance."""
    require_case(catalog, case_id)
    ledger = await load_ledger(store, catalog, user_id, case_id, max_balance=settings.max_hint_balance)
    # first visit creates the player with starting hints
    await db.commit()
    records = ledger.records(case_id)
    return LedgerViewSchema(
        user_id=user_id,
        case_id=case_id,
        balance=ledger.balance,
        records=records,
        hints=[
            UnlockedHintSchema(
                unlock_id=record.unlock_id,
                method=record.method,
                hint_text=catalog.unlockable(record.unlock_id).hint_text,
            )
            for record in records
        ],
    )


@router.post(
    "/users/{user_id}/cases/{case_id}/missions/{mission_id}/hints/evaluate",
    response_model=HintEvaluationSchema,
)
async def evaluate_hints(
    user_id: str,
    case_id: str,
    mission_id: str,
    body: CodeSubmitSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
    store: Annotated[SqlUnlockStore, Depends(get_store)],
):
    """Auto-unlock hint steps whose conditions the submitted code now meets."""
    mission = require_mission(catalog, case_id, mission_id)
    ledger = await load_ledger(store, catalog, user_id, case_id, max_balance=settings.max_hint_balance)

    revealed = ledger.sync_conditions(mission, body.html, body.css)
    if revealed:
        await save_ledger(store, ledger, case_id)
        reward = sum(catalog.unlockable(outcome.unlock_id).points for outcome in revealed)
        player = await get_or_create_player(db, user_id, settings.starting_hints)
        apply_stats(player, apply_hint_reward(player_stats(player), reward))
    await db.commit()

    already = ledger.revealed_ids(case_id)
    next_step = next_locked_step(mission, body.html, body.css, already)
    return HintEvaluationSchema(
        mission_id=mission.id,
        revealed=revealed,
        steps=step_statuses(mission, body.html, body.css, already),
        next_task=next_step.condition if next_step else None,
        balance=ledger.balance,
    )


@router.post("/users/{user_id}/hints/{unlock_id}/purchase", response_model=PurchaseResultSchema)
async def purchase_hint(
    user_id: str,
    unlock_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
    store: Annotated[SqlUnlockStore, Depends(get_store)],
):
    """Buy a hint; an unaffordable or repeated purchase is reported in the body, not as an error."""
    item = catalog.unlockable(unlock_id)
    if item is None:
        raise UnknownUnlockError(unlock_id)

    ledger = await load_ledger(store, catalog, user_id, item.case_id, max_balance=settings.max_hint_balance)
    result = ledger.purchase_unlock(unlock_id, settings.hint_cost)
    if result.success:
        await save_ledger(store, ledger, item.case_id)
    await db.commit()
    return result


@router.post("/users/{user_id}/cases/{case_id}/reset", response_model=ResetResultSchema)
async def reset_case(
    user_id: str,
    case_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
    store: Annotated[SqlUnlockStore, Depends(get_store)],
):
    """Relock every hint of the case so it can be retried."""
    require_case(catalog, case_id)
    ledger = await load_ledger(store, catalog, user_id, case_id, max_balance=settings.max_hint_balance)
    cleared = ledger.reset(case_id)
    await save_ledger(store, ledger, case_id)
    await db.commit()
    return ResetResultSchema(user_id=user_id, case_id=case_id, cleared=cleared, balance=ledger.balance)


@router.post("/users/{user_id}/cases/{case_id}/complete", response_model=CompletionOutSchema)
async def complete_case(
    user_id: str,
    case_id: str,
    body: CaseCompleteSchema,
    db: Annotated[AsyncSession, Depends(get_db)],
    catalog: Annotated[ContentCatalog, Depends(get_catalog)],
    store: Annotated[SqlUnlockStore, Depends(get_store)],
):
    """Finalize the score, update progression, clear the case's hints and award achievements."""
    case = require_case(catalog, case_id)
    max_clues = catalog.clue_count(case_id)
    if body.clues_found > max_clues:
        raise HTTPException(status_code=422, detail=f"Case {case_id} has only {max_clues} clues")
    player = await get_or_create_player(db, user_id, settings.starting_hints)
    ledger = await load_ledger(store, catalog, user_id, case_id, max_balance=settings.max_hint_balance)

    hints_used = body.hints_used if body.hints_used is not None else ledger.purchased_count(case_id)
    scoring = case.scoring
    score = finalize_score(
        body.clues_found,
        hints_used,
        base_points=scoring.base_points,
        per_clue_points=scoring.per_clue_points,
        max_cap=scoring.max_score,
        per_hint_penalty=scoring.per_hint_penalty,
        max_penalty_ratio=scoring.max_penalty_ratio,
        min_score=scoring.min_score,
    )

    cleared = ledger.reset(case_id)
    await save_ledger(store, ledger, case_id)

    outcome = apply_case_completion(
        player_stats(player),
        case_id,
        points=score,
        time_spent=body.time_spent,
        clues_found=body.clues_found,
        hints_used=hints_used,
    )
    new_ids = pending_achievements(outcome.stats)
    stats = outcome.stats.model_copy(update={"achievements": [*outcome.stats.achievements, *new_ids]})

    apply_stats(player, stats)
    await record_completion(
        db,
        player,
        case_id,
        score=score,
        points_awarded=outcome.points_awarded,
        clues_found=body.clues_found,
        hints_used=hints_used,
        time_spent=body.time_spent,
        is_repeat=outcome.is_repeat,
    )
    await db.commit()

    if new_ids:
        logger.info("user %s earned achievements %s", user_id, ", ".join(new_ids))
    return CompletionOutSchema(
        case_id=case_id,
        score=score,
        points_awarded=outcome.points_awarded,
        is_repeat=outcome.is_repeat,
        hints_used=hints_used,
        cleared_unlocks=cleared,
        new_achievements=[achievement_schema(ACHIEVEMENTS_BY_ID[achievement_id], True) for achievement_id in new_ids],
        stats=stats,
    )


@router.get("/users/{user_id}/stats", response_model=StatsOutSchema)
async def get_stats(
    user_id: str,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    """Progression stats and the full achievement list with unlocked flags."""
    player = await get_or_create_player(db, user_id, settings.starting_hints)
    await db.commit()
    stats = player_stats(player)
    return StatsOutSchema(stats=stats, achievements=achievements_view(stats))
