import asyncio
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from codecase.db.base import Base
from codecase.models.completion import CaseCompletion
from codecase.schemas.hints import UnlockMethod, UnlockRecordSchema
from codecase.services.content_loader import ContentCatalog
from codecase.services.ledger import load_ledger, save_ledger
from codecase.services.progression import apply_case_completion
from codecase.services.unlock_store import (
    SqlUnlockStore,
    apply_stats,
    get_or_create_player,
    player_stats,
    record_completion,
)

T = TypeVar("T")


def run_with_session(db_path: Path, work: Callable[[AsyncSession], Awaitable[T]]) -> T:
    async def runner() -> T:
        engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}")
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
            async with session_factory() as session:
                return await work(session)
        finally:
            await engine.dispose()

    return asyncio.run(runner())


def _record(unlock_id: str, method: UnlockMethod = UnlockMethod.AUTO) -> UnlockRecordSchema:
    return UnlockRecordSchema(
        user_id="u1",
        case_id="case-vanishing-blogger",
        unlock_id=unlock_id,
        method=method,
    )


def test_new_player_gets_starting_hints(tmp_path: Path) -> None:
    async def work(db: AsyncSession) -> int:
        store = SqlUnlockStore(db, starting_hints=2)
        balance = await store.load_balance("u1")
        await store.save_balance("u1", 9)
        await db.commit()
        return balance

    assert run_with_session(tmp_path / "store.db", work) == 2

    async def reread(db: AsyncSession) -> int:
        return await SqlUnlockStore(db, starting_hints=2).load_balance("u1")

    assert run_with_session(tmp_path / "store.db", reread) == 9


def test_save_unlock_state_replaces_rows(tmp_path: Path) -> None:
    async def work(db: AsyncSession) -> list[UnlockRecordSchema]:
        store = SqlUnlockStore(db)
        await store.save_unlock_state(
            "u1",
            "case-vanishing-blogger",
            [_record("remove-center"), _record("reveal-hidden-message", UnlockMethod.PURCHASED)],
        )
        await db.commit()
        await store.save_unlock_state("u1", "case-vanishing-blogger", [_record("reveal-hidden-message", UnlockMethod.PURCHASED)])
        await db.commit()
        return await store.load_unlock_state("u1", "case-vanishing-blogger")

    records = run_with_session(tmp_path / "store.db", work)
    assert [(record.unlock_id, record.method) for record in records] == [
        ("reveal-hidden-message", UnlockMethod.PURCHASED)
    ]


def test_unlock_state_is_per_user_and_case(tmp_path: Path) -> None:
    async def work(db: AsyncSession) -> tuple[int, int]:
        store = SqlUnlockStore(db)
        await store.save_unlock_state("u1", "case-vanishing-blogger", [_record("remove-center")])
        await db.commit()
        other_user = await store.load_unlock_state("u2", "case-vanishing-blogger")
        other_case = await store.load_unlock_state("u1", "visual-vanishing-blogger")
        return len(other_user), len(other_case)

    assert run_with_session(tmp_path / "store.db", work) == (0, 0)


def test_ledger_round_trip_through_sql(tmp_path: Path, catalog: ContentCatalog) -> None:
    async def work(db: AsyncSession) -> tuple[int, set[str]]:
        store = SqlUnlockStore(db, starting_hints=2)
        ledger = await load_ledger(store, catalog, "u1", "case-vanishing-blogger", max_balance=99)
        ledger.auto_unlock("fix-display-none", 5)
        ledger.purchase_unlock("style-evidence", 3)
        await save_ledger(store, ledger, "case-vanishing-blogger")
        await db.commit()

        reloaded = await load_ledger(store, catalog, "u1", "case-vanishing-blogger", max_balance=99)
        return reloaded.balance, reloaded.revealed_ids()

    balance, revealed = run_with_session(tmp_path / "store.db", work)
    assert balance == 4
    assert revealed == {"fix-display-none", "style-evidence"}


def test_player_stats_round_trip_and_completion_row(tmp_path: Path) -> None:
    async def work(db: AsyncSession) -> tuple[list[str], int, int]:
        player = await get_or_create_player(db, "u1", starting_hints=2)
        outcome = apply_case_completion(player_stats(player), "case-1", points=1700, time_spent=300, clues_found=2)
        stats = outcome.stats.model_copy(update={"achievements": ["first-detective"]})
        apply_stats(player, stats)
        await record_completion(
            db,
            player,
            "case-1",
            score=1700,
            points_awarded=outcome.points_awarded,
            clues_found=2,
            hints_used=0,
            time_spent=300,
            is_repeat=outcome.is_repeat,
        )
        await db.commit()

        again = await get_or_create_player(db, "u1", starting_hints=2)
        reread = player_stats(again)
        rows = (await db.execute(select(CaseCompletion).where(CaseCompletion.player_id == again.id))).scalars().all()
        return reread.completed_cases + reread.achievements, reread.level, len(rows)

    names, level, completions = run_with_session(tmp_path / "store.db", work)
    assert names == ["case-1", "first-detective"]
    assert level == 2
    assert completions == 1
