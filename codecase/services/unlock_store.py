"""SQLAlchemy persistence for the unlock ledger and player progression.

The store flushes but never commits; the request handler owns the
transaction so a ledger save and a stats update land together.
"""
import json
import logging

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from codecase.models.completion import CaseCompletion
from codecase.models.hint_unlock import HintUnlock
from codecase.models.player import Player
from codecase.schemas.hints import UnlockMethod, UnlockRecordSchema
from codecase.schemas.stats import PlayerStatsSchema

logger = logging.getLogger(__name__)


async def get_or_create_player(db: AsyncSession, user_id: str, starting_hints: int) -> Player:
    result = await db.execute(select(Player).where(Player.user_id == user_id))
    player = result.scalar_one_or_none()

    if player is None:
        player = Player(
            user_id=user_id,
            hints=starting_hints,
            total_points=0,
            level=1,
            evidence_count=0,
            hints_used=0,
            current_streak=0,
            best_streak=0,
            total_time_spent=0,
            average_case_time=0.0,
            completed_cases_json="[]",
            achievements_json="[]",
        )
        db.add(player)
        await db.flush()
        logger.info("Created player %s with %d hints", user_id, starting_hints)

    return player


def player_stats(player: Player) -> PlayerStatsSchema:
    return PlayerStatsSchema(
        user_id=player.user_id,
        hints=player.hints,
        total_points=player.total_points,
        level=player.level,
        completed_cases=json.loads(player.completed_cases_json or "[]"),
        evidence_count=player.evidence_count,
        hints_used=player.hints_used,
        current_streak=player.current_streak,
        best_streak=player.best_streak,
        total_time_spent=player.total_time_spent,
        average_case_time=player.average_case_time,
        achievements=json.loads(player.achievements_json or "[]"),
    )


def apply_stats(player: Player, stats: PlayerStatsSchema) -> None:
    """Copy progression stats onto the row; the hint balance belongs to the ledger."""
    player.total_points = stats.total_points
    player.level = stats.level
    player.evidence_count = stats.evidence_count
    player.hints_used = stats.hints_used
    player.current_streak = stats.current_streak
    player.best_streak = stats.best_streak
    player.total_time_spent = stats.total_time_spent
    player.average_case_time = stats.average_case_time
    player.completed_cases_json = json.dumps(stats.completed_cases)
    player.achievements_json = json.dumps(stats.achievements)


async def record_completion(
    db: AsyncSession,
    player: Player,
    case_id: str,
    score: int,
    points_awarded: int,
    clues_found: int,
    hints_used: int,
    time_spent: int,
    is_repeat: bool,
) -> CaseCompletion:
    completion = CaseCompletion(
        player_id=player.id,
        case_id=case_id,
        score=score,
        points_awarded=points_awarded,
        clues_found=clues_found,
        hints_used=hints_used,
        time_spent=time_spent,
        is_repeat=is_repeat,
    )
    db.add(completion)
    await db.flush()
    return completion


class SqlUnlockStore:
    """UnlockStore over an AsyncSession."""

    def __init__(self, db: AsyncSession, starting_hints: int = 0) -> None:
        self.db = db
        self.starting_hints = starting_hints

    async def load_unlock_state(self, user_id: str, case_id: str) -> list[UnlockRecordSchema]:
        result = await self.db.execute(
            select(HintUnlock)
            .where(HintUnlock.user_id == user_id, HintUnlock.case_id == case_id)
            .order_by(HintUnlock.id.asc())
        )
        return [
            UnlockRecordSchema(
                user_id=row.user_id,
                case_id=row.case_id,
                unlock_id=row.unlock_id,
                unlocked=True,
                method=UnlockMethod(row.method),
            )
            for row in result.scalars().all()
        ]

    async def save_unlock_state(self, user_id: str, case_id: str, records: list[UnlockRecordSchema]) -> None:
        """Make the stored rows for ``(user_id, case_id)`` match ``records``."""
        wanted = {record.unlock_id: record for record in records if record.unlocked and record.case_id == case_id}

        result = await self.db.execute(
            select(HintUnlock).where(HintUnlock.user_id == user_id, HintUnlock.case_id == case_id)
        )
        stored = {row.unlock_id: row for row in result.scalars().all()}

        stale = [unlock_id for unlock_id in stored if unlock_id not in wanted]
        if stale:
            await self.db.execute(
                delete(HintUnlock).where(
                    HintUnlock.user_id == user_id,
                    HintUnlock.case_id == case_id,
                    HintUnlock.unlock_id.in_(stale),
                )
            )
        for unlock_id, record in wanted.items():
            if unlock_id not in stored:
                self.db.add(
                    HintUnlock(
                        user_id=user_id,
                        case_id=case_id,
                        unlock_id=unlock_id,
                        method=record.method.value,
                    )
                )
        await self.db.flush()

    async def load_balance(self, user_id: str) -> int:
        player = await get_or_create_player(self.db, user_id, self.starting_hints)
        return player.hints

    async def save_balance(self, user_id: str, balance: int) -> None:
        if balance < 0:
            raise ValueError("Hint balance cannot be negative.")
        player = await get_or_create_player(self.db, user_id, self.starting_hints)
        player.hints = balance
        await self.db.flush()
