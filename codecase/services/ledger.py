"""Hint economy: per-user unlock ledger and hint balance.

Each unlock id (hint step or puzzle) moves once from locked to unlocked,
either automatically when its condition is met (free, credits a reward)
or by purchase (debits the balance). Only ``reset`` for a whole case
returns records to locked.

The ledger works on an in-memory snapshot. Loading and saving go through
an ``UnlockStore``; the ledger never owns storage and does no locking, so
callers must serialize mutating calls per user.
"""
import logging
from collections.abc import Iterable
from typing import Protocol

from codecase.schemas.content import Mission
from codecase.schemas.hints import (
    PurchaseFailure,
    PurchaseResultSchema,
    UnlockMethod,
    UnlockOutcomeSchema,
    UnlockRecordSchema,
)
from codecase.services.content_loader import ContentCatalog, Unlockable
from codecase.services.hints import evaluate_conditions
from codecase.services.scoring import apply_balance_delta

logger = logging.getLogger(__name__)


class UnknownUnlockError(KeyError):
    """Unlock id is not defined by any loaded case; a wiring bug, not a user action."""


class UnlockStore(Protocol):
    async def load_unlock_state(self, user_id: str, case_id: str) -> list[UnlockRecordSchema]: ...

    async def save_unlock_state(self, user_id: str, case_id: str, records: list[UnlockRecordSchema]) -> None: ...

    async def load_balance(self, user_id: str) -> int: ...

    async def save_balance(self, user_id: str, balance: int) -> None: ...


class UnlockLedger:
    """Unlock state and hint balance for one user."""

    def __init__(
        self,
        user_id: str,
        catalog: ContentCatalog,
        records: Iterable[UnlockRecordSchema] = (),
        balance: int = 0,
        max_balance: int | None = None,
    ) -> None:
        if balance < 0:
            raise ValueError("Hint balance cannot be negative.")
        self.user_id = user_id
        self.catalog = catalog
        self.max_balance = max_balance
        self._balance = balance if max_balance is None else min(balance, max_balance)
        self._records: dict[str, UnlockRecordSchema] = {}
        for record in records:
            if record.unlocked:
                self._lookup(record.unlock_id)
                self._records[record.unlock_id] = record

    @property
    def balance(self) -> int:
        return self._balance

    def _lookup(self, unlock_id: str) -> Unlockable:
        item = self.catalog.unlockable(unlock_id)
        if item is None:
            raise UnknownUnlockError(unlock_id)
        return item

    def is_unlocked(self, unlock_id: str) -> bool:
        self._lookup(unlock_id)
        return unlock_id in self._records

    def records(self, case_id: str | None = None) -> list[UnlockRecordSchema]:
        """Snapshot of unlocked records, optionally for one case (save hook)."""
        return [record for record in self._records.values() if case_id is None or record.case_id == case_id]

    def revealed_ids(self, case_id: str | None = None) -> set[str]:
        return {record.unlock_id for record in self.records(case_id)}

    def _record(self, item: Unlockable, method: UnlockMethod) -> None:
        self._records[item.unlock_id] = UnlockRecordSchema(
            user_id=self.user_id,
            case_id=item.case_id,
            unlock_id=item.unlock_id,
            unlocked=True,
            method=method,
        )

    def auto_unlock(self, unlock_id: str, reward: int) -> UnlockOutcomeSchema:
        """Free unlock on a satisfied condition; credits ``reward`` once.

        Repeating it for an unlocked id is a no-op, which absorbs the
        condition evaluator re-reporting a step that stays true.
        """
        if reward < 0:
            raise ValueError("Reward cannot be negative.")
        item = self._lookup(unlock_id)
        existing = self._records.get(unlock_id)
        if existing is not None:
            return UnlockOutcomeSchema(
                unlock_id=unlock_id,
                changed=False,
                method=existing.method,
                hint_text=item.hint_text,
                credited=0,
                balance=self._balance,
            )

        before = self._balance
        self._balance = apply_balance_delta(self._balance, reward, self.max_balance)
        self._record(item, UnlockMethod.AUTO)
        logger.debug("user %s auto-unlocked %s (+%d)", self.user_id, unlock_id, self._balance - before)
        return UnlockOutcomeSchema(
            unlock_id=unlock_id,
            changed=True,
            method=UnlockMethod.AUTO,
            hint_text=item.hint_text,
            credited=self._balance - before,
            balance=self._balance,
        )

    def purchase_unlock(self, unlock_id: str, cost: int) -> PurchaseResultSchema:
        """Buy a locked hint. Failures come back as values and leave state untouched."""
        if cost < 0:
            raise ValueError("Cost cannot be negative.")
        item = self._lookup(unlock_id)
        if unlock_id in self._records:
            return PurchaseResultSchema(
                unlock_id=unlock_id,
                success=False,
                failure=PurchaseFailure.ALREADY_UNLOCKED,
                cost=cost,
                balance=self._balance,
            )
        if self._balance < cost:
            logger.info("user %s cannot afford %s (%d < %d)", self.user_id, unlock_id, self._balance, cost)
            return PurchaseResultSchema(
                unlock_id=unlock_id,
                success=False,
                failure=PurchaseFailure.INSUFFICIENT_FUNDS,
                cost=cost,
                balance=self._balance,
            )

        self._balance -= cost
        self._record(item, UnlockMethod.PURCHASED)
        logger.info("user %s purchased %s for %d", self.user_id, unlock_id, cost)
        return PurchaseResultSchema(
            unlock_id=unlock_id,
            success=True,
            cost=cost,
            balance=self._balance,
            hint_text=item.hint_text,
        )

    def reset(self, case_id: str) -> int:
        """Drop every record of ``case_id`` (case retry or completion); returns how many."""
        doomed = [unlock_id for unlock_id, record in self._records.items() if record.case_id == case_id]
        for unlock_id in doomed:
            del self._records[unlock_id]
        if doomed:
            logger.info("user %s reset %d unlocks for %s", self.user_id, len(doomed), case_id)
        return len(doomed)

    def purchased_count(self, case_id: str) -> int:
        return sum(1 for record in self.records(case_id) if record.method is UnlockMethod.PURCHASED)

    def sync_conditions(self, mission: Mission, html: str, css: str) -> list[UnlockOutcomeSchema]:
        """Auto-unlock every hint step of ``mission`` whose condition newly holds."""
        steps = {step.id: step for step in mission.hints_steps}
        newly_met = evaluate_conditions(mission, html, css, self.revealed_ids())
        return [self.auto_unlock(step_id, steps[step_id].points) for step_id in newly_met]


async def load_ledger(
    store: UnlockStore,
    catalog: ContentCatalog,
    user_id: str,
    case_id: str,
    max_balance: int | None = None,
) -> UnlockLedger:
    records = await store.load_unlock_state(user_id, case_id)
    balance = await store.load_balance(user_id)
    return UnlockLedger(user_id, catalog, records=records, balance=balance, max_balance=max_balance)


async def save_ledger(store: UnlockStore, ledger: UnlockLedger, case_id: str) -> None:
    await store.save_unlock_state(ledger.user_id, case_id, ledger.records(case_id))
    await store.save_balance(ledger.user_id, ledger.balance)
