import asyncio

import pytest

from codecase.schemas.hints import PurchaseFailure, UnlockMethod, UnlockRecordSchema
from codecase.services.content_loader import ContentCatalog
from codecase.services.ledger import UnknownUnlockError, UnlockLedger, load_ledger, save_ledger

HINT_COST = 3


class MemoryStore:
    """UnlockStore kept in dicts."""

    def __init__(self, starting_hints: int = 2) -> None:
        self.starting_hints = starting_hints
        self.unlocks: dict[tuple[str, str], list[UnlockRecordSchema]] = {}
        self.balances: dict[str, int] = {}

    async def load_unlock_state(self, user_id: str, case_id: str) -> list[UnlockRecordSchema]:
        return list(self.unlocks.get((user_id, case_id), []))

    async def save_unlock_state(self, user_id: str, case_id: str, records: list[UnlockRecordSchema]) -> None:
        self.unlocks[(user_id, case_id)] = list(records)

    async def load_balance(self, user_id: str) -> int:
        return self.balances.get(user_id, self.starting_hints)

    async def save_balance(self, user_id: str, balance: int) -> None:
        self.balances[user_id] = balance


def test_purchase_rejected_when_balance_is_short(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=2)
    result = ledger.purchase_unlock("reveal-hidden-message", HINT_COST)
    assert result.success is False
    assert result.failure is PurchaseFailure.INSUFFICIENT_FUNDS
    assert result.balance == 2
    assert ledger.balance == 2
    assert ledger.is_unlocked("reveal-hidden-message") is False


def test_purchase_debits_once_then_reports_already_unlocked(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=5)
    result = ledger.purchase_unlock("reveal-hidden-message", HINT_COST)
    assert result.success is True
    assert result.balance == 2
    assert result.hint_text.startswith("Remove the")
    assert ledger.is_unlocked("reveal-hidden-message") is True

    again = ledger.purchase_unlock("reveal-hidden-message", HINT_COST)
    assert again.success is False
    assert again.failure is PurchaseFailure.ALREADY_UNLOCKED
    assert ledger.balance == 2


def test_auto_unlock_credits_reward_once(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=2)
    first = ledger.auto_unlock("reveal-hidden-message", 5)
    assert first.changed is True
    assert first.credited == 5
    assert ledger.balance == 7

    second = ledger.auto_unlock("reveal-hidden-message", 5)
    assert second.changed is False
    assert second.credited == 0
    assert ledger.balance == 7


def test_auto_unlock_after_purchase_keeps_purchase(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=3)
    ledger.purchase_unlock("laptop", HINT_COST)
    outcome = ledger.auto_unlock("laptop", 3)
    assert outcome.changed is False
    assert outcome.method is UnlockMethod.PURCHASED
    assert ledger.balance == 0


def test_balance_is_capped(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=97, max_balance=99)
    outcome = ledger.auto_unlock("fix-display-none", 5)
    assert ledger.balance == 99
    assert outcome.credited == 2


def test_unknown_unlock_id_raises(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=10)
    with pytest.raises(UnknownUnlockError):
        ledger.purchase_unlock("no-such-hint", HINT_COST)
    with pytest.raises(KeyError):
        ledger.is_unlocked("no-such-hint")


def test_negative_amounts_raise(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=10)
    with pytest.raises(ValueError):
        ledger.purchase_unlock("laptop", -1)
    with pytest.raises(ValueError):
        ledger.auto_unlock("laptop", -1)
    with pytest.raises(ValueError):
        UnlockLedger("u1", catalog, balance=-1)


def test_reset_clears_only_one_case(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=10)
    ledger.auto_unlock("remove-center", 3)
    ledger.purchase_unlock("fix-display-none", HINT_COST)
    ledger.purchase_unlock("laptop", HINT_COST)

    assert ledger.reset("case-vanishing-blogger") == 2
    assert ledger.is_unlocked("remove-center") is False
    assert ledger.is_unlocked("fix-display-none") is False
    assert ledger.is_unlocked("laptop") is True
    assert ledger.reset("case-vanishing-blogger") == 0
    # balance is untouched by a reset
    assert ledger.balance == 7


def test_sync_conditions_unlocks_met_steps(catalog: ContentCatalog) -> None:
    mission = catalog.mission("case-vanishing-blogger", "clue-1")
    ledger = UnlockLedger("u1", catalog, balance=2)
    html = "<center><h1>The Truth About NovaCorp</h1></center><p>Check my last Insta story.</p>"

    outcomes = ledger.sync_conditions(mission, html, "")
    assert [outcome.unlock_id for outcome in outcomes] == ["reveal-hidden-message"]
    assert ledger.balance == 7
    assert ledger.sync_conditions(mission, html, "") == []
    assert ledger.purchased_count("case-vanishing-blogger") == 0


def test_records_are_filtered_by_case(catalog: ContentCatalog) -> None:
    ledger = UnlockLedger("u1", catalog, balance=10)
    ledger.auto_unlock("remove-center", 3)
    ledger.purchase_unlock("phone", HINT_COST)
    assert [record.unlock_id for record in ledger.records("visual-vanishing-blogger")] == ["phone"]
    assert len(ledger.records()) == 2


def test_load_and_save_through_store(catalog: ContentCatalog) -> None:
    store = MemoryStore(starting_hints=2)

    async def scenario() -> UnlockLedger:
        ledger = await load_ledger(store, catalog, "u1", "case-vanishing-blogger")
        assert ledger.balance == 2
        ledger.auto_unlock("reveal-hidden-message", 5)
        ledger.purchase_unlock("remove-center", HINT_COST)
        await save_ledger(store, ledger, "case-vanishing-blogger")
        return await load_ledger(store, catalog, "u1", "case-vanishing-blogger")

    reloaded = asyncio.run(scenario())
    assert reloaded.balance == 4
    assert reloaded.revealed_ids() == {"reveal-hidden-message", "remove-center"}
    assert reloaded.purchased_count("case-vanishing-blogger") == 1
