"""Unit tests for account opening, funding and transaction history"""

import threading
import pytest
from datetime import datetime, timezone
from banking_gateway.domain.exceptions import ConflictError, InternalError, InvalidInputError, NotFoundError
from banking_gateway.domain.models import MAX_BALANCE_CENTS, FundingSource
from banking_gateway.infrastructure.database.models import Account, LedgerTransaction
from banking_gateway.services.ledger_engine import LedgerEngine

CARD = FundingSource(type="card", account_number="4111111111111111")
BANK = FundingSource(type="bank", account_number="000123456789", routing_number="021000021")


def ledger_sum(db, account_id):
    entries = db.query(LedgerTransaction).filter(LedgerTransaction.account_id == account_id).all()
    return sum(e.amount_cents if e.type == "deposit" else -e.amount_cents for e in entries)


def balance_of(db, account_id):
    db.expire_all()
    return db.query(Account).filter(Account.id == account_id).one().balance_cents


def test_open_account_starts_empty_and_active(ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")

    assert account.user_id == user.id
    assert account.account_type == "checking"
    assert account.status == "active"
    assert account.balance_cents == 0
    assert len(account.account_number) == 10
    assert account.account_number.isdigit()


def test_open_account_one_per_type(ledger, make_user):
    user = make_user()
    ledger.open_account(user.id, "checking")
    ledger.open_account(user.id, "savings")

    with pytest.raises(ConflictError):
        ledger.open_account(user.id, "checking")


def test_open_account_rejects_unknown_type(ledger, make_user):
    user = make_user()
    with pytest.raises(InvalidInputError):
        ledger.open_account(user.id, "brokerage")


def test_open_account_retries_on_number_collision(db, make_user):
    """Generated numbers already in the store are skipped"""
    first = make_user()
    second = make_user()
    LedgerEngine(db, number_generator=lambda: "1111111111").open_account(first.id, "checking")

    candidates = iter(["1111111111", "1111111111", "2222222222"])
    account = LedgerEngine(db, number_generator=lambda: next(candidates)).open_account(second.id, "checking")

    assert account.account_number == "2222222222"


def test_open_account_gives_up_after_bounded_attempts(db, make_user):
    first = make_user()
    second = make_user()
    LedgerEngine(db, number_generator=lambda: "1111111111").open_account(first.id, "checking")

    calls = []

    def always_taken():
        calls.append(1)
        return "1111111111"

    engine = LedgerEngine(db, max_account_number_attempts=3, number_generator=always_taken)
    with pytest.raises(InternalError):
        engine.open_account(second.id, "savings")
    assert len(calls) == 3


def test_open_account_for_unknown_user_is_not_found(db):
    """A missing owner is reported as such, not retried as a number collision"""
    calls = []

    def numbers():
        calls.append(1)
        return "3333333333"

    with pytest.raises(NotFoundError):
        LedgerEngine(db, number_generator=numbers).open_account(424242, "checking")
    assert calls == []
    assert db.query(Account).count() == 0


def test_list_accounts_only_returns_callers(ledger, make_user):
    user = make_user()
    other = make_user()
    ledger.open_account(user.id, "checking")
    ledger.open_account(user.id, "savings")
    ledger.open_account(other.id, "checking")

    accounts = ledger.list_accounts(user.id)

    assert [a.account_type for a in accounts] == ["checking", "savings"]
    assert all(a.user_id == user.id for a in accounts)


def test_fund_updates_balance_and_writes_entry(db, ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")

    result = ledger.fund(user.id, account.id, 10_000, CARD)

    assert result.new_balance_cents == 10_000
    assert result.transaction.type == "deposit"
    assert result.transaction.amount_cents == 10_000
    assert result.transaction.status == "completed"
    assert result.transaction.description == "Funding from card"
    assert result.transaction.processed_at is not None
    assert balance_of(db, account.id) == 10_000


def test_fund_balance_matches_ledger_sum(db, ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "savings")

    for amount in (1_000, 250, 99_999):
        before = balance_of(db, account.id)
        result = ledger.fund(user.id, account.id, amount, CARD)
        assert result.new_balance_cents == before + amount

    assert balance_of(db, account.id) == ledger_sum(db, account.id) == 101_249


def test_fund_bank_requires_routing_number(db, ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    no_routing = FundingSource(type="bank", account_number="000123456789")

    with pytest.raises(InvalidInputError):
        ledger.fund(user.id, account.id, 5_000, no_routing)
    assert ledger_sum(db, account.id) == 0


def test_fund_card_never_needs_routing_number(ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    same_payload_as_card = FundingSource(type="card", account_number="000123456789")

    result = ledger.fund(user.id, account.id, 5_000, same_payload_as_card)
    assert result.new_balance_cents == 5_000


def test_fund_bank_with_routing_number(ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")

    result = ledger.fund(user.id, account.id, 5_000, BANK)
    assert result.transaction.description == "Funding from bank"


@pytest.mark.parametrize("amount", [0, -100])
def test_fund_rejects_non_positive_amounts(db, ledger, make_user, amount):
    user = make_user()
    account = ledger.open_account(user.id, "checking")

    with pytest.raises(InvalidInputError):
        ledger.fund(user.id, account.id, amount, CARD)
    assert balance_of(db, account.id) == 0
    assert ledger_sum(db, account.id) == 0


def test_fund_rejects_amount_above_limit(db, make_user):
    user = make_user()
    engine = LedgerEngine(db, max_funding_amount_cents=10_000)
    account = engine.open_account(user.id, "checking")

    with pytest.raises(InvalidInputError):
        engine.fund(user.id, account.id, 10_001, CARD)
    assert balance_of(db, account.id) == 0

    assert engine.fund(user.id, account.id, 10_000, CARD).new_balance_cents == 10_000
    assert ledger_sum(db, account.id) == 10_000


def test_fund_never_pushes_balance_past_bigint(db, ledger, make_user):
    """The balance stays an exact integer at the top of the column's range"""
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    near_limit = MAX_BALANCE_CENTS - 500
    db.query(Account).filter(Account.id == account.id).update({Account.balance_cents: near_limit})
    db.commit()

    with pytest.raises(InvalidInputError):
        ledger.fund(user.id, account.id, 501, CARD)
    balance = balance_of(db, account.id)
    assert balance == near_limit
    assert isinstance(balance, int)
    assert db.query(LedgerTransaction).count() == 0

    assert ledger.fund(user.id, account.id, 500, CARD).new_balance_cents == MAX_BALANCE_CENTS
    assert balance_of(db, account.id) == MAX_BALANCE_CENTS


def test_fund_foreign_account_looks_absent(db, ledger, make_user):
    owner = make_user()
    intruder = make_user()
    account = ledger.open_account(owner.id, "checking")

    with pytest.raises(NotFoundError):
        ledger.fund(intruder.id, account.id, 1_000, CARD)
    with pytest.raises(NotFoundError):
        ledger.fund(intruder.id, 424242, 1_000, CARD)
    assert balance_of(db, account.id) == 0


def test_fund_suspended_account_rejected(db, ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    db.query(Account).filter(Account.id == account.id).update({Account.status: "suspended"})
    db.commit()

    with pytest.raises(InvalidInputError):
        ledger.fund(user.id, account.id, 1_000, CARD)
    assert ledger_sum(db, account.id) == 0


def test_fund_failure_between_writes_persists_nothing(db, ledger, make_user, monkeypatch):
    """Crash after the ledger insert: neither the entry nor the balance change survives"""
    user = make_user()
    account = ledger.open_account(user.id, "checking")

    def crash(account_id, amount_cents):
        raise RuntimeError("simulated crash")

    monkeypatch.setattr(ledger.accounts, "increment_balance", crash)

    with pytest.raises(RuntimeError):
        ledger.fund(user.id, account.id, 1_000, CARD)

    assert db.query(LedgerTransaction).count() == 0
    assert balance_of(db, account.id) == 0


def test_fund_missing_read_back_is_internal_error(db, ledger, make_user, monkeypatch):
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    monkeypatch.setattr(ledger.accounts, "read_balance", lambda account_id: None)

    with pytest.raises(InternalError):
        ledger.fund(user.id, account.id, 1_000, CARD)
    assert db.query(LedgerTransaction).count() == 0
    assert balance_of(db, account.id) == 0


def test_concurrent_funding_converges(session_factory, make_user, ledger):
    """+$10 and +$25 from two sessions at once end at $35 with two entries"""
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    barrier = threading.Barrier(2)
    errors = []

    def deposit(amount):
        db = session_factory()
        try:
            barrier.wait()
            LedgerEngine(db).fund(user.id, account.id, amount, CARD)
        except Exception as e:
            errors.append(e)
        finally:
            db.close()

    threads = [threading.Thread(target=deposit, args=(amount,)) for amount in (1_000, 2_500)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    check = session_factory()
    try:
        assert balance_of(check, account.id) == 3_500
        assert check.query(LedgerTransaction).filter(LedgerTransaction.account_id == account.id).count() == 2
        assert ledger_sum(check, account.id) == 3_500
    finally:
        check.close()


def _add_entry(db, account_id, created_at, amount_cents=100):
    db.add(
        LedgerTransaction(
            account_id=account_id,
            type="deposit",
            amount_cents=amount_cents,
            description="seed",
            status="completed",
            created_at=created_at,
        )
    )
    db.commit()


def test_list_transactions_most_recent_first(db, ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "savings")
    for ts in ("2023-01-01", "2025-12-01", "2024-06-01"):
        _add_entry(db, account.id, datetime.fromisoformat(ts).replace(tzinfo=timezone.utc))

    entries = ledger.list_transactions(user.id, account.id)

    assert [e.created_at.date().isoformat() for e in entries] == ["2025-12-01", "2024-06-01", "2023-01-01"]
    assert all(e.account_type == "savings" for e in entries)


def test_list_transactions_offset_pagination(db, ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    for day in range(1, 6):
        _add_entry(db, account.id, datetime(2024, 1, day, tzinfo=timezone.utc), amount_cents=day)

    first_page = ledger.list_transactions(user.id, account.id, limit=2, offset=0)
    second_page = ledger.list_transactions(user.id, account.id, limit=2, offset=2)
    last_page = ledger.list_transactions(user.id, account.id, limit=2, offset=4)

    assert [e.amount_cents for e in first_page] == [5, 4]
    assert [e.amount_cents for e in second_page] == [3, 2]
    assert [e.amount_cents for e in last_page] == [1]


def test_list_transactions_defaults_to_ten(db, ledger, make_user):
    user = make_user()
    account = ledger.open_account(user.id, "checking")
    for day in range(1, 13):
        _add_entry(db, account.id, datetime(2024, 2, day, tzinfo=timezone.utc))

    assert len(ledger.list_transactions(user.id, account.id)) == 10


def test_list_transactions_foreign_account_looks_absent(ledger, make_user):
    owner = make_user()
    intruder = make_user()
    account = ledger.open_account(owner.id, "checking")

    with pytest.raises(NotFoundError):
        ledger.list_transactions(intruder.id, account.id)


@pytest.mark.parametrize("limit,offset", [(0, 0), (-1, 0), (5, -1)])
def test_list_transactions_rejects_bad_window(ledger, make_user, limit, offset):
    user = make_user()
    account = ledger.open_account(user.id, "checking")

    with pytest.raises(InvalidInputError):
        ledger.list_transactions(user.id, account.id, limit=limit, offset=offset)
