"""
Unit tests for money parsing and storage, the balance mutator, the account
store and the deposit, transfer and account services.
"""

import json
import logging
from decimal import Decimal

import pytest

from ledger.core import exceptions
from ledger.core.logging_config import JSONFormatter
from ledger.core.money import UPPER_BOUND, format_amount, parse_amount
from ledger.models import Account, AccountStatus, AuditLog, Transfer
from ledger.services.account_store import AccountStore
from ledger.services.accounts import AccountService
from ledger.services.balance import apply_delta
from ledger.services.deposits import DepositHandler
from ledger.services.transfers import TransferEngine


# ==================== MONEY TESTS ====================

@pytest.mark.parametrize("raw, expected", [
    ("100", Decimal("100.0000")),
    ("0.0001", Decimal("0.0001")),
    (" 12.50 ", Decimal("12.5000")),
    (7, Decimal("7.0000")),
    (Decimal("1.23"), Decimal("1.2300")),
    ("999999999999999.9999", Decimal("999999999999999.9999")),
])
def test_parse_amount_valid(raw, expected):
    amount = parse_amount(raw)
    assert amount == expected
    assert amount.as_tuple().exponent == -4


@pytest.mark.parametrize("raw", [
    "0", "-1", "abc", "", "1.00001", "NaN", "sNaN", "-Infinity",
    "1000000000000000", 1.5, True, None,
])
def test_parse_amount_invalid(raw):
    with pytest.raises(exceptions.InvalidAmount):
        parse_amount(raw)


def test_format_amount():
    assert format_amount(Decimal("5")) == "5.0000"
    assert format_amount(Decimal("0.12")) == "0.1200"


def test_large_balances_stored_exactly(open_account, balance_of):
    """Thirteen integer digits plus four decimals survive a round trip through storage."""
    account_id = open_account("big@example.com", "1234567890123.4567")
    assert balance_of(account_id) == Decimal("1234567890123.4567")
    assert format_amount(balance_of(account_id)) == "1234567890123.4567"


def test_deposit_result_matches_stored_balance(session_factory, open_account, balance_of):
    account_id = open_account("top@example.com", "99999999999999.9998")

    with session_factory() as db:
        new_balance = DepositHandler(db).deposit("top@example.com", "Top", "0.0001")

    assert new_balance == Decimal("99999999999999.9999")
    assert balance_of(account_id) == new_balance


def test_transfer_amount_stored_exactly(session_factory, open_account, balance_of):
    alice = open_account("a@example.com", "999999999999999.9999")
    bob = open_account("b@example.com")

    with session_factory() as db:
        transfer_id = TransferEngine(db).transfer(alice, bob, "123456789012345.6789").id

    with session_factory() as db:
        stored = db.query(Transfer).filter(Transfer.id == transfer_id).one()
        assert stored.amount == Decimal("123456789012345.6789")
    assert balance_of(alice) == Decimal("876543210987654.3210")
    assert balance_of(bob) == Decimal("123456789012345.6789")


# ==================== ERROR TAXONOMY TESTS ====================

def test_error_codes_are_distinct():
    kinds = [
        exceptions.InvalidAmount,
        exceptions.SameAccount,
        exceptions.NotFound,
        exceptions.AccountInactive,
        exceptions.InsufficientFunds,
        exceptions.Conflict,
        exceptions.StorageFailure,
    ]
    codes = [kind.code for kind in kinds]
    assert len(set(codes)) == len(codes)
    assert exceptions.AccountNotFound.code == exceptions.TransferNotFound.code == "not_found"
    assert exceptions.StorageFailure().status_code == 503


# ==================== BALANCE MUTATOR TESTS ====================

def test_apply_delta_credit_and_debit():
    account = Account(balance=Decimal("50.0000"), updated_at=None)

    assert apply_delta(account, Decimal("25")) == Decimal("75.0000")
    assert account.updated_at is not None
    assert apply_delta(account, Decimal("-75")) == Decimal("0")
    assert account.balance == Decimal("0")


def test_apply_delta_rejects_overdraft():
    account = Account(balance=Decimal("50.0000"), updated_at=None)

    with pytest.raises(exceptions.InsufficientFunds):
        apply_delta(account, Decimal("-50.0001"))

    assert account.balance == Decimal("50.0000")
    assert account.updated_at is None


def test_apply_delta_rejects_balance_beyond_range():
    ceiling = Decimal(UPPER_BOUND) - Decimal("0.0001")
    account = Account(balance=ceiling, updated_at=None)

    with pytest.raises(exceptions.InvalidAmount):
        apply_delta(account, Decimal("0.0001"))

    assert account.balance == ceiling
    assert account.updated_at is None


def test_deposit_beyond_range_changes_nothing(session_factory, open_account, balance_of):
    account_id = open_account("full@example.com", "999999999999999.9999")

    with session_factory() as db:
        with pytest.raises(exceptions.InvalidAmount):
            DepositHandler(db).deposit("full@example.com", "Full", "0.0001")

    assert balance_of(account_id) == Decimal("999999999999999.9999")
    with session_factory() as db:
        assert db.query(AuditLog).filter(AuditLog.action == "deposit").count() == 1


# ==================== ACCOUNT STORE TESTS ====================

def test_store_create_and_lookup(session_factory):
    with session_factory() as db:
        store = AccountStore(db)
        account = store.create("jo@example.com", "Jo")
        db.commit()

        assert store.get_by_id(account.id).email == "jo@example.com"
        assert store.get_by_email("jo@example.com").id == account.id
        assert store.get_by_email("nobody@example.com") is None
        assert account.balance == Decimal("0")
        assert account.status == AccountStatus.ACTIVE


def test_store_create_duplicate_email_conflicts(session_factory):
    with session_factory() as db:
        store = AccountStore(db)
        store.create("jo@example.com", "Jo")
        db.commit()

        with pytest.raises(exceptions.Conflict):
            store.create("jo@example.com", "Other Jo")
        # The savepoint rollback keeps the outer transaction usable.
        assert store.get_by_email("jo@example.com").full_name == "Jo"
        db.rollback()


def test_store_missing_accounts(session_factory):
    with session_factory() as db:
        store = AccountStore(db)
        with pytest.raises(exceptions.AccountNotFound):
            store.get_by_id("missing")
        with pytest.raises(exceptions.AccountNotFound):
            store.lock_for_update("missing")
        with pytest.raises(exceptions.AccountNotFound):
            store.require_by_email("missing@example.com")
        db.rollback()


def test_lock_for_update_reloads_current_balance(session_factory, open_account):
    account_id = open_account("fresh@example.com", "10")

    with session_factory() as reader:
        stale = AccountStore(reader).get_by_id(account_id)
        reader.rollback()

        with session_factory() as writer:
            DepositHandler(writer).deposit("fresh@example.com", "Fresh", "5")

        locked = AccountStore(reader).lock_for_update(account_id)
        assert locked is stale
        assert locked.balance == Decimal("15")
        reader.rollback()


def test_models_declare_no_relationships():
    """Transfers are looked up by query; neither side keeps a loaded collection."""
    assert not Account.__mapper__.relationships
    assert not Transfer.__mapper__.relationships


# ==================== DEPOSIT HANDLER TESTS ====================

def test_deposit_find_or_create(session_factory):
    with session_factory() as db:
        handler = DepositHandler(db)
        assert handler.deposit("new@example.com", "New", "800") == Decimal("800.0000")
        assert handler.deposit("new@example.com", "Renamed", "0.5") == Decimal("800.5000")

    with session_factory() as db:
        account = db.query(Account).filter(Account.email == "new@example.com").one()
        assert account.full_name == "New"
        entries = (
            db.query(AuditLog)
            .filter(AuditLog.entity_id == account.id, AuditLog.action == "deposit")
            .all()
        )
        assert len(entries) == 2
        assert sorted(entry.changes["account_created"] for entry in entries) == [False, True]


def test_deposit_invalid_amount_creates_nothing(session_factory):
    with session_factory() as db:
        with pytest.raises(exceptions.InvalidAmount):
            DepositHandler(db).deposit("x@example.com", "X", "-1")
        assert db.query(Account).count() == 0


def test_transfer_validation_order(session_factory, open_account):
    """Amount and same-account checks run before any account lookup."""
    alice = open_account("a@example.com", "10")

    with session_factory() as db:
        engine = TransferEngine(db)
        with pytest.raises(exceptions.InvalidAmount):
            engine.transfer(alice, "missing", "0")
        with pytest.raises(exceptions.SameAccount):
            engine.transfer(alice, alice, "1")
        with pytest.raises(exceptions.AccountNotFound):
            engine.transfer(alice, "missing", "1")
        # The read phase leaves no transaction open behind it.
        assert not db.in_transaction()


def test_status_change_blocks_transfers(session_factory, open_account):
    alice = open_account("a@example.com", "10")
    bob = open_account("b@example.com")

    with session_factory() as db:
        AccountService(db).change_status(bob, AccountStatus.SUSPENDED)
        with pytest.raises(exceptions.AccountInactive):
            TransferEngine(db).transfer(alice, bob, "1")

        AccountService(db).change_status(bob, AccountStatus.ACTIVE)
        transfer = TransferEngine(db).transfer(alice, bob, "1")
        assert transfer.amount == Decimal("1")


# ==================== ACCOUNT SERVICE TESTS ====================

def test_update_profile_renames_and_audits(session_factory, open_account):
    account_id = open_account("jo@example.com", "10", full_name="Jo")

    with session_factory() as db:
        account = AccountService(db).update_profile(
            account_id, full_name="Joanna", email="joanna@example.com"
        )
        assert account.full_name == "Joanna"
        assert account.email == "joanna@example.com"
        assert account.balance == Decimal("10")

    with session_factory() as db:
        entry = db.query(AuditLog).filter(AuditLog.action == "account_updated").one()
        assert entry.entity_id == account_id
        assert entry.changes == {
            "before": {"email": "jo@example.com", "full_name": "Jo"},
            "after": {"email": "joanna@example.com", "full_name": "Joanna"},
        }


def test_update_profile_partial_keeps_other_field(session_factory, open_account):
    account_id = open_account("jo@example.com", full_name="Jo")

    with session_factory() as db:
        account = AccountService(db).update_profile(account_id, full_name="Joanna")
        assert account.email == "jo@example.com"
        assert account.full_name == "Joanna"


def test_update_profile_duplicate_email_changes_nothing(session_factory, open_account):
    account_id = open_account("jo@example.com", full_name="Jo")
    open_account("taken@example.com")

    with session_factory() as db:
        with pytest.raises(exceptions.Conflict):
            AccountService(db).update_profile(
                account_id, full_name="Joanna", email="taken@example.com"
            )

    with session_factory() as db:
        account = AccountStore(db).get_by_id(account_id)
        assert account.email == "jo@example.com"
        assert account.full_name == "Jo"
        assert db.query(AuditLog).filter(AuditLog.action == "account_updated").count() == 0


def test_update_profile_missing_account(session_factory):
    with session_factory() as db:
        with pytest.raises(exceptions.AccountNotFound):
            AccountService(db).update_profile("missing", full_name="Nobody")


def test_unknown_actor_rejected_before_any_write(session_factory, open_account, balance_of):
    alice = open_account("a@example.com", "10")
    bob = open_account("b@example.com")

    with session_factory() as db:
        with pytest.raises(exceptions.AccountNotFound):
            TransferEngine(db).transfer(alice, bob, "1", actor_id="auth-user-42")
        with pytest.raises(exceptions.AccountNotFound):
            DepositHandler(db).deposit("c@example.com", "C", "5", actor_id="auth-user-42")
        with pytest.raises(exceptions.AccountNotFound):
            AccountService(db).change_status(bob, AccountStatus.CLOSED, actor_id="auth-user-42")
        assert not db.in_transaction()

    assert balance_of(alice) == Decimal("10")
    assert balance_of(bob) == Decimal("0")
    with session_factory() as db:
        assert AccountStore(db).get_by_email("c@example.com") is None
        assert AccountStore(db).get_by_id(bob).status == AccountStatus.ACTIVE
        assert db.query(Transfer).count() == 0


def test_known_actor_recorded_on_audit_entry(session_factory, open_account):
    alice = open_account("a@example.com", "10")
    bob = open_account("b@example.com")

    with session_factory() as db:
        transfer = TransferEngine(db).transfer(alice, bob, "1", actor_id=alice)

    with session_factory() as db:
        entry = db.query(AuditLog).filter(AuditLog.entity_id == transfer.id).one()
        assert entry.user_id == alice


# ==================== LOGGING TESTS ====================

def test_json_formatter_includes_context():
    record = logging.LogRecord(
        name="ledger.services.transfers",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Transfer of %s committed",
        args=("1.0000",),
        exc_info=None,
    )
    record.transfer_id = "t-1"

    payload = json.loads(JSONFormatter().format(record))
    assert payload["message"] == "Transfer of 1.0000 committed"
    assert payload["transfer_id"] == "t-1"
    assert payload["level"] == "INFO"
    assert "actor_id" not in payload
