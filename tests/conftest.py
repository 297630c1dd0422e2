"""
Shared fixtures: a fresh database per test, a session factory for
service-level tests and a TestClient wired to the same database.

Set TEST_DATABASE_URL to run against PostgreSQL; otherwise each test gets
its own SQLite file.
"""

import os
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from ledger.database import Base, build_engine, get_db, init_db
from ledger.main import app
from ledger.models import Account, Transfer
from ledger.services.accounts import AccountService
from ledger.services.audit import AuditRecorder
from ledger.services.deposits import DepositHandler


@pytest.fixture
def engine(tmp_path):
    url = os.environ.get("TEST_DATABASE_URL") or f"sqlite:///{tmp_path / 'ledger_test.db'}"
    engine = build_engine(url)
    init_db(engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def open_account(session_factory):
    """Create an account funded with ``balance`` and return its id."""
    def _open(email, balance="0", full_name=None):
        with session_factory() as db:
            if Decimal(balance) > 0:
                DepositHandler(db).deposit(email, full_name or email, balance)
            else:
                AccountService(db).open_account(email, full_name or email)
            return db.query(Account).filter(Account.email == email).one().id
    return _open


@pytest.fixture
def balance_of(session_factory):
    def _balance(account_id):
        with session_factory() as db:
            return db.query(Account).filter(Account.id == account_id).one().balance
    return _balance


@pytest.fixture
def row_counts(session_factory):
    """Return (transfers, audit entries of entity_type 'transfer')."""
    def _counts():
        with session_factory() as db:
            transfers = db.query(Transfer).count()
            audits = AuditRecorder(db).count("transfer")
            return transfers, audits
    return _counts
