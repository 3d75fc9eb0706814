"""
Pytest configuration and fixtures for tripsplit tests.
"""
import pytest
from decimal import Decimal
from typing import Dict, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from tripsplit.db.database import Base, get_db
from tripsplit.models import expenses, trips  # noqa: F401  (register tables)
from tripsplit.schemas.settlement_schema import MemberBalance, Transaction
from tripsplit.services.auth.jwt_handler import create_access_token


def make_balance(name: str, balance, member_id: str = None) -> MemberBalance:
    """Build a MemberBalance whose paid/owed totals are consistent with the balance."""
    balance = Decimal(str(balance))
    total_paid = balance if balance > 0 else Decimal("0")
    total_owed = -balance if balance < 0 else Decimal("0")
    return MemberBalance(
        member_id=member_id or name,
        display_name=name,
        total_paid=total_paid,
        total_owed=total_owed,
        balance=balance,
    )


def apply_transactions(balances: List[MemberBalance], transactions: List[Transaction]) -> Dict[str, Decimal]:
    """
    Replay transactions against the balances and return what is left per member.

    Paying reduces what a debtor owes (balance moves up), receiving reduces
    what a creditor is owed (balance moves down).
    """
    remaining = {b.display_name: b.balance for b in balances}
    for transaction in transactions:
        remaining[transaction.from_] += transaction.amount
        remaining[transaction.to] -= transaction.amount
    return remaining


@pytest.fixture
def scenario_balances():
    """Four-member trip: A paid for most things."""
    return [
        make_balance("A", "66.67"),
        make_balance("B", "-10.00"),
        make_balance("C", "-43.33"),
        make_balance("D", "-13.34"),
    ]


@pytest.fixture
def db_session():
    """Fresh in-memory SQLite database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """HTTP client whose requests share the test session."""
    from tripsplit.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build access-token headers for a user id."""
    def _headers(user_id: str, display_name: str = None) -> Dict[str, str]:
        return {"access-token": create_access_token(user_id, display_name or user_id)}
    return _headers
