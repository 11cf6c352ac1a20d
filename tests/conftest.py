"""Pytest fixtures for testing"""

import pytest
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Generator, List
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from agrigrow_lending.api.main import create_app
from agrigrow_lending.api.dependencies import get_notification_client, get_today
from agrigrow_lending.infrastructure.database.models import Base
from agrigrow_lending.infrastructure.database.session import get_db
from agrigrow_lending.domain.models import RiskFactors


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TODAY = date(2024, 3, 15)


class RecordingNotifier:
    """Stands in for the notification webhook; keeps every dispatched event"""

    def __init__(self):
        self.events: List[Dict[str, Any]] = []

    async def dispatch(self, payload: Dict[str, Any]) -> None:
        self.events.append(payload)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def client(db: Session, notifier: RecordingNotifier) -> TestClient:
    """Create FastAPI test client with test database, fixed clock and recording notifier"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_today] = lambda: TODAY
    app.dependency_overrides[get_notification_client] = lambda: notifier
    return TestClient(app)


@pytest.fixture
def risky_farm() -> RiskFactors:
    """No collateral, existing loan, rain-fed rice, loan far above revenue"""
    return RiskFactors(
        has_collateral=False,
        has_previous_loan=True,
        has_irrigation=False,
        crop_type="rice",
        loan_amount=Decimal("300000"),
        farm_size_hectares=Decimal("1"),
        estimated_revenue=Decimal("200000"),
    )


@pytest.fixture
def safe_farm() -> RiskFactors:
    """Collateralised, insured, irrigated maize with a small loan"""
    return RiskFactors(
        has_collateral=True,
        has_previous_loan=False,
        has_irrigation=True,
        has_insurance=True,
        crop_type="maize",
        loan_amount=Decimal("100000"),
        farm_size_hectares=Decimal("5"),
        estimated_revenue=Decimal("1000000"),
    )
