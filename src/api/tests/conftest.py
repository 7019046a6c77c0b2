import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from src.api.app import app, get_clock, get_registry, get_rng
from src.api.v1.routes import get_store
from src.api.services.persistence import SqlPredictionStore
from src.api.v1.schemas import PredictionResult
from src.db.base import Base
import src.db.models  # noqa: F401  (registers tables)

FIXED_NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)

VALID_INPUT = {
    "gender": "Female",
    "age": 45,
    "heartDisease": False,
    "smokingHistory": "never",
    "bmi": 27.1,
    "hbA1cLevel": 6.9,
    "bloodGlucoseLevel": 150,
}

ALICE = {"X-User-ID": "alice"}
BOB = {"X-User-ID": "bob"}


class FixedGateway:
    def make_prediction(self, inp):
        return PredictionResult(
            prediction="Low Risk",
            risk_score=0.2,
            details={"factors": {"bmi": "Overweight"}},
        )


class FailingGateway:
    def make_prediction(self, inp):
        raise RuntimeError("model offline")


class UnavailableStore:
    """Store that is down; any CRUD call is a bug in the caller."""

    def is_available(self):
        return False

    def create(self, *args):
        raise AssertionError("create called while store unavailable")

    def find_by_owner(self, *args):
        raise AssertionError("find_by_owner called while store unavailable")

    def find_one(self, *args):
        raise AssertionError("find_one called while store unavailable")

    def delete_one(self, *args):
        raise AssertionError("delete_one called while store unavailable")


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(bind=engine, autoflush=False)
    engine.dispose()


@pytest.fixture
def db_client(session_factory):
    def _store():
        db = session_factory()
        try:
            yield SqlPredictionStore(db)
        finally:
            db.close()

    app.dependency_overrides[get_store] = _store
    app.dependency_overrides[get_registry] = lambda: FixedGateway()
    app.dependency_overrides[get_rng] = lambda: random.Random(7)
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def mock_client():
    app.dependency_overrides[get_store] = lambda: UnavailableStore()
    app.dependency_overrides[get_rng] = lambda: random.Random(7)
    app.dependency_overrides[get_clock] = lambda: (lambda: FIXED_NOW)
    yield TestClient(app)
    app.dependency_overrides.clear()
