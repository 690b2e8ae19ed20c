"""
Pytest fixtures for testing
"""
import copy
from collections import Counter
from datetime import date, datetime

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session

from cityvizor_migrate.domain.identifiers import IdentifierMap
from cityvizor_migrate.infrastructure.db import models  # noqa: F401
from cityvizor_migrate.infrastructure.db.session import Base
from cityvizor_migrate.infrastructure.source.store import SourceStore


class InMemorySource(SourceStore):
    """SourceStore over plain lists of documents, counts every read"""

    def __init__(self, profiles=(), years=(), events=(), payments=(), budgets=(), avatars=None):
        self._collections = {
            "profiles": list(profiles),
            "years": list(years),
            "events": list(events),
            "payments": list(payments),
            "budgets": list(budgets),
        }
        self._avatars = dict(avatars or {})
        self.reads = Counter()
        self.closed = False

    def _read(self, name):
        self.reads[name] += 1
        return copy.deepcopy(self._collections[name])

    def profiles(self):
        return self._read("profiles")

    def years(self):
        return self._read("years")

    def events(self):
        return self._read("events")

    def payments(self):
        return self._read("payments")

    def budgets(self):
        return self._read("budgets")

    def fetch_avatar(self, profile_id):
        self.reads["avatars"] += 1
        return self._avatars.get(profile_id)

    def close(self):
        self.closed = True


@pytest.fixture
def db_engine():
    """In-memory SQLite engine; PostgreSQL schemas (app, data) mapped to the default one."""
    engine = create_engine("sqlite:///:memory:").execution_options(
        schema_translate_map={"app": None, "data": None}
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine) -> Session:
    """Create database session for tests"""
    SessionLocal = sessionmaker(bind=db_engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def ids():
    return IdentifierMap()


@pytest.fixture
def source_factory():
    return InMemorySource


@pytest.fixture
def sample_source():
    """Two profiles, one year each, events with good and bad srcIds, one budget."""
    return InMemorySource(
        profiles=[
            {
                "_id": "p1",
                "name": "Obec Nová Ves",
                "status": "active",
                "url": "nova-ves",
                "email": "podatelna@novaves.cz",
                "ico": "00012345",
                "edesky": 57,
                "mapasamospravy": 123,
                "gps": [14.4205, 50.0878],
                "avatar": {"name": "erb.png"},
            },
            {
                "_id": "p2",
                "name": "Město Horní Lhota",
                "status": "hidden",
                "url": "horni-lhota",
                "mapasamospravy": 5000,
            },
        ],
        avatars={"p1": b"\x89PNG fake image"},
        years=[
            {"profile": "p1", "year": 2019, "validity": datetime(2019, 12, 31), "visible": True},
            {"profile": "p2", "year": 2019, "visible": False},
        ],
        events=[
            {"_id": "e1", "profile": "p1", "year": 2019, "name": "Oprava silnice", "srcId": "101"},
            {"_id": "e2", "profile": "p1", "year": 2019, "name": "Bez čísla", "srcId": "abc"},
            {"_id": "e3", "profile": "p1", "year": 2019, "name": "Nulové číslo", "srcId": "0"},
            {"_id": "e4", "profile": "p1", "year": 2019, "name": "Kanalizace", "srcId": 102},
        ],
        payments=[
            {
                "profile": "p1", "year": 2019, "paragraph": "2212", "item": "5171",
                "event": "e1", "amount": 1500.5, "date": datetime(2019, 3, 1),
                "counterpartyId": 25123456, "counterpartyName": "Stavby s.r.o.",
                "description": "Oprava výtluků",
            },
            {
                "profile": "p1", "year": 2019, "paragraph": "2212", "item": "5171",
                "event": "e2", "amount": 200, "date": date(2019, 4, 2),
            },
        ],
        budgets=[
            {
                "profile": "p1",
                "year": 2019,
                "paragraphs": [
                    {
                        "id": "2212",
                        "expenditureAmount": 100,
                        "budgetExpenditureAmount": 120,
                        "events": [
                            {"event": "e1", "expenditureAmount": 60, "budgetExpenditureAmount": 70},
                            {"event": "e2", "expenditureAmount": 5, "budgetExpenditureAmount": 5},
                        ],
                    },
                ],
                "items": [
                    {
                        "id": "1111",
                        "incomeAmount": 500,
                        "expenditureAmount": 0,
                        "budgetIncomeAmount": 400,
                        "budgetExpenditureAmount": 0,
                        "events": [
                            {
                                "event": "e4",
                                "incomeAmount": 200,
                                "expenditureAmount": 0,
                                "budgetIncomeAmount": 100,
                                "budgetExpenditureAmount": 0,
                            },
                        ],
                    },
                ],
            },
            {"profile": "p2", "year": 2019},
        ],
    )
