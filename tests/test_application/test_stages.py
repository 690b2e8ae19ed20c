"""
Tests for the per-entity migration stages
"""
from datetime import date
from decimal import Decimal

import pytest

from cityvizor_migrate.application.ledger_writer import LedgerWriter
from cityvizor_migrate.application.stages.base import MigrationOrchestrator
from cityvizor_migrate.application.stages.budgets import BudgetsStage
from cityvizor_migrate.application.stages.events import EventsStage
from cityvizor_migrate.application.stages.payments import PaymentsStage
from cityvizor_migrate.application.stages.profiles import ProfilesStage
from cityvizor_migrate.application.stages.years import YearsStage
from cityvizor_migrate.domain.errors import UnknownStatus, UnresolvedReference
from cityvizor_migrate.infrastructure.db.models import (
    AccountingRecord, EventRecord, PaymentRecord, ProfileRecord, YearRecord,
)
from cityvizor_migrate.infrastructure.files.avatars import AvatarStore


@pytest.fixture
def writer(db_session):
    return LedgerWriter(db_session)


@pytest.fixture
def avatars(tmp_path):
    return AvatarStore(tmp_path)


@pytest.fixture
def orchestrator(sample_source, writer, ids, avatars):
    orchestrator = MigrationOrchestrator()
    orchestrator.register(ProfilesStage(sample_source, writer, ids, avatars))
    orchestrator.register(YearsStage(sample_source, writer, ids))
    orchestrator.register(EventsStage(sample_source, writer, ids))
    orchestrator.register(PaymentsStage(sample_source, writer, ids))
    orchestrator.register(BudgetsStage(sample_source, writer, ids))
    return orchestrator


def test_profiles_stage(db_session, sample_source, writer, ids, avatars, tmp_path):
    count = ProfilesStage(sample_source, writer, ids, avatars).run()

    assert count == 2
    profiles = db_session.query(ProfileRecord).order_by(ProfileRecord.id).all()
    assert [(p.id, p.name, p.status) for p in profiles] == [
        (1, "Obec Nová Ves", "visible"),
        (2, "Město Horní Lhota", "hidden"),
    ]
    assert profiles[0].mapasamospravy == 123
    assert profiles[1].mapasamospravy is None
    assert (profiles[0].gps_x, profiles[0].gps_y) == (pytest.approx(14.4205), pytest.approx(50.0878))
    assert profiles[0].avatar_type == ".png"
    assert profiles[1].avatar_type is None

    assert ids.resolve_profile_id("p1") == 1
    assert ids.resolve_profile_id("p2") == 2

    avatar = tmp_path / "avatars" / "avatar_1.png"
    assert avatar.read_bytes() == b"\x89PNG fake image"
    assert sorted(f.name for f in (tmp_path / "avatars").iterdir()) == ["avatar_1.png"]
    # avatar binary fetched only for the profile that has one
    assert sample_source.reads["avatars"] == 1


def test_profiles_stage_clears_old_avatars(sample_source, writer, ids, avatars, tmp_path):
    stale = tmp_path / "avatars" / "avatar_99.jpg"
    stale.parent.mkdir()
    stale.write_bytes(b"old")

    ProfilesStage(sample_source, writer, ids, avatars).run()

    assert not stale.exists()


def test_profiles_stage_unknown_status(source_factory, writer, ids, avatars):
    source = source_factory(profiles=[{"_id": "p1", "status": "deleted"}])

    with pytest.raises(UnknownStatus):
        ProfilesStage(source, writer, ids, avatars).run()


def test_years_stage_negates_visibility(db_session, sample_source, writer, ids, avatars):
    ProfilesStage(sample_source, writer, ids, avatars).run()

    count = YearsStage(sample_source, writer, ids).run()

    assert count == 2
    years = db_session.query(YearRecord).order_by(YearRecord.profile_id).all()
    assert [(y.profile_id, y.year, y.hidden) for y in years] == [(1, 2019, False), (2, 2019, True)]
    assert years[0].validity == date(2019, 12, 31)


def test_years_stage_requires_mapped_profile(source_factory, writer, ids):
    source = source_factory(years=[{"profile": "ghost", "year": 2019, "visible": True}])

    with pytest.raises(UnresolvedReference):
        YearsStage(source, writer, ids).run()


def test_events_stage_skips_non_numeric_src_ids(db_session, sample_source, writer, ids, avatars):
    ProfilesStage(sample_source, writer, ids, avatars).run()
    stage = EventsStage(sample_source, writer, ids)

    count = stage.run()

    assert count == 4
    assert stage.skipped == 2
    events = db_session.query(EventRecord).order_by(EventRecord.id).all()
    assert [(e.id, e.name) for e in events] == [(101, "Oprava silnice"), (102, "Kanalizace")]
    assert ids.resolve_event_id("e1") == 101
    assert ids.resolve_event_id("e2") is None
    assert ids.resolve_event_id("e3") is None


def test_payments_stage(db_session, sample_source, writer, ids, avatars):
    ProfilesStage(sample_source, writer, ids, avatars).run()
    EventsStage(sample_source, writer, ids).run()

    count = PaymentsStage(sample_source, writer, ids).run()

    assert count == 2
    payments = db_session.query(PaymentRecord).order_by(PaymentRecord.id).all()
    first, second = payments
    assert (first.profile_id, first.paragraph, first.item, first.event) == (1, 2212, 5171, 101)
    assert first.amount == Decimal("1500.50")
    assert first.date == date(2019, 3, 1)
    assert first.counterparty_id == "25123456"
    assert first.unit is None
    # e2 had srcId "abc"
    assert second.event is None
    assert second.counterparty_id is None


def test_orchestrator_runs_stages_in_order(db_session, orchestrator):
    results = orchestrator.run_all()

    assert list(results) == ["profiles", "years", "events", "payments", "budgets"]
    assert results == {"profiles": 2, "years": 2, "events": 4, "payments": 2, "budgets": 2}


def test_budgets_stage_writes_ledger(db_session, orchestrator):
    orchestrator.run_all()

    rows = db_session.query(AccountingRecord).order_by(AccountingRecord.id).all()
    assert [(r.type, r.paragraph, r.item, r.event, r.amount) for r in rows] == [
        ("UCT", 2212, None, 101, Decimal(60)),
        ("ROZ", 2212, None, 101, Decimal(70)),
        ("UCT", 2212, None, None, Decimal(40)),
        ("ROZ", 2212, None, None, Decimal(50)),
        ("UCT", None, 1111, 102, Decimal(200)),
        ("ROZ", None, 1111, 102, Decimal(100)),
        ("UCT", None, 1111, None, Decimal(300)),
        ("ROZ", None, 1111, None, Decimal(300)),
    ]
    assert {(r.profile_id, r.year) for r in rows} == {(1, 2019)}
    assert orchestrator.stages[-1].entries_count == 8


def test_paragraph_ledger_reconstructs_declared_totals(db_session, orchestrator):
    orchestrator.run_all()

    for entry_type, declared in (("UCT", Decimal(100)), ("ROZ", Decimal(120))):
        rows = db_session.query(AccountingRecord).filter(
            AccountingRecord.paragraph == 2212,
            AccountingRecord.type == entry_type,
        ).all()
        assert sum(r.amount for r in rows) == declared


def test_events_stage_same_src_id_in_different_years(db_session, source_factory, writer, ids, avatars):
    """One profile reuses an accounting id in another year"""
    source = source_factory(
        profiles=[{"_id": "p1", "status": "active"}],
        events=[
            {"_id": "e2018", "profile": "p1", "year": 2018, "name": "Chodník", "srcId": "5"},
            {"_id": "e2019", "profile": "p1", "year": 2019, "name": "Chodník", "srcId": "5"},
        ],
    )
    ProfilesStage(source, writer, ids, avatars).run()

    count = EventsStage(source, writer, ids).run()

    assert count == 2
    events = db_session.query(EventRecord).order_by(EventRecord.year).all()
    assert [(e.profile_id, e.year, e.id) for e in events] == [(1, 2018, 5), (1, 2019, 5)]
    assert ids.resolve_event_id("e2018") == 5
    assert ids.resolve_event_id("e2019") == 5


def test_zero_src_id_references_become_null(db_session, source_factory, writer, ids, avatars):
    """srcId "0" → no event row; payment and budget links to it are NULL"""
    source = source_factory(
        profiles=[{"_id": "p1", "status": "active"}],
        events=[{"_id": "e0", "profile": "p1", "year": 2019, "name": "Nulové číslo", "srcId": "0"}],
        payments=[{"profile": "p1", "year": 2019, "paragraph": "3612", "event": "e0", "amount": 80}],
        budgets=[{
            "profile": "p1",
            "year": 2019,
            "paragraphs": [{
                "id": "3612", "expenditureAmount": 80, "budgetExpenditureAmount": 90,
                "events": [{"event": "e0", "expenditureAmount": 80, "budgetExpenditureAmount": 90}],
            }],
            "items": [{
                "id": "5171", "incomeAmount": 0, "expenditureAmount": 80,
                "budgetIncomeAmount": 0, "budgetExpenditureAmount": 90,
                "events": [{
                    "event": "e0", "incomeAmount": 0, "expenditureAmount": 80,
                    "budgetIncomeAmount": 0, "budgetExpenditureAmount": 90,
                }],
            }],
        }],
    )
    orchestrator = MigrationOrchestrator()
    orchestrator.register(ProfilesStage(source, writer, ids, avatars))
    orchestrator.register(EventsStage(source, writer, ids))
    orchestrator.register(PaymentsStage(source, writer, ids))
    orchestrator.register(BudgetsStage(source, writer, ids))

    orchestrator.run_all()

    assert db_session.query(EventRecord).count() == 0
    assert db_session.query(PaymentRecord).one().event is None

    rows = db_session.query(AccountingRecord).order_by(AccountingRecord.id).all()
    assert [(r.type, r.paragraph, r.item, r.event, r.amount) for r in rows] == [
        ("UCT", 3612, None, None, Decimal(80)),
        ("ROZ", 3612, None, None, Decimal(90)),
        ("UCT", None, 5171, None, Decimal(80)),
        ("ROZ", None, 5171, None, Decimal(90)),
    ]


def test_payment_with_non_iso_date_is_kept(db_session, source_factory, writer, ids, avatars):
    source = source_factory(
        profiles=[{"_id": "p1", "status": "active"}],
        payments=[{"profile": "p1", "year": 2019, "amount": 10, "date": "1. 3. 2019"}],
    )
    ProfilesStage(source, writer, ids, avatars).run()

    PaymentsStage(source, writer, ids).run()

    payment = db_session.query(PaymentRecord).one()
    assert payment.date is None
    assert payment.amount == Decimal(10)
