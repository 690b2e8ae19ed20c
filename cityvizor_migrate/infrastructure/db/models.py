"""
SQLAlchemy ORM models for the destination schema

Two PostgreSQL schemas:
- app:  profiles, years (per-profile application data)
- data: events, payments, accounting (the ledger)

Column names are the snake_case form of the source field names.
"""
from decimal import Decimal
from datetime import date as date_type
from sqlalchemy import String, Integer, SmallInteger, Text, Date, Boolean, Numeric, Index, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from cityvizor_migrate.infrastructure.db.session import Base


class ProfileRecord(Base):
    """
    Municipal profile (city / town)

    id is generated by the database; the migration restarts the sequence
    before loading so ids follow source order.
    """
    __tablename__ = "profiles"
    __table_args__ = {"schema": "app"}

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(String(16), nullable=False)  # visible, pending, hidden
    url: Mapped[str | None] = mapped_column(String(255), nullable=True)
    email: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # Registration numbers
    ico: Mapped[str | None] = mapped_column(String(32), nullable=True)
    edesky: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mapasamospravy: Mapped[int | None] = mapped_column(Integer, nullable=True)

    gps_x: Mapped[float | None] = mapped_column(Numeric(precision=12, scale=8, asdecimal=False), nullable=True)
    gps_y: Mapped[float | None] = mapped_column(Numeric(precision=12, scale=8, asdecimal=False), nullable=True)

    # File extension of avatars/avatar_<id><ext>, e.g. ".png"
    avatar_type: Mapped[str | None] = mapped_column(String(16), nullable=True)


class YearRecord(Base):
    """
    Fiscal year of a profile (one per source ETL record)
    """
    __tablename__ = "years"
    __table_args__ = {"schema": "app"}

    profile_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    year: Mapped[int] = mapped_column(SmallInteger, primary_key=True)
    validity: Mapped[date_type | None] = mapped_column(Date, nullable=True)
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default="false")


class EventRecord(Base):
    """
    Budget event (investment action), keyed by the accounting system id (srcId)

    srcId is unique only within one profile and year.
    """
    __tablename__ = "events"
    __table_args__ = {"schema": "data"}

    profile_id: Mapped[int] = mapped_column(Integer, primary_key=True)
    year: Mapped[int] = mapped_column(SmallInteger, primary_key=True)
    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)


class PaymentRecord(Base):
    """
    Single invoice / payment
    """
    __tablename__ = "payments"

    id: Mapped[int] = mapped_column(primary_key=True)
    profile_id: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    paragraph: Mapped[int | None] = mapped_column(Integer, nullable=True)
    item: Mapped[int | None] = mapped_column(Integer, nullable=True)
    unit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    event: Mapped[int | None] = mapped_column(Integer, nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False, server_default="0")
    date: Mapped[date_type | None] = mapped_column(Date, nullable=True)

    counterparty_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    counterparty_name: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        Index("ix_payments_profile_year", "profile_id", "year"),
        {"schema": "data"},
    )


class AccountingRecord(Base):
    """
    Ledger entry produced by budget decomposition

    type: UCT (actual) or ROZ (planned). Exactly one of paragraph / item is set.
    """
    __tablename__ = "accounting"

    id: Mapped[int] = mapped_column(primary_key=True)
    profile_id: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    type: Mapped[str] = mapped_column(String(3), nullable=False)

    paragraph: Mapped[int | None] = mapped_column(Integer, nullable=True)
    item: Mapped[int | None] = mapped_column(Integer, nullable=True)
    unit: Mapped[int | None] = mapped_column(Integer, nullable=True)
    event: Mapped[int | None] = mapped_column(Integer, nullable=True)

    amount: Mapped[Decimal] = mapped_column(Numeric(precision=20, scale=2), nullable=False)

    __table_args__ = (
        CheckConstraint("type IN ('UCT', 'ROZ')", name="ck_accounting_type"),
        Index("ix_accounting_profile_year", "profile_id", "year"),
        {"schema": "data"},
    )
