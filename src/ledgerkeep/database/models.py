"""SQLAlchemy models for ledgerkeep database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, sessionmaker, Session

Base = declarative_base()


class Account(Base):
    """Counterparty or internal cash/bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    display_name = Column(String, unique=True, nullable=False)
    kind = Column(String, nullable=True)
    category = Column(String, nullable=True)
    stored_balance = Column(Numeric(14, 2), nullable=False, default=0)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


class Transaction(Base):
    """Ledger transaction model.

    Party columns reference accounts but carry no foreign key constraint:
    legacy records may point at accounts that no longer exist.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    type = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    total_amount = Column(Numeric(14, 2), nullable=True)
    primary_party = Column(Integer, nullable=True, index=True)
    source_party = Column(Integer, nullable=True, index=True)
    target_party = Column(Integer, nullable=True, index=True)
    occurred_at = Column(Date, nullable=False)
    recorded_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)
    description = Column(String, nullable=True)

    # Visibility flags
    affects_balance = Column(Boolean, default=True, nullable=False)
    is_deleted = Column(Boolean, default=False, nullable=False)
    is_log = Column(Boolean, default=False, nullable=False)
    record_type = Column(String, default="transaction", nullable=False)

    # Migration bookkeeping
    migration_flag = Column(Boolean, default=False, nullable=False)
    needs_review = Column(Boolean, default=False, nullable=False)
    migration_status = Column(String, nullable=True)
    rejection_reason = Column(String, nullable=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
