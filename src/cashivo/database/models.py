"""SQLAlchemy models for cashivo database."""

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
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


class RecurringDefinition(Base):
    """Recurring transaction definition model."""

    __tablename__ = "recurring_definitions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    direction = Column(String, nullable=False)
    category = Column(String, nullable=False)
    description = Column(String, nullable=True)
    frequency = Column(String, nullable=False)
    interval = Column(Integer, default=1, nullable=False)
    # -1 means last day of month
    day_of_month = Column(Integer, nullable=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    last_processed_date = Column(Date, nullable=True)
    status = Column(String, default="active", nullable=False)
    auto_process = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # Relationships
    transactions = relationship("Transaction", back_populates="source_definition")


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    direction = Column(String, nullable=False)
    category = Column(String, nullable=False)
    date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    notes = Column(String, nullable=True)
    source_definition_id = Column(
        Integer, ForeignKey("recurring_definitions.id", ondelete="SET NULL"), nullable=True
    )
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)

    # One materialized transaction per occurrence
    __table_args__ = (
        UniqueConstraint("source_definition_id", "date", name="uq_definition_occurrence"),
    )

    # Relationships
    source_definition = relationship("RecurringDefinition", back_populates="transactions")


class Budget(Base):
    """Category budget model."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    category = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    period = Column(String, default="monthly", nullable=False)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(UTC), nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
