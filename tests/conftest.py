"""Shared pytest fixtures for cashivo tests."""

import tempfile
import os
from datetime import date
from decimal import Decimal
import pytest

from cashivo.database.factories import create_sqlite_database
from cashivo.domain.budget import BudgetService
from cashivo.domain.entities import Direction, Frequency, RecurringDefinition
from cashivo.domain.recurring import RecurringService
from cashivo.domain.summary import SummaryService
from cashivo.domain.transaction import TransactionService
from cashivo.logging_config import configure_logging

# Fixed "today" used by services and CLI tests
TODAY = date(2024, 1, 20)
USER = "alice"


@pytest.fixture(autouse=True)
def quiet_logging():
    """Route service loggers through stdlib at WARNING, bound to the current stderr."""
    configure_logging("WARNING")


@pytest.fixture
def temp_db():
    """Create a temporary database for testing."""
    fd, db_path = tempfile.mkstemp(suffix=".db")
    os.close(fd)

    db = create_sqlite_database(database_path=db_path)
    # Store the path for tests that need it
    db.database_path = db_path
    db.connect()
    db.initialize_schema()

    yield db

    db.disconnect()
    if os.path.exists(db_path):
        os.unlink(db_path)


@pytest.fixture
def recurring_service(temp_db):
    """Create a RecurringService whose clock returns TODAY."""
    return RecurringService(temp_db, clock=lambda: TODAY)


@pytest.fixture
def transaction_service(temp_db):
    """Create a TransactionService with a temporary database."""
    return TransactionService(temp_db)


@pytest.fixture
def summary_service(temp_db):
    """Create a SummaryService whose clock returns TODAY."""
    return SummaryService(temp_db, clock=lambda: TODAY)


@pytest.fixture
def budget_service(temp_db):
    """Create a BudgetService whose clock returns TODAY."""
    return BudgetService(temp_db, clock=lambda: TODAY)


@pytest.fixture
def make_definition():
    """Build an in-memory RecurringDefinition with sensible defaults."""

    def _make(**overrides) -> RecurringDefinition:
        values = {
            "id": 1,
            "user_id": USER,
            "amount": Decimal("100.00"),
            "direction": Direction.EXPENSE,
            "category": "Rent",
            "frequency": Frequency.MONTHLY,
            "start_date": date(2024, 1, 1),
        }
        values.update(overrides)
        return RecurringDefinition(**values)

    return _make


@pytest.fixture
def cli_runner():
    """Create a Click CLI test runner."""
    from click.testing import CliRunner

    return CliRunner()


@pytest.fixture
def invoke(cli_runner, temp_db):
    """Invoke the CLI against the temporary database as USER on TODAY."""
    from cashivo.cli.main import cli

    def _invoke(*args, input=None):
        return cli_runner.invoke(
            cli,
            [
                "--db-path",
                temp_db.database_path,
                "--user",
                USER,
                "--today",
                TODAY.isoformat(),
                *args,
            ],
            input=input,
        )

    return _invoke
