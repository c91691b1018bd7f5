"""Unit tests for the record stores."""

from dataclasses import replace

import psycopg2
import pytest

from scorecard.catalog import BEHAVIORAL_CATALOG
from scorecard.errors import PersistenceError
from scorecard.models import LifecycleState
from scorecard.postgres_store import PostgresAssessmentStore
from scorecard.record_builder import build_record
from scorecard.store import SQLiteAssessmentStore, get_store


@pytest.fixture
def record(candidate, strong_scores, clock):
    return build_record(
        "assign-1", candidate, strong_scores, {"leadership": "Clear direction"},
        "Good session", BEHAVIORAL_CATALOG,
        lifecycle_state=LifecycleState.IN_PROGRESS, updated_at=clock(),
    )


def test_store_initialization(tmp_path):
    """Test store creates its directory and database."""
    data_dir = tmp_path / "nested" / "data"
    store = SQLiteAssessmentStore(data_dir=data_dir)
    assert data_dir.exists()
    assert store.db_path.exists()


def test_load_miss(store):
    """Test loading an unknown assignment."""
    assert store.load_record("nonexistent") is None


def test_save_and_load(store, record):
    """Test a saved record loads back unchanged."""
    store.save_record(record)
    assert store.load_record("assign-1") == record


def test_save_replaces(store, record, clock):
    """Test one record per assignment."""
    store.save_record(record)
    submitted = replace(record, lifecycle_state=LifecycleState.SUBMITTED, submitted_at=clock())
    store.submit_record(submitted)
    assert store.load_record("assign-1") == submitted
    assert len(store.list_records()) == 1


def test_list_records(store, record, clock):
    """Test listing filters by state and puts recent updates first."""
    store.save_record(record)
    later = replace(record, assignment_id="assign-2", lifecycle_state=LifecycleState.SUBMITTED,
                    updated_at=clock())
    store.save_record(later)

    assert [r.assignment_id for r in store.list_records()] == ["assign-2", "assign-1"]
    assert [r.assignment_id for r in store.list_records(LifecycleState.SUBMITTED)] == ["assign-2"]
    assert [r.assignment_id for r in store.list_records("in_progress")] == ["assign-1"]


def test_unreadable_database(store):
    """Test database errors surface as PersistenceError."""
    store.db_path = store.db_path.parent
    with pytest.raises(PersistenceError):
        store.load_record("assign-1")


def test_get_store_defaults_to_sqlite(tmp_path, monkeypatch):
    """Test SQLite is used when DATABASE_URL is unset."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.setenv("SCORECARD_DATA_DIR", str(tmp_path))
    store = get_store()
    assert isinstance(store, SQLiteAssessmentStore)
    assert store.db_path == tmp_path / "assessments.db"


def test_postgres_store_requires_url(monkeypatch):
    """Test the Postgres store needs a connection string."""
    monkeypatch.delenv("DATABASE_URL", raising=False)
    with pytest.raises(ValueError):
        PostgresAssessmentStore()


def test_postgres_connection_failure(monkeypatch):
    """Test connection errors surface as PersistenceError."""
    def refuse(*args, **kwargs):
        raise psycopg2.OperationalError("connection refused")

    monkeypatch.setattr(psycopg2, "connect", refuse)
    with pytest.raises(PersistenceError):
        PostgresAssessmentStore("postgresql://scorecard@localhost/scorecard")
