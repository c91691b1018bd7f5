"""
Storage for assessment records.

Uses SQLite for local development and PostgreSQL (Supabase) for production.
get_store() selects the backend from environment variables.

Each record is stored as one JSON document keyed by assignment id, alongside
a few plain columns (state, total, band, timestamps) for reporting queries.
"""

import json
import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from . import config
from .errors import PersistenceError
from .models import AssessmentRecord, LifecycleState, record_from_dict, record_to_dict


logger = logging.getLogger(__name__)


class SQLiteAssessmentStore:
    """Stores assessment records in a local SQLite database."""

    def __init__(self, data_dir: Optional[Path] = None):
        """Initialize store.

        Args:
            data_dir: Directory for the database file. Defaults to SCORECARD_DATA_DIR
                      or ~/.scorecard
        """
        if data_dir is None:
            data_dir = config.get_data_dir()
        data_dir = Path(data_dir)
        data_dir.mkdir(parents=True, exist_ok=True)
        self.db_path = data_dir / "assessments.db"
        self._init_db()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.db_path)

    def _init_db(self):
        """Create the assessments table if needed."""
        try:
            conn = self._connect()
            try:
                conn.execute("""
                    CREATE TABLE IF NOT EXISTS assessments (
                        assignment_id TEXT PRIMARY KEY,
                        record_json TEXT NOT NULL,
                        lifecycle_state TEXT NOT NULL,
                        total_score REAL NOT NULL,
                        performance_band TEXT NOT NULL,
                        updated_at TEXT,
                        submitted_at TEXT
                    )
                """)
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to initialize assessment database at {self.db_path}: {e}") from e

    def load_record(self, assignment_id: str) -> Optional[AssessmentRecord]:
        """Look up the record for an assignment.

        Returns:
            AssessmentRecord if one was saved, None otherwise

        Raises:
            PersistenceError: If the database cannot be read
        """
        try:
            conn = self._connect()
            try:
                row = conn.execute(
                    "SELECT record_json FROM assessments WHERE assignment_id = ?",
                    (assignment_id,)
                ).fetchone()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("Failed to load assessment %s: %s", assignment_id, e)
            raise PersistenceError(f"Failed to load assessment {assignment_id}: {e}") from e

        if row is None:
            return None
        return record_from_dict(json.loads(row[0]))

    def save_record(self, record: AssessmentRecord):
        """Insert or replace the record for its assignment.

        Raises:
            PersistenceError: If the write fails
        """
        data = record_to_dict(record)
        try:
            conn = self._connect()
            try:
                conn.execute(
                    """
                    INSERT OR REPLACE INTO assessments
                    (assignment_id, record_json, lifecycle_state, total_score,
                     performance_band, updated_at, submitted_at)
                    VALUES (?, ?, ?, ?, ?, ?, ?)
                    """,
                    (
                        record.assignment_id,
                        json.dumps(data),
                        data["lifecycle_state"],
                        record.total_score,
                        data["performance_band"],
                        data["updated_at"],
                        data["submitted_at"],
                    )
                )
                conn.commit()
            finally:
                conn.close()
        except sqlite3.Error as e:
            logger.error("Failed to save assessment %s: %s", record.assignment_id, e)
            raise PersistenceError(f"Failed to save assessment {record.assignment_id}: {e}") from e
        logger.debug("Stored assessment %s (%s)", record.assignment_id, data["lifecycle_state"])

    def submit_record(self, record: AssessmentRecord):
        """Store a submitted record. Same write as save_record."""
        self.save_record(record)

    def list_records(self, state: Optional[LifecycleState] = None) -> List[AssessmentRecord]:
        """List stored records, most recently updated first.

        Args:
            state: Only return records in this lifecycle state
        """
        query = "SELECT record_json FROM assessments"
        params: tuple = ()
        if state is not None:
            query += " WHERE lifecycle_state = ?"
            params = (LifecycleState(state).value,)
        query += " ORDER BY updated_at DESC"
        try:
            conn = self._connect()
            try:
                rows = conn.execute(query, params).fetchall()
            finally:
                conn.close()
        except sqlite3.Error as e:
            raise PersistenceError(f"Failed to list assessments: {e}") from e
        return [record_from_dict(json.loads(row[0])) for row in rows]


# Auto-select store based on environment
def get_store():
    """Get the appropriate store based on environment.

    Returns:
        PostgresAssessmentStore if DATABASE_URL is set, otherwise SQLiteAssessmentStore
    """
    if config.get_database_url():
        from .postgres_store import PostgresAssessmentStore
        return PostgresAssessmentStore()
    return SQLiteAssessmentStore()
