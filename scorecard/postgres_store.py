"""
PostgreSQL (Supabase) store for production deployment.

Used instead of local SQLite when the DATABASE_URL environment variable is set.
Writes upsert on assignment_id, so there is at most one record per assignment.
"""

import json
import logging
from typing import List, Optional

import psycopg2
from psycopg2.extras import RealDictCursor

from . import config
from .errors import PersistenceError
from .models import AssessmentRecord, LifecycleState, record_from_dict, record_to_dict


logger = logging.getLogger(__name__)


class PostgresAssessmentStore:
    """Stores assessment records in PostgreSQL.

    Records are kept as JSONB documents with their lifecycle state, total,
    band and timestamps duplicated into columns for reporting.
    """

    def __init__(self, database_url: Optional[str] = None):
        """Initialize store.

        Args:
            database_url: PostgreSQL connection string. If None, reads from
                          DATABASE_URL environment variable.

        Raises:
            ValueError: If no database_url is given and DATABASE_URL is not set
            PersistenceError: If the database cannot be reached
        """
        if database_url is None:
            database_url = config.get_database_url()

        if not database_url:
            raise ValueError(
                "DATABASE_URL environment variable must be set for the Postgres store. "
                "For local development, use SQLiteAssessmentStore instead."
            )

        self.database_url = database_url
        self._init_db()

    def _get_connection(self):
        try:
            return psycopg2.connect(self.database_url)
        except psycopg2.Error as e:
            raise PersistenceError(f"Failed to connect to database: {e}") from e

    def _init_db(self):
        conn = self._get_connection()
        try:
            cur = conn.cursor()
            cur.execute("""
                CREATE TABLE IF NOT EXISTS assessments (
                    assignment_id TEXT PRIMARY KEY,
                    record_json JSONB NOT NULL,
                    lifecycle_state TEXT NOT NULL,
                    total_score DOUBLE PRECISION NOT NULL,
                    performance_band TEXT NOT NULL,
                    updated_at TIMESTAMPTZ,
                    submitted_at TIMESTAMPTZ
                )
            """)
            conn.commit()
            cur.close()
        except psycopg2.Error as e:
            raise PersistenceError(f"Failed to initialize assessments table: {e}") from e
        finally:
            conn.close()

    def load_record(self, assignment_id: str) -> Optional[AssessmentRecord]:
        """Look up the record for an assignment.

        Returns:
            AssessmentRecord if one was saved, None otherwise

        Raises:
            PersistenceError: If the query fails
        """
        conn = self._get_connection()
        try:
            cur = conn.cursor(cursor_factory=RealDictCursor)
            cur.execute(
                "SELECT record_json FROM assessments WHERE assignment_id = %s",
                (assignment_id,)
            )
            row = cur.fetchone()
            cur.close()
        except psycopg2.Error as e:
            logger.error("Failed to load assessment %s: %s", assignment_id, e)
            raise PersistenceError(f"Failed to load assessment {assignment_id}: {e}") from e
        finally:
            conn.close()

        if row is None:
            return None
        # JSONB comes back already decoded
        data = row["record_json"]
        if isinstance(data, str):
            data = json.loads(data)
        return record_from_dict(data)

    def save_record(self, record: AssessmentRecord):
        """Upsert the record for its assignment.

        Raises:
            PersistenceError: If the write fails
        """
        data = record_to_dict(record)
        conn = self._get_connection()
        try:
            cur = conn.cursor()
            cur.execute(
                """
                INSERT INTO assessments
                (assignment_id, record_json, lifecycle_state, total_score,
                 performance_band, updated_at, submitted_at)
                VALUES (%s, %s, %s, %s, %s, %s, %s)
                ON CONFLICT (assignment_id)
                DO UPDATE SET
                    record_json = EXCLUDED.record_json,
                    lifecycle_state = EXCLUDED.lifecycle_state,
                    total_score = EXCLUDED.total_score,
                    performance_band = EXCLUDED.performance_band,
                    updated_at = EXCLUDED.updated_at,
                    submitted_at = EXCLUDED.submitted_at
                """,
                (
                    record.assignment_id,
                    json.dumps(data),
                    data["lifecycle_state"],
                    record.total_score,
                    data["performance_band"],
                    record.updated_at,
                    record.submitted_at,
                )
            )
            conn.commit()
            cur.close()
        except psycopg2.Error as e:
            logger.error("Failed to save assessment %s: %s", record.assignment_id, e)
            raise PersistenceError(f"Failed to save assessment {record.assignment_id}: {e}") from e
        finally:
            conn.close()
        logger.debug("Stored assessment %s (%s)", record.assignment_id, data["lifecycle_state"])

    def submit_record(self, record: AssessmentRecord):
        """Store a submitted record. Same write as save_record."""
        self.save_record(record)

    def list_records(self, state: Optional[LifecycleState] = None) -> List[AssessmentRecord]:
        """List stored records, most recently updated first."""
        query = "SELECT record_json FROM assessments"
        params: tuple = ()
        if state is not None:
            query += " WHERE lifecycle_state = %s"
            params = (LifecycleState(state).value,)
        query += " ORDER BY updated_at DESC NULLS LAST"

        conn = self._get_connection()
        try:
            cur = conn.cursor(cursor_factory=RealDictCursor)
            cur.execute(query, params)
            rows = cur.fetchall()
            cur.close()
        except psycopg2.Error as e:
            raise PersistenceError(f"Failed to list assessments: {e}") from e
        finally:
            conn.close()

        records = []
        for row in rows:
            data = row["record_json"]
            if isinstance(data, str):
                data = json.loads(data)
            records.append(record_from_dict(data))
        return records
