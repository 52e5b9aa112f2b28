"""
Database access layer for the Opportunity Engine.
Provides methods for interacting with SQLite database.
"""

import sqlite3
import json
import os
from contextlib import contextmanager
from typing import Optional, List, Dict, Any

from ingest.base import Status
from scorer.dimensions import DIMENSION_NAMES

# Columns written by an ingestion upsert, in insert order
OPPORTUNITY_COLUMNS = (
    "title", "description", "source", "source_url", "source_id", "raw_data",
) + DIMENSION_NAMES + (
    "time_to_market_bonus", "final_score", "score_breakdown", "status",
)

# Columns refreshed when a source_url is re-ingested. status is user-owned.
REFRESHED_COLUMNS = tuple(
    c for c in OPPORTUNITY_COLUMNS if c not in ("source_url", "status")
)

JSON_COLUMNS = ("raw_data", "score_breakdown")

SORT_ORDERS = {
    "score": "final_score DESC, id DESC",
    "date": "created_at DESC, id DESC",
    "source": "source ASC, final_score DESC",
}

# SQLite's default limit on bound parameters is 999
CHUNK_SIZE = 900


class Database:
    """Database access layer for opportunities and run outcomes."""

    def __init__(self, db_path: str = "data/opportunities.db"):
        """
        Initialize database connection.

        Args:
            db_path: Path to SQLite database file
        """
        # Ensure data directory exists
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._init_schema()

    def _init_schema(self):
        """
        Create tables if they don't exist.
        Use PRAGMA user_version for schema migration tracking.
        """
        current_version = self.conn.execute("PRAGMA user_version").fetchone()[0]

        if current_version == 0:
            schema_path = os.path.join(os.path.dirname(__file__), "schema.sql")
            with open(schema_path, 'r') as f:
                self.conn.executescript(f.read())
            self.conn.execute("PRAGMA user_version = 1")
            self.conn.commit()

    @contextmanager
    def transaction(self):
        """Context manager for database transactions."""
        try:
            self.conn.execute("BEGIN")
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def close(self):
        self.conn.close()

    def _decode(self, row: sqlite3.Row) -> Dict[str, Any]:
        record = dict(row)
        for column in JSON_COLUMNS:
            if record.get(column) is not None:
                record[column] = json.loads(record[column])
        return record

    # Opportunity operations

    def upsert_opportunities(self, records) -> List[Dict[str, Any]]:
        """
        Insert or update a batch of scored opportunities keyed by source_url.
        The whole batch is written in one transaction. Existing rows keep
        their id, created_at and status.

        Args:
            records: ScoredRecord objects (or row dicts with OPPORTUNITY_COLUMNS)

        Returns:
            Stored rows, in batch order
        """
        rows = [r.to_row() if hasattr(r, 'to_row') else dict(r) for r in records]
        if not rows:
            return []

        placeholders = ', '.join('?' * len(OPPORTUNITY_COLUMNS))
        updates = ', '.join(f"{c} = excluded.{c}" for c in REFRESHED_COLUMNS)
        sql = f"""
            INSERT INTO opportunities ({', '.join(OPPORTUNITY_COLUMNS)})
            VALUES ({placeholders})
            ON CONFLICT(source_url) DO UPDATE SET
                {updates},
                updated_at = CURRENT_TIMESTAMP,
                ingested_at = CURRENT_TIMESTAMP,
                last_scored_at = CURRENT_TIMESTAMP
        """

        params = []
        for row in rows:
            values = []
            for column in OPPORTUNITY_COLUMNS:
                value = row.get(column)
                if column in JSON_COLUMNS:
                    value = json.dumps(value or {})
                elif column == "status" and value is None:
                    value = Status.NEW.value
                values.append(value)
            params.append(values)

        urls = [row['source_url'] for row in rows]
        with self.transaction():
            self.conn.executemany(sql, params)
            stored = self._get_by_source_urls(urls)

        by_url = {record['source_url']: record for record in stored}
        return [by_url[url] for url in dict.fromkeys(urls) if url in by_url]

    def _get_by_source_urls(self, urls: List[str]) -> List[Dict[str, Any]]:
        """Fetch rows for source URLs, chunked for SQLite's parameter limit."""
        unique = list(dict.fromkeys(urls))
        records = []
        for i in range(0, len(unique), CHUNK_SIZE):
            chunk = unique[i:i + CHUNK_SIZE]
            placeholders = ','.join('?' * len(chunk))
            rows = self.conn.execute(
                f"SELECT * FROM opportunities WHERE source_url IN ({placeholders})",
                chunk
            )
            records.extend(self._decode(row) for row in rows)
        return records

    def get_opportunity(self, opportunity_id: int) -> Optional[Dict[str, Any]]:
        row = self.conn.execute(
            "SELECT * FROM opportunities WHERE id = ?",
            (opportunity_id,)
        ).fetchone()
        return self._decode(row) if row else None

    def get_opportunity_by_source_url(self, source_url: str) -> Optional[Dict[str, Any]]:
        row = self.conn.execute(
            "SELECT * FROM opportunities WHERE source_url = ?",
            (source_url,)
        ).fetchone()
        return self._decode(row) if row else None

    def _filters(
        self,
        status: Optional[str],
        source: Optional[str],
        min_score: float,
        max_score: float
    ):
        clauses = ["final_score >= ?", "final_score <= ?"]
        params: List[Any] = [min_score, max_score]
        if status:
            clauses.append("status = ?")
            params.append(status)
        if source:
            clauses.append("source = ?")
            params.append(source)
        return " AND ".join(clauses), params

    def list_opportunities(
        self,
        status: Optional[str] = None,
        source: Optional[str] = None,
        min_score: float = 0,
        max_score: float = 100,
        sort_by: str = "score",
        limit: int = 100,
        offset: int = 0
    ) -> List[Dict[str, Any]]:
        """
        Get opportunities with optional filtering and sorting.

        Args:
            status: Filter by status
            source: Filter by source name
            min_score: Minimum final score (inclusive)
            max_score: Maximum final score (inclusive)
            sort_by: 'score', 'date' or 'source'; unknown values sort by score
            limit: Maximum number of results
            offset: Offset for pagination

        Returns:
            List of opportunity dictionaries
        """
        where, params = self._filters(status, source, min_score, max_score)
        order = SORT_ORDERS.get(sort_by, SORT_ORDERS["score"])
        rows = self.conn.execute(
            f"SELECT * FROM opportunities WHERE {where} ORDER BY {order} LIMIT ? OFFSET ?",
            params + [limit, offset]
        )
        return [self._decode(row) for row in rows]

    def count_opportunities(
        self,
        status: Optional[str] = None,
        source: Optional[str] = None,
        min_score: float = 0,
        max_score: float = 100
    ) -> int:
        where, params = self._filters(status, source, min_score, max_score)
        row = self.conn.execute(
            f"SELECT COUNT(*) as count FROM opportunities WHERE {where}",
            params
        ).fetchone()
        return row['count'] if row else 0

    def update_status(self, opportunity_id: int, status: str) -> Dict[str, Any]:
        """
        Update review status.

        Args:
            opportunity_id: Opportunity ID
            status: New status ('new', 'pursuing', 'watching' or 'passed')

        Returns:
            Updated opportunity dictionary

        Raises:
            ValueError: If status is not a valid status
            LookupError: If no opportunity has this ID
        """
        valid = [s.value for s in Status]
        if status not in valid:
            raise ValueError(
                f"Invalid status: {status}. Valid statuses: {', '.join(valid)}"
            )

        cursor = self.conn.execute(
            "UPDATE opportunities SET status = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?",
            (status, opportunity_id)
        )
        self.conn.commit()
        if cursor.rowcount == 0:
            raise LookupError(f"Opportunity not found: {opportunity_id}")
        return self.get_opportunity(opportunity_id)

    # Run outcome operations

    def insert_run_outcome(self, outcome):
        """
        Append a run outcome audit row.

        Args:
            outcome: RunOutcome with source, status, counts and error_message
        """
        self.conn.execute("""
            INSERT INTO cron_runs
            (source, status, records_pulled, records_stored, error_message, completed_at)
            VALUES (?, ?, ?, ?, ?, CURRENT_TIMESTAMP)
        """, (outcome.source, outcome.status, outcome.records_pulled,
              outcome.records_stored, outcome.error_message))
        self.conn.commit()

    def list_run_outcomes(self, source: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
        """
        Get recent run outcomes, newest first.

        Args:
            source: Filter by source name
            limit: Maximum number of results

        Returns:
            List of run outcome dictionaries
        """
        query = "SELECT * FROM cron_runs"
        params: List[Any] = []
        if source:
            query += " WHERE source = ?"
            params.append(source)
        query += " ORDER BY run_at DESC, id DESC LIMIT ?"
        params.append(limit)
        rows = self.conn.execute(query, params)
        return [dict(row) for row in rows]
