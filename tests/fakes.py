"""Test doubles for the HTTP client, adapters and storage."""

from __future__ import annotations

import time
from typing import Any, Dict, List, Optional

from ingest.base import CandidateRecord, Source
from ingest.http import FetchError


class FakeHttp:
    """HttpClient stand-in serving canned payloads keyed by URL."""

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        self.responses = responses or {}
        self.calls: List[Dict[str, Any]] = []

    def get_json(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"method": "GET", "url": url, "params": params, "headers": headers, "timeout": timeout})
        return self._respond(url)

    def post_json(self, url, payload, headers=None, timeout=None):
        self.calls.append({"method": "POST", "url": url, "payload": payload, "headers": headers, "timeout": timeout})
        return self._respond(url)

    def _respond(self, url):
        if url not in self.responses:
            raise FetchError(f"No route for {url}")
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


class StubAdapter:
    """Adapter stand-in returning fixed records or raising."""

    def __init__(self, records=None, error: Optional[Exception] = None, delay: float = 0):
        self.records = records or []
        self.error = error
        self.delay = delay
        self.calls: List[int] = []

    def fetch(self, limit):
        self.calls.append(limit)
        if self.delay:
            time.sleep(self.delay)
        if self.error:
            raise self.error
        return list(self.records)


class MemoryStore:
    """In-memory persistence collaborator keyed by source_url."""

    def __init__(self, upsert_error: Optional[Exception] = None, audit_error: Optional[Exception] = None):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self.outcomes = []
        self.upsert_calls = 0
        self.upsert_error = upsert_error
        self.audit_error = audit_error

    def upsert_opportunities(self, records):
        self.upsert_calls += 1
        if self.upsert_error:
            raise self.upsert_error
        stored = []
        for record in records:
            row = record.to_row()
            existing = self.rows.get(row["source_url"])
            row["id"] = existing["id"] if existing else len(self.rows) + 1
            self.rows[row["source_url"]] = row
            stored.append(row)
        return stored

    def insert_run_outcome(self, outcome):
        if self.audit_error:
            raise self.audit_error
        self.outcomes.append(outcome)


def candidate(source: Source, url: str, **values) -> CandidateRecord:
    values.setdefault("title", f"Item at {url}")
    values.setdefault("source_id", url.rsplit("/", 1)[-1])
    return CandidateRecord(source=source, source_url=url, **values)
