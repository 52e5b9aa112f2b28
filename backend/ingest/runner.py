"""
Ingestion runner with parallel execution.

Coordinates fetching across source adapters with timeout protection and
failure isolation, then scores the combined batch, stores it with one upsert
and records a run outcome per source.
"""

from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeoutError
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging
from bs4 import BeautifulSoup

from ingest.base import BaseAdapter, CandidateRecord
from scorer import ScoringEngine, ScoredRecord

logger = logging.getLogger(__name__)

ALL_SOURCES = "all"

STATUS_SUCCESS = "success"
STATUS_FAILED = "failed"


class IngestionError(Exception):
    """Pass-level ingestion failure surfaced to the caller."""


class EmptyResultError(IngestionError):
    """Every selected source produced zero records."""


class PersistenceError(IngestionError):
    """Storage rejected the batch; nothing is considered stored."""


@dataclass
class SourceResult:
    """Result of fetching a single source."""
    source: str
    status: str  # 'success' or 'failed'
    records: List[CandidateRecord] = field(default_factory=list)
    error_message: Optional[str] = None


@dataclass
class RunOutcome:
    """Audit row for one source within one ingestion pass."""
    source: str
    status: str  # 'success' or 'failed'
    records_pulled: int
    records_stored: int
    error_message: Optional[str] = None


@dataclass
class IngestionReport:
    """Result of one ingestion pass."""
    sources: List[str]
    count: int
    opportunities: List[Dict[str, Any]]
    outcomes: List[RunOutcome]


class IngestionRunner:
    """
    Coordinates ingestion across sources with parallel execution.

    Features:
    - Parallel execution with ThreadPoolExecutor
    - Timeout protection per source
    - Failure isolation (one source failure doesn't affect others)
    - Single atomic upsert of the scored batch
    - Best-effort audit trail of per-source outcomes
    """

    def __init__(
        self,
        adapters: Dict[str, BaseAdapter],
        store,
        scorer: Optional[ScoringEngine] = None,
        timeout: float = 30,
        max_workers: int = 4
    ):
        """
        Initialize ingestion runner.

        Args:
            adapters: Adapter instances keyed by source name, in run order
            store: Persistence collaborator with upsert_opportunities() and insert_run_outcome()
            scorer: ScoringEngine instance (default: new engine)
            timeout: Seconds to wait for each source
            max_workers: Parallel workers
        """
        self.adapters = adapters
        self.store = store
        self.scorer = scorer or ScoringEngine()
        self.timeout = timeout
        self.max_workers = max_workers

    def run(self, source: str = ALL_SOURCES, limit: int = 50) -> IngestionReport:
        """
        Run one ingestion pass.

        Args:
            source: Source name, or "all" for every registered source
            limit: Positive per-source item limit

        Returns:
            IngestionReport with attempted sources, stored count and stored rows

        Raises:
            ValueError: If limit is not positive
            EmptyResultError: If no source produced any record
            PersistenceError: If the storage upsert fails
        """
        if limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")

        sources = self.resolve_sources(source)
        logger.info(f"[ingest] Starting for source: {source} ({', '.join(sources) or 'none'})")

        results = self._run_sources(sources, limit)
        outcomes = []
        candidates = []
        for result in results:
            if result.status == STATUS_FAILED:
                outcome = RunOutcome(
                    source=result.source,
                    status=STATUS_FAILED,
                    records_pulled=0,
                    records_stored=0,
                    error_message=result.error_message,
                )
                self._record_outcome(outcome)
                outcomes.append(outcome)
                continue
            candidates.extend(result.records)
            logger.info(f"[{result.source}] {len(result.records)} opportunities")

        if not candidates:
            raise EmptyResultError("No opportunities found from specified sources")

        for candidate in candidates:
            if candidate.description:
                candidate.description = self._normalize_text(candidate.description)

        scored = self._dedupe(self.scorer.score_batch(candidates))

        try:
            stored = self.store.upsert_opportunities(scored)
        except Exception as e:
            logger.error(f"[ingest] Storage error: {e}")
            raise PersistenceError(str(e)) from e

        for result in results:
            if result.status != STATUS_SUCCESS:
                continue
            stored_count = sum(1 for row in stored if row['source'] == result.source)
            if stored_count == 0:
                continue
            outcome = RunOutcome(
                source=result.source,
                status=STATUS_SUCCESS,
                records_pulled=len(result.records),
                records_stored=stored_count,
            )
            self._record_outcome(outcome)
            outcomes.append(outcome)

        logger.info(f"[ingest] Complete: {len(stored)} opportunities stored")
        return IngestionReport(
            sources=sources,
            count=len(stored),
            opportunities=stored,
            outcomes=outcomes,
        )

    def resolve_sources(self, source: str) -> List[str]:
        """
        Expand the source selector into registered source names.
        Unknown names are skipped with a warning.
        """
        if source == ALL_SOURCES:
            return list(self.adapters)
        if source not in self.adapters:
            logger.warning(f"[ingest] Unknown source: {source}")
            return []
        return [source]

    def _run_sources(self, sources: List[str], limit: int) -> List[SourceResult]:
        """
        Run adapters in parallel with timeout.
        Every source yields a SourceResult; failures never escape.
        A source that times out is abandoned, not waited for.
        """
        results = []
        if not sources:
            return results

        executor = ThreadPoolExecutor(max_workers=self.max_workers)
        try:
            future_map = {
                executor.submit(self._run_source, name, limit): name
                for name in sources
            }

            for future, name in future_map.items():
                try:
                    result = future.result(timeout=self.timeout)
                except FuturesTimeoutError:
                    logger.error(f"[{name}] Timeout after {self.timeout}s")
                    future.cancel()
                    result = SourceResult(
                        source=name,
                        status=STATUS_FAILED,
                        error_message=f"Timeout after {self.timeout}s",
                    )
                results.append(result)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        return results

    def _run_source(self, name: str, limit: int) -> SourceResult:
        """Fetch one source, converting any error into a failed result."""
        try:
            records = self.adapters[name].fetch(limit)
        except Exception as e:
            logger.error(f"[{name}] Error ingesting: {e}")
            return SourceResult(source=name, status=STATUS_FAILED, error_message=str(e))
        return SourceResult(source=name, status=STATUS_SUCCESS, records=records)

    def _record_outcome(self, outcome: RunOutcome):
        """Append an audit row. Failures are logged, never raised."""
        try:
            self.store.insert_run_outcome(outcome)
        except Exception as e:
            logger.error(f"[{outcome.source}] Failed to record run outcome: {e}")

    def _dedupe(self, records: List[ScoredRecord]) -> List[ScoredRecord]:
        """
        Keep one record per source_url, the last one seen.
        A single upsert cannot touch the same row twice.
        """
        by_url = {}
        for record in records:
            by_url[record.source_url] = record
        if len(by_url) < len(records):
            logger.warning(
                f"[ingest] Dropped {len(records) - len(by_url)} duplicate source URLs from batch"
            )
        return list(by_url.values())

    def _normalize_text(self, html: str) -> str:
        """
        Strip HTML tags and preserve paragraph breaks.

        Args:
            html: HTML text (may contain tags)

        Returns:
            Plain text with preserved paragraph breaks
        """
        soup = BeautifulSoup(html, 'html.parser')
        text = soup.get_text("\n")
        lines = [line.strip() for line in text.splitlines()]
        return "\n".join([l for l in lines if l])
