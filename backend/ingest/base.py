"""
Base adapter interface for opportunity sources.

Every adapter MUST:
1. Fill source_url with the canonical link to the item (the dedup key)
2. Fill source_id with the source's native identifier
3. Derive momentum from the source's engagement metrics where available
4. Take any other dimension it cannot compute from its source profile
5. Either return records or raise SourceFailure; the runner isolates failures

Adapters with a fallback policy return a single placeholder record when their
credential is missing or the fetch fails, instead of raising.
"""

from abc import ABC, abstractmethod
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional
import logging

from ingest.http import FetchError, HttpClient, MalformedPayload
from scorer.dimensions import Dimensions

logger = logging.getLogger(__name__)


class Source(str, Enum):
    """Known opportunity sources."""
    GITHUB = "github"
    MOLTBOOK = "moltbook"
    REDDIT = "reddit"
    TWITTER = "twitter"
    PRODUCTHUNT = "producthunt"
    APPSUMO = "appsumo"
    # Shown by the display layer; no adapter fetches it
    HACKERNEWS = "hackernews"


class Status(str, Enum):
    """Review status of a stored opportunity."""
    NEW = "new"
    PURSUING = "pursuing"
    WATCHING = "watching"
    PASSED = "passed"


@dataclass
class CandidateRecord:
    """
    Normalized, unscored opportunity pulled from one source.

    Attributes:
        title: Display title (REQUIRED)
        source: Source the record came from (REQUIRED)
        source_url: Canonical link, unique per record (REQUIRED)
        source_id: Source-native identifier (REQUIRED)
        description: Free text summary (optional)
        raw_data: Provenance payload from the source
        is_fallback: True for placeholder records returned instead of live data
        revenue_potential .. margin_potential: signal dimensions, None when unknown
    """
    title: str
    source: Source
    source_url: str
    source_id: str
    description: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)
    is_fallback: bool = False
    revenue_potential: Optional[float] = None
    timeline_days: Optional[float] = None
    skill_match: Optional[float] = None
    momentum: Optional[float] = None
    competition: Optional[float] = None
    improvement_margin: Optional[float] = None
    distribution_leverage: Optional[float] = None
    margin_potential: Optional[float] = None


@dataclass(frozen=True)
class FallbackContent:
    """Fixed placeholder content an adapter returns when it cannot fetch live data."""
    title: str
    description: str
    source_url: str
    dimensions: Dimensions


class SourceFailure(Exception):
    """One adapter's fetch or parse failed."""

    def __init__(self, source: Source, cause: Exception):
        self.source = source
        self.cause = cause
        super().__init__(f"Failed to ingest from {source.value}: {cause}")


class CredentialMissing(Exception):
    """Adapter credential is not configured."""


def scaled_momentum(raw: Optional[float], normalizer: float) -> float:
    """
    Map an engagement count onto 0-100.

    Args:
        raw: Engagement count (stars, votes, ...). None counts as 0
        normalizer: Count that maps to 100

    Returns:
        min(100, raw / normalizer * 100), floored at 0
    """
    value = (raw or 0) * 100 / normalizer
    return max(0.0, min(100.0, value))


class BaseAdapter(ABC):
    """
    Abstract base class for source-specific fetchers.

    Subclasses set the class attributes below and implement _fetch_items().
    """

    source: Source
    # Per-source constants for dimensions the adapter cannot derive
    profile: Dimensions = Dimensions()
    # Count that maps to momentum 100
    momentum_normalizer: float = 100
    # Name of the Credentials field this adapter needs, if any
    credential_field: Optional[str] = None
    # Placeholder returned when the credential is missing
    fallback: Optional[FallbackContent] = None
    # Whether fetch errors also degrade to the fallback record
    fallback_on_error: bool = False
    # Per-request timeout in seconds; None uses the HTTP client default
    timeout: Optional[float] = None

    def __init__(self, http: HttpClient, credentials=None):
        """
        Initialize adapter.

        Args:
            http: Shared HttpClient for outbound requests
            credentials: Credentials object from config (optional)
        """
        self.http = http
        self.credentials = credentials
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

    @property
    def credential(self) -> Optional[str]:
        if not self.credential_field or self.credentials is None:
            return None
        return getattr(self.credentials, self.credential_field, None) or None

    def fetch(self, limit: int) -> List[CandidateRecord]:
        """
        Fetch up to limit candidate records.

        Args:
            limit: Positive item limit

        Returns:
            List of CandidateRecord objects; a single fallback record when the
            adapter degrades gracefully

        Raises:
            ValueError: If limit is not positive
            SourceFailure: If the fetch fails and the adapter has no fallback
        """
        if limit < 1:
            raise ValueError(f"limit must be a positive integer, got {limit}")

        if self.credential_field and not self.credential:
            env_name = self.credential_field.upper()
            if self.fallback is None:
                raise SourceFailure(self.source, CredentialMissing(f"{env_name} not configured"))
            self.logger.warning(f"[{self.source.value}] {env_name} not configured, using fallback data")
            return [self.fallback_record({"reason": "API not configured"})]

        try:
            records = self._fetch_items(limit)
        except FetchError as e:
            return self._recover(e)
        except (KeyError, TypeError, AttributeError) as e:
            return self._recover(MalformedPayload(f"Unexpected payload shape: {e!r}"))

        self.logger.info(f"[{self.source.value}] Fetched {len(records)} records")
        return records

    def _recover(self, error: FetchError) -> List[CandidateRecord]:
        """Degrade to the fallback record, or raise SourceFailure."""
        if self.fallback is not None and self.fallback_on_error:
            self.logger.error(f"[{self.source.value}] Fetch error, using fallback data: {error}")
            return [self.fallback_record({"error": "API request failed"}, suffix="_error")]
        self.logger.error(f"[{self.source.value}] Fetch error: {error}")
        raise SourceFailure(self.source, error) from error

    @abstractmethod
    def _fetch_items(self, limit: int) -> List[CandidateRecord]:
        """
        Request the source and map its items into candidate records.

        Raises:
            FetchError: On network, timeout or payload shape errors
        """
        raise NotImplementedError

    def build_candidate(self, **values) -> CandidateRecord:
        """
        Create a CandidateRecord for this source with profile defaults.

        Keyword arguments override any profile dimension.
        """
        record = asdict(self.profile)
        record.update(values)
        return CandidateRecord(source=self.source, **record)

    def fallback_record(self, raw_data: Dict[str, Any], suffix: str = "") -> CandidateRecord:
        """
        Build the placeholder record for this source.

        Args:
            raw_data: Provenance describing why the fallback was used
            suffix: Appended to the fallback source_id (e.g. "_error")

        Returns:
            CandidateRecord flagged with is_fallback
        """
        content = self.fallback
        record = asdict(content.dimensions)
        return CandidateRecord(
            title=content.title,
            description=content.description,
            source=self.source,
            source_url=content.source_url,
            source_id=f"{self.source.value}_fallback{suffix}",
            raw_data=raw_data,
            is_fallback=True,
            **record
        )
