"""
Moltbook adapter for fetching trending AI agents.

Requires MOLTBOOK_API_KEY. Without it the adapter returns a placeholder
record; request failures are reported to the runner.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ingest.base import BaseAdapter, CandidateRecord, FallbackContent, Source, scaled_momentum
from scorer.dimensions import Dimensions

MOLTBOOK_AGENTS_URL = "https://api.moltbook.com/v1/agents"

# AI agents: high potential, fast to build, in our wheelhouse
MOLTBOOK_PROFILE = Dimensions(
    revenue_potential=75,
    timeline_days=7,
    skill_match=90,
    momentum=50,
    competition=40,
    improvement_margin=80,
    distribution_leverage=70,
    margin_potential=80,
)


@dataclass
class MoltbookAgent:
    """Agent item from the Moltbook API."""
    id: str
    name: str
    url: str
    description: Optional[str] = None
    usage_count: Optional[int] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "MoltbookAgent":
        agent_id = str(data['id'])
        return cls(
            id=agent_id,
            name=data['name'],
            url=data.get('url') or f"https://moltbook.com/{agent_id}",
            description=data.get('description'),
            usage_count=data.get('usage_count'),
            raw=data,
        )


class MoltbookAdapter(BaseAdapter):
    """Adapter for the Moltbook agents API."""

    source = Source.MOLTBOOK
    profile = MOLTBOOK_PROFILE
    momentum_normalizer = 100
    credential_field = "moltbook_api_key"
    fallback = FallbackContent(
        title="Trending Moltbook Agents",
        description="AI agents gaining usage on Moltbook",
        source_url="https://moltbook.com",
        dimensions=MOLTBOOK_PROFILE,
    )

    def _fetch_items(self, limit: int) -> List[CandidateRecord]:
        data = self.http.get_json(
            MOLTBOOK_AGENTS_URL,
            params={'limit': limit, 'trending': 'true'},
            headers={
                'Authorization': f"Bearer {self.credential}",
                'Content-Type': 'application/json',
            },
            timeout=self.timeout,
        )
        agents = [MoltbookAgent.from_api(item) for item in data['agents'][:limit]]
        return [self.to_candidate(agent) for agent in agents]

    def to_candidate(self, agent: MoltbookAgent) -> CandidateRecord:
        values = dict(
            title=agent.name,
            description=agent.description,
            source_url=agent.url,
            source_id=agent.id,
            raw_data=agent.raw,
        )
        if agent.usage_count:
            values['momentum'] = scaled_momentum(agent.usage_count, self.momentum_normalizer)
        return self.build_candidate(**values)
