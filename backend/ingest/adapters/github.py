"""
GitHub adapter for fetching popular repositories.

Uses the public repository search API; no credential required.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ingest.base import BaseAdapter, CandidateRecord, Source, scaled_momentum
from scorer.dimensions import Dimensions

GITHUB_SEARCH_URL = "https://api.github.com/search/repositories"


@dataclass
class GitHubRepo:
    """Repository item from the search API."""
    id: str
    name: str
    html_url: str
    stargazers_count: int = 0
    description: Optional[str] = None
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "GitHubRepo":
        return cls(
            id=str(data['id']),
            name=data['name'],
            html_url=data['html_url'],
            stargazers_count=data.get('stargazers_count') or 0,
            description=data.get('description'),
            raw=data,
        )


class GitHubAdapter(BaseAdapter):
    """Adapter for GitHub repository search."""

    source = Source.GITHUB
    # Repos: moderate revenue, buildable with code
    profile = Dimensions(
        revenue_potential=60,
        timeline_days=14,
        skill_match=80,
        competition=50,
        improvement_margin=70,
        distribution_leverage=60,
        margin_potential=70,
    )
    momentum_normalizer = 10000

    def _fetch_items(self, limit: int) -> List[CandidateRecord]:
        data = self.http.get_json(
            GITHUB_SEARCH_URL,
            params={
                'q': 'stars:>100',
                'sort': 'stars',
                'order': 'desc',
                'per_page': min(limit, 100),
            },
            headers={
                'Accept': 'application/vnd.github.v3+json',
                'X-GitHub-Api-Version': '2022-11-28',
            },
            timeout=self.timeout,
        )
        repos = [GitHubRepo.from_api(item) for item in data['items'][:limit]]
        return [self.to_candidate(repo) for repo in repos]

    def to_candidate(self, repo: GitHubRepo) -> CandidateRecord:
        return self.build_candidate(
            title=repo.name,
            description=repo.description,
            source_url=repo.html_url,
            source_id=repo.id,
            raw_data=repo.raw,
            momentum=scaled_momentum(repo.stargazers_count, self.momentum_normalizer),
        )
