"""
Twitter/X adapter for fetching recent AI/SaaS discussion.

Requires TWITTER_BEARER_TOKEN. Without it, or when the search request fails,
the adapter returns a placeholder record.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ingest.base import BaseAdapter, CandidateRecord, FallbackContent, Source, scaled_momentum
from scorer.dimensions import Dimensions

TWITTER_SEARCH_URL = "https://api.twitter.com/2/tweets/search/recent"
SEARCH_QUERY = "AI SaaS startup -is:retweet"

# Recent search accepts max_results between 10 and 100
MIN_RESULTS = 10
MAX_RESULTS = 100

TITLE_LIMIT = 100


@dataclass
class Tweet:
    """Tweet item joined with its author."""
    id: str
    text: str
    metrics: Dict[str, int] = field(default_factory=dict)
    created_at: Optional[str] = None
    author_username: Optional[str] = None
    author_followers: Optional[int] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any], users: Dict[str, Dict[str, Any]]) -> "Tweet":
        author = users.get(data.get('author_id'), {})
        return cls(
            id=str(data['id']),
            text=data['text'],
            metrics=data.get('public_metrics') or {},
            created_at=data.get('created_at'),
            author_username=author.get('username'),
            author_followers=(author.get('public_metrics') or {}).get('followers_count'),
        )

    @property
    def engagement(self) -> int:
        return (
            self.metrics.get('like_count', 0) +
            self.metrics.get('retweet_count', 0) +
            self.metrics.get('reply_count', 0)
        )

    @property
    def url(self) -> str:
        if self.author_username:
            return f"https://twitter.com/{self.author_username}/status/{self.id}"
        return f"https://twitter.com/i/web/status/{self.id}"


class TwitterAdapter(BaseAdapter):
    """Adapter for the Twitter v2 recent search API."""

    source = Source.TWITTER
    profile = Dimensions(
        revenue_potential=70,
        timeline_days=5,
        skill_match=85,
        momentum=75,
        competition=45,
        improvement_margin=75,
        distribution_leverage=80,
        margin_potential=80,
    )
    momentum_normalizer = 10000
    credential_field = "twitter_bearer_token"
    fallback = FallbackContent(
        title="AI/SaaS Innovation Thread",
        description="Emerging discussion about AI tooling and SaaS opportunities",
        source_url="https://twitter.com/search?q=AI%20SaaS",
        dimensions=Dimensions(
            revenue_potential=70,
            timeline_days=7,
            skill_match=85,
            momentum=75,
            competition=45,
            improvement_margin=75,
            distribution_leverage=80,
            margin_potential=80,
        ),
    )
    fallback_on_error = True

    def _fetch_items(self, limit: int) -> List[CandidateRecord]:
        data = self.http.get_json(
            TWITTER_SEARCH_URL,
            params={
                'query': SEARCH_QUERY,
                'max_results': max(MIN_RESULTS, min(limit, MAX_RESULTS)),
                'tweet.fields': 'public_metrics,created_at',
                'expansions': 'author_id',
                'user.fields': 'username,public_metrics',
            },
            headers={'Authorization': f"Bearer {self.credential}"},
            timeout=self.timeout,
        )
        users = {user['id']: user for user in (data.get('includes') or {}).get('users', [])}
        tweets = [Tweet.from_api(item, users) for item in (data.get('data') or [])[:limit]]
        return [self.to_candidate(tweet) for tweet in tweets]

    def to_candidate(self, tweet: Tweet) -> CandidateRecord:
        return self.build_candidate(
            title=tweet.text[:TITLE_LIMIT],
            description=tweet.text,
            source_url=tweet.url,
            source_id=tweet.id,
            raw_data={
                'author': tweet.author_username,
                'author_followers': tweet.author_followers,
                'engagement_metrics': tweet.metrics,
                'created_at': tweet.created_at,
            },
            momentum=scaled_momentum(tweet.engagement, self.momentum_normalizer),
        )
