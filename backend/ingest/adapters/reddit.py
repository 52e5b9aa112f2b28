"""
Reddit adapter for fetching hot posts from startup subreddits.

Uses the public JSON listing of each subreddit; no credential required.
A failing subreddit is skipped. If no subreddit yields posts, a single
placeholder record is returned.
"""

from dataclasses import dataclass
from math import ceil
from typing import Any, Dict, List, Optional

from ingest.base import BaseAdapter, CandidateRecord, FallbackContent, Source, scaled_momentum
from ingest.http import FetchError
from scorer.dimensions import DEFAULT_DIMENSIONS, Dimensions

SUBREDDITS = ['entrepreneur', 'startups', 'SideProject']

DESCRIPTION_LIMIT = 500


@dataclass
class RedditPost:
    """Post item from a subreddit listing."""
    id: str
    title: str
    permalink: str
    selftext: str
    subreddit: str
    ups: int = 0
    num_comments: int = 0
    created_utc: Optional[float] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "RedditPost":
        return cls(
            id=data['id'],
            title=data['title'],
            permalink=data['permalink'],
            selftext=data.get('selftext') or '',
            subreddit=data.get('subreddit', ''),
            ups=data.get('ups') or 0,
            num_comments=data.get('num_comments') or 0,
            created_utc=data.get('created_utc'),
        )

    @property
    def engagement(self) -> int:
        return self.ups + self.num_comments


class RedditAdapter(BaseAdapter):
    """Adapter for subreddit hot listings."""

    source = Source.REDDIT
    profile = Dimensions(
        revenue_potential=65,
        timeline_days=10,
        skill_match=75,
        competition=55,
        improvement_margin=70,
        distribution_leverage=65,
        margin_potential=70,
    )
    momentum_normalizer = 1000
    timeout = 5
    fallback = FallbackContent(
        title="Failed to fetch Reddit data",
        description="Using fallback mock data",
        source_url="https://reddit.com/r/entrepreneur",
        dimensions=DEFAULT_DIMENSIONS,
    )

    def __init__(self, http, credentials=None, subreddits: Optional[List[str]] = None):
        super().__init__(http, credentials)
        self.subreddits = subreddits or SUBREDDITS

    def _fetch_items(self, limit: int) -> List[CandidateRecord]:
        per_feed = ceil(limit / len(self.subreddits))
        records = []

        for subreddit in self.subreddits:
            try:
                posts = self._fetch_subreddit(subreddit, per_feed)
            except FetchError as e:
                self.logger.error(f"[reddit] r/{subreddit} error: {e}")
                continue
            except (KeyError, TypeError, AttributeError) as e:
                self.logger.error(f"[reddit] r/{subreddit} unexpected payload: {e!r}")
                continue
            records.extend(self.to_candidate(post) for post in posts)

        if not records:
            self.logger.warning("[reddit] No subreddit returned posts, using fallback data")
            return [self.fallback_record({"error": "No subreddit feed returned posts"})]
        # Per-feed quota is rounded up, so the combined list can overshoot
        return records[:limit]

    def _fetch_subreddit(self, subreddit: str, limit: int) -> List[RedditPost]:
        data = self.http.get_json(
            f"https://www.reddit.com/r/{subreddit}/hot.json",
            params={'limit': limit},
            timeout=self.timeout,
        )
        posts = [
            RedditPost.from_api(child['data'])
            for child in data['data']['children']
            if child.get('kind') == 't3'
        ]
        # Text posts only; link posts carry no description to score
        posts = [post for post in posts if post.selftext.strip()]
        return posts[:limit]

    def to_candidate(self, post: RedditPost) -> CandidateRecord:
        return self.build_candidate(
            title=post.title,
            description=post.selftext[:DESCRIPTION_LIMIT],
            source_url=f"https://reddit.com{post.permalink}",
            source_id=post.id,
            raw_data={
                'subreddit': post.subreddit,
                'upvotes': post.ups,
                'comments': post.num_comments,
                'created_utc': post.created_utc,
            },
            momentum=scaled_momentum(post.engagement, self.momentum_normalizer),
        )
