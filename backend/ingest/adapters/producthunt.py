"""
Product Hunt adapter for fetching trending products.

Queries the v2 GraphQL API. Requires PRODUCTHUNT_API_KEY; without it, or when
the request fails, the adapter returns a placeholder record.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ingest.base import BaseAdapter, CandidateRecord, FallbackContent, Source, scaled_momentum
from ingest.http import MalformedPayload
from scorer.dimensions import Dimensions

PRODUCTHUNT_GRAPHQL_URL = "https://api.producthunt.com/v2/api/graphql"

POSTS_QUERY = """
query TrendingPosts($first: Int!) {
  posts(first: $first, order: RANKING) {
    edges {
      node {
        id
        name
        tagline
        description
        votesCount
        commentsCount
        reviewsCount
        url
        makers {
          name
          username
        }
      }
    }
  }
}
"""

# The API caps page size
MAX_PAGE_SIZE = 20

PRODUCTHUNT_PROFILE = Dimensions(
    revenue_potential=75,
    timeline_days=10,
    skill_match=80,
    momentum=80,
    competition=50,
    improvement_margin=75,
    distribution_leverage=85,
    margin_potential=80,
)


@dataclass
class ProductHuntPost:
    """Post node from the GraphQL API."""
    id: str
    name: str
    url: str
    tagline: Optional[str] = None
    description: Optional[str] = None
    votes_count: int = 0
    comments_count: Optional[int] = None
    reviews_count: Optional[int] = None
    makers: List[str] = field(default_factory=list)

    @classmethod
    def from_api(cls, node: Dict[str, Any]) -> "ProductHuntPost":
        return cls(
            id=str(node['id']),
            name=node['name'],
            url=node['url'],
            tagline=node.get('tagline'),
            description=node.get('description'),
            votes_count=node.get('votesCount') or 0,
            comments_count=node.get('commentsCount'),
            reviews_count=node.get('reviewsCount'),
            makers=[maker.get('username') for maker in node.get('makers') or []],
        )


class ProductHuntAdapter(BaseAdapter):
    """Adapter for the Product Hunt GraphQL API."""

    source = Source.PRODUCTHUNT
    profile = PRODUCTHUNT_PROFILE
    momentum_normalizer = 500
    credential_field = "producthunt_api_key"
    fallback = FallbackContent(
        title="Trending Product Hunt Products",
        description="Emerging products gaining traction on Product Hunt",
        source_url="https://www.producthunt.com",
        dimensions=PRODUCTHUNT_PROFILE,
    )
    fallback_on_error = True

    def _fetch_items(self, limit: int) -> List[CandidateRecord]:
        data = self.http.post_json(
            PRODUCTHUNT_GRAPHQL_URL,
            {'query': POSTS_QUERY, 'variables': {'first': min(limit, MAX_PAGE_SIZE)}},
            headers={
                'Authorization': f"Bearer {self.credential}",
                'Content-Type': 'application/json',
            },
            timeout=self.timeout,
        )
        if data.get('errors'):
            raise MalformedPayload(f"GraphQL errors: {data['errors']}")

        edges = ((data.get('data') or {}).get('posts') or {}).get('edges') or []
        posts = [ProductHuntPost.from_api(edge['node']) for edge in edges[:limit]]
        return [self.to_candidate(post) for post in posts]

    def to_candidate(self, post: ProductHuntPost) -> CandidateRecord:
        return self.build_candidate(
            title=post.name,
            description=post.tagline or post.description,
            source_url=post.url,
            source_id=post.id,
            raw_data={
                'votes': post.votes_count,
                'comments': post.comments_count,
                'reviews': post.reviews_count,
                'makers': post.makers,
            },
            momentum=scaled_momentum(post.votes_count, self.momentum_normalizer),
        )
