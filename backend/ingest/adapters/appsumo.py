"""
AppSumo adapter for fetching trending deals.

AppSumo has no documented public API; this reads the JSON deals feed behind
the storefront. No credential required. Request failures and unrecognized
payloads degrade to a placeholder record.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from ingest.base import BaseAdapter, CandidateRecord, FallbackContent, Source, scaled_momentum
from scorer.dimensions import Dimensions

APPSUMO_DEALS_URL = "https://appsumo.com/api/deals/"

APPSUMO_PROFILE = Dimensions(
    revenue_potential=70,
    timeline_days=14,
    skill_match=75,
    momentum=50,
    competition=60,
    improvement_margin=70,
    distribution_leverage=75,
    margin_potential=75,
)


@dataclass
class AppSumoDeal:
    """Deal item from the deals feed."""
    id: str
    title: str
    url: str
    description: str
    category: Optional[str] = None
    price: Optional[float] = None
    original_price: Optional[float] = None
    rating: Optional[float] = None
    review_count: Optional[int] = None
    trending_score: Optional[float] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> Optional["AppSumoDeal"]:
        """Parse a deal; returns None when it has no usable identity."""
        slug = data.get('slug')
        deal_id = data.get('id') or slug
        url = data.get('url') or (f"https://appsumo.com/products/{slug}" if slug else None)
        title = data.get('name') or data.get('title')
        if not (deal_id and url and title):
            return None

        ratings = data.get('ratings') or {}
        category = data.get('category')
        return cls(
            id=str(deal_id),
            title=title,
            url=url,
            description=(
                data.get('description') or
                (data.get('details') or {}).get('summary') or
                'AppSumo trending deal'
            ),
            category=category.get('name') if isinstance(category, dict) else category,
            price=data.get('price'),
            original_price=data.get('original_price'),
            rating=ratings.get('rating'),
            review_count=ratings.get('rating_count'),
            trending_score=data.get('trending_score'),
        )


class AppSumoAdapter(BaseAdapter):
    """Adapter for the AppSumo deals feed."""

    source = Source.APPSUMO
    profile = APPSUMO_PROFILE
    momentum_normalizer = 100
    fallback = FallbackContent(
        title="AppSumo Trending Deals",
        description="Trending deals from the AppSumo marketplace",
        source_url="https://appsumo.com",
        dimensions=APPSUMO_PROFILE,
    )
    fallback_on_error = True

    def _fetch_items(self, limit: int) -> List[CandidateRecord]:
        data = self.http.get_json(
            APPSUMO_DEALS_URL,
            params={'sort': 'trending', 'limit': limit},
            timeout=self.timeout,
        )
        listings = data.get('deals') if isinstance(data, dict) else data
        if not isinstance(listings, list):
            self.logger.warning("[appsumo] Unrecognized deals payload, using fallback data")
            return [self.fallback_record({"error": "Parse error"})]

        records = []
        for item in listings[:limit]:
            deal = AppSumoDeal.from_api(item)
            if deal is None:
                self.logger.warning(f"[appsumo] Skipping deal with missing fields: {item.get('id')}")
                continue
            records.append(self.to_candidate(deal))
        return records

    def to_candidate(self, deal: AppSumoDeal) -> CandidateRecord:
        values = dict(
            title=deal.title,
            description=deal.description,
            source_url=deal.url,
            source_id=deal.id,
            raw_data={
                'category': deal.category,
                'price': deal.price,
                'original_price': deal.original_price,
                'rating': deal.rating,
                'review_count': deal.review_count,
                'trending_score': deal.trending_score,
            },
        )
        # Deals without reviews keep the profile momentum
        if deal.review_count:
            values['momentum'] = scaled_momentum(deal.review_count, self.momentum_normalizer)
        return self.build_candidate(**values)
