"""
Source adapter registry.

This module maintains a registry of all available source adapters.
Use get_adapter() to build one adapter, or build_adapters() for the full set.
"""

from typing import Dict, Type
from ingest.base import BaseAdapter, Source
from ingest.http import HttpClient
from ingest.adapters.github import GitHubAdapter
from ingest.adapters.moltbook import MoltbookAdapter
from ingest.adapters.reddit import RedditAdapter
from ingest.adapters.twitter import TwitterAdapter
from ingest.adapters.producthunt import ProductHuntAdapter
from ingest.adapters.appsumo import AppSumoAdapter


# Registry of available adapters, in the order "all" runs them.
# Source.HACKERNEWS is intentionally absent: it has no fetcher.
ADAPTERS: Dict[str, Type[BaseAdapter]] = {
    Source.GITHUB.value: GitHubAdapter,
    Source.MOLTBOOK.value: MoltbookAdapter,
    Source.REDDIT.value: RedditAdapter,
    Source.TWITTER.value: TwitterAdapter,
    Source.PRODUCTHUNT.value: ProductHuntAdapter,
    Source.APPSUMO.value: AppSumoAdapter,
}


def get_adapter(name: str, http: HttpClient, credentials=None) -> BaseAdapter:
    """
    Get adapter instance for a source.

    Args:
        name: Source name (e.g. "reddit")
        http: Shared HttpClient
        credentials: Credentials object from config

    Returns:
        Instantiated adapter for the source

    Raises:
        ValueError: If adapter name is not registered
    """
    adapter_class = ADAPTERS.get(name)
    if not adapter_class:
        raise ValueError(
            f"Unknown adapter: {name}. "
            f"Available adapters: {', '.join(ADAPTERS.keys())}"
        )
    return adapter_class(http, credentials)


def build_adapters(http: HttpClient, credentials=None) -> Dict[str, BaseAdapter]:
    """Instantiate every registered adapter, keyed by source name."""
    return {name: get_adapter(name, http, credentials) for name in ADAPTERS}
