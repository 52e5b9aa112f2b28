"""
Scorer package for opportunity ranking.
Provides dimension resolution and the scoring engine.
"""

from .engine import (
    ScoringEngine,
    ScoreResult,
    ScoredRecord,
    normalize_timeline,
    INITIAL_STATUS,
)
from .dimensions import Dimensions, DEFAULT_DIMENSIONS, resolve_dimensions

__all__ = [
    'ScoringEngine',
    'ScoreResult',
    'ScoredRecord',
    'normalize_timeline',
    'INITIAL_STATUS',
    'Dimensions',
    'DEFAULT_DIMENSIONS',
    'resolve_dimensions',
]
