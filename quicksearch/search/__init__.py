"""
Search package - Query matching and ranked search.

The pipeline matches queries against catalog entries (or asks a search
engine for ranked matches) and resolves icon assets on the results.
"""

from .engine import CatalogSearchEngine, SearchEngine
from .matching import Match, MatchMode, MatchPipeline, entry_display, entry_match

__all__ = [
    "CatalogSearchEngine",
    "SearchEngine",
    "Match",
    "MatchMode",
    "MatchPipeline",
    "entry_display",
    "entry_match",
]
