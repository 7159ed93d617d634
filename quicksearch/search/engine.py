"""
Search engines - Ranked match providers behind the pipeline.

Any object with `search(query)` and an `assets` table can back the overlay.
CatalogSearchEngine is the in-process one: substring search over entry
names ranked by where in the name the query landed.

Ranking:
  score = (chars into the matched word, index of the matched word)
Lower scores first, ties broken by the matched name. So "code" ranks
"Code" before "VS Code", and "VS Code" before "Visual Studio Code".
"""

from typing import Protocol, Sequence

from loguru import logger

from ..catalog.entries import Asset, Entry
from .matching import Match

DEFAULT_MAX_RESULTS = 7


class SearchEngine(Protocol):
    assets: Sequence[Asset | None]

    def search(self, query: str) -> list:
        ...


def _score(entry: Entry, query: str):
    """Score the first name containing the (lowercase) query."""
    for key in entry.names:
        start = key.lower().find(query)
        if start < 0:
            continue

        before = key[:start]
        word_index = before.count(" ")
        char_index = len(before) - before.rfind(" ") - 1 if " " in before else start
        return (char_index, word_index), key, start

    return None


class CatalogSearchEngine:
    """Ranked substring search over an in-memory catalog."""

    name = "catalog"

    def __init__(self, entries: Sequence[Entry] = (), assets: Sequence[Asset | None] = (),
                 max_results: int = DEFAULT_MAX_RESULTS):
        self.entries = list(entries)
        self.assets = list(assets)
        self.max_results = max_results

    def replace(self, entries: Sequence[Entry], assets: Sequence[Asset | None] = ()) -> None:
        """Swap in a new catalog snapshot."""
        self.entries = list(entries)
        self.assets = list(assets)
        logger.debug(f"Search engine indexed {len(self.entries)} entries, {len(self.assets)} assets")

    def search(self, query: str) -> list[Match]:
        q = query.lower()

        hits = []
        for entry in self.entries:
            scored = _score(entry, q)
            if scored is not None:
                score, key, start = scored
                hits.append((score, key, start, entry))

        hits.sort(key=lambda h: (h[0], h[1]))

        return [
            Match(target=entry, span=(start, len(query)), key=key)
            for _score_, key, start, entry in hits[:self.max_results]
        ]
