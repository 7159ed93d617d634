"""
Match Pipeline - Turn a query into an ordered list of highlighted matches.

Matching policy (default): case-insensitive prefix match against each of an
entry's names, first name in declaration order wins, span covers the whole
matched name. Substring mode is available but off by default.

Ordering:
  - local matching emits matches in catalog order
  - engine-backed searches keep the engine's order untouched
"""

from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from loguru import logger

from ..catalog.entries import Entry
from ..errors import AssetNotFound, MalformedEntry
from ..services.assets import AssetCache

# Icon name shown when an asset index cannot be resolved
PLACEHOLDER_ICON = "image-missing"


class MatchMode(Enum):
    PREFIX = "prefix"
    SUBSTRING = "substring"


@dataclass(eq=False)
class Match:
    """
    One entry matched by a query.

    Attributes:
        target: The matched entry (shared with the catalog, not copied)
        span: (start, length) of the highlighted part of `key`
        key: The entry name that matched
    """
    target: Entry
    span: tuple[int, int]
    key: str = ""

    @property
    def display(self) -> str:
        return entry_display(self.target)


def _first_match(query: str, entry: Entry, mode: MatchMode) -> Optional[tuple[str, tuple[int, int]]]:
    """Find the first name matching the query, with its span."""
    q = query.lower()
    for name in entry.names:
        lower = name.lower()
        if mode is MatchMode.PREFIX:
            if lower.startswith(q):
                return name, (0, len(name))
        else:
            start = lower.find(q)
            if start >= 0:
                return name, (start, len(query))
    return None


def entry_match(query: str, entry: Entry, mode: MatchMode = MatchMode.PREFIX) -> Optional[tuple[int, int]]:
    """
    Match a query against one entry.

    Returns:
        (start, length) span of the first matching name, or None
    """
    found = _first_match(query, entry, mode)
    return found[1] if found else None


def entry_display(entry: Entry) -> str:
    """Name shown for an entry in the results list."""
    return entry.names[0]


class MatchPipeline:
    """
    Computes matches and resolves their icons through an AssetCache.

    Args:
        cache: Shared asset cache (one per catalog)
        mode: Prefix (default) or substring matching
        show_all_on_empty: Whether an empty query lists every entry
        max_results: Cap on local matches (None for no cap)
    """

    def __init__(
        self,
        cache: Optional[AssetCache] = None,
        mode: MatchMode = MatchMode.PREFIX,
        show_all_on_empty: bool = True,
        max_results: Optional[int] = None,
    ):
        self.cache = cache if cache is not None else AssetCache()
        self.mode = mode
        self.show_all_on_empty = show_all_on_empty
        self.max_results = max_results

    def match(self, query: str, entries, assets=None) -> list[Match]:
        """
        Match a query against a static entry list.

        Malformed rows are skipped with a warning instead of failing the
        whole result set.
        """
        if not query and not self.show_all_on_empty:
            return []

        matches = []
        for row in entries:
            try:
                entry = Entry.from_raw(row)
            except MalformedEntry as e:
                logger.warning(f"Skipping entry during match: {e}")
                continue

            found = _first_match(query, entry, self.mode)
            if found is None:
                continue

            key, span = found
            matches.append(Match(target=entry, span=span, key=key))
            if self.max_results and len(matches) >= self.max_results:
                break

        self.resolve_icons(matches, assets)
        return matches

    def search(self, query: str, engine) -> list[Match]:
        """Ask a search engine for ranked matches, preserving its order."""
        matches = []
        for record in engine.search(query):
            try:
                matches.append(self._coerce(record))
            except MalformedEntry as e:
                logger.warning(f"Skipping engine result: {e}")

        self.resolve_icons(matches, getattr(engine, "assets", None))
        return matches

    def resolve_icons(self, matches: list[Match], assets) -> None:
        """
        Point each match's icon at the cached handle for its asset index.

        Runs every cycle: a handle released by a cache clear is replaced
        with the handle for the current table.
        """
        for m in matches:
            entry = m.target
            index = entry.asset_index
            if index is None:
                continue
            try:
                if assets is None:
                    raise AssetNotFound(index, 0)
                entry.display_icon = self.cache.resolve(index, assets)
            except AssetNotFound as e:
                if entry.display_icon != PLACEHOLDER_ICON:
                    logger.warning(f"No icon for '{entry.name}': {e}")
                entry.display_icon = PLACEHOLDER_ICON

    @staticmethod
    def _coerce(record) -> Match:
        """Accept Match objects or match-shaped mappings from an engine."""
        if isinstance(record, Match):
            return record
        if not isinstance(record, Mapping) or "target" not in record:
            raise MalformedEntry(record, "engine result has no 'target'")

        entry = Entry.from_raw(record["target"])
        key = record.get("key") or entry.name
        if "start" in record:
            start = record["start"]
            end = record.get("end", start + len(key))
            span = (start, end - start)
        else:
            span = (0, len(key))
        return Match(target=entry, span=span, key=key)
