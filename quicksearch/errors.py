"""
Error taxonomy for the overlay.

None of these reach the user. Each is raised at the layer that detects it
and recovered one layer up (placeholder icon, skipped row, empty catalog).
"""


class QuickSearchError(Exception):
    """Base class for overlay errors."""


class AssetNotFound(QuickSearchError):
    """An icon referenced an asset index outside the asset table."""

    def __init__(self, index: int, table_size: int):
        super().__init__(f"asset index {index} out of range (table has {table_size})")
        self.index = index
        self.table_size = table_size


class MalformedEntry(QuickSearchError):
    """A catalog row has no usable name."""

    def __init__(self, row, reason: str = "missing 'names'/'name' field"):
        super().__init__(f"malformed entry ({reason}): {row!r}")
        self.row = row
        self.reason = reason


class MalformedCatalogPayload(QuickSearchError):
    """A catalog push was not a list (or could not be parsed into one)."""
