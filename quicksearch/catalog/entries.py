"""
Catalog entries - Normalized launch targets and their icon assets.

Rows arrive from the host in two shapes:
  - {"names": ["Calculator", "calc"], ...}
  - {"name": "Calculator", ...}

Both are folded into a single Entry with a `names` tuple at ingestion time,
so matching never has to look at the raw row again.

Example catalog.toml:
    [[entries]]
    names = ["Terminal", "term"]
    target = ["foot"]
    icon = "utilities-terminal"
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

import toml
from loguru import logger

from ..errors import MalformedCatalogPayload, MalformedEntry

# Keys consumed by Entry itself; everything else stays in payload
_ENTRY_KEYS = {"names", "name", "icon", "display_icon", "details", "target"}


@dataclass(eq=False)
class Entry:
    """
    A catalog item.

    `display_icon` is either an icon name/path, a resolved asset handle,
    an integer index into the asset table (not yet resolved), or None.
    `asset_index` keeps the original index once display_icon has been
    replaced by a handle, so the icon can be resolved again against a
    new asset table.
    Matches reference entries by identity, hence eq=False.
    """
    names: tuple[str, ...]
    display_icon: object = None
    details: str = ""
    target: tuple[str, ...] = ()
    payload: dict = field(default_factory=dict)
    asset_index: int | None = None

    def __post_init__(self):
        icon = self.display_icon
        if self.asset_index is None and isinstance(icon, int) and not isinstance(icon, bool):
            self.asset_index = icon

    @property
    def name(self) -> str:
        """Primary display name."""
        return self.names[0]

    @classmethod
    def from_raw(cls, row) -> "Entry":
        """
        Normalize a raw catalog row.

        Raises:
            MalformedEntry: if the row has no usable name
        """
        if isinstance(row, Entry):
            return row
        if not isinstance(row, Mapping):
            raise MalformedEntry(row, "row is not a mapping")

        if "names" in row:
            names = row["names"]
            if isinstance(names, str) or not isinstance(names, (list, tuple)):
                raise MalformedEntry(row, "'names' must be a list of strings")
            names = tuple(names)
        elif "name" in row:
            names = (row["name"],)
        else:
            raise MalformedEntry(row)

        if not names or not all(isinstance(n, str) and n for n in names):
            raise MalformedEntry(row, "names must be non-empty strings")

        target = row.get("target", ())
        if isinstance(target, str):
            target = (target,)
        target = tuple(str(part) for part in target)

        icon = row.get("display_icon", row.get("icon"))
        details = row.get("details") or (target[0] if target else "")

        payload = {k: v for k, v in row.items() if k not in _ENTRY_KEYS}
        return cls(names=names, display_icon=icon, details=details, target=target, payload=payload)


@dataclass(frozen=True)
class Asset:
    """Raw icon blob from the backend asset table."""
    data: bytes
    type: str = "application/octet-stream"

    @classmethod
    def from_raw(cls, row) -> "Asset":
        if isinstance(row, Asset):
            return row
        if not isinstance(row, Mapping) or "data" not in row:
            raise ValueError(f"asset row needs a 'data' field: {row!r}")
        data = row["data"]
        if isinstance(data, (int, str)):
            raise ValueError(f"asset data must be bytes or a list of byte values, got {type(data).__name__}")
        return cls(data=bytes(data), type=str(row.get("type") or cls.type))


def build_asset_table(rows) -> list[Asset | None]:
    """
    Coerce raw asset rows into Asset objects.

    Bad rows become None so the remaining indices keep pointing at the
    same content. Resolving a None slot is reported as a missing asset.
    """
    table = []
    for i, row in enumerate(rows or []):
        try:
            table.append(Asset.from_raw(row))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping asset {i}: {e}")
            table.append(None)
    return table


def parse_catalog_payload(raw) -> list:
    """
    Turn a catalog push into a list of raw rows.

    Strings and bytes are parsed as JSON first.

    Raises:
        MalformedCatalogPayload: if the payload is not (or does not parse to) a list
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            raw = json.loads(raw)
        except ValueError as e:
            raise MalformedCatalogPayload(f"could not parse catalog payload: {e}") from e

    if not isinstance(raw, (list, tuple)):
        raise MalformedCatalogPayload(f"catalog payload is {type(raw).__name__}, expected a list")

    return list(raw)


def normalize_entries(rows) -> list[Entry]:
    """Normalize rows into entries, skipping malformed ones."""
    entries = []
    for row in rows:
        try:
            entries.append(Entry.from_raw(row))
        except MalformedEntry as e:
            logger.warning(f"Skipping catalog row: {e}")
    return entries


def ingest_catalog(raw, links=None) -> list[Entry]:
    """
    Build the catalog snapshot from a host push.

    Args:
        raw: Entry rows, or a JSON string encoding them
        links: Extra link rows appended after the entries

    Returns:
        Normalized entries. A malformed payload yields an empty catalog.
    """
    try:
        rows = parse_catalog_payload(raw)
    except MalformedCatalogPayload as e:
        logger.warning(f"Ignoring catalog push: {e}")
        rows = []

    if links:
        if isinstance(links, (list, tuple)):
            rows.extend(links)
        else:
            logger.warning(f"Ignoring links payload of type {type(links).__name__}")

    entries = normalize_entries(rows)
    logger.debug(f"Ingested catalog with {len(entries)} entries")
    return entries


def load_catalog_file(path: Path) -> list[Entry]:
    """
    Load user-defined launch targets from a TOML catalog file.

    Rows without a `target` cannot be launched and are skipped.
    """
    path = Path(path)
    if not path.exists():
        logger.info(f"Catalog file not found at {path}, using empty catalog")
        return []

    try:
        data = toml.load(path)
    except Exception:
        logger.exception(f"Failed to load catalog from {path}")
        return []

    rows = []
    for row in data.get("entries", []):
        if not isinstance(row, dict) or not row.get("target"):
            logger.warning(f"Skipping catalog row without 'target': {row!r}")
            continue
        rows.append(row)

    return normalize_entries(rows)
