"""
Catalog package - Entries and icon assets supplied by the host.
"""

from .entries import Asset, Entry, build_asset_table, ingest_catalog, load_catalog_file

__all__ = ["Asset", "Entry", "build_asset_table", "ingest_catalog", "load_catalog_file"]
