"""
Tests for AssetCache memoization and handle lifetime.

Uses real PNG data generated with Pillow.
"""

import io
from unittest.mock import patch

import pytest
from PIL import Image

from quicksearch.catalog.entries import Asset
from quicksearch.errors import AssetNotFound
from quicksearch.services.assets import AssetCache, AssetHandle


def _png_bytes(size=(4, 4), color=(255, 0, 0, 255)):
    buf = io.BytesIO()
    Image.new("RGBA", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def assets():
    return [
        Asset(data=_png_bytes(), type="image/png"),
        Asset(data=_png_bytes(color=(0, 0, 255, 255)), type="image/png"),
    ]


class TestResolve:
    """Test index -> handle resolution."""

    def test_same_index_returns_same_handle(self, assets):
        cache = AssetCache()
        assert cache.resolve(0, assets) is cache.resolve(0, assets)

    def test_different_indices_return_different_handles(self, assets):
        cache = AssetCache()
        first = cache.resolve(0, assets)
        second = cache.resolve(1, assets)
        assert first is not second
        assert first.uri != second.uri

    def test_out_of_range_raises(self, assets):
        cache = AssetCache()
        with pytest.raises(AssetNotFound) as exc:
            cache.resolve(2, assets)
        assert exc.value.index == 2
        assert exc.value.table_size == 2

    def test_negative_index_raises(self, assets):
        with pytest.raises(AssetNotFound):
            AssetCache().resolve(-1, assets)

    def test_empty_slot_raises(self, assets):
        with pytest.raises(AssetNotFound):
            AssetCache().resolve(1, [assets[0], None])

    def test_handle_carries_mime(self, assets):
        handle = AssetCache().resolve(0, assets)
        assert handle.mime == "image/png"
        assert handle.uri.startswith("asset://")


class TestInvalidation:
    """Test that handles are released when the cache is invalidated."""

    def test_new_table_clears_old_handles(self, assets):
        cache = AssetCache()
        old = cache.resolve(0, assets)

        new_table = list(assets)
        new = cache.resolve(0, new_table)

        assert new is not old
        assert old.released
        assert len(cache) == 1

    def test_clear_releases_everything(self, assets):
        cache = AssetCache()
        handles = [cache.resolve(0, assets), cache.resolve(1, assets)]
        cache.clear()
        assert all(h.released for h in handles)
        assert len(cache) == 0

    def test_context_manager_releases_on_exit(self, assets):
        with AssetCache() as cache:
            handle = cache.resolve(0, assets)
            assert not handle.released
        assert handle.released

    def test_resolve_after_clear_builds_new_handle(self, assets):
        cache = AssetCache()
        old = cache.resolve(0, assets)
        cache.clear()
        assert cache.resolve(0, assets) is not old


class TestAssetHandle:
    """Test lazy decoding and release."""

    def test_decodes_png(self):
        handle = AssetHandle(_png_bytes(size=(8, 6)), "image/png")
        assert handle.image.size == (8, 6)

    def test_decode_is_memoized(self):
        handle = AssetHandle(_png_bytes(), "image/png")
        assert handle.image is handle.image

    def test_garbage_data_decodes_to_none(self):
        handle = AssetHandle(bytes([1, 2, 3]), "image/png")
        assert handle.image is None

    def test_failed_decode_is_not_retried(self):
        handle = AssetHandle(bytes([1, 2, 3]), "image/png")
        with patch("quicksearch.services.assets.Image.open", wraps=Image.open) as image_open:
            assert handle.image is None
            assert handle.image is None
        assert image_open.call_count == 1

    def test_released_handle_has_no_image(self):
        handle = AssetHandle(_png_bytes(), "image/png")
        handle.image
        handle.release()
        assert handle.released
        assert handle.image is None

    def test_release_is_idempotent(self):
        handle = AssetHandle(_png_bytes(), "image/png")
        handle.release()
        handle.release()
        assert handle.released
