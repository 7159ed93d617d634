"""
Asset Cache - Resolve icon asset indices to renderable handles.

The backend ships icons as an indexed table of raw blobs. Each index is
turned into an AssetHandle at most once for the lifetime of the table;
later lookups return the same handle object.

Handles own a decoded image (decoded lazily on first render). The cache
releases every handle when it is cleared, when a different asset table is
bound, or when used as a context manager and the block exits.
"""

import io
import itertools

from loguru import logger
from PIL import Image

from ..errors import AssetNotFound

_handle_ids = itertools.count(1)


class AssetHandle:
    """
    Display-ready reference to one asset blob.

    Attributes:
        uri: Process-unique reference string (asset://N)
        mime: MIME type reported by the backend
    """

    def __init__(self, data: bytes, mime: str):
        self.uri = f"asset://{next(_handle_ids)}"
        self.mime = mime
        self._data = data
        self._image = None
        self._decode_failed = False
        self.released = False

    @property
    def image(self) -> Image.Image | None:
        """
        Decoded image, or None if the blob cannot be decoded.

        Decoding happens on first access, not when the handle is created.
        """
        if self.released or self._decode_failed:
            return None
        if self._image is None:
            try:
                img = Image.open(io.BytesIO(self._data))
                img.load()
                self._image = img
            except Exception as e:
                logger.warning(f"Could not decode {self.mime} asset {self.uri}: {e}")
                self._decode_failed = True
                return None
        return self._image

    def release(self) -> None:
        """Drop the decoded image and raw bytes."""
        if self.released:
            return
        if self._image is not None:
            self._image.close()
            self._image = None
        self._data = b""
        self.released = True

    def __repr__(self):
        state = "released" if self.released else self.mime
        return f"<AssetHandle {self.uri} {state}>"


class AssetCache:
    """Memoizes AssetHandle creation per asset index."""

    def __init__(self):
        self._handles: dict[int, AssetHandle] = {}
        self._table = None

    def __len__(self):
        return len(self._handles)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.clear()
        return False

    def resolve(self, index: int, assets) -> AssetHandle:
        """
        Get the handle for an asset index, creating it on first use.

        Args:
            index: Position in the asset table
            assets: The asset table the index refers to

        Raises:
            AssetNotFound: if index is outside the table (or the slot is empty)
        """
        if assets is not self._table:
            # New table: indices may now point at different content
            self.clear()
            self._table = assets

        handle = self._handles.get(index)
        if handle is not None:
            return handle

        if not 0 <= index < len(assets) or assets[index] is None:
            raise AssetNotFound(index, len(assets))

        asset = assets[index]
        handle = AssetHandle(asset.data, asset.type)
        self._handles[index] = handle
        logger.debug(f"Created {handle!r} for asset {index}")
        return handle

    def clear(self) -> None:
        """Release every handle and forget the bound table."""
        if self._handles:
            logger.debug(f"Releasing {len(self._handles)} asset handles")
        for handle in self._handles.values():
            handle.release()
        self._handles.clear()
        self._table = None
