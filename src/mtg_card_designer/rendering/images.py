"""Resolve image references (data URIs, URLs, file paths) into Pillow images."""

import base64
import binascii
import io
import logging
from pathlib import Path
from typing import Optional
from urllib.parse import unquote

import requests
from PIL import Image, UnidentifiedImageError

from mtg_card_designer.errors import RasterizationError

logger = logging.getLogger(__name__)


def to_data_uri(data: bytes, mime_type: str = "image/png") -> str:
    """Encode raw image bytes as a data URI."""
    encoded = base64.b64encode(data).decode("ascii")
    return f"data:{mime_type};base64,{encoded}"


def image_to_bytes(image: Image.Image, format: str = "PNG", **options) -> bytes:
    buffer = io.BytesIO()
    image.save(buffer, format, **options)
    return buffer.getvalue()


class ImageLoader:
    """Load and cache images referenced by templates and cards.

    The reference is treated as opaque: it is fetched, never rewritten.
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_dir = base_dir
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cache: dict[str, Image.Image] = {}

    def load(self, source: str) -> Image.Image:
        """Return an RGBA copy of the image behind ``source``.

        Raises:
            RasterizationError: If the reference cannot be read or decoded
        """
        if source not in self._cache:
            data = self.read_bytes(source)
            try:
                image = Image.open(io.BytesIO(data))
                image.load()
            except (UnidentifiedImageError, OSError) as e:
                raise RasterizationError(
                    f"Cannot decode image {self._describe(source)}: {e}"
                ) from e
            self._cache[source] = image.convert("RGBA")
            logger.debug(f"Loaded image {self._describe(source)}: {image.size}")
        return self._cache[source].copy()

    def clear_cache(self) -> None:
        self._cache.clear()

    def read_bytes(self, source: str) -> bytes:
        """Return the raw bytes behind an image reference."""
        if not source:
            raise RasterizationError("Empty image reference")

        if source.startswith("data:"):
            header, _, payload = source.partition(",")
            try:
                if header.endswith(";base64"):
                    return base64.b64decode(payload, validate=False)
                return unquote(payload).encode("utf-8")
            except binascii.Error as e:
                raise RasterizationError(f"Malformed data URI: {e}") from e

        if source.startswith(("http://", "https://")):
            try:
                response = self.session.get(source, timeout=self.timeout)
            except requests.RequestException as e:
                raise RasterizationError(f"Failed to fetch {source}: {e}") from e
            if response.status_code != 200:
                raise RasterizationError(
                    f"Failed to fetch {source}: HTTP {response.status_code}"
                )
            return response.content

        path = Path(source)
        if not path.is_absolute() and self.base_dir is not None:
            path = self.base_dir / path
        try:
            return path.read_bytes()
        except OSError as e:
            raise RasterizationError(f"Cannot read image file {path}: {e}") from e

    @staticmethod
    def _describe(source: str) -> str:
        if source.startswith("data:"):
            return f"<{source[:30]}...>"
        return source
