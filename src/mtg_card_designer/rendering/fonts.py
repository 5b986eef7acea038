"""Map CSS-style font family lists onto font files."""

import logging
import re
from pathlib import Path
from typing import Optional

from PIL import ImageFont

logger = logging.getLogger(__name__)

FONT_SUFFIXES = (".ttf", ".otf")


def _normalize(name: str) -> str:
    return re.sub(r"[\s_\-]", "", name).lower()


class FontRegistry:
    """Resolve ``"Beleren, sans-serif"`` style families to Pillow fonts.

    Files in ``fonts_dir`` are matched by name, e.g. ``Beleren-Bold.ttf``
    for a bold Beleren. Families with no file fall back to Pillow's
    bundled default font at the requested size.
    """

    def __init__(self, fonts_dir: Optional[Path] = None) -> None:
        self.fonts_dir = fonts_dir
        self._files: dict[str, Path] = {}
        self._cache: dict[tuple, ImageFont.FreeTypeFont] = {}
        if fonts_dir is not None and fonts_dir.is_dir():
            for path in sorted(fonts_dir.iterdir()):
                if path.suffix.lower() in FONT_SUFFIXES:
                    self._files[_normalize(path.stem)] = path
            logger.debug(f"Indexed {len(self._files)} font files in {fonts_dir}")

    def find_file(self, family: str, bold: bool = False, italic: bool = False) -> Optional[Path]:
        """Return the first font file matching a name in the family list."""
        variants = []
        if bold and italic:
            variants.append("bolditalic")
        if bold:
            variants.append("bold")
        if italic:
            variants.append("italic")
        variants.extend(["regular", ""])

        for name in family.split(","):
            base = _normalize(name.strip().strip("'\""))
            for variant in variants:
                path = self._files.get(base + variant)
                if path is not None:
                    return path
        return None

    def get(self, family: str, size: float, bold: bool = False, italic: bool = False):
        """Return a font object for drawing at ``size`` pixels."""
        pixel_size = max(1, round(size))
        key = (family, pixel_size, bold, italic)
        if key not in self._cache:
            path = self.find_file(family, bold=bold, italic=italic)
            if path is not None:
                self._cache[key] = ImageFont.truetype(str(path), pixel_size)
            else:
                self._cache[key] = ImageFont.load_default(size=pixel_size)
        return self._cache[key]
