"""Registry of inline symbols that may appear as ``{TOKEN}`` in card text."""

from dataclasses import dataclass
from typing import Optional

COLOR_FILLS = {
    "W": "#f8f6d8",
    "U": "#c1d7e9",
    "B": "#bab1ab",
    "R": "#e9c2c0",
    "G": "#c3d3c4",
    "C": "#cccccc",
}
GENERIC_FILL = "#cac5c0"

# Baseline correction in card units; positive values move an icon down.
VERTICAL_OFFSETS = {
    "T": 1.5,
    "Q": 1.5,
    "UT": 1.5,
}

HYBRID_PAIRS = ("W/U", "W/B", "U/B", "U/R", "B/R", "B/G", "R/G", "R/W", "G/W", "G/U")


@dataclass(frozen=True)
class SymbolIcon:
    """How a symbol is drawn: one or two fill colors and a centred glyph."""

    key: str
    fills: tuple[str, ...]
    glyph: str = ""
    vertical_offset: float = 0.0

    @property
    def is_hybrid(self) -> bool:
        return len(self.fills) > 1


def _icon(key: str, fills: tuple[str, ...], glyph: str = "") -> SymbolIcon:
    return SymbolIcon(
        key=key,
        fills=fills,
        glyph=glyph,
        vertical_offset=VERTICAL_OFFSETS.get(key, 0.0),
    )


def _build_registry() -> dict[str, SymbolIcon]:
    registry: dict[str, SymbolIcon] = {}

    for color, fill in COLOR_FILLS.items():
        registry[color] = _icon(color, (fill,), color)

    for number in range(0, 18):
        key = str(number)
        registry[key] = _icon(key, (GENERIC_FILL,), key)

    for key in ("X", "Y", "Z", "S", "H"):
        registry[key] = _icon(key, (GENERIC_FILL,), key)

    registry["T"] = _icon("T", (GENERIC_FILL,), "T")
    registry["Q"] = _icon("Q", (GENERIC_FILL,), "Q")
    registry["UT"] = _icon("UT", (GENERIC_FILL,), "Q")

    for pair in HYBRID_PAIRS:
        first, second = pair.split("/")
        registry[pair] = _icon(pair, (COLOR_FILLS[first], COLOR_FILLS[second]))

    for color in "WUBRG":
        registry[f"{color}/P"] = _icon(f"{color}/P", (COLOR_FILLS[color],), "P")
        registry[f"2/{color}"] = _icon(
            f"2/{color}", (GENERIC_FILL, COLOR_FILLS[color]), "2"
        )

    return registry


SYMBOLS: dict[str, SymbolIcon] = _build_registry()


def lookup_symbol(key: str) -> Optional[SymbolIcon]:
    """Resolve a token key (case-sensitive) to its icon, or None."""
    return SYMBOLS.get(key)
