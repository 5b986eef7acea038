"""Split card text into literal runs and inline symbol references."""

import re
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Union

from mtg_card_designer.rendering.symbols import SymbolIcon, lookup_symbol

TOKEN_PATTERN = re.compile(r"(\{[^}]+\})")


@dataclass(frozen=True)
class TextSegment:
    """A literal run of text, preserved verbatim."""

    value: str
    type: str = "text"


@dataclass(frozen=True)
class SymbolSegment:
    """A resolved ``{KEY}`` token."""

    key: str
    icon: SymbolIcon
    type: str = "symbol"

    @property
    def source(self) -> str:
        return f"{{{self.key}}}"


Segment = Union[TextSegment, SymbolSegment]


def tokenize(text: str) -> Iterator[Segment]:
    """Yield the text and symbol segments of ``text`` in order.

    Unknown tokens are emitted as text, braces included.
    """
    if not text:
        return
    for part in TOKEN_PATTERN.split(text):
        if not part:
            continue
        if TOKEN_PATTERN.fullmatch(part):
            key = part[1:-1]
            icon = lookup_symbol(key)
            if icon is not None:
                yield SymbolSegment(key=key, icon=icon)
                continue
        yield TextSegment(value=part)


def segments_to_text(segments) -> str:
    """Join segments back into their source text."""
    return "".join(
        seg.value if isinstance(seg, TextSegment) else seg.source for seg in segments
    )


def parse_mana_cost(cost: str) -> list[SymbolSegment]:
    """Parse a cost string such as ``{2}{W}{U}`` into symbol segments.

    Unresolvable keys are dropped rather than drawn as raw text.
    """
    keys = cost.replace("{", " ").replace("}", " ").split()
    symbols = []
    for key in keys:
        icon = lookup_symbol(key)
        if icon is not None:
            symbols.append(SymbolSegment(key=key, icon=icon))
    return symbols


def insert_symbol(text: str, key: str, cursor: int | None = None) -> tuple[str, int]:
    """Insert ``{key}`` at ``cursor`` (end of text by default).

    Returns:
        The new text and the cursor position just after the inserted token.
    """
    if cursor is None or cursor > len(text):
        cursor = len(text)
    cursor = max(0, cursor)
    token = f"{{{key}}}"
    return text[:cursor] + token + text[cursor:], cursor + len(token)
