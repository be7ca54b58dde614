"""Assemble positioned PDF glyphs into words and lines.

pdfplumber exposes every glyph of a page with its bounding box. The Korean
statutory forms handled here are typeset with wide letter spacing, so the
built-in ``extract_words`` splits labels like ``성 명`` unpredictably. This
module rebuilds words and lines with explicit spatial tolerances instead:

- Glyphs close together horizontally on the same baseline merge into a word
- Words whose tops lie within a looser tolerance form one line

Documentation:
- pdfplumber: https://github.com/jsvine/pdfplumber#objects
"""

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_WORD_Y_TOLERANCE = 5.0
DEFAULT_WORD_X_GAP = 5.0
DEFAULT_LINE_Y_TOLERANCE = 10.0


@dataclass(frozen=True)
class PositionedToken:
    """A single glyph (or glyph run) with its page coordinates."""

    text: str
    x0: float
    x1: float
    top: float
    bottom: float
    page: int = 0


@dataclass
class Word:
    """Tokens merged into one word; the bounding box grows as tokens join."""

    text: str
    x0: float
    x1: float
    top: float
    bottom: float
    page: int = 0

    @classmethod
    def from_token(cls, token: PositionedToken) -> "Word":
        return cls(
            text=token.text,
            x0=token.x0,
            x1=token.x1,
            top=token.top,
            bottom=token.bottom,
            page=token.page,
        )

    def absorb(self, token: PositionedToken) -> None:
        """Append a token to this word, extending the bounding box."""
        self.text += token.text
        self.x0 = min(self.x0, token.x0)
        self.x1 = max(self.x1, token.x1)
        self.bottom = max(self.bottom, token.bottom)


@dataclass
class Line:
    """Words sharing a baseline, ordered left to right."""

    words: list[Word] = field(default_factory=list)

    @property
    def text(self) -> str:
        return " ".join(word.text for word in self.words)

    @property
    def top(self) -> float:
        return self.words[0].top if self.words else 0.0


def tokens_from_page(page: Any, page_index: int = 0) -> list[PositionedToken]:
    """Convert pdfplumber page characters into positioned tokens.

    Args:
        page: A ``pdfplumber.page.Page``
        page_index: Zero-based page number stored on each token

    Returns:
        list[PositionedToken]: Non-blank glyphs of the page
    """
    tokens = []
    for char in page.chars:
        text = char.get("text", "")
        if not text or not text.strip():
            continue
        tokens.append(
            PositionedToken(
                text=text,
                x0=float(char["x0"]),
                x1=float(char["x1"]),
                top=float(char["top"]),
                bottom=float(char["bottom"]),
                page=page_index,
            )
        )
    return tokens


def reading_order(
    tokens: Iterable[PositionedToken], y_tolerance: float = DEFAULT_WORD_Y_TOLERANCE
) -> list[PositionedToken]:
    """Order tokens top to bottom in bands, left to right within a band.

    A token stays in the current band while its top is within
    ``y_tolerance`` of the top of the band's first token.
    """
    bands: list[list[PositionedToken]] = []
    for token in sorted(tokens, key=lambda t: t.top):
        if bands and abs(token.top - bands[-1][0].top) < y_tolerance:
            bands[-1].append(token)
        else:
            bands.append([token])
    return [token for band in bands for token in sorted(band, key=lambda t: t.x0)]


def assemble_words(
    tokens: Iterable[PositionedToken],
    y_tolerance: float = DEFAULT_WORD_Y_TOLERANCE,
    x_gap: float = DEFAULT_WORD_X_GAP,
) -> list[Word]:
    """Merge glyphs into words.

    Tokens are visited in reading order (see ``reading_order``). A token joins
    the pending word when its top is within ``y_tolerance`` of the word and
    the horizontal gap from the word's right edge is below ``x_gap``.

    Args:
        tokens: Positioned glyphs of one page
        y_tolerance: Maximum vertical offset inside a word
        x_gap: Maximum horizontal gap inside a word

    Returns:
        list[Word]: Words in reading order
    """
    ordered = reading_order(tokens, y_tolerance)
    words: list[Word] = []
    current: Word | None = None

    for token in ordered:
        if (
            current is not None
            and abs(token.top - current.top) < y_tolerance
            and token.x0 - current.x1 < x_gap
        ):
            current.absorb(token)
            continue
        if current is not None:
            words.append(current)
        current = Word.from_token(token)

    if current is not None:
        words.append(current)
    return words


def group_lines(
    words: Iterable[Word], y_tolerance: float = DEFAULT_LINE_Y_TOLERANCE
) -> list[Line]:
    """Group words into lines by vertical proximity.

    A word joins the current line when its top is within ``y_tolerance`` of
    the last word added to that line.

    Args:
        words: Words of one page
        y_tolerance: Maximum vertical offset between neighbouring words

    Returns:
        list[Line]: Lines top to bottom, words sorted by ``x0``
    """
    lines: list[Line] = []
    pending: list[Word] = []

    for word in sorted(words, key=lambda w: w.top):
        if pending and abs(word.top - pending[-1].top) >= y_tolerance:
            lines.append(Line(sorted(pending, key=lambda w: w.x0)))
            pending = []
        pending.append(word)

    if pending:
        lines.append(Line(sorted(pending, key=lambda w: w.x0)))
    return lines


def page_words(
    page: Any,
    page_index: int = 0,
    y_tolerance: float = DEFAULT_WORD_Y_TOLERANCE,
    x_gap: float = DEFAULT_WORD_X_GAP,
) -> list[Word]:
    """Read a pdfplumber page straight into assembled words."""
    return assemble_words(tokens_from_page(page, page_index), y_tolerance, x_gap)


def lines_text(lines: Sequence[Line]) -> str:
    """Join line texts with newlines."""
    return "\n".join(line.text for line in lines)


def words_text(words: Sequence[Word], separator: str = " ") -> str:
    """Join word texts in the given order."""
    return separator.join(word.text for word in words)
