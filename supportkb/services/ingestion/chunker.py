"""Recursive text chunking with overlapping windows.

Splits document text into segments of at most ``chunk_size`` characters
for embedding.  Boundaries are chosen hierarchically:

1. **Paragraphs** (blank-line breaks) so chunks rarely start mid-thought.
2. **Sentences**, using an abbreviation-aware splitter that does not break
   on "Dr.", "vs.", etc.
3. **Words** (any whitespace run).
4. **Characters**, as a last resort for unbroken runs.

A coarser boundary is only abandoned for a piece that does not fit in one
chunk on its own.  Consecutive chunks share up to ``overlap`` characters of
trailing context so a concept spanning a boundary stays retrievable.  The
shared tail is made of whole trailing pieces when they fit; otherwise it
starts at the first word boundary within ``overlap`` characters of the
previous chunk's end.

Each piece keeps its trailing separator, so every span is an exact slice
of the input: the spans, with overlap regions removed, concatenate back
to the original text.  :meth:`TextChunker.split` skips spans that are
whitespace only (e.g. inside a long run of blank lines), so only those
characters can be missing from its output.
"""

from __future__ import annotations

import re
from collections import deque
from collections.abc import Iterator

# Common abbreviations that should NOT trigger a sentence split.
_ABBREVIATIONS = frozenset(
    {
        "Dr",
        "Mr",
        "Mrs",
        "Ms",
        "Prof",
        "Jr",
        "Sr",
        "St",
        "Ave",
        "No",
        "vs",
        "etc",
        "approx",
        "dept",
        "est",
        "inc",
        "ltd",
        "co",
        "e.g",
        "i.e",
    }
)

_ABBREVIATION_RE = re.compile(
    r"\b(" + "|".join(re.escape(a) for a in sorted(_ABBREVIATIONS)) + r")\."
)

# Separator patterns, coarsest first.  None means single characters.
_SEPARATORS: tuple[re.Pattern[str] | None, ...] = (
    re.compile(r"\n\s*\n"),
    re.compile(r"[.!?]+\s+"),
    re.compile(r"\s+"),
    None,
)

Span = tuple[int, int]


class TextChunker:
    """Splits text into overlapping chunks of bounded character length.

    Parameters
    ----------
    chunk_size:
        Maximum characters per chunk (default 500).
    overlap:
        Maximum characters shared by consecutive chunks (default 50).
        Must be smaller than *chunk_size*.
    """

    def __init__(self, chunk_size: int = 500, overlap: int = 50) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        if overlap < 0 or overlap >= chunk_size:
            raise ValueError(
                f"overlap must be in [0, chunk_size), got {overlap} for chunk_size {chunk_size}"
            )
        self._chunk_size = chunk_size
        self._overlap = overlap

    @property
    def chunk_size(self) -> int:
        return self._chunk_size

    @property
    def overlap(self) -> int:
        return self._overlap

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def split(self, text: str) -> Iterator[str]:
        """Yield the chunks of *text* in order.

        The generator is lazy; calling :meth:`split` again on the same text
        yields the same chunks.  Blank text yields nothing, and text no
        longer than ``chunk_size`` yields itself as the only chunk.
        """
        for start, end in self.spans(text):
            chunk = text[start:end]
            if chunk.strip():
                yield chunk

    def spans(self, text: str) -> Iterator[Span]:
        """Yield ``(start, end)`` offsets of each chunk within *text*."""
        if not text or not text.strip():
            return
        if len(text) <= self._chunk_size:
            yield 0, len(text)
            return

        masked = _ABBREVIATION_RE.sub(lambda m: m.group(1) + "\x00", text)
        yield from self._merge(masked, self._fitting_pieces(masked, 0, len(text), 0))

    # ------------------------------------------------------------------
    # Recursive splitting
    # ------------------------------------------------------------------

    def _fitting_pieces(self, masked: str, start: int, end: int, level: int) -> Iterator[Span]:
        """Yield pieces of ``masked[start:end]`` no longer than ``chunk_size``.

        Pieces too long at *level* are split again at the next level.
        """
        for piece_start, piece_end in self._pieces(masked, start, end, level):
            if piece_end - piece_start > self._chunk_size:
                yield from self._fitting_pieces(masked, piece_start, piece_end, level + 1)
            else:
                yield piece_start, piece_end

    def _merge(self, masked: str, pieces: Iterator[Span]) -> Iterator[Span]:
        """Pack consecutive pieces into overlapping chunks."""
        window: deque[Span] = deque()
        total = 0

        for piece_start, piece_end in pieces:
            length = piece_end - piece_start

            if window and total + length > self._chunk_size:
                chunk_start, chunk_end = window[0][0], window[-1][1]
                yield chunk_start, chunk_end
                # Keep a tail of at most `overlap` chars that leaves room for the piece.
                while window and (total > self._overlap or total + length > self._chunk_size):
                    dropped_start, dropped_end = window.popleft()
                    total -= dropped_end - dropped_start
                if not window:
                    tail_start = self._tail_start(masked, chunk_start, chunk_end, length)
                    if tail_start is not None:
                        window.append((tail_start, chunk_end))
                        total = chunk_end - tail_start

            window.append((piece_start, piece_end))
            total += length

        if window:
            yield window[0][0], window[-1][1]

    def _tail_start(
        self, masked: str, chunk_start: int, chunk_end: int, next_length: int
    ) -> int | None:
        """Return the first word start in the last ``overlap`` chars of a chunk.

        The tail must also leave room for the next piece.  ``None`` when no
        word starts in that range.
        """
        lower = max(
            chunk_start + 1,
            chunk_end - self._overlap,
            chunk_end + next_length - self._chunk_size,
        )
        for position in range(lower, chunk_end):
            if masked[position - 1].isspace() and not masked[position].isspace():
                return position
        return None

    @staticmethod
    def _pieces(masked: str, start: int, end: int, level: int) -> list[Span]:
        """Cut ``masked[start:end]`` after every separator match at *level*."""
        separator = _SEPARATORS[level]
        if separator is None:
            return [(i, i + 1) for i in range(start, end)]

        pieces: list[Span] = []
        last = start
        for match in separator.finditer(masked, start, end):
            pieces.append((last, match.end()))
            last = match.end()
        if last < end:
            pieces.append((last, end))
        return pieces
