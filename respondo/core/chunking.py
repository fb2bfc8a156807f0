"""
Word-window chunking for document ingestion.

Splits extracted text into overlapping windows of whitespace-delimited words.
Windows are produced lazily and the sequence can be iterated more than once.

Dependencies: None (pure domain layer)
System role: Chunking stage of the document ingestion pipeline
"""

from collections.abc import Iterator

from respondo.core.exceptions import InvalidConfiguration

DEFAULT_WINDOW_SIZE = 1000
DEFAULT_OVERLAP = 200


class WordChunks:
    """
    Restartable, finite sequence of overlapping word windows.

    Each window holds at most `window_size` words and starts
    `window_size - overlap` words after the previous one. Iteration stops after
    the first window that reaches the end of the text, so the last window may
    be shorter than `window_size` and no window is a pure suffix of the one
    before it.
    """

    def __init__(
        self,
        text: str,
        window_size: int = DEFAULT_WINDOW_SIZE,
        overlap: int = DEFAULT_OVERLAP,
    ) -> None:
        """
        Validate parameters and capture the source text.

        Args:
            text: Source text to split
            window_size: Words per window (>= 1)
            overlap: Words shared by consecutive windows (0 <= overlap < window_size)

        Raises:
            InvalidConfiguration: When the window would not advance
        """
        if window_size < 1:
            raise InvalidConfiguration(
                f"window_size must be at least 1, got {window_size}",
                parameter="window_size",
            )
        if overlap < 0:
            raise InvalidConfiguration(
                f"overlap must not be negative, got {overlap}",
                parameter="overlap",
            )
        if overlap >= window_size:
            raise InvalidConfiguration(
                f"overlap ({overlap}) must be smaller than window_size ({window_size})",
                parameter="overlap",
                details={"window_size": window_size, "overlap": overlap},
            )

        self.window_size = window_size
        self.overlap = overlap
        self._words = text.split()

    @property
    def step(self) -> int:
        return self.window_size - self.overlap

    def __iter__(self) -> Iterator[str]:
        words = self._words
        start = 0
        while start < len(words):
            end = start + self.window_size
            yield " ".join(words[start:end])
            if end >= len(words):
                return
            start += self.step

    def __len__(self) -> int:
        total = len(self._words)
        if total == 0:
            return 0
        if total <= self.window_size:
            return 1
        # ceil((total - window_size) / step) windows after the first
        return 1 + -(-(total - self.window_size) // self.step)


def split_into_chunks(
    text: str,
    window_size: int = DEFAULT_WINDOW_SIZE,
    overlap: int = DEFAULT_OVERLAP,
) -> WordChunks:
    """
    Split text into overlapping word windows.

    Args:
        text: Extracted document text
        window_size: Words per window
        overlap: Words shared between consecutive windows

    Returns:
        WordChunks: Lazy, restartable sequence of chunk texts

    Raises:
        InvalidConfiguration: When overlap >= window_size or window_size < 1
    """
    return WordChunks(text, window_size=window_size, overlap=overlap)
