"""Buffered progress logging for concurrently processed images."""

import logging


def lpad(text: str, width: int) -> str:
    """Pad text on the right to a fixed column width."""
    return text.ljust(width)


def progress_prefix(index: int, total: int) -> str:
    """Column prefix identifying an item, e.g. "[3/10]"."""
    return lpad(f"[{index + 1}/{total}]", 10)


class ItemLog:
    """Collects the progress output of one item and emits it as one record.

    Lines written with ``partial`` are joined on the current line until a
    ``newline`` call; ``flush`` sends everything buffered so far to the logger
    in a single call so that output of concurrent items does not interleave.
    """

    def __init__(self, logger: logging.Logger, level: int = logging.INFO) -> None:
        self.logger = logger
        self.level = level
        self._lines: list[str] = []
        self._current = ""

    def partial(self, text: str) -> "ItemLog":
        self._current += text
        return self

    def newline(self) -> "ItemLog":
        self._lines.append(self._current.rstrip())
        self._current = ""
        return self

    def line(self, text: str) -> "ItemLog":
        return self.partial(text).newline()

    @property
    def pending(self) -> list[str]:
        lines = list(self._lines)
        if self._current:
            lines.append(self._current.rstrip())
        return lines

    def flush(self) -> None:
        lines = self.pending
        self._lines = []
        self._current = ""
        if lines:
            self.logger.log(self.level, "\n".join(lines))
