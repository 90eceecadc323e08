"""Character sources with position tracking and single-step pushback."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections import deque
from pathlib import Path
from types import TracebackType

from drawlang.tokens import SourceLocation


class SourceCursor(ABC):
    """A character stream the scanner pulls from.

    End of input is signalled by the empty string. ``location()`` is the
    position of the next character ``next_char()`` would return.
    """

    def __init__(self, name: str) -> None:
        self.name = name

    @abstractmethod
    def next_char(self) -> str: ...

    @abstractmethod
    def peek_char(self) -> str: ...

    @abstractmethod
    def unget_char(self) -> None:
        """Roll back the most recently consumed character (no-op if none)."""

    @abstractmethod
    def eof(self) -> bool: ...

    @abstractmethod
    def location(self) -> SourceLocation: ...


class StringSource(SourceCursor):
    """In-memory source text."""

    def __init__(self, text: str, name: str = "input.draw") -> None:
        super().__init__(name)
        self._text = text
        self._pos = 0
        self._line = 1
        self._col = 1

    def next_char(self) -> str:
        if self._pos >= len(self._text):
            return ""
        ch = self._text[self._pos]
        self._pos += 1
        if ch == "\n":
            self._line += 1
            self._col = 1
        else:
            self._col += 1
        return ch

    def peek_char(self) -> str:
        if self._pos < len(self._text):
            return self._text[self._pos]
        return ""

    def unget_char(self) -> None:
        if self._pos == 0:
            return
        self._pos -= 1
        if self._text[self._pos] == "\n":
            self._line -= 1
            line_start = self._text.rfind("\n", 0, self._pos) + 1
            self._col = self._pos - line_start + 1
        else:
            self._col -= 1

    def eof(self) -> bool:
        return self._pos >= len(self._text)

    def location(self) -> SourceLocation:
        return SourceLocation(self.name, self._line, self._col, self._pos)


class FileSource(SourceCursor):
    """Buffered file source.

    The file is read ``buffer_size`` characters at a time. Consumed characters
    and the locations they were read from are kept in a bounded history, so
    ``unget_char`` works even when the previous character came from an earlier
    chunk that is no longer buffered.
    """

    def __init__(
        self,
        path: str | Path,
        name: str | None = None,
        *,
        buffer_size: int = 4096,
        history: int = 64,
    ) -> None:
        super().__init__(name if name is not None else str(path))
        if buffer_size < 1:
            raise ValueError("buffer_size must be at least 1")
        # Undecodable bytes become U+FFFD and scan as invalid characters
        self._file = open(path, encoding="utf-8", errors="replace", newline="")
        self._buffer_size = buffer_size
        self._chunk = ""
        self._index = 0
        self._exhausted = False
        # Characters handed back by unget_char, most recent last
        self._pushback: list[str] = []
        self._history: deque[tuple[str, SourceLocation]] = deque(maxlen=history)
        self._loc = SourceLocation(self.name, 1, 1, 0)

    def __enter__(self) -> FileSource:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._file.close()

    def _fill(self) -> bool:
        """Make sure a buffered character is available. Returns False at EOF."""
        if self._index < len(self._chunk):
            return True
        if self._exhausted:
            return False
        self._chunk = self._file.read(self._buffer_size)
        self._index = 0
        if not self._chunk:
            self._exhausted = True
            return False
        return True

    def next_char(self) -> str:
        if self._pushback:
            ch = self._pushback.pop()
        elif self._fill():
            ch = self._chunk[self._index]
            self._index += 1
        else:
            return ""

        self._history.append((ch, self._loc))
        line, col, offset = self._loc.line, self._loc.column, self._loc.offset + 1
        if ch == "\n":
            line += 1
            col = 1
        else:
            col += 1
        self._loc = SourceLocation(self.name, line, col, offset)
        return ch

    def peek_char(self) -> str:
        if self._pushback:
            return self._pushback[-1]
        if self._fill():
            return self._chunk[self._index]
        return ""

    def unget_char(self) -> None:
        if not self._history:
            return
        ch, loc = self._history.pop()
        self._pushback.append(ch)
        self._loc = loc

    def eof(self) -> bool:
        return not self._pushback and not self._fill()

    def location(self) -> SourceLocation:
        return self._loc
