"""Line-oriented matching for configuration files."""

from __future__ import annotations

import re
from typing import Iterable


def is_comment_or_blank(line: str, comment_prefix: str = "#") -> bool:
    stripped = line.strip()
    return not stripped or stripped.startswith(comment_prefix)


def normalize(text: str) -> str:
    """Collapse runs of whitespace so spacing differences don't matter."""
    return " ".join(text.split())


class LineMatcher:
    """Match lines of a configuration file.

    Two modes are supported:

    - exact: the whitespace-normalised line must equal ``text`` (or contain it
      when ``substring`` is set)
    - regex: ``re.search`` against the left-stripped line, or ``re.match``
      when ``anchored`` is set

    Comment and blank lines are skipped unless ``ignore_comments`` is False.
    """

    def __init__(self, text: str | None = None, pattern: str | None = None,
                 anchored: bool = True, substring: bool = False,
                 ignore_comments: bool = True, comment_prefix: str = "#",
                 flags: int = 0) -> None:
        if (text is None) == (pattern is None):
            raise ValueError("LineMatcher needs exactly one of text or pattern")
        self.text = text
        self.pattern = pattern
        self.anchored = anchored
        self.substring = substring
        self.ignore_comments = ignore_comments
        self.comment_prefix = comment_prefix
        self._regex = re.compile(pattern, flags) if pattern is not None else None
        self._normalized = normalize(text) if text is not None else ""

    @classmethod
    def exact(cls, text: str, **kwargs) -> LineMatcher:
        return cls(text=text, **kwargs)

    @classmethod
    def regex(cls, pattern: str, **kwargs) -> LineMatcher:
        return cls(pattern=pattern, **kwargs)

    @property
    def description(self) -> str:
        return self.text if self.text is not None else f"/{self.pattern}/"

    def matches(self, line: str) -> bool:
        if self.ignore_comments and is_comment_or_blank(line, self.comment_prefix):
            return False
        candidate = line.strip()
        if self._regex is not None:
            if self.anchored:
                return self._regex.match(candidate) is not None
            return self._regex.search(candidate) is not None
        if self.substring:
            return self._normalized in normalize(candidate)
        return normalize(candidate) == self._normalized

    def search(self, lines: Iterable[str]) -> list[tuple[int, str]]:
        """Return (line_number, text) pairs for matching lines, 1-based."""
        return [
            (i, line.rstrip("\n"))
            for i, line in enumerate(lines, 1)
            if self.matches(line)
        ]

    def __repr__(self) -> str:
        return f"LineMatcher({self.description!r})"
