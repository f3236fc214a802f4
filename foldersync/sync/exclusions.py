"""Regular-expression exclusion patterns for sync runs.

Patterns are searched (not fully matched) in the complete path of each file
and directory visited. A directory that matches is skipped together with
everything below it.

Exclusion lists are plain text, one pattern per line. Lines starting with
``;`` or ``#`` are comments.

Examples:
    >>> matcher = ExclusionMatcher()
    >>> matcher.add(r".*\\.tmp$")
    >>> matcher.matches("/data/report.tmp")
    True
    >>> matcher.matches("/data/report.txt")
    False
"""

import logging
import re
from pathlib import Path
from typing import Iterable, Iterator, Union

from ..exceptions import ExclusionPatternError

logger = logging.getLogger(__name__)

COMMENT_PREFIXES = (";", "#")


class ExclusionMatcher:
    """Ordered set of regular expressions deciding which paths to skip."""

    def __init__(self, patterns: Iterable[str] = ()):
        """Initialize the matcher.

        Args:
            patterns: Initial patterns

        Raises:
            ExclusionPatternError: If a pattern is not a valid regex
        """
        self._patterns: list[str] = []
        self._compiled: dict[str, re.Pattern[str]] = {}
        self.add_from_list(patterns)

    @property
    def patterns(self) -> tuple[str, ...]:
        """Registered patterns in insertion order."""
        return tuple(self._patterns)

    def __len__(self) -> int:
        return len(self._patterns)

    def __iter__(self) -> Iterator[str]:
        return iter(tuple(self._patterns))

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._compiled

    def __repr__(self) -> str:
        return f"ExclusionMatcher({self._patterns!r})"

    def add(self, pattern: str) -> None:
        """Register a pattern. Empty strings and duplicates are ignored.

        Raises:
            ExclusionPatternError: If the pattern is not a valid regex
        """
        if not pattern or pattern in self._compiled:
            return
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise ExclusionPatternError(pattern, str(e)) from e
        self._patterns.append(pattern)
        self._compiled[pattern] = compiled
        logger.debug(f"Added exclusion pattern: {pattern}")

    def add_from_list(self, patterns: Iterable[str]) -> None:
        """Register several patterns."""
        for pattern in patterns:
            self.add(pattern)

    def add_from_source(self, lines: Iterable[str]) -> None:
        """Register patterns from the lines of an exclusion list.

        Line endings are stripped; blank lines and comment lines are skipped.
        """
        for line in lines:
            line = line.rstrip("\r\n")
            if not line.strip() or line.startswith(COMMENT_PREFIXES):
                continue
            self.add(line)

    def remove(self, pattern: str) -> bool:
        """Remove a pattern.

        Returns:
            True if the pattern was registered
        """
        if pattern not in self._compiled:
            return False
        self._patterns.remove(pattern)
        del self._compiled[pattern]
        return True

    def remove_all(self, patterns: Iterable[str]) -> None:
        """Remove several patterns; unknown patterns are ignored."""
        for pattern in patterns:
            self.remove(pattern)

    def clear(self) -> None:
        """Remove every pattern."""
        self._patterns.clear()
        self._compiled.clear()

    def matches(self, path: Union[str, Path]) -> bool:
        """Check whether any pattern is found in the given path."""
        path_str = str(path)
        return any(regex.search(path_str) for regex in self._compiled.values())


def read_exclusion_file(path: Path) -> list[str]:
    """Read the lines of an exclusion list file.

    Comments are not filtered here; pass the result to
    ExclusionMatcher.add_from_source.

    Args:
        path: Path to a UTF-8 text file

    Returns:
        Lines of the file, or an empty list if it does not exist
    """
    if not path.is_file():
        logger.debug(f"No exclusion file at {path}")
        return []
    with open(path, encoding="utf-8") as f:
        return f.read().splitlines()


def write_exclusion_file(path: Path, patterns: Iterable[str]) -> None:
    """Write patterns to a file, one per line."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        for pattern in patterns:
            f.write(f"{pattern}\n")
