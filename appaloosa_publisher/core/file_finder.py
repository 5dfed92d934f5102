"""ANT-style file discovery under an artifact root.

Patterns follow the ANT ``fileset`` conventions:

- ``*`` matches zero or more characters inside one path segment
- ``?`` matches exactly one character inside one path segment
- ``**`` matches zero or more whole segments
- a pattern ending with ``/`` matches everything below that directory

Several patterns can be combined in one string, separated by commas or
newlines. Matching is case-sensitive and anchored at the root.
"""

import os
import re
from functools import lru_cache
from pathlib import Path

from appaloosa_publisher.utils.logging import get_logger

logger = get_logger(__name__)

PATTERN_SEPARATORS = re.compile(r"[,\n]")

# ANT DirectoryScanner default excludes
DEFAULT_EXCLUDES = (
    "**/*~",
    "**/#*#",
    "**/.#*",
    "**/%*%",
    "**/._*",
    "**/CVS",
    "**/CVS/**",
    "**/.cvsignore",
    "**/SCCS",
    "**/SCCS/**",
    "**/vssver.scc",
    "**/.svn",
    "**/.svn/**",
    "**/.DS_Store",
    "**/.git",
    "**/.git/**",
    "**/.gitattributes",
    "**/.gitignore",
    "**/.gitmodules",
    "**/.hg",
    "**/.hg/**",
    "**/.hgignore",
    "**/.hgsub",
    "**/.hgsubstate",
    "**/.hgtags",
    "**/.bzr",
    "**/.bzr/**",
    "**/.bzrignore",
)


def split_patterns(pattern: str) -> list[str]:
    """Split a multi-pattern string into normalized sub-patterns."""
    patterns = []
    for token in PATTERN_SEPARATORS.split(pattern):
        token = token.strip().replace("\\", "/")
        if not token:
            continue
        if token.endswith("/"):
            token += "**"
        patterns.append(token)
    return patterns


@lru_cache(maxsize=256)
def _segment_regex(segment: str) -> re.Pattern[str]:
    parts = []
    for char in segment:
        if char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def _match_segments(pattern: list[str], path: list[str]) -> bool:
    if not pattern:
        return not path

    head = pattern[0]
    if head == "**":
        rest = pattern[1:]
        # collapse consecutive "**"
        while rest and rest[0] == "**":
            rest = rest[1:]
        if not rest:
            return True
        return any(
            _match_segments(rest, path[index:]) for index in range(len(path) + 1)
        )

    if not path:
        return False
    if not _segment_regex(head).fullmatch(path[0]):
        return False
    return _match_segments(pattern[1:], path[1:])


def match_path(pattern: str, path: str) -> bool:
    """Check a ``/``-separated relative path against one ANT pattern."""
    pattern_segments = [s for s in pattern.strip("/").split("/") if s]
    path_segments = [s for s in path.strip("/").split("/") if s]
    return _match_segments(pattern_segments, path_segments)


class FileFinder:
    """Finds files under a root directory matching an ANT pattern."""

    def __init__(self, pattern: str, default_excludes: bool = True):
        self.pattern = pattern
        self.includes = split_patterns(pattern)
        self.excludes = list(DEFAULT_EXCLUDES) if default_excludes else []

    def matches(self, relative_path: str) -> bool:
        """Check whether a relative path is included and not excluded."""
        if not any(match_path(p, relative_path) for p in self.includes):
            return False
        return not any(match_path(p, relative_path) for p in self.excludes)

    def find(self, root: str | Path) -> list[str]:
        """Return sorted relative paths of matching files under ``root``.

        A missing root has no matches.
        """
        root = Path(root)
        if not root.is_dir():
            logger.debug("file_finder.missing_root", root=str(root))
            return []
        if not self.includes:
            return []

        found = []
        for dirpath, _dirnames, filenames in os.walk(root):
            for filename in filenames:
                absolute = Path(dirpath) / filename
                relative = absolute.relative_to(root).as_posix()
                if absolute.is_file() and self.matches(relative):
                    found.append(relative)

        found.sort()
        logger.debug(
            "file_finder.scanned",
            root=str(root),
            pattern=self.pattern,
            matches=len(found),
        )
        return found
