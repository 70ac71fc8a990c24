"""
Diff parser — parses unified diff text (as returned by the LLM) into
file headers and positional hunks.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)

# Patterns
_HUNK_HEADER = re.compile(r"^@@ -(\d+)(?:,(\d+))? \+(\d+)(?:,(\d+))? @@")
_OLD_FILE_PREFIX = "--- "
_NEW_FILE_PREFIX = "+++ "


@dataclass
class DiffHunk:
    """A single ``@@`` block: header positions plus its prefixed lines."""
    old_start: int             # 1-indexed
    old_count: int
    new_start: int
    new_count: int
    lines: list[str] = field(default_factory=list)

    @property
    def added_lines(self) -> list[str]:
        return [l[1:] for l in self.lines if l.startswith("+")]

    @property
    def removed_lines(self) -> list[str]:
        return [l[1:] for l in self.lines if l.startswith("-")]

    @property
    def changed_line_count(self) -> int:
        return sum(1 for l in self.lines if l[:1] in ("+", "-"))


@dataclass
class ParsedDiff:
    """A parsed single-file unified diff."""
    old_file: str
    new_file: str
    hunks: list[DiffHunk] = field(default_factory=list)

    @property
    def changed_line_count(self) -> int:
        return sum(h.changed_line_count for h in self.hunks)


def strip_path_prefix(path: str) -> str:
    """Drop a git-style ``a/`` or ``b/`` prefix and any trailing timestamp."""
    path = path.split("\t", 1)[0].strip()
    if path.startswith("a/") or path.startswith("b/"):
        return path[2:]
    return path


def is_file_header(lines: list[str], idx: int) -> bool:
    """True if ``lines[idx]`` opens a ``--- ``/``+++ `` header pair."""
    return (
        idx + 1 < len(lines)
        and lines[idx].startswith(_OLD_FILE_PREFIX)
        and lines[idx + 1].startswith(_NEW_FILE_PREFIX)
    )


def find_file_headers(text: str) -> list[tuple[str, str]]:
    """Return every ``(old_file, new_file)`` header pair found in *text*."""
    lines = text.split("\n")
    headers: list[tuple[str, str]] = []
    for i in range(len(lines) - 1):
        if is_file_header(lines, i):
            headers.append((
                strip_path_prefix(lines[i][len(_OLD_FILE_PREFIX):]),
                strip_path_prefix(lines[i + 1][len(_NEW_FILE_PREFIX):]),
            ))
    return headers


def parse_diff(text: str) -> ParsedDiff | None:
    """Parse a unified diff.

    Parameters
    ----------
    text:
        Raw diff text. Only the first ``--- ``/``+++ `` section is read;
        rejecting multi-file diffs is the validator's job.

    Returns
    -------
    ParsedDiff | None
        The parsed diff, or None when no header pair or no ``@@`` hunk
        could be found.
    """
    lines = text.replace("\r\n", "\n").split("\n")
    # A final newline is a split artifact, not an empty context line
    if lines and lines[-1] == "":
        lines.pop()

    header_idx = next(
        (i for i in range(len(lines)) if is_file_header(lines, i)), None
    )
    if header_idx is None:
        logger.debug("[SmartPatch] No ---/+++ header pair found")
        return None

    parsed = ParsedDiff(
        old_file=strip_path_prefix(lines[header_idx][len(_OLD_FILE_PREFIX):]),
        new_file=strip_path_prefix(lines[header_idx + 1][len(_NEW_FILE_PREFIX):]),
    )

    current: DiffHunk | None = None
    i = header_idx + 2
    while i < len(lines):
        line = lines[i]
        if is_file_header(lines, i):
            # Start of a second file section
            break

        match = _HUNK_HEADER.match(line)
        if match:
            old_count, new_count = match.group(2), match.group(4)
            current = DiffHunk(
                old_start=int(match.group(1)),
                old_count=int(old_count) if old_count is not None else 1,
                new_start=int(match.group(3)),
                new_count=int(new_count) if new_count is not None else 1,
            )
            parsed.hunks.append(current)
        elif current is not None:
            current.lines.append(line)
        i += 1

    if not parsed.hunks:
        logger.debug(
            "[SmartPatch] Header for %s found but no @@ hunks", parsed.new_file
        )
        return None

    return parsed
