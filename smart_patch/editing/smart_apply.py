"""
Smart apply — merges an LLM code snippet that elides unchanged regions
with ``// ... existing code ...`` markers back into the real file.

The merge walks the snippet once, keeping a cursor into the existing
lines. Each marker is expanded with the existing lines up to the next
snippet line's best match. It is greedy and never backtracks, so highly
repetitive files can mis-anchor.
"""

from __future__ import annotations

import logging
import re

logger = logging.getLogger(__name__)

DEFAULT_FUZZY_THRESHOLD = 0.7

_EXISTING_CODE_MARKERS = [
    re.compile(r"^\s*//\s*\.\.\.\s*existing\s*code\s*\.\.\..*$", re.IGNORECASE),
    re.compile(r"^\s*#\s*\.\.\.\s*existing\s*code\s*\.\.\..*$", re.IGNORECASE),
    re.compile(r"^\s*/\*\s*\.\.\.\s*existing\s*code\s*\.\.\.\s*\*/.*$", re.IGNORECASE),
    re.compile(r"^\s*<!--\s*\.\.\.\s*existing\s*code\s*\.\.\.\s*-->.*$", re.IGNORECASE),
    re.compile(r"^\s*\.\.\.\s*existing\s*code\s*\.\.\..*$", re.IGNORECASE),
]


def is_existing_code_marker(line: str) -> bool:
    return any(p.match(line) for p in _EXISTING_CODE_MARKERS)


def contains_markers(text: str) -> bool:
    return any(is_existing_code_marker(line) for line in text.split("\n"))


def strip_markers(text: str) -> str:
    """Remove every marker line from *text*."""
    return "\n".join(
        line for line in text.split("\n") if not is_existing_code_marker(line)
    )


def similarity(a: str, b: str) -> float:
    """Score two lines between 0 and 1, ignoring surrounding whitespace."""
    a_norm, b_norm = a.strip(), b.strip()

    if a_norm == b_norm:
        return 1.0
    if not a_norm or not b_norm:
        return 0.0
    if a_norm in b_norm or b_norm in a_norm:
        return 0.9

    # Positional character overlap
    matches = sum(1 for x, y in zip(a_norm, b_norm) if x == y)
    return matches / max(len(a_norm), len(b_norm))


def find_matching_line_index(
    existing_lines: list[str],
    target_line: str,
    start_from: int = 0,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> int:
    """Index of the line in *existing_lines* best matching *target_line*.

    Only lines at or after *start_from* are considered. An exact match
    (after stripping) wins; otherwise the highest similarity strictly
    above *threshold*, earliest on ties. Returns -1 when nothing
    qualifies or *target_line* is blank.
    """
    target_norm = target_line.strip()
    if not target_norm:
        return -1

    for i in range(start_from, len(existing_lines)):
        if existing_lines[i].strip() == target_norm:
            return i

    best_match = -1
    best_sim = threshold
    for i in range(start_from, len(existing_lines)):
        sim = similarity(existing_lines[i], target_line)
        if sim > best_sim:
            best_sim = sim
            best_match = i

    return best_match


def _merge(
    existing_content: str,
    code_edit: str,
    threshold: float,
) -> str:
    if not contains_markers(code_edit):
        # No markers: the snippet is the whole file
        return code_edit

    if not existing_content.strip():
        return strip_markers(code_edit)

    existing_lines = existing_content.split("\n")
    edit_lines = code_edit.split("\n")
    result: list[str] = []

    existing_idx = 0
    edit_idx = 0

    while edit_idx < len(edit_lines):
        edit_line = edit_lines[edit_idx]

        if not is_existing_code_marker(edit_line):
            result.append(edit_line)
            match_idx = find_matching_line_index(
                existing_lines, edit_line, existing_idx, threshold
            )
            if match_idx >= 0:
                existing_idx = match_idx + 1
            edit_idx += 1
            continue

        # Collapse consecutive markers
        next_idx = edit_idx + 1
        while next_idx < len(edit_lines) and is_existing_code_marker(edit_lines[next_idx]):
            next_idx += 1

        if next_idx >= len(edit_lines):
            stop = len(existing_lines)
        else:
            anchor = edit_lines[next_idx]
            match_idx = find_matching_line_index(
                existing_lines, anchor, existing_idx, threshold
            )
            if match_idx >= 0:
                stop = match_idx
            else:
                logger.debug(
                    "[SmartPatch] No anchor match for %r, keeping rest of file",
                    anchor.strip(),
                )
                stop = len(existing_lines)

        result.extend(existing_lines[existing_idx:stop])
        existing_idx = stop
        edit_idx = next_idx

    return "\n".join(result)


def apply_smart_edit(
    existing_content: str,
    code_edit: str,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> str:
    """Merge *code_edit* (with ``... existing code ...`` markers) into
    *existing_content*.

    A snippet without markers replaces the file wholesale. Markers in a
    snippet for an empty file are dropped. This never fails: an anchor
    that cannot be found keeps the rest of the existing file.
    """
    return _merge(existing_content or "", code_edit, threshold)


def apply_smart_edit_v2(
    existing_content: str,
    code_edit: str,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> str:
    """Alias of :func:`apply_smart_edit` kept for callers of the v2 name."""
    return _merge(existing_content or "", code_edit, threshold)
