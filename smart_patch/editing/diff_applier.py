"""
Diff applier — applies a parsed unified diff to in-memory content.

Hunks are applied positionally from their ``@@`` headers; context lines
are copied from the original rather than checked against it.
"""

from __future__ import annotations

import logging

from .diff_parser import DiffHunk, parse_diff

logger = logging.getLogger(__name__)


def _hunk_offset(hunk: DiffHunk) -> int:
    """0-indexed position in the original where *hunk* starts consuming."""
    if hunk.old_count == 0:
        # Pure insertion: old_start names the line the insertion follows
        return hunk.old_start
    return max(hunk.old_start - 1, 0)


def _apply_hunk(
    original: list[str],
    cursor: int,
    hunk: DiffHunk,
    output: list[str],
) -> int:
    """Emit *hunk* into *output*, returning the advanced cursor."""
    for line in hunk.lines:
        prefix, body = line[:1], line[1:]
        if prefix == "+":
            output.append(body)
        elif prefix == "-":
            cursor += 1
        elif prefix == " " or line == "":
            if cursor < len(original):
                output.append(original[cursor])
            cursor += 1
        # "\ No newline at end of file" and other noise is skipped
    return cursor


def apply_diff_to_content(original: str, diff_text: str) -> str | None:
    """Apply *diff_text* to *original* and return the new content.

    Parameters
    ----------
    original:
        Current file content. Empty content is treated as a file with
        no lines.
    diff_text:
        Single-file unified diff.

    Returns
    -------
    str | None
        The patched content joined with ``\\n``, or None if the diff
        could not be parsed.
    """
    try:
        parsed = parse_diff(diff_text)
        if parsed is None:
            return None

        original_lines = original.split("\n") if original else []
        output: list[str] = []
        cursor = 0

        for hunk in parsed.hunks:
            target = min(_hunk_offset(hunk), len(original_lines))
            if target > cursor:
                output.extend(original_lines[cursor:target])
                cursor = target
            cursor = _apply_hunk(original_lines, cursor, hunk, output)

        if cursor < len(original_lines):
            output.extend(original_lines[cursor:])

        return "\n".join(output)
    except Exception as exc:
        logger.warning("[SmartPatch] Unexpected error applying diff: %s", exc)
        return None
