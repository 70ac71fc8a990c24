"""
File operations — reads targets, runs the validator/applier or the smart
merge against them, and writes results back atomically.
"""

from __future__ import annotations

import logging
import os
import shutil
from dataclasses import dataclass

from .diff_applier import apply_diff_to_content
from .diff_parser import parse_diff
from .diff_validator import DiffValidator, Flow, Scope
from .smart_apply import DEFAULT_FUZZY_THRESHOLD, apply_smart_edit_v2

logger = logging.getLogger(__name__)


class PatchApplyError(Exception):
    """Raised when a target cannot be read or written, or input is unsafe."""


@dataclass
class ApplyResult:
    """Outcome of computing new content for one file."""
    file_path: str
    mode: str                      # "diff" or "smart"
    success: bool = False
    original_content: str = ""
    new_content: str = ""
    changed_lines: int = 0
    error: str = ""

    @property
    def changed(self) -> bool:
        return self.success and self.new_content != self.original_content

    def as_metric(self) -> dict:
        return {
            "file": self.file_path,
            "mode": self.mode,
            "success": self.success,
            "changed_lines": self.changed_lines,
            "error": self.error,
        }


def contains_null_bytes(text: str) -> bool:
    return "\0" in text


def read_text(file_path: str, missing_ok: bool = True) -> str:
    """Read *file_path* as UTF-8.

    A missing file reads as empty content when *missing_ok* is set, so
    that diffs and snippets can create new files.
    """
    try:
        with open(file_path, "r", encoding="utf-8", newline="") as f:
            return f.read()
    except FileNotFoundError:
        if missing_ok:
            return ""
        raise PatchApplyError(f"File not found: {file_path}")
    except (OSError, UnicodeDecodeError) as exc:
        raise PatchApplyError(f"Cannot read {file_path}: {exc}") from exc


def safe_write(file_path: str, content: str) -> None:
    """Write *content* atomically via temp file + rename."""
    if contains_null_bytes(content):
        raise PatchApplyError("Content contains null bytes")

    abs_path = os.path.abspath(file_path)
    tmp_path = abs_path + ".smartpatch_tmp"

    try:
        parent = os.path.dirname(abs_path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        with open(tmp_path, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        shutil.move(tmp_path, abs_path)
    except OSError as exc:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise PatchApplyError(f"Write failed for {file_path}: {exc}") from exc


def apply_diff_to_file(
    file_path: str,
    diff_text: str,
    flow: Flow = "chat",
    scope: Scope | None = None,
    validator: DiffValidator | None = None,
) -> ApplyResult:
    """Validate and apply *diff_text* against the current *file_path*.

    Nothing is written; the caller previews and writes via
    :func:`safe_write`.
    """
    if contains_null_bytes(diff_text):
        raise PatchApplyError("Diff contains null bytes")

    result = ApplyResult(file_path=file_path, mode="diff")
    result.original_content = read_text(file_path)

    validation = (validator or DiffValidator()).validate(
        diff_text, flow, file_path, scope
    )
    if not validation.valid:
        result.error = validation.error or "Diff rejected"
        logger.warning("[SmartPatch] Diff for %s rejected: %s", file_path, result.error)
        return result

    new_content = apply_diff_to_content(result.original_content, diff_text)
    if new_content is None:
        result.error = "Failed to apply diff"
        logger.warning("[SmartPatch] Failed to apply diff to %s", file_path)
        return result

    parsed = parse_diff(diff_text)
    result.changed_lines = parsed.changed_line_count if parsed else 0
    result.new_content = new_content
    result.success = True
    logger.info(
        "[SmartPatch] Diff applied to %s (%d changed lines)",
        file_path, result.changed_lines,
    )
    return result


def apply_smart_edit_to_file(
    file_path: str,
    code_edit: str,
    threshold: float = DEFAULT_FUZZY_THRESHOLD,
) -> ApplyResult:
    """Merge a marker snippet into the current *file_path* (not written)."""
    if contains_null_bytes(code_edit):
        raise PatchApplyError("Content contains null bytes")

    result = ApplyResult(file_path=file_path, mode="smart")
    result.original_content = read_text(file_path)
    result.new_content = apply_smart_edit_v2(
        result.original_content, code_edit, threshold
    )

    old_lines = result.original_content.split("\n")
    new_lines = result.new_content.split("\n")
    common = sum(1 for a, b in zip(old_lines, new_lines) if a == b)
    result.changed_lines = max(len(old_lines), len(new_lines)) - common
    result.success = True
    logger.info("[SmartPatch] Smart edit merged into %s", file_path)
    return result
