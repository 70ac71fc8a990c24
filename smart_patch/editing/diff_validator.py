"""
Diff validator — acceptance policy for LLM-produced unified diffs.

Checks run in a fixed order and the first failure wins, so every
rejection carries one stable message.
"""

from __future__ import annotations

import logging
import ntpath
import re
from dataclasses import dataclass
from typing import Literal, Optional

from .diff_parser import ParsedDiff, find_file_headers, parse_diff

logger = logging.getLogger(__name__)

Flow = Literal["chat", "codelens"]

DEFAULT_MAX_CHANGED_LINES = 400

_BINARY_FILES = re.compile(r"Binary files .* differ")
_GIT_BINARY_PATCH = "GIT binary patch"
_DEV_NULL = "/dev/null"


@dataclass(frozen=True)
class Scope:
    """0-indexed, inclusive line range the edit must stay within."""
    start_line: int
    end_line: int


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    error: Optional[str] = None


def _basename(path: str) -> str:
    # ntpath splits on both separators
    return ntpath.basename(path)


def paths_match(diff_path: str, target_path: str) -> bool:
    """True if the diff's file names the same file as *target_path*.

    Exact equality, or the same base filename. Two directories sharing a
    filename therefore both match.
    """
    if diff_path == target_path:
        return True
    return bool(diff_path) and _basename(diff_path) == _basename(target_path)


class DiffValidator:
    """Enforce the acceptance policy before a diff is applied."""

    def __init__(self, max_changed_lines: int = DEFAULT_MAX_CHANGED_LINES) -> None:
        self._max_changed_lines = max_changed_lines

    def validate(
        self,
        diff_text: str,
        flow: Flow,
        target_path: str,
        scope: Scope | None = None,
    ) -> ValidationResult:
        """Validate *diff_text* for the given flow and target.

        Parameters
        ----------
        diff_text:
            Raw unified diff.
        flow:
            ``"chat"`` checks the target file; ``"codelens"`` checks the
            hunks against *scope*.
        target_path:
            The active file (chat flow). Bare names and absolute paths
            are both accepted.
        scope:
            Selection or symbol range (codelens flow).

        Returns
        -------
        ValidationResult
            Never raises.
        """
        try:
            result = self._check(diff_text, flow, target_path, scope)
        except Exception as exc:
            logger.warning("[SmartPatch] Unexpected error validating diff: %s", exc)
            result = ValidationResult(valid=False, error=f"Diff validation failed: {exc}")

        if not result.valid:
            logger.debug("[SmartPatch] Diff rejected: %s", result.error)
        return result

    # ------------------------------------------------------------------
    # Ordered checks
    # ------------------------------------------------------------------

    def _check(
        self,
        diff_text: str,
        flow: Flow,
        target_path: str,
        scope: Scope | None,
    ) -> ValidationResult:
        if not diff_text or not diff_text.strip():
            return ValidationResult(valid=False, error="Empty diff received")

        # Binary markers do not follow the hunk grammar, so check them first
        if _BINARY_FILES.search(diff_text) or _GIT_BINARY_PATCH in diff_text:
            return ValidationResult(
                valid=False, error="Binary patches are not supported"
            )

        parsed = parse_diff(diff_text)
        if parsed is None:
            return ValidationResult(valid=False, error="Failed to parse unified diff")

        headers = set(find_file_headers(diff_text))
        if len(headers) > 1:
            return ValidationResult(
                valid=False,
                error=f"Diff must touch exactly one file (found {len(headers)})",
            )

        if flow == "chat":
            error = self._check_target(parsed, target_path)
            if error:
                return ValidationResult(valid=False, error=error)

        if flow == "codelens" and scope is not None:
            error = self._check_scope(parsed, scope)
            if error:
                return ValidationResult(valid=False, error=error)

        changed = parsed.changed_line_count
        if changed > self._max_changed_lines:
            return ValidationResult(
                valid=False,
                error=(
                    f"Diff changes {changed} lines, exceeds limit of "
                    f"{self._max_changed_lines}"
                ),
            )

        return ValidationResult(valid=True)

    @staticmethod
    def _check_target(parsed: ParsedDiff, target_path: str) -> str | None:
        diff_file = parsed.new_file
        if diff_file == _DEV_NULL:
            # Deletions name the file on the old side only
            diff_file = parsed.old_file
        if paths_match(diff_file, target_path):
            return None
        return f"Diff file '{diff_file}' does not match active file '{target_path}'"

    @staticmethod
    def _check_scope(parsed: ParsedDiff, scope: Scope) -> str | None:
        for hunk in parsed.hunks:
            hunk_start = max(hunk.old_start - 1, 0)
            hunk_end = hunk_start + max(hunk.old_count, 1) - 1
            if hunk_start < scope.start_line or hunk_end > scope.end_line:
                return (
                    f"Hunk at line {hunk.old_start} is outside the scope range "
                    f"({scope.start_line}-{scope.end_line})"
                )
        return None


def validate_diff(
    diff_text: str,
    flow: Flow,
    target_path: str,
    scope: Scope | None = None,
    max_changed_lines: int = DEFAULT_MAX_CHANGED_LINES,
) -> ValidationResult:
    """Validate *diff_text* with a one-off :class:`DiffValidator`."""
    return DiffValidator(max_changed_lines).validate(
        diff_text, flow, target_path, scope
    )
