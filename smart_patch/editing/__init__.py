"""Patch engine — unified-diff parsing, validation and application, plus
marker-based merging of partial code edits."""

from .diff_parser import parse_diff, ParsedDiff, DiffHunk
from .diff_applier import apply_diff_to_content
from .diff_validator import (
    DiffValidator, validate_diff, ValidationResult, Scope, Flow,
)
from .smart_apply import (
    apply_smart_edit, apply_smart_edit_v2, find_matching_line_index,
    is_existing_code_marker,
)
from .file_ops import (
    ApplyResult, PatchApplyError, apply_diff_to_file,
    apply_smart_edit_to_file, safe_write,
)
from .metrics import log_edit_metric, read_edit_stats

__all__ = [
    "parse_diff", "ParsedDiff", "DiffHunk",
    "apply_diff_to_content",
    "DiffValidator", "validate_diff", "ValidationResult", "Scope", "Flow",
    "apply_smart_edit", "apply_smart_edit_v2", "find_matching_line_index",
    "is_existing_code_marker",
    "ApplyResult", "PatchApplyError", "apply_diff_to_file",
    "apply_smart_edit_to_file", "safe_write",
    "log_edit_metric", "read_edit_stats",
]
