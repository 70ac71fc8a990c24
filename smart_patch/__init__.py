"""
smart_patch — patch engine for LLM-generated code edits.

Public API for library usage::

    from smart_patch import validate_diff, apply_diff_to_content

    result = validate_diff(diff_text, "chat", "src/app.py")
    if result.valid:
        new_content = apply_diff_to_content(original, diff_text)
"""

from .editing import (
    parse_diff, apply_diff_to_content, validate_diff, ValidationResult,
    Scope, apply_smart_edit, apply_smart_edit_v2,
)

__all__ = [
    "parse_diff", "apply_diff_to_content", "validate_diff",
    "ValidationResult", "Scope", "apply_smart_edit", "apply_smart_edit_v2",
]
