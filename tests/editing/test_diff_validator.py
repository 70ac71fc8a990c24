"""Tests for the diff acceptance policy."""

import pytest

from smart_patch.editing.diff_validator import (
    DiffValidator, Scope, ValidationResult, paths_match, validate_diff,
)


VALID_DIFF = """\
--- a/test.ts
+++ b/test.ts
@@ -1,3 +1,3 @@
 const x = 1;
-const y = 2;
+const y = 3;
 const z = 3;"""

DIFF_AT_LINE_10 = """\
--- a/test.ts
+++ b/test.ts
@@ -10,3 +10,3 @@
 const x = 1;
-const y = 2;
+const y = 3;
 const z = 3;"""

MULTI_FILE_DIFF = """\
--- a/file1.ts
+++ b/file1.ts
@@ -1 +1 @@
-old
+new
--- a/file2.ts
+++ b/file2.ts
@@ -1 +1 @@
-old
+new"""


def _sized_diff(changed: int) -> str:
    header = f"--- a/test.ts\n+++ b/test.ts\n@@ -1,{changed} +1,{changed} @@\n"
    return header + "".join(f"-line {i}\n" for i in range(changed))


class TestChatFlow:
    def test_valid_diff(self):
        result = validate_diff(VALID_DIFF, "chat", "test.ts")

        assert result.valid is True
        assert result.error is None

    def test_wrong_file(self):
        result = validate_diff(VALID_DIFF, "chat", "other.ts")

        assert result.valid is False
        assert "does not match active file" in result.error

    def test_absolute_target_path(self):
        assert validate_diff(VALID_DIFF, "chat", "/path/to/test.ts").valid is True

    def test_windows_target_path(self):
        assert validate_diff(VALID_DIFF, "chat", r"C:\work\src\test.ts").valid is True

    def test_same_filename_in_other_directory_is_accepted(self):
        diff = VALID_DIFF.replace("a/test.ts", "a/src/test.ts").replace("b/test.ts", "b/src/test.ts")

        assert validate_diff(diff, "chat", "/repo/lib/test.ts").valid is True

    def test_deletion_diff_matches_old_side(self):
        diff = "--- a/test.ts\n+++ /dev/null\n@@ -1 +0,0 @@\n-gone"

        assert validate_diff(diff, "chat", "test.ts").valid is True

    def test_codelens_flow_skips_target_check(self):
        assert validate_diff(VALID_DIFF, "codelens", "other.ts").valid is True


class TestCodelensFlow:
    def test_inside_scope(self):
        result = validate_diff(VALID_DIFF, "codelens", "test.ts", Scope(0, 3))

        assert result.valid is True

    def test_outside_scope(self):
        result = validate_diff(DIFF_AT_LINE_10, "codelens", "test.ts", Scope(0, 5))

        assert result.valid is False
        assert "outside the scope range" in result.error

    def test_hunk_ending_past_scope(self):
        # Original range is lines 0-2, scope ends at 1
        result = validate_diff(VALID_DIFF, "codelens", "test.ts", Scope(0, 1))

        assert result.valid is False
        assert "outside the scope range" in result.error

    def test_hunk_starting_before_scope(self):
        result = validate_diff(DIFF_AT_LINE_10, "codelens", "test.ts", Scope(10, 20))

        assert result.valid is False

    def test_exact_scope_boundaries(self):
        assert validate_diff(DIFF_AT_LINE_10, "codelens", "test.ts", Scope(9, 11)).valid is True

    def test_no_scope_skips_check(self):
        assert validate_diff(DIFF_AT_LINE_10, "codelens", "test.ts").valid is True

    def test_chat_flow_ignores_scope(self):
        assert validate_diff(DIFF_AT_LINE_10, "chat", "test.ts", Scope(0, 5)).valid is True


class TestRejections:
    @pytest.mark.parametrize("text", ["", "   \n  "])
    def test_empty(self, text):
        result = validate_diff(text, "chat", "test.ts")

        assert result == ValidationResult(valid=False, error="Empty diff received")

    def test_unparseable(self):
        result = validate_diff("not a valid diff", "chat", "test.ts")

        assert result.valid is False
        assert result.error == "Failed to parse unified diff"

    def test_multiple_files(self):
        result = validate_diff(MULTI_FILE_DIFF, "chat", "file1.ts")

        assert result.valid is False
        assert "Diff must touch exactly one file" in result.error

    def test_binary_files_differ(self):
        diff = "--- a/test.png\n+++ b/test.png\nBinary files a/test.png and b/test.png differ"
        result = validate_diff(diff, "chat", "test.png")

        assert result.valid is False
        assert result.error == "Binary patches are not supported"

    def test_git_binary_patch(self):
        diff = "--- a/test.png\n+++ b/test.png\nGIT binary patch\nliteral 1234"
        result = validate_diff(diff, "chat", "test.png")

        assert result.error == "Binary patches are not supported"

    def test_binary_checked_before_parsing(self):
        result = validate_diff("Binary files a/x and b/x differ", "chat", "x")

        assert result.error == "Binary patches are not supported"


class TestSizeLimit:
    def test_exactly_400_changed_lines_is_valid(self):
        assert validate_diff(_sized_diff(400), "chat", "test.ts").valid is True

    def test_401_changed_lines_is_rejected(self):
        result = validate_diff(_sized_diff(401), "chat", "test.ts")

        assert result.valid is False
        assert "exceeds limit of 400" in result.error

    def test_context_lines_do_not_count(self):
        diff = _sized_diff(400) + "".join(f" ctx {i}\n" for i in range(50))

        assert validate_diff(diff, "chat", "test.ts").valid is True

    def test_custom_limit(self):
        validator = DiffValidator(max_changed_lines=2)
        result = validator.validate(VALID_DIFF, "chat", "test.ts")

        assert result.valid is True
        result = validator.validate(_sized_diff(3), "chat", "test.ts")
        assert "exceeds limit of 2" in result.error


class TestOrdering:
    def test_multi_file_reported_before_target_mismatch(self):
        result = validate_diff(MULTI_FILE_DIFF, "chat", "other.ts")

        assert "Diff must touch exactly one file" in result.error

    def test_target_mismatch_reported_before_size(self):
        result = validate_diff(_sized_diff(401), "chat", "other.ts")

        assert "does not match active file" in result.error

    def test_scope_reported_before_size(self):
        result = validate_diff(_sized_diff(401), "codelens", "test.ts", Scope(0, 10))

        assert "outside the scope range" in result.error


class TestPurity:
    def test_repeated_validation_is_identical(self):
        first = validate_diff(DIFF_AT_LINE_10, "codelens", "test.ts", Scope(0, 5))
        second = validate_diff(DIFF_AT_LINE_10, "codelens", "test.ts", Scope(0, 5))

        assert first == second

    def test_never_raises_on_bad_input(self):
        result = DiffValidator().validate(None, "chat", "test.ts")

        assert result.valid is False


class TestPathsMatch:
    @pytest.mark.parametrize("diff_path,target,expected", [
        ("test.ts", "test.ts", True),
        ("test.ts", "/path/to/test.ts", True),
        ("src/test.ts", "src/test.ts", True),
        ("src/test.ts", "lib/test.ts", True),
        ("test.ts", "other.ts", False),
        ("test.ts", "test.tsx", False),
        ("", "test.ts", False),
    ])
    def test_matching(self, diff_path, target, expected):
        assert paths_match(diff_path, target) is expected
