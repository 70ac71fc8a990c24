"""
CLI entry point — validate, apply or merge LLM edits against a file.
"""

import argparse
import logging
import sys

from .config import Config
from .cli_display import setup_logger, print_ok, print_error
from .diff_display import compute_diff, format_colored_diff, prompt_diff_approval
from .editing.diff_validator import DiffValidator, Scope
from .editing.file_ops import (
    ApplyResult, PatchApplyError, apply_diff_to_file,
    apply_smart_edit_to_file, read_text, safe_write,
)
from .editing.metrics import log_edit_metric

_logger = logging.getLogger(__name__)


def parse_scope(value: str) -> Scope:
    """Parse ``START:END`` (0-indexed, inclusive) into a :class:`Scope`."""
    try:
        start, end = (int(part) for part in value.split(":", 1))
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Invalid scope '{value}', expected START:END"
        )
    if start < 0 or end < start:
        raise argparse.ArgumentTypeError(
            f"Invalid scope '{value}', need 0 <= START <= END"
        )
    return Scope(start_line=start, end_line=end)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="smart-patch",
        description="SmartPatch — apply LLM diffs and smart edits safely",
    )
    parser.add_argument("--config", default=None,
                        help="Path to .smartpatch.yaml config file")
    sub = parser.add_subparsers(dest="command", required=True)

    def _diff_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("file", help="Target file the diff applies to")
        p.add_argument("diff", help="File containing the unified diff "
                                    "('-' reads stdin)")
        p.add_argument("--flow", choices=["chat", "codelens"], default="chat",
                       help="Validation flow (default: chat)")
        p.add_argument("--scope", type=parse_scope, default=None,
                       help="START:END line range for the codelens flow")

    def _write_args(p: argparse.ArgumentParser) -> None:
        p.add_argument("--write", action="store_true",
                       help="Write the result to the file instead of stdout")
        p.add_argument("--yes", action="store_true",
                       help="Write without asking for approval")
        p.add_argument("--no-preview", action="store_true",
                       help="Do not show the diff preview")
        p.add_argument("--console", action="store_true",
                       help="Use console approval instead of the TUI viewer")

    p_validate = sub.add_parser("validate", help="Check a diff against policy")
    _diff_args(p_validate)

    p_apply = sub.add_parser("apply", help="Validate and apply a unified diff")
    _diff_args(p_apply)
    _write_args(p_apply)

    p_merge = sub.add_parser("merge",
                             help="Merge a '... existing code ...' snippet")
    p_merge.add_argument("file", help="Target file")
    p_merge.add_argument("snippet", help="File containing the edit snippet "
                                         "('-' reads stdin)")
    _write_args(p_merge)

    return parser


def _read_input(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    return read_text(path, missing_ok=False)


def _finish(result: ApplyResult, args: argparse.Namespace, cfg: Config) -> int:
    """Preview, approve and write (or print) a computed result."""
    if cfg.METRICS_ENABLED:
        log_edit_metric(result.as_metric())

    if not result.success:
        print_error(result.error)
        return 1

    diff_text = compute_diff(result.original_content, result.new_content,
                             result.file_path)
    show_preview = cfg.DIFF_PREVIEW and not args.no_preview

    if not args.write:
        if show_preview and diff_text:
            print(format_colored_diff(diff_text), file=sys.stderr)
        sys.stdout.write(result.new_content)
        return 0

    if not diff_text:
        print_ok(f"No changes for {result.file_path}")
        return 0

    approved = prompt_diff_approval(
        result.file_path, diff_text if show_preview else None,
        mode=result.mode, auto=args.yes, console=args.console,
    )
    if not approved:
        _logger.info("[SmartPatch] Write to %s cancelled", result.file_path)
        print_error("Cancelled")
        return 1

    safe_write(result.file_path, result.new_content)
    print_ok(f"Updated {result.file_path} ({result.changed_lines} changed lines)")
    return 0


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    cfg = Config.load(args.config)
    setup_logger(cfg.LOG_DIR)
    validator = DiffValidator(max_changed_lines=cfg.MAX_CHANGED_LINES)

    try:
        if args.command == "validate":
            result = validator.validate(
                _read_input(args.diff), args.flow, args.file, args.scope
            )
            if result.valid:
                print_ok("Diff is valid")
                return 0
            _logger.warning("[SmartPatch] Diff rejected: %s", result.error)
            print_error(result.error)
            return 1

        if args.command == "apply":
            result = apply_diff_to_file(
                args.file, _read_input(args.diff), args.flow, args.scope,
                validator=validator,
            )
        else:
            result = apply_smart_edit_to_file(
                args.file, _read_input(args.snippet), cfg.FUZZY_THRESHOLD
            )
        return _finish(result, args, cfg)
    except PatchApplyError as exc:
        _logger.error("[SmartPatch] %s", exc)
        print_error(str(exc))
        return 1


if __name__ == "__main__":
    sys.exit(main())
