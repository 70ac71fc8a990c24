"""
Diff display — compute and show colored unified diffs before writing files.

Includes a Textual-based interactive diff viewer that pauses execution so the
user can review a patch result and approve/reject it before it is written.
"""

from __future__ import annotations

import difflib
import logging

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, VerticalScroll
from textual.widgets import Button, Footer, Static

logger = logging.getLogger(__name__)


def _split(content: str) -> list[str]:
    return content.split("\n") if content else []


def compute_diff(old_content: str, new_content: str,
                 filepath: str = "file") -> str | None:
    """Return a unified diff from *old_content* to *new_content*.

    Returns None if the content is unchanged. Lines are split on ``\\n``
    exactly as the applier splits them, so the result applies back onto
    *old_content*.
    """
    if old_content == new_content:
        return None

    diff = difflib.unified_diff(
        _split(old_content), _split(new_content),
        fromfile=f"a/{filepath}",
        tofile=f"b/{filepath}",
        lineterm="",
    )
    diff_text = "\n".join(diff)
    return diff_text if diff_text.strip() else None


def format_colored_diff(diff_text: str) -> str:
    """Add ANSI colors to a unified diff string.

    Green for additions (+), red for deletions (-), cyan for @@ hunks.
    """
    lines = diff_text.splitlines()
    colored: list[str] = []
    for line in lines:
        if line.startswith("+++") or line.startswith("---"):
            colored.append(f"\033[1m{line}\033[0m")  # bold
        elif line.startswith("@@"):
            colored.append(f"\033[36m{line}\033[0m")  # cyan
        elif line.startswith("+"):
            colored.append(f"\033[32m{line}\033[0m")  # green
        elif line.startswith("-"):
            colored.append(f"\033[31m{line}\033[0m")  # red
        else:
            colored.append(line)
    return "\n".join(colored)


def _format_rich_diff(diff_text: str) -> str:
    """Convert unified diff text to Rich markup for Textual display."""
    lines = diff_text.splitlines()
    markup_lines: list[str] = []
    for line in lines:
        # Escape Rich markup characters in the line content
        escaped = line.replace("[", "\\[")
        if line.startswith("+++") or line.startswith("---"):
            markup_lines.append(f"[bold white]{escaped}[/bold white]")
        elif line.startswith("@@"):
            markup_lines.append(f"[cyan]{escaped}[/cyan]")
        elif line.startswith("+"):
            markup_lines.append(f"[green]{escaped}[/green]")
        elif line.startswith("-"):
            markup_lines.append(f"[red]{escaped}[/red]")
        else:
            markup_lines.append(escaped)
    return "\n".join(markup_lines)


# ══════════════════════════════════════════════════════════════════
#  Interactive Diff Approval — Textual TUI
# ══════════════════════════════════════════════════════════════════

class DiffApprovalApp(App):
    """Interactive diff viewer with approve/reject."""

    CSS = """
    Screen {
        background: $surface;
    }
    #title-bar {
        dock: top;
        height: 3;
        background: #1a1a2e;
        color: #e94560;
        text-align: center;
        padding: 1;
        text-style: bold;
    }
    #diff-scroll {
        height: 1fr;
        margin: 1 2;
        border: round #444;
        padding: 1;
    }
    #action-buttons {
        dock: bottom;
        height: 3;
        align: center middle;
        padding: 0 2;
    }
    #action-buttons Button {
        margin: 0 2;
        min-width: 20;
    }
    """

    BINDINGS = [
        Binding("a", "approve", "Apply"),
        Binding("escape", "reject", "Cancel"),
        Binding("r", "reject", "Cancel"),
    ]

    def __init__(self, filepath: str, diff_text: str, mode: str) -> None:
        super().__init__()
        self._filepath = filepath
        self._diff_text = diff_text
        self._mode = mode
        self.approved: bool = False

    def compose(self) -> ComposeResult:
        title = "Smart Edit" if self._mode == "smart" else "Diff"
        yield Static(f" ━━  {title} — {self._filepath}  ━━ ", id="title-bar")
        with VerticalScroll(id="diff-scroll"):
            yield Static(_format_rich_diff(self._diff_text))
        with Horizontal(id="action-buttons"):
            yield Button("✔ Apply", id="approve-btn", variant="success")
            yield Button("✕ Cancel", id="reject-btn", variant="error")
        yield Footer()

    def on_button_pressed(self, event: Button.Pressed) -> None:
        self.approved = event.button.id == "approve-btn"
        self.exit()

    def action_approve(self) -> None:
        self.approved = True
        self.exit()

    def action_reject(self) -> None:
        self.approved = False
        self.exit()


def prompt_diff_approval(filepath: str, diff_text: str | None,
                         mode: str = "diff", auto: bool = False,
                         console: bool = False) -> bool:
    """Show a diff and wait for the user to apply or cancel it.

    Returns ``True`` if the user approves, if running in auto mode, or if
    there is nothing to review.
    """
    if not diff_text:
        return True

    if auto:
        logger.info("[SmartPatch] [auto] Diff for %s:\n%s", filepath, diff_text)
        return True

    if not console:
        try:
            app = DiffApprovalApp(filepath, diff_text, mode)
            app.run()
            return app.approved
        except Exception as exc:
            logger.warning("[SmartPatch] Textual diff viewer failed: %s", exc)

    return _console_diff_approval(filepath, diff_text)


def _console_diff_approval(filepath: str, diff_text: str) -> bool:
    """Console-based approval (non-interactive terminals, viewer errors)."""
    print("\n" + "=" * 60)
    print(f"  DIFF REVIEW — {filepath}")
    print("=" * 60)
    print(format_colored_diff(diff_text))
    print("\n" + "=" * 60)
    print("  [A]pply  |  [C]ancel")
    print()

    while True:
        try:
            choice = input("  Your choice: ").strip().lower()
        except (EOFError, KeyboardInterrupt):
            return False
        if choice in ("a", "apply", "y", "yes"):
            return True
        elif choice in ("c", "cancel", "n", "no"):
            return False
        else:
            print("  Invalid choice. Use A or C.")
