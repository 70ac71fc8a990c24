"""
Edit metrics — tracks diff/snippet apply outcomes in a JSONL log file.
"""

from __future__ import annotations

import json
import logging
import os
from collections import Counter
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_METRICS_DIR = ".smartpatch/metrics"
_METRICS_FILE = "edit_metrics.jsonl"


def _metrics_path(project_root: str | None = None) -> str:
    """Return the absolute path to the metrics file."""
    base = project_root or os.getcwd()
    return os.path.join(base, _METRICS_DIR, _METRICS_FILE)


def log_edit_metric(data: dict, project_root: str | None = None) -> None:
    """Append a single edit metric entry to the JSONL log.

    Parameters
    ----------
    data:
        Metric fields to log (file, mode, success, changed_lines, error).
    project_root:
        Optional project root directory. Defaults to CWD.
    """
    path = _metrics_path(project_root)

    entry = {"timestamp": datetime.now(timezone.utc).isoformat()}
    entry.update(data)

    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError as exc:
        logger.warning("[SmartPatch] Failed to write metrics: %s", exc)


def read_edit_stats(
    last_n: int = 50,
    project_root: str | None = None,
) -> dict:
    """Compute rolling statistics from the metrics log.

    Returns
    -------
    dict
        total_edits, success_rate (percent), modes (count per
        ``diff``/``smart``), avg_changed_lines and errors (count per
        error message).
    """
    path = _metrics_path(project_root)

    entries: list[dict] = []
    if os.path.isfile(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                for line in f:
                    line = line.strip()
                    if line:
                        try:
                            entries.append(json.loads(line))
                        except json.JSONDecodeError:
                            continue
        except OSError as exc:
            logger.warning("[SmartPatch] Failed to read metrics: %s", exc)

    entries = entries[-last_n:]

    if not entries:
        return {
            "total_edits": 0,
            "success_rate": 0.0,
            "modes": {},
            "avg_changed_lines": 0.0,
            "errors": {},
        }

    total = len(entries)
    successes = sum(1 for e in entries if e.get("success", False))
    changed = [e["changed_lines"] for e in entries if "changed_lines" in e]
    modes = Counter(e.get("mode", "unknown") for e in entries)
    errors = Counter(e["error"] for e in entries if e.get("error"))

    return {
        "total_edits": total,
        "success_rate": successes / total * 100,
        "modes": dict(modes.most_common()),
        "avg_changed_lines": sum(changed) / len(changed) if changed else 0.0,
        "errors": dict(errors.most_common()),
    }
