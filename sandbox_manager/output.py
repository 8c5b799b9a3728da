"""Output formatting for sandbox-manager commands."""

import json
from typing import List, Optional

from .models.sandbox import RecreateResult, SandboxContainerInfo, now_ms


def format_table(headers: List[str], rows: List[List[str]]) -> str:
    """Format rows as a left-aligned table with upper-case headers."""
    if not rows:
        return "No containers found."

    headers = [h.upper() for h in headers]
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    lines = ["   ".join(h.ljust(widths[i]) for i, h in enumerate(headers)).rstrip()]
    for row in rows:
        lines.append(
            "   ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)).rstrip()
        )
    return "\n".join(lines)


def format_duration(duration_ms: int) -> str:
    """Format a duration as a short kubectl-style age (30s, 5m, 3h, 2d)."""
    seconds = max(0, int(duration_ms // 1000))
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    if seconds < 86400:
        return f"{seconds // 3600}h"
    return f"{seconds // 86400}d"


def format_age(timestamp_ms: Optional[int], current_ms: Optional[int] = None) -> str:
    """Format time elapsed since an epoch-ms timestamp."""
    if timestamp_ms is None or isinstance(timestamp_ms, bool):
        return "Unknown"
    try:
        elapsed = (current_ms if current_ms is not None else now_ms()) - int(timestamp_ms)
    except (TypeError, ValueError):
        return "Unknown"
    return format_duration(elapsed)


def format_containers_json(containers: List[SandboxContainerInfo]) -> str:
    """Machine-readable listing: {"containers": [...]}."""
    return json.dumps({"containers": [c.to_dict() for c in containers]}, indent=2)


def format_container_list(
    containers: List[SandboxContainerInfo], current_ms: Optional[int] = None
) -> str:
    headers = ["name", "status", "image", "session", "age", "idle"]
    rows = []
    for c in containers:
        image = c.image if c.image_match else f"{c.image} (mismatch)"
        rows.append(
            [
                c.container_name,
                "running" if c.running else "stopped",
                image,
                c.session_key,
                format_age(c.created_at_ms, current_ms),
                format_age(c.last_used_at_ms, current_ms),
            ]
        )
    return format_table(headers, rows)


def format_summary(containers: List[SandboxContainerInfo]) -> str:
    total = len(containers)
    running = sum(1 for c in containers if c.running)
    mismatched = sum(1 for c in containers if not c.image_match)

    lines = [f"Total: {total} (running: {running}, stopped: {total - running})"]
    if mismatched:
        lines.append(
            f"{mismatched} container(s) with image mismatch. "
            "Run 'sandbox-manager recreate --all' to update them."
        )
    return "\n".join(lines)


def format_recreate_preview(containers: List[SandboxContainerInfo]) -> str:
    lines = [f"About to remove {len(containers)} container(s):"]
    for c in containers:
        status = "running" if c.running else "stopped"
        lines.append(f"  - {c.container_name} ({status}, session {c.session_key})")
    lines.append("")
    lines.append("They will be recreated automatically on next use.")
    return "\n".join(lines)


def format_recreate_result(result: RecreateResult) -> str:
    lines = [f"Done: {result.success_count} removed, {result.fail_count} failed"]
    if result.fail_count:
        lines.append("Some containers could not be removed; rerun to retry.")
    return "\n".join(lines)
