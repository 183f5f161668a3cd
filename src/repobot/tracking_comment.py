from __future__ import annotations

from typing import Final

from repobot.models import ModeName, ProgressStatus


MAX_OUTPUT_CHARS: Final[int] = 2000

_STATUS_ICONS: Final[dict[ProgressStatus, str]] = {
    "starting": "🔄",
    "running": "⚙️",
    "success": "✅",
    "error": "❌",
}
_STATUS_TITLES: Final[dict[ProgressStatus, str]] = {
    "starting": "Working",
    "running": "Working",
    "success": "Complete",
    "error": "Failed",
}


def progress_marker(mode: ModeName) -> str:
    if mode == "tag":
        return "<!-- repobot-progress -->"
    return f"<!-- repobot-{mode}-progress -->"


def has_marker(body: str, marker: str) -> bool:
    return marker in body


def render_progress_comment(
    *,
    mode: ModeName,
    task_id: str,
    status: ProgressStatus,
    message: str,
    output: str | None = None,
    pr_url: str | None = None,
) -> str:
    lines = [
        f"## 🤖 Repobot {_STATUS_ICONS[status]} {_STATUS_TITLES[status]}",
        "",
        f"**Mode:** {mode}",
        f"**Task ID:** `{task_id}`",
        "",
        "### Status",
        "",
        message,
    ]
    if output:
        truncated = output[:MAX_OUTPUT_CHARS]
        if len(output) > MAX_OUTPUT_CHARS:
            truncated += "\n...(truncated)"
        lines.extend(["", "### Output", "", "```", truncated, "```"])
    if pr_url:
        lines.extend(["", "### Pull Request", "", pr_url])
    lines.extend(["", progress_marker(mode)])
    return "\n".join(lines) + "\n"
