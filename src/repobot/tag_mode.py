from __future__ import annotations

from repobot.mode import Mode
from repobot.models import GitHubEvent, ModeContext
from repobot.prompts import build_github_context_block, build_tag_prompt
from repobot.triggers import is_tag_trigger


class TagMode(Mode):
    """Interactive mode: someone mentioned, labeled or assigned the bot on an issue or PR."""

    __slots__ = ()

    name = "tag"
    description = "Interactive mode triggered by bot mentions, labels or assignment on issues/PRs"
    progress_message = "🤖 Initializing..."

    def should_trigger(self, event: GitHubEvent) -> bool:
        return is_tag_trigger(event)

    def generate_prompt(self, context: ModeContext) -> str:
        return build_tag_prompt(event=context.event)

    def get_system_prompt(self, context: ModeContext) -> str | None:
        return build_github_context_block(event=context.event) + "\n"


TAG_MODE = TagMode()
