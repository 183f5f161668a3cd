from __future__ import annotations

from repobot.mode import Mode
from repobot.models import GitHubEvent, ModeContext
from repobot.prompts import build_agent_prompt, build_github_context_block
from repobot.triggers import is_agent_trigger


class AgentMode(Mode):
    __slots__ = ()

    name = "agent"
    description = "Direct automation mode for explicit prompts, dispatches and new issues"
    progress_message = "🤖 Starting agent task..."

    def should_trigger(self, event: GitHubEvent) -> bool:
        return is_agent_trigger(event)

    def generate_prompt(self, context: ModeContext) -> str:
        return build_agent_prompt(event=context.event)

    def get_system_prompt(self, context: ModeContext) -> str | None:
        return build_github_context_block(event=context.event) + "\n"


AGENT_MODE = AgentMode()
