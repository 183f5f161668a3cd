from __future__ import annotations

import logging

from repobot.mode import STANDARD_TOOLS, Mode
from repobot.models import GitHubEvent, ModeContext, PreparationResult
from repobot.observability import log_event
from repobot.preparation import PrepareOptions
from repobot.prompts import build_continuous_prompt, build_continuous_system_prompt
from repobot.triggers import is_continuous_trigger


LOGGER = logging.getLogger("repobot.continuous_mode")


class ContinuousMode(Mode):
    """Works through a queue of tasks until none remain or the task limit is hit."""

    __slots__ = ()

    name = "continuous"
    description = "Continuous mode that processes pending tasks one after another"
    progress_message = "🔁 Starting continuous task processing..."

    def should_trigger(self, event: GitHubEvent) -> bool:
        return is_continuous_trigger(event)

    def get_allowed_tools(self) -> tuple[str, ...]:
        return (*STANDARD_TOOLS, "continuous_mode")

    def generate_prompt(self, context: ModeContext) -> str:
        return build_continuous_prompt(event=context.event)

    def get_system_prompt(self, context: ModeContext) -> str | None:
        return build_continuous_system_prompt(event=context.event)

    def prepare(self, options: PrepareOptions) -> PreparationResult:
        inputs = options.event.inputs
        log_event(
            LOGGER,
            "continuous_settings",
            max_tasks=inputs.max_tasks,
            task_source=inputs.task_source,
            delay_between_tasks=inputs.delay_between_tasks,
            auto_merge=inputs.auto_merge,
            close_issues=inputs.close_issues,
        )
        return super().prepare(options)


CONTINUOUS_MODE = ContinuousMode()
