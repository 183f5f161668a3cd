from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar

from repobot.mode_context import build_mode_context
from repobot.models import (
    GitHubEvent,
    ModeContext,
    ModeName,
    PartialPreparation,
    PreparationResult,
)
from repobot.preparation import PrepareOptions, run_preparation
from repobot.prompts import build_github_context_block
from repobot.tracking_comment import progress_marker


STANDARD_TOOLS: tuple[str, ...] = (
    "bash",
    "git",
    "github",
    "read",
    "write",
    "edit",
    "search",
    "research",
    "plan",
    "run_tests",
)


class Mode(ABC):
    """One behavioral strategy. Instances are stateless and shared across runs."""

    __slots__ = ()

    name: ClassVar[ModeName]
    description: ClassVar[str]
    progress_message: ClassVar[str]

    @abstractmethod
    def should_trigger(self, event: GitHubEvent) -> bool:
        """Pure check of whether this mode applies to the event."""

    @abstractmethod
    def generate_prompt(self, context: ModeContext) -> str:
        """Task prompt handed to the downstream coding agent."""

    def prepare_context(
        self,
        event: GitHubEvent,
        seed: PartialPreparation | PreparationResult | None = None,
    ) -> ModeContext:
        return build_mode_context(mode=self.name, event=event, seed=seed)

    def get_allowed_tools(self) -> tuple[str, ...]:
        return STANDARD_TOOLS

    def get_disallowed_tools(self) -> tuple[str, ...]:
        return ()

    def should_create_tracking_comment(self) -> bool:
        return True

    @property
    def tracking_marker(self) -> str:
        return progress_marker(self.name)

    def get_system_prompt(self, context: ModeContext) -> str | None:
        _ = context
        return None

    def system_prompt_or_default(self, context: ModeContext) -> str:
        system_prompt = self.get_system_prompt(context)
        if system_prompt is not None:
            return system_prompt
        return build_github_context_block(event=context.event) + "\n"

    def prepare(self, options: PrepareOptions) -> PreparationResult:
        return run_preparation(
            mode=self.name,
            options=options,
            create_tracking_comment=self.should_create_tracking_comment(),
            progress_message=self.progress_message,
        )

    def __repr__(self) -> str:
        return f"<{type(self).__name__} name={self.name!r}>"
