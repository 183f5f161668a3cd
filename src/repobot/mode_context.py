from __future__ import annotations

from repobot.models import (
    GitHubEvent,
    ModeContext,
    ModeName,
    PartialPreparation,
    PreparationResult,
    PreparedModeContext,
    UnpreparedModeContext,
)


def build_mode_context(
    *,
    mode: ModeName,
    event: GitHubEvent,
    seed: PartialPreparation | PreparationResult | None = None,
) -> ModeContext:
    """Build the per-run context.

    A full PreparationResult yields a prepared context. A partial seed only
    pre-fills the fields it carries; everything else stays None.
    """
    if isinstance(seed, PreparationResult):
        return _prepared(mode=mode, event=event, result=seed)
    if seed is None:
        return UnpreparedModeContext(mode=mode, event=event)
    branch_info = seed.branch_info
    return UnpreparedModeContext(
        mode=mode,
        event=event,
        comment_id=seed.comment_id,
        task_id=seed.task_id,
        base_branch=branch_info.base_branch if branch_info is not None else None,
        claude_branch=branch_info.claude_branch if branch_info is not None else None,
    )


def with_preparation(context: ModeContext, result: PreparationResult) -> PreparedModeContext:
    if isinstance(context, PreparedModeContext):
        raise ValueError(f"Mode context for task {context.task_id} is already prepared")
    return _prepared(mode=context.mode, event=context.event, result=result)


def _prepared(
    *, mode: ModeName, event: GitHubEvent, result: PreparationResult
) -> PreparedModeContext:
    return PreparedModeContext(
        mode=mode,
        event=event,
        task_id=result.task_id,
        branch_info=result.branch_info,
        comment_id=result.comment_id,
        tracking_comment_unavailable=result.tracking_comment_unavailable,
    )
