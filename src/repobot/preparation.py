from __future__ import annotations

from dataclasses import dataclass
import logging
import time

from repobot.config import DEFAULT_BASE_BRANCH, ActionInputs
from repobot.github_gateway import CommentGateway
from repobot.models import (
    BranchInfo,
    GitHubEvent,
    ModeName,
    PreparationResult,
    Repository,
    TrackingCommentUnavailable,
)
from repobot.observability import log_event, log_warning_event
from repobot.tracking_comment import progress_marker, render_progress_comment


LOGGER = logging.getLogger("repobot.preparation")


@dataclass(frozen=True)
class PrepareOptions:
    event: GitHubEvent
    github: CommentGateway


def resolve_base_branch(inputs: ActionInputs) -> str:
    if inputs.base_branch is None:
        return DEFAULT_BASE_BRANCH
    return inputs.base_branch


def build_task_id(
    *, mode: ModeName, repository: Repository, run_id: str, now_ms: int | None = None
) -> str:
    slug = repository.full_name.lower().replace("/", "-")
    if run_id.isascii() and run_id.isdigit():
        suffix = run_id
    else:
        suffix = str(now_ms if now_ms is not None else int(time.time() * 1000))
    return f"{mode}-{slug}-{suffix}"


def ensure_tracking_comment(
    *,
    github: CommentGateway,
    event: GitHubEvent,
    mode: ModeName,
    task_id: str,
    message: str,
) -> int | None:
    """Reuse this mode's tracking comment on the entity, or create one.

    Returns None when no comment could be created; never raises for
    collaborator failures.
    """
    issue_number = event.entity_number
    if issue_number is None:
        raise ValueError("ensure_tracking_comment requires an entity number")
    marker = progress_marker(mode)
    body = render_progress_comment(mode=mode, task_id=task_id, status="starting", message=message)

    existing = None
    try:
        existing = github.find_bot_comment(issue_number, event.inputs.bot_name, marker)
    except Exception as exc:  # noqa: BLE001
        log_warning_event(
            LOGGER,
            "tracking_comment_lookup_failed",
            mode=mode,
            issue_number=issue_number,
            error_type=type(exc).__name__,
        )

    if existing is not None:
        try:
            github.update_comment(existing.comment_id, body)
        except Exception as exc:  # noqa: BLE001
            log_warning_event(
                LOGGER,
                "tracking_comment_update_failed",
                mode=mode,
                comment_id=existing.comment_id,
                error_type=type(exc).__name__,
            )
        else:
            log_event(
                LOGGER,
                "tracking_comment_reused",
                mode=mode,
                issue_number=issue_number,
                comment_id=existing.comment_id,
            )
            return existing.comment_id

    try:
        created = github.create_comment(issue_number, body)
    except Exception as exc:  # noqa: BLE001
        log_warning_event(
            LOGGER,
            "tracking_comment_unavailable",
            mode=mode,
            issue_number=issue_number,
            reason="create_failed",
            error_type=type(exc).__name__,
            error=str(exc),
        )
        return None
    log_event(
        LOGGER,
        "tracking_comment_created",
        mode=mode,
        issue_number=issue_number,
        comment_id=created.comment_id,
    )
    return created.comment_id


def mark_working(*, github: CommentGateway, event: GitHubEvent, mode: ModeName) -> None:
    label = event.inputs.working_label
    issue_number = event.entity_number
    if label is None or issue_number is None:
        return
    try:
        github.add_labels(issue_number, (label,))
    except Exception as exc:  # noqa: BLE001
        # The label may not exist in the repository.
        log_warning_event(
            LOGGER,
            "working_label_failed",
            mode=mode,
            issue_number=issue_number,
            label=label,
            error_type=type(exc).__name__,
        )


def run_preparation(
    *,
    mode: ModeName,
    options: PrepareOptions,
    create_tracking_comment: bool,
    progress_message: str,
) -> PreparationResult:
    event = options.event
    base_branch = resolve_base_branch(event.inputs)
    task_id = build_task_id(mode=mode, repository=event.repository, run_id=event.run_id)
    log_event(
        LOGGER,
        "preparation_started",
        mode=mode,
        repo_full_name=event.repository.full_name,
        entity_number=event.entity_number,
        entity_kind=event.entity_kind if event.entity_number is not None else None,
        task_id=task_id,
    )

    comment_id: int | None = None
    unavailable: TrackingCommentUnavailable | None = None
    if event.entity_number is None:
        unavailable = "no_entity"
        log_event(
            LOGGER,
            "standalone_run",
            mode=mode,
            repo_full_name=event.repository.full_name,
            detail=f"Running {mode} mode on repository without an issue or pull request",
        )
    else:
        if create_tracking_comment:
            comment_id = ensure_tracking_comment(
                github=options.github,
                event=event,
                mode=mode,
                task_id=task_id,
                message=progress_message,
            )
            if comment_id is None:
                unavailable = "create_failed"
        else:
            unavailable = "disabled"
        mark_working(github=options.github, event=event, mode=mode)

    result = PreparationResult(
        should_execute=True,
        task_id=task_id,
        branch_info=BranchInfo(
            base_branch=base_branch,
            claude_branch=None,
            current_branch=base_branch,
        ),
        comment_id=comment_id,
        tracking_comment_unavailable=unavailable,
    )
    log_event(
        LOGGER,
        "preparation_finished",
        mode=mode,
        task_id=task_id,
        base_branch=base_branch,
        comment_id=comment_id,
        tracking_comment_unavailable=unavailable,
    )
    return result
