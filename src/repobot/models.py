from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, TypeAlias

from repobot.config import ActionInputs


ModeName = Literal["tag", "agent", "continuous"]
TrackingCommentUnavailable = Literal["no_entity", "disabled", "create_failed"]
ProgressStatus = Literal["starting", "running", "success", "error"]


@dataclass(frozen=True)
class Repository:
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclass(frozen=True)
class EntityDetails:
    """Issue or pull request fields read from the webhook payload."""

    title: str
    body: str | None
    labels: tuple[str, ...] = ()
    assignees: tuple[str, ...] = ()


@dataclass(frozen=True)
class EventPayload:
    comment_body: str | None = None
    issue: EntityDetails | None = None
    pull_request: EntityDetails | None = None

    @property
    def entity(self) -> EntityDetails | None:
        if self.issue is not None:
            return self.issue
        return self.pull_request


@dataclass(frozen=True)
class GitHubEvent:
    """One inbound GitHub event, immutable for the whole run."""

    event_name: str
    actor: str
    repository: Repository
    run_id: str
    inputs: ActionInputs
    event_action: str | None = None
    is_pr: bool = False
    entity_number: int | None = None
    payload: EventPayload | None = None

    @property
    def entity_kind(self) -> str:
        return "Pull Request" if self.is_pr else "Issue"

    @property
    def entity_url(self) -> str | None:
        if self.entity_number is None:
            return None
        path = "pull" if self.is_pr else "issues"
        return f"https://github.com/{self.repository.full_name}/{path}/{self.entity_number}"


@dataclass(frozen=True)
class IssueComment:
    comment_id: int
    body: str
    user_login: str
    html_url: str


@dataclass(frozen=True)
class CreatedComment:
    comment_id: int
    html_url: str


@dataclass(frozen=True)
class BranchInfo:
    base_branch: str
    current_branch: str
    claude_branch: str | None = None


@dataclass(frozen=True)
class PreparationResult:
    should_execute: bool
    task_id: str
    branch_info: BranchInfo
    comment_id: int | None = None
    tracking_comment_unavailable: TrackingCommentUnavailable | None = None


@dataclass(frozen=True)
class PartialPreparation:
    """Preparation fields known ahead of preparation, e.g. in staged pipelines."""

    comment_id: int | None = None
    task_id: str | None = None
    branch_info: BranchInfo | None = None


@dataclass(frozen=True)
class UnpreparedModeContext:
    mode: ModeName
    event: GitHubEvent
    comment_id: int | None = None
    task_id: str | None = None
    base_branch: str | None = None
    claude_branch: str | None = None

    @property
    def is_prepared(self) -> bool:
        return False


@dataclass(frozen=True)
class PreparedModeContext:
    mode: ModeName
    event: GitHubEvent
    task_id: str
    branch_info: BranchInfo
    comment_id: int | None = None
    tracking_comment_unavailable: TrackingCommentUnavailable | None = None

    @property
    def is_prepared(self) -> bool:
        return True

    @property
    def base_branch(self) -> str:
        return self.branch_info.base_branch

    @property
    def claude_branch(self) -> str | None:
        return self.branch_info.claude_branch

    @property
    def current_branch(self) -> str:
        return self.branch_info.current_branch


ModeContext: TypeAlias = UnpreparedModeContext | PreparedModeContext
