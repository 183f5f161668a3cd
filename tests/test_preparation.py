from __future__ import annotations

import re

from hypothesis import given
from hypothesis import strategies as st
import pytest

from repobot.agent_mode import AGENT_MODE
from repobot.config import ActionInputs, parse_inputs
from repobot.continuous_mode import CONTINUOUS_MODE
from repobot.mode_context import with_preparation
from repobot.models import (
    CreatedComment,
    EventPayload,
    GitHubEvent,
    IssueComment,
    PreparedModeContext,
    Repository,
)
from repobot.observability import configure_logging
from repobot.preparation import (
    PrepareOptions,
    build_task_id,
    resolve_base_branch,
    run_preparation,
)
from repobot.tag_mode import TAG_MODE
from repobot.tracking_comment import progress_marker


class FakeGitHub:
    def __init__(
        self,
        *,
        existing: IssueComment | None = None,
        fail_find: bool = False,
        fail_create: bool = False,
        fail_update: bool = False,
        fail_labels: bool = False,
    ) -> None:
        self.existing = existing
        self.fail_find = fail_find
        self.fail_create = fail_create
        self.fail_update = fail_update
        self.fail_labels = fail_labels
        self.lookups: list[tuple[int, str, str]] = []
        self.created: list[tuple[int, str]] = []
        self.updated: list[tuple[int, str]] = []
        self.labels: list[tuple[int, tuple[str, ...]]] = []

    def find_bot_comment(
        self, issue_number: int, bot_login: str, marker: str
    ) -> IssueComment | None:
        self.lookups.append((issue_number, bot_login, marker))
        if self.fail_find:
            raise RuntimeError("lookup failed")
        return self.existing

    def create_comment(self, issue_number: int, body: str) -> CreatedComment:
        if self.fail_create:
            raise RuntimeError("API rate limit exceeded")
        self.created.append((issue_number, body))
        return CreatedComment(comment_id=1000 + len(self.created), html_url="https://example/c")

    def update_comment(self, comment_id: int, body: str) -> CreatedComment:
        if self.fail_update:
            raise RuntimeError("update failed")
        self.updated.append((comment_id, body))
        return CreatedComment(comment_id=comment_id, html_url="https://example/c")

    def add_labels(self, issue_number: int, labels: tuple[str, ...]) -> None:
        if self.fail_labels:
            raise RuntimeError("label missing")
        self.labels.append((issue_number, labels))


def _event(
    *,
    event_name: str = "issue_comment",
    entity_number: int | None = 123,
    run_id: str = "123456",
    **raw_inputs: str,
) -> GitHubEvent:
    return GitHubEvent(
        event_name=event_name,
        actor="testuser",
        repository=Repository(owner="octo", repo="test-repo"),
        run_id=run_id,
        inputs=parse_inputs(raw_inputs),
        entity_number=entity_number,
        payload=EventPayload(comment_body="@repobot help") if entity_number else None,
    )


def test_resolve_base_branch() -> None:
    assert resolve_base_branch(ActionInputs()) == "main"
    assert resolve_base_branch(ActionInputs(base_branch="develop")) == "develop"


def test_build_task_id_uses_numeric_run_id() -> None:
    repository = Repository(owner="Octo", repo="Test-Repo")
    assert (
        build_task_id(mode="tag", repository=repository, run_id="42") == "tag-octo-test-repo-42"
    )


@pytest.mark.parametrize("run_id", ["", "run-7", "١٢٣"])
def test_build_task_id_falls_back_to_clock(run_id: str) -> None:
    repository = Repository(owner="octo", repo="test-repo")
    task_id = build_task_id(mode="agent", repository=repository, run_id=run_id, now_ms=1700000000000)
    assert task_id == "agent-octo-test-repo-1700000000000"


def test_build_task_id_reads_clock_when_not_given(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("repobot.preparation.time.time", lambda: 1700000000.5)
    repository = Repository(owner="octo", repo="test-repo")
    assert build_task_id(mode="continuous", repository=repository, run_id="") == (
        "continuous-octo-test-repo-1700000000500"
    )


@given(
    mode=st.sampled_from(["tag", "agent", "continuous"]),
    run_id=st.text(),
)
def test_task_id_always_matches_format(mode: str, run_id: str) -> None:
    task_id = build_task_id(
        mode=mode,  # type: ignore[arg-type]
        repository=Repository(owner="octo", repo="test-repo"),
        run_id=run_id,
    )
    assert re.fullmatch(rf"{mode}-octo-test-repo-\d+", task_id)


def test_prepare_without_entity_skips_tracking_comment() -> None:
    github = FakeGitHub()
    event = _event(event_name="workflow_dispatch", entity_number=None, continuous_mode="true")

    result = CONTINUOUS_MODE.prepare(PrepareOptions(event=event, github=github))

    assert result.should_execute is True
    assert result.comment_id is None
    assert result.tracking_comment_unavailable == "no_entity"
    assert re.fullmatch(r"continuous-octo-test-repo-\d+", result.task_id)
    assert result.branch_info.base_branch == "main"
    assert result.branch_info.current_branch == "main"
    assert result.branch_info.claude_branch is None
    assert github.lookups == []
    assert github.created == []
    assert github.labels == []


def test_prepare_with_entity_creates_tracking_comment() -> None:
    github = FakeGitHub()
    event = _event()

    result = TAG_MODE.prepare(PrepareOptions(event=event, github=github))

    assert result.should_execute is True
    assert result.comment_id == 1001
    assert result.tracking_comment_unavailable is None
    assert result.task_id == "tag-octo-test-repo-123456"
    assert github.lookups == [(123, "repobot[bot]", "<!-- repobot-progress -->")]
    issue_number, body = github.created[0]
    assert issue_number == 123
    assert "🤖 Initializing..." in body
    assert "`tag-octo-test-repo-123456`" in body
    assert body.rstrip().endswith(progress_marker("tag"))
    assert github.labels == [(123, ("agent:working",))]


def test_prepare_reuses_existing_tracking_comment() -> None:
    existing = IssueComment(
        comment_id=77,
        body=f"old\n{progress_marker('agent')}",
        user_login="repobot[bot]",
        html_url="https://example/77",
    )
    github = FakeGitHub(existing=existing)

    result = AGENT_MODE.prepare(PrepareOptions(event=_event(), github=github))

    assert result.comment_id == 77
    assert github.created == []
    assert github.updated[0][0] == 77
    assert "🤖 Starting agent task..." in github.updated[0][1]


def test_prepare_creates_comment_when_lookup_fails() -> None:
    github = FakeGitHub(fail_find=True)

    result = AGENT_MODE.prepare(PrepareOptions(event=_event(), github=github))

    assert result.comment_id == 1001
    assert result.tracking_comment_unavailable is None


def test_prepare_creates_comment_when_update_fails() -> None:
    existing = IssueComment(
        comment_id=77, body="x", user_login="repobot[bot]", html_url="https://example/77"
    )
    github = FakeGitHub(existing=existing, fail_update=True)

    result = AGENT_MODE.prepare(PrepareOptions(event=_event(), github=github))

    assert result.comment_id == 1001
    assert github.updated == []


def test_prepare_degrades_when_comment_creation_fails(
    capsys: pytest.CaptureFixture[str],
) -> None:
    configure_logging(verbose="low")
    github = FakeGitHub(fail_create=True)

    result = TAG_MODE.prepare(PrepareOptions(event=_event(), github=github))

    assert result.should_execute is True
    assert result.comment_id is None
    assert result.tracking_comment_unavailable == "create_failed"
    assert result.task_id == "tag-octo-test-repo-123456"
    stderr = capsys.readouterr().err
    assert "event=tracking_comment_unavailable" in stderr
    assert "reason=create_failed" in stderr
    assert "event=preparation_finished" in stderr


def test_prepare_ignores_working_label_failures() -> None:
    github = FakeGitHub(fail_labels=True)

    result = TAG_MODE.prepare(PrepareOptions(event=_event(), github=github))

    assert result.comment_id == 1001
    assert result.tracking_comment_unavailable is None


def test_prepare_skips_working_label_when_disabled() -> None:
    github = FakeGitHub()

    TAG_MODE.prepare(PrepareOptions(event=_event(working_label="none"), github=github))

    assert github.labels == []


def test_prepare_uses_configured_base_branch() -> None:
    github = FakeGitHub()
    event = _event(entity_number=None, base_branch="develop")

    result = AGENT_MODE.prepare(PrepareOptions(event=event, github=github))

    assert result.branch_info.base_branch == "develop"
    assert result.branch_info.current_branch == "develop"


def test_run_preparation_reports_disabled_tracking_comment() -> None:
    github = FakeGitHub()

    result = run_preparation(
        mode="agent",
        options=PrepareOptions(event=_event(), github=github),
        create_tracking_comment=False,
        progress_message="unused",
    )

    assert result.comment_id is None
    assert result.tracking_comment_unavailable == "disabled"
    assert github.created == []
    assert github.labels == [(123, ("agent:working",))]


def test_continuous_prepare_logs_settings(capsys: pytest.CaptureFixture[str]) -> None:
    configure_logging(verbose="high")
    event = _event(entity_number=None, continuous_mode="true", max_tasks="0")

    CONTINUOUS_MODE.prepare(PrepareOptions(event=event, github=FakeGitHub()))

    stderr = capsys.readouterr().err
    assert "event=continuous_settings" in stderr
    assert "max_tasks=0" in stderr
    assert "delay_between_tasks=5" in stderr
    assert "event=standalone_run" in stderr


def test_prepared_context_carries_result() -> None:
    event = _event()
    result = TAG_MODE.prepare(PrepareOptions(event=event, github=FakeGitHub()))

    context = with_preparation(TAG_MODE.prepare_context(event), result)

    assert isinstance(context, PreparedModeContext)
    assert context.task_id == result.task_id
    assert context.comment_id == result.comment_id
    assert context.base_branch == "main"
    with pytest.raises(ValueError, match="already prepared"):
        with_preparation(context, result)
