from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from typing import Protocol, cast
from urllib.parse import urlencode

from repobot.models import CreatedComment, IssueComment
from repobot.observability import log_event
from repobot.shell import run
from repobot.tracking_comment import has_marker


LOGGER = logging.getLogger("repobot.github_gateway")
_PAGE_SIZE = 100


class CommentGateway(Protocol):
    def find_bot_comment(
        self, issue_number: int, bot_login: str, marker: str
    ) -> IssueComment | None: ...

    def create_comment(self, issue_number: int, body: str) -> CreatedComment: ...

    def update_comment(self, comment_id: int, body: str) -> CreatedComment: ...

    def add_labels(self, issue_number: int, labels: tuple[str, ...]) -> None: ...


@dataclass(frozen=True)
class GitHubGateway:
    owner: str
    name: str
    token: str | None = field(default=None, repr=False, compare=False)

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"

    def list_issue_comments(self, issue_number: int) -> list[IssueComment]:
        comments: list[IssueComment] = []
        page = 1
        while True:
            query = urlencode({"per_page": str(_PAGE_SIZE), "page": str(page)})
            path = f"/repos/{self.owner}/{self.name}/issues/{issue_number}/comments?{query}"
            payload = self._api_json("GET", path)
            if not isinstance(payload, list):
                raise RuntimeError("Unexpected GitHub response: expected list of issue comments")
            for item in payload:
                item_obj = _as_object_dict(item)
                if item_obj is None:
                    continue
                comments.append(_parse_issue_comment(item_obj))
            if len(payload) < _PAGE_SIZE:
                break
            page += 1
        log_event(
            LOGGER,
            "github_read",
            endpoint="issue_comments",
            issue_number=issue_number,
            count=len(comments),
        )
        return comments

    def find_bot_comment(
        self, issue_number: int, bot_login: str, marker: str
    ) -> IssueComment | None:
        wanted_login = bot_login.strip().lower()
        for comment in self.list_issue_comments(issue_number):
            if comment.user_login != wanted_login:
                continue
            if has_marker(comment.body, marker):
                return comment
        return None

    def create_comment(self, issue_number: int, body: str) -> CreatedComment:
        path = f"/repos/{self.owner}/{self.name}/issues/{issue_number}/comments"
        try:
            payload = self._api_json("POST", path, payload={"body": body})
            created = _parse_created_comment(payload)
        except Exception as exc:  # noqa: BLE001
            log_event(
                LOGGER,
                "github_comment_create_failed",
                repo_full_name=self.full_name,
                issue_number=issue_number,
                error_type=type(exc).__name__,
            )
            raise
        log_event(
            LOGGER,
            "github_comment_created",
            issue_number=issue_number,
            comment_id=created.comment_id,
        )
        return created

    def update_comment(self, comment_id: int, body: str) -> CreatedComment:
        path = f"/repos/{self.owner}/{self.name}/issues/comments/{comment_id}"
        try:
            payload = self._api_json("PATCH", path, payload={"body": body})
            updated = _parse_created_comment(payload)
        except Exception as exc:  # noqa: BLE001
            log_event(
                LOGGER,
                "github_comment_update_failed",
                repo_full_name=self.full_name,
                comment_id=comment_id,
                error_type=type(exc).__name__,
            )
            raise
        log_event(LOGGER, "github_comment_updated", comment_id=comment_id)
        return updated

    def delete_comment(self, comment_id: int) -> None:
        path = f"/repos/{self.owner}/{self.name}/issues/comments/{comment_id}"
        self._api_call("DELETE", path)
        log_event(LOGGER, "github_comment_deleted", comment_id=comment_id)

    def add_labels(self, issue_number: int, labels: tuple[str, ...]) -> None:
        path = f"/repos/{self.owner}/{self.name}/issues/{issue_number}/labels"
        self._api_json("POST", path, payload={"labels": list(labels)})
        log_event(LOGGER, "github_labels_added", issue_number=issue_number, labels=labels)

    def _api_json(self, method: str, path: str, payload: dict[str, object] | None = None) -> object:
        raw = self._api_call(method, path, payload=payload)
        if not raw.strip():
            return None
        return json.loads(raw)

    def _api_call(self, method: str, path: str, payload: dict[str, object] | None = None) -> str:
        cmd = ["gh", "api", "--method", method.upper(), path]
        stdin_payload: str | None = None
        if payload is not None:
            cmd.extend(["--input", "-"])
            stdin_payload = json.dumps(payload)
        extra_env = {"GH_TOKEN": self.token} if self.token else None
        return run(cmd, input_text=stdin_payload, extra_env=extra_env)


def _parse_issue_comment(item_obj: dict[str, object]) -> IssueComment:
    user_obj = _as_object_dict(item_obj.get("user"))
    return IssueComment(
        comment_id=_as_int(item_obj.get("id"), field="id"),
        body=_as_string(item_obj.get("body")),
        user_login=_as_login(user_obj.get("login") if user_obj else None),
        html_url=_as_string(item_obj.get("html_url")),
    )


def _parse_created_comment(payload: object) -> CreatedComment:
    payload_obj = _as_object_dict(payload)
    if payload_obj is None:
        raise RuntimeError("Unexpected GitHub response: expected object for comment")
    return CreatedComment(
        comment_id=_as_int(payload_obj.get("id"), field="id"),
        html_url=_as_string(payload_obj.get("html_url")),
    )


def _as_object_dict(value: object) -> dict[str, object] | None:
    if not isinstance(value, dict):
        return None
    if not all(isinstance(key, str) for key in value.keys()):
        return None
    return cast(dict[str, object], value)


def _as_string(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def _as_login(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip().lower()


def _as_int(value: object, *, field: str) -> int:
    if isinstance(value, bool):
        raise RuntimeError(f"Unexpected GitHub response type for {field}")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Unexpected GitHub response value for {field}: {value}") from exc
    raise RuntimeError(f"Unexpected GitHub response type for {field}")
