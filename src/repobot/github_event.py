from __future__ import annotations

from collections.abc import Mapping
import json
from pathlib import Path
from typing import cast

from repobot.config import ActionInputs, inputs_from_environ, merge_inputs, parse_inputs
from repobot.models import EntityDetails, EventPayload, GitHubEvent, Repository


class EventLoadError(RuntimeError):
    """The runner environment does not describe a usable GitHub event."""


def parse_repository(full_name: str) -> Repository:
    owner, sep, repo = full_name.strip().partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise EventLoadError(f"Repository must look like 'owner/repo', got {full_name!r}")
    return Repository(owner=owner, repo=repo)


def event_from_payload(
    *,
    event_name: str,
    repository: Repository,
    actor: str,
    run_id: str,
    inputs: ActionInputs,
    payload: Mapping[str, object] | None,
) -> GitHubEvent:
    if payload is None:
        return GitHubEvent(
            event_name=event_name,
            actor=actor,
            repository=repository,
            run_id=run_id,
            inputs=inputs,
        )

    issue_obj = _as_object_dict(payload.get("issue"))
    pr_obj = _as_object_dict(payload.get("pull_request"))
    comment_obj = _as_object_dict(payload.get("comment"))

    entity_number: int | None = None
    for candidate in (issue_obj, pr_obj):
        if candidate is not None:
            entity_number = _as_optional_int(candidate.get("number"))
            if entity_number is not None:
                break

    # Comments on pull requests arrive as issue_comment with an issue.pull_request link.
    is_pr = pr_obj is not None or (issue_obj is not None and "pull_request" in issue_obj)

    action = payload.get("action")
    return GitHubEvent(
        event_name=event_name,
        actor=actor,
        repository=repository,
        run_id=run_id,
        inputs=inputs,
        event_action=action if isinstance(action, str) and action else None,
        is_pr=is_pr,
        entity_number=entity_number,
        payload=EventPayload(
            comment_body=_as_optional_str(comment_obj.get("body")) if comment_obj else None,
            issue=_parse_entity(issue_obj) if issue_obj is not None else None,
            pull_request=_parse_entity(pr_obj) if pr_obj is not None else None,
        ),
    )


def load_event_from_env(
    environ: Mapping[str, str],
    *,
    input_defaults: Mapping[str, str] | None = None,
) -> GitHubEvent:
    event_name = environ.get("GITHUB_EVENT_NAME", "").strip()
    if not event_name:
        raise EventLoadError("GITHUB_EVENT_NAME is required")
    repository = parse_repository(environ.get("GITHUB_REPOSITORY", ""))

    payload: dict[str, object] | None = None
    event_path = environ.get("GITHUB_EVENT_PATH", "").strip()
    if event_path:
        payload = _read_payload(Path(event_path))

    raw_inputs = merge_inputs(input_defaults or {}, inputs_from_environ(environ))
    return event_from_payload(
        event_name=event_name,
        repository=repository,
        actor=environ.get("GITHUB_ACTOR", ""),
        run_id=environ.get("GITHUB_RUN_ID", ""),
        inputs=parse_inputs(raw_inputs),
        payload=payload,
    )


def _read_payload(path: Path) -> dict[str, object]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise EventLoadError(f"Unable to read event payload at {path}: {exc}") from exc
    payload = _as_object_dict(raw)
    if payload is None:
        raise EventLoadError(f"Event payload at {path} must be a JSON object")
    return payload


def _parse_entity(obj: dict[str, object]) -> EntityDetails:
    return EntityDetails(
        title=_as_optional_str(obj.get("title")) or "",
        body=_as_optional_str(obj.get("body")),
        labels=_names(obj.get("labels"), key="name"),
        assignees=_assignee_logins(obj),
    )


def _assignee_logins(obj: dict[str, object]) -> tuple[str, ...]:
    logins = list(_names(obj.get("assignees"), key="login"))
    single = _as_object_dict(obj.get("assignee"))
    if single is not None:
        login = single.get("login")
        if isinstance(login, str) and login and login not in logins:
            logins.append(login)
    return tuple(logins)


def _names(value: object, *, key: str) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    names: list[str] = []
    for entry in value:
        entry_obj = _as_object_dict(entry)
        if entry_obj is None:
            continue
        name = entry_obj.get(key)
        if isinstance(name, str):
            names.append(name)
    return tuple(names)


def _as_object_dict(value: object) -> dict[str, object] | None:
    if not isinstance(value, dict):
        return None
    if not all(isinstance(key, str) for key in value.keys()):
        return None
    return cast(dict[str, object], value)


def _as_optional_str(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        return value
    return str(value)


def _as_optional_int(value: object) -> int | None:
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None
