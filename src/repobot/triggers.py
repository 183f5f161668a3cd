from __future__ import annotations

from repobot.models import EventPayload, GitHubEvent


AGENT_TASK_LABEL = "agent-task"


def triggering_body(payload: EventPayload | None) -> str:
    """Text that can carry the trigger phrase: comment, then issue, then PR body."""
    if payload is None:
        return ""
    if payload.comment_body:
        return payload.comment_body
    if payload.issue is not None and payload.issue.body:
        return payload.issue.body
    if payload.pull_request is not None and payload.pull_request.body:
        return payload.pull_request.body
    return ""


def entity_labels(payload: EventPayload | None) -> tuple[str, ...]:
    if payload is None or payload.entity is None:
        return ()
    return payload.entity.labels


def entity_assignees(payload: EventPayload | None) -> tuple[str, ...]:
    if payload is None or payload.entity is None:
        return ()
    return payload.entity.assignees


def mentions_trigger_phrase(event: GitHubEvent) -> bool:
    phrase = event.inputs.trigger_phrase.lower()
    if not phrase:
        return False
    return phrase in triggering_body(event.payload).lower()


def has_trigger_label(event: GitHubEvent) -> bool:
    wanted = event.inputs.label_trigger.lower()
    return any(label.lower() == wanted for label in entity_labels(event.payload))


def has_trigger_assignee(event: GitHubEvent) -> bool:
    wanted = event.inputs.assignee_trigger.lower()
    return any(login.lower() == wanted for login in entity_assignees(event.payload))


def is_tag_trigger(event: GitHubEvent) -> bool:
    if event.entity_number is None:
        return False
    return mentions_trigger_phrase(event) or has_trigger_label(event) or has_trigger_assignee(event)


def is_agent_trigger(event: GitHubEvent) -> bool:
    if event.inputs.prompt != "":
        return True
    if event.event_name == "workflow_dispatch":
        return True
    if event.event_name != "issues":
        return False
    if event.event_action == "opened":
        return True
    if event.event_action == "labeled":
        issue = event.payload.issue if event.payload is not None else None
        if issue is None:
            return False
        return AGENT_TASK_LABEL in issue.labels
    return False


def is_continuous_trigger(event: GitHubEvent) -> bool:
    return event.inputs.continuous_mode
