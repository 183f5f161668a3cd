from __future__ import annotations

from repobot.config import ActionInputs
from repobot.models import GitHubEvent
from repobot.triggers import entity_labels, triggering_body


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _entity_reference_lines(event: GitHubEvent) -> list[str]:
    if event.entity_number is None:
        return []
    return [
        f"- **{event.entity_kind}**: #{event.entity_number}",
        f"- **URL**: {event.entity_url}",
    ]


def build_github_context_block(*, event: GitHubEvent) -> str:
    event_line = f"- **Event**: {event.event_name}"
    if event.event_action:
        event_line += f" ({event.event_action})"
    return "\n".join(
        [
            "## GitHub Context",
            "",
            f"- **Actor**: {event.actor}",
            event_line,
            f"- **Repository**: {event.repository.full_name}",
            f"- **Run ID**: {event.run_id}",
        ]
    )


def build_tag_prompt(*, event: GitHubEvent) -> str:
    inputs = event.inputs
    request = triggering_body(event.payload).strip() or "Help with this issue."
    sections = [
        f"You are {inputs.display_name}, an AI coding assistant. "
        f"You were mentioned with {inputs.trigger_phrase} in {event.repository.full_name}.",
        f"## Request\n\n{request}",
    ]

    if event.entity_number is not None:
        context_lines = [
            f"## {event.entity_kind} Context",
            "",
            f"- **Number**: #{event.entity_number}",
            f"- **Repository**: {event.repository.full_name}",
            f"- **URL**: {event.entity_url}",
        ]
        labels = entity_labels(event.payload)
        if labels:
            context_lines.append(f"- **Labels**: {', '.join(labels)}")
        sections.append("\n".join(context_lines))

    sections.append(
        """
## Instructions

1. Analyze the request and the codebase
2. Create a plan for the changes needed
3. Implement the changes on a new branch
4. Create a pull request with your changes
5. Add a summary comment when done
""".strip()
    )

    if inputs.prompt != "":
        sections.append(f"## Additional Context\n\n{inputs.prompt}")
    return "\n\n".join(sections) + "\n"


def build_agent_prompt(*, event: GitHubEvent) -> str:
    inputs = event.inputs
    sections = [f"You are {inputs.display_name}, an AI coding assistant."]

    issue = event.payload.issue if event.payload is not None else None
    if inputs.prompt != "":
        sections.append(f"## Task\n\n{inputs.prompt}")
    elif event.event_name == "issues" and event.entity_number is not None and issue is not None:
        body = issue.body or "(No description)"
        sections.append(
            f"## Task\n\nProcess this issue:\n\n**Title:** {issue.title}\n\n**Body:**\n{body}"
        )
    else:
        sections.append("## Task\n\nHelp with this repository.")

    repository_lines = [
        "## Repository Context",
        "",
        f"- **Repository**: {event.repository.full_name}",
        *_entity_reference_lines(event),
    ]
    sections.append("\n".join(repository_lines))

    sections.append(
        """
## Instructions

1. Understand the task and analyze the codebase
2. Create a plan for implementation
3. Implement the changes
4. Test and verify the changes
5. Report results
""".strip()
    )
    return "\n\n".join(sections) + "\n"


def build_continuous_prompt(*, event: GitHubEvent) -> str:
    inputs = event.inputs
    sections = [
        f"You are {inputs.display_name}, an AI coding assistant running in continuous mode. "
        f"Work through the pending tasks of {event.repository.full_name} one at a time.",
        "\n".join(
            [
                "## Continuous Mode Configuration",
                "",
                f"- **Max Tasks**: {inputs.max_tasks}",
                f"- **Task Source**: {inputs.task_source}",
                f"- **Auto-Merge**: {_flag(inputs.auto_merge)}",
                f"- **Close Issues**: {_flag(inputs.close_issues)}",
            ]
        ),
    ]
    if inputs.prompt != "":
        sections.append(f"## Initial Context\n\n{inputs.prompt}")

    sections.append(
        """
## Instructions

1. Fetch pending tasks from the configured task source
2. Process each task sequentially, highest priority first
3. Create a pull request for each completed task
4. Optionally auto-merge the pull request once required checks pass
5. Mark task as complete and close the source issue when configured
6. Continue until no tasks remain or the max task limit is reached
""".strip()
    )
    return "\n\n".join(sections) + "\n"


def build_continuous_settings_block(*, inputs: ActionInputs) -> str:
    return "\n".join(
        [
            "## Continuous Mode Settings",
            "",
            f"- **Max Tasks**: {inputs.max_tasks}",
            f"- **Delay Between Tasks**: {inputs.delay_between_tasks}s",
            f"- **Auto-Merge**: {_flag(inputs.auto_merge)}",
            f"- **Close Issues**: {_flag(inputs.close_issues)}",
            f"- **Task Source**: {inputs.task_source}",
        ]
    )


def build_continuous_system_prompt(*, event: GitHubEvent) -> str:
    return (
        build_continuous_settings_block(inputs=event.inputs)
        + "\n\n"
        + build_github_context_block(event=event)
        + "\n"
    )
