from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
import tomllib
from typing import cast


DEFAULT_BASE_BRANCH = "main"
DEFAULT_TRIGGER_PHRASE = "@repobot"
DEFAULT_LABEL_TRIGGER = "repobot"
DEFAULT_ASSIGNEE_TRIGGER = "repobot"
DEFAULT_BOT_NAME = "repobot[bot]"
DEFAULT_MAX_TASKS = 100
DEFAULT_TASK_SOURCE = "github-issues"
DEFAULT_DELAY_BETWEEN_TASKS = 5
DEFAULT_WORKING_LABEL = "agent:working"

INPUT_KEYS: tuple[str, ...] = (
    "trigger_phrase",
    "label_trigger",
    "assignee_trigger",
    "prompt",
    "mode",
    "continuous_mode",
    "max_tasks",
    "task_source",
    "auto_merge",
    "close_issues",
    "delay_between_tasks",
    "base_branch",
    "bot_name",
    "working_label",
)

_CAMEL_ALIASES: dict[str, str] = {
    "triggerPhrase": "trigger_phrase",
    "labelTrigger": "label_trigger",
    "assigneeTrigger": "assignee_trigger",
    "continuousMode": "continuous_mode",
    "maxTasks": "max_tasks",
    "taskSource": "task_source",
    "autoMerge": "auto_merge",
    "closeIssues": "close_issues",
    "delayBetweenTasks": "delay_between_tasks",
    "baseBranch": "base_branch",
    "botName": "bot_name",
    "workingLabel": "working_label",
}


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ActionInputs:
    trigger_phrase: str = DEFAULT_TRIGGER_PHRASE
    label_trigger: str = DEFAULT_LABEL_TRIGGER
    assignee_trigger: str = DEFAULT_ASSIGNEE_TRIGGER
    prompt: str = ""
    mode: str = ""
    continuous_mode: bool = False
    max_tasks: int = DEFAULT_MAX_TASKS
    task_source: str = DEFAULT_TASK_SOURCE
    auto_merge: bool = True
    close_issues: bool = True
    delay_between_tasks: int = DEFAULT_DELAY_BETWEEN_TASKS
    base_branch: str | None = None
    bot_name: str = DEFAULT_BOT_NAME
    working_label: str | None = DEFAULT_WORKING_LABEL

    @property
    def display_name(self) -> str:
        name = self.bot_name
        if name.endswith("[bot]"):
            name = name[: -len("[bot]")]
        return name or DEFAULT_BOT_NAME.removesuffix("[bot]")


def parse_inputs(raw: Mapping[str, str]) -> ActionInputs:
    """Convert the flat string inputs into ActionInputs.

    Only the empty string means "unset": `"0"` and `"false"` are explicit values.
    """
    values = _normalize_keys(raw)
    return ActionInputs(
        trigger_phrase=_str_or_default(values, "trigger_phrase", DEFAULT_TRIGGER_PHRASE),
        label_trigger=_str_or_default(values, "label_trigger", DEFAULT_LABEL_TRIGGER),
        assignee_trigger=_str_or_default(values, "assignee_trigger", DEFAULT_ASSIGNEE_TRIGGER),
        prompt=values.get("prompt", ""),
        mode=values.get("mode", "").strip(),
        continuous_mode=values.get("continuous_mode", "") == "true",
        max_tasks=_count_or_default(values, "max_tasks", DEFAULT_MAX_TASKS),
        task_source=_str_or_default(values, "task_source", DEFAULT_TASK_SOURCE),
        auto_merge=_flag_or_default(values, "auto_merge", True),
        close_issues=_flag_or_default(values, "close_issues", True),
        delay_between_tasks=_count_or_default(
            values, "delay_between_tasks", DEFAULT_DELAY_BETWEEN_TASKS
        ),
        base_branch=_optional_str(values, "base_branch"),
        bot_name=_str_or_default(values, "bot_name", DEFAULT_BOT_NAME),
        working_label=_working_label(values),
    )


def inputs_from_environ(environ: Mapping[str, str]) -> dict[str, str]:
    """Collect GitHub Actions `INPUT_*` variables keyed by input name."""
    out: dict[str, str] = {}
    for key in INPUT_KEYS:
        env_key = f"INPUT_{key.upper()}"
        if env_key in environ:
            out[key] = environ[env_key]
    return out


def load_input_defaults(path: Path) -> dict[str, str]:
    with path.open("rb") as fh:
        data = tomllib.load(fh)

    table = data.get("inputs", {})
    if not isinstance(table, dict):
        raise ConfigError("[inputs] must be a TOML table")
    out: dict[str, str] = {}
    for key, value in cast(dict[object, object], table).items():
        if not isinstance(key, str):
            raise ConfigError("[inputs] must have string keys")
        normalized_key = _CAMEL_ALIASES.get(key, key)
        if normalized_key not in INPUT_KEYS:
            raise ConfigError(f"Unknown input {key!r} in [inputs]")
        out[normalized_key] = _toml_value_as_input(value, key=key)
    return out


def merge_inputs(*layers: Mapping[str, str]) -> dict[str, str]:
    """Later layers win, but only with non-empty values."""
    merged: dict[str, str] = {}
    for layer in layers:
        for key, value in _normalize_keys(layer).items():
            if value != "" or key not in merged:
                merged[key] = value
    return merged


def _normalize_keys(raw: Mapping[str, str]) -> dict[str, str]:
    out: dict[str, str] = {}
    for key, value in raw.items():
        normalized_key = _CAMEL_ALIASES.get(key, key)
        # Snake-case keys take precedence over their camel-case aliases.
        if normalized_key in out and key != normalized_key:
            continue
        out[normalized_key] = value
    return out


def _str_or_default(values: dict[str, str], key: str, default: str) -> str:
    value = values.get(key, "")
    if value == "":
        return default
    return value


def _optional_str(values: dict[str, str], key: str) -> str | None:
    value = values.get(key, "").strip()
    if value == "":
        return None
    return value


def _count_or_default(values: dict[str, str], key: str, default: int) -> int:
    value = values.get(key, "").strip()
    if value == "":
        return default
    if not value.isdigit():
        raise ConfigError(f"{key} must be a non-negative integer, got {value!r}")
    return int(value)


def _flag_or_default(values: dict[str, str], key: str, default: bool) -> bool:
    value = values.get(key, "").strip()
    if value == "":
        return default
    if value == "true":
        return True
    if value == "false":
        return False
    raise ConfigError(f"{key} must be 'true' or 'false', got {value!r}")


def _working_label(values: dict[str, str]) -> str | None:
    value = values.get("working_label", "").strip()
    if value == "":
        return DEFAULT_WORKING_LABEL
    if value == "none":
        return None
    return value


def _toml_value_as_input(value: object, *, key: str) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        if value < 0:
            raise ConfigError(f"{key} must be >= 0")
        return str(value)
    if isinstance(value, str):
        return value
    raise ConfigError(f"{key} must be a string, integer or boolean")
