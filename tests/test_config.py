from __future__ import annotations

from pathlib import Path

import pytest

from repobot import config
from repobot.config import ActionInputs, ConfigError


def _write(path: Path, content: str) -> Path:
    path.write_text(content, encoding="utf-8")
    return path


def test_parse_inputs_applies_defaults_for_empty_and_missing_values() -> None:
    parsed = config.parse_inputs({"max_tasks": "", "task_source": "", "auto_merge": ""})

    assert parsed == ActionInputs()
    assert parsed.trigger_phrase == "@repobot"
    assert parsed.max_tasks == 100
    assert parsed.task_source == "github-issues"
    assert parsed.auto_merge is True
    assert parsed.close_issues is True
    assert parsed.delay_between_tasks == 5
    assert parsed.base_branch is None
    assert parsed.working_label == "agent:working"


def test_parse_inputs_keeps_explicit_zero_and_false() -> None:
    parsed = config.parse_inputs(
        {
            "max_tasks": "0",
            "delay_between_tasks": "0",
            "auto_merge": "false",
            "close_issues": "false",
        }
    )

    assert parsed.max_tasks == 0
    assert parsed.delay_between_tasks == 0
    assert parsed.auto_merge is False
    assert parsed.close_issues is False


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("true", True), ("false", False), ("", False), ("TRUE", False), ("True", False), (" true", False)],
)
def test_continuous_mode_requires_exact_lowercase_true(raw: str, expected: bool) -> None:
    assert config.parse_inputs({"continuous_mode": raw}).continuous_mode is expected


def test_parse_inputs_accepts_camel_case_aliases() -> None:
    parsed = config.parse_inputs(
        {
            "triggerPhrase": "@custombot",
            "continuousMode": "true",
            "maxTasks": "25",
            "baseBranch": "develop",
            "botName": "custombot[bot]",
        }
    )

    assert parsed.trigger_phrase == "@custombot"
    assert parsed.continuous_mode is True
    assert parsed.max_tasks == 25
    assert parsed.base_branch == "develop"
    assert parsed.display_name == "custombot"


def test_snake_case_key_wins_over_camel_alias() -> None:
    assert config.parse_inputs({"maxTasks": "3", "max_tasks": "7"}).max_tasks == 7
    assert config.parse_inputs({"max_tasks": "7", "maxTasks": "3"}).max_tasks == 7


@pytest.mark.parametrize(
    ("key", "value"),
    [("max_tasks", "-1"), ("max_tasks", "ten"), ("delay_between_tasks", "1.5")],
)
def test_parse_inputs_rejects_non_numeric_counts(key: str, value: str) -> None:
    with pytest.raises(ConfigError, match=key):
        config.parse_inputs({key: value})


def test_parse_inputs_rejects_unknown_flag_values() -> None:
    with pytest.raises(ConfigError, match="auto_merge must be 'true' or 'false'"):
        config.parse_inputs({"auto_merge": "yes"})


def test_working_label_can_be_disabled_or_overridden() -> None:
    assert config.parse_inputs({"working_label": "none"}).working_label is None
    assert config.parse_inputs({"working_label": "bot:busy"}).working_label == "bot:busy"


def test_display_name_strips_bot_suffix() -> None:
    assert ActionInputs().display_name == "repobot"
    assert ActionInputs(bot_name="helper").display_name == "helper"
    assert ActionInputs(bot_name="[bot]").display_name == "repobot"


def test_inputs_from_environ_reads_known_input_variables() -> None:
    environ = {
        "INPUT_PROMPT": "do it",
        "INPUT_CONTINUOUS_MODE": "true",
        "INPUT_UNRELATED": "x",
        "HOME": "/root",
    }

    assert config.inputs_from_environ(environ) == {"prompt": "do it", "continuous_mode": "true"}


def test_merge_inputs_ignores_empty_overrides() -> None:
    merged = config.merge_inputs(
        {"base_branch": "develop", "maxTasks": "5"},
        {"base_branch": "", "max_tasks": "9", "prompt": ""},
    )

    assert merged == {"base_branch": "develop", "max_tasks": "9", "prompt": ""}


def test_load_input_defaults_normalizes_toml_values(tmp_path: Path) -> None:
    cfg_path = _write(
        tmp_path / "repobot.toml",
        """
[inputs]
trigger_phrase = "@helper"
maxTasks = 25
auto_merge = false
base_branch = "develop"
""".strip(),
    )

    loaded = config.load_input_defaults(cfg_path)

    assert loaded == {
        "trigger_phrase": "@helper",
        "max_tasks": "25",
        "auto_merge": "false",
        "base_branch": "develop",
    }
    parsed = config.parse_inputs(loaded)
    assert parsed.max_tasks == 25
    assert parsed.auto_merge is False


def test_load_input_defaults_without_inputs_table(tmp_path: Path) -> None:
    cfg_path = _write(tmp_path / "repobot.toml", "[other]\nkey = 1\n")
    assert config.load_input_defaults(cfg_path) == {}


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("inputs = 3", r"\[inputs\] must be a TOML table"),
        ("[inputs]\nsurprise = 'x'", "Unknown input 'surprise'"),
        ("[inputs]\nmax_tasks = -2", "max_tasks must be >= 0"),
        ("[inputs]\nprompt = [1, 2]", "prompt must be a string, integer or boolean"),
    ],
)
def test_load_input_defaults_rejects_bad_tables(tmp_path: Path, body: str, message: str) -> None:
    cfg_path = _write(tmp_path / "repobot.toml", body)
    with pytest.raises(ConfigError, match=message):
        config.load_input_defaults(cfg_path)
