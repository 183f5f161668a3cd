from __future__ import annotations

import argparse
from collections.abc import Mapping
import json
import os
from pathlib import Path

from repobot.config import load_input_defaults
from repobot.github_event import load_event_from_env
from repobot.github_gateway import GitHubGateway
from repobot.mode import Mode
from repobot.mode_context import with_preparation
from repobot.mode_registry import get_mode
from repobot.models import GitHubEvent
from repobot.observability import configure_logging
from repobot.preparation import PrepareOptions


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="repobot")
    subparsers = parser.add_subparsers(dest="command", required=True)

    detect_parser = subparsers.add_parser(
        "detect", help="Select the mode for the current GitHub event and print it as JSON"
    )
    _add_common_arguments(detect_parser)

    prepare_parser = subparsers.add_parser(
        "prepare",
        help="Select a mode, prepare the tracking comment and branch, and print the prompts",
    )
    _add_common_arguments(prepare_parser)
    prepare_parser.add_argument(
        "--token",
        type=str,
        default=None,
        help="GitHub token for comment operations (defaults to GITHUB_TOKEN)",
    )

    return parser


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="TOML file whose [inputs] table provides default action inputs",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        nargs="?",
        const="high",
        default=None,
        choices=("low", "high"),
        help="Enable runtime logging to stderr (low: decisions and failures only)",
    )


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(args.verbose)
    event = _load_event(args.config, os.environ)

    if args.command == "detect":
        _cmd_detect(event)
        return
    if args.command == "prepare":
        _cmd_prepare(event, token=args.token or os.environ.get("GITHUB_TOKEN"))
        return

    raise RuntimeError(f"Unknown command: {args.command}")


def _load_event(config_path: Path | None, environ: Mapping[str, str]) -> GitHubEvent:
    defaults = load_input_defaults(config_path) if config_path is not None else None
    return load_event_from_env(environ, input_defaults=defaults)


def _cmd_detect(event: GitHubEvent) -> None:
    mode = get_mode(event)
    print(json.dumps(_mode_summary(mode), indent=2))


def _cmd_prepare(event: GitHubEvent, *, token: str | None) -> None:
    mode = get_mode(event)
    github = GitHubGateway(event.repository.owner, event.repository.repo, token=token)
    result = mode.prepare(PrepareOptions(event=event, github=github))
    context = with_preparation(mode.prepare_context(event), result)
    payload = {
        **_mode_summary(mode),
        "should_execute": result.should_execute,
        "task_id": context.task_id,
        "comment_id": context.comment_id,
        "tracking_comment_unavailable": context.tracking_comment_unavailable,
        "branch_info": {
            "base_branch": context.base_branch,
            "claude_branch": context.claude_branch,
            "current_branch": context.current_branch,
        },
        "prompt": mode.generate_prompt(context),
        "system_prompt": mode.system_prompt_or_default(context),
    }
    print(json.dumps(payload, indent=2))


def _mode_summary(mode: Mode) -> dict[str, object]:
    return {
        "mode": mode.name,
        "description": mode.description,
        "allowed_tools": list(mode.get_allowed_tools()),
        "disallowed_tools": list(mode.get_disallowed_tools()),
        "create_tracking_comment": mode.should_create_tracking_comment(),
    }
