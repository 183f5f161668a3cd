from __future__ import annotations

import logging
from typing import Final, TypeGuard, assert_never

from repobot.agent_mode import AGENT_MODE
from repobot.continuous_mode import CONTINUOUS_MODE
from repobot.mode import Mode
from repobot.models import GitHubEvent, ModeName
from repobot.observability import log_event, log_warning_event
from repobot.tag_mode import TAG_MODE


LOGGER = logging.getLogger("repobot.mode_registry")

# Both the set of accepted names and the auto-detection precedence.
VALID_MODES: Final[tuple[ModeName, ...]] = ("tag", "agent", "continuous")


def is_valid_mode(name: str) -> TypeGuard[ModeName]:
    return name in VALID_MODES


def get_mode_by_name(name: str) -> Mode | None:
    if not is_valid_mode(name):
        return None
    return _mode_for(name)


def detect_mode_name(event: GitHubEvent) -> ModeName:
    for name in VALID_MODES:
        if _mode_for(name).should_trigger(event):
            return name
    # Nothing matched (e.g. a push without a prompt): fall back to direct automation.
    return "agent"


def get_mode(event: GitHubEvent) -> Mode:
    requested = event.inputs.mode
    if requested != "":
        if is_valid_mode(requested):
            log_event(
                LOGGER,
                "mode_detected",
                mode=requested,
                source="input",
                event_name=event.event_name,
                event_action=event.event_action,
            )
            return _mode_for(requested)
        log_warning_event(
            LOGGER,
            "mode_override_invalid",
            requested=requested,
            valid_modes=VALID_MODES,
        )

    name = detect_mode_name(event)
    log_event(
        LOGGER,
        "mode_detected",
        mode=name,
        source="auto",
        event_name=event.event_name,
        event_action=event.event_action,
        entity_number=event.entity_number,
    )
    return _mode_for(name)


def _mode_for(name: ModeName) -> Mode:
    if name == "tag":
        return TAG_MODE
    if name == "agent":
        return AGENT_MODE
    if name == "continuous":
        return CONTINUOUS_MODE
    assert_never(name)
