from __future__ import annotations

from collections.abc import Mapping
import logging
import os
import subprocess


class CommandError(RuntimeError):
    pass


LOGGER = logging.getLogger("repobot.shell")


def _preview(text: str, *, limit: int = 200) -> str:
    compact = text.replace("\n", "\\n").strip()
    if not compact:
        return "<empty>"
    if len(compact) <= limit:
        return compact
    return f"{compact[:limit]}..."


def run(
    argv: list[str],
    *,
    input_text: str | None = None,
    extra_env: Mapping[str, str] | None = None,
    check: bool = True,
) -> str:
    env: dict[str, str] | None = None
    if extra_env:
        env = dict(os.environ)
        env.update(extra_env)
    proc = subprocess.run(
        argv,
        input=input_text,
        env=env,
        text=True,
        capture_output=True,
        check=False,
    )
    if check and proc.returncode != 0:
        LOGGER.error(
            "event=command_failed command=%s exit_code=%s stderr=%s",
            " ".join(argv),
            proc.returncode,
            _preview(proc.stderr),
        )
        raise CommandError(
            "Command failed\n"
            f"cmd: {' '.join(argv)}\n"
            f"exit: {proc.returncode}\n"
            f"stderr:\n{proc.stderr}"
        )
    return proc.stdout
