from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Mapping, Sequence

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandError(RuntimeError):
    """An external tool exited non-zero (or could not be started)."""

    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"Command failed ({returncode}): {_fmt_argv(self.argv)}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


def _fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    input_text: str | None = None,
    dry_run: bool = False,
    interactive: bool = False,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - Captures stdout/stderr unless ``interactive`` (passwd needs the tty).
    - dry_run logs but does not execute.
    """

    argv_list = list(argv)
    logger.info("CMD %s", _fmt_argv(argv_list))

    if dry_run:
        return CmdResult(argv=argv_list, returncode=0, stdout="", stderr="")

    try:
        if interactive:
            p = subprocess.run(
                argv_list,
                text=True,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
            )
        else:
            p = subprocess.run(
                argv_list,
                input=input_text,
                text=True,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                cwd=cwd,
                env=dict(os.environ, **(env or {})),
            )
    except FileNotFoundError as e:
        raise CommandError(argv_list, 127, f"{argv_list[0]}: command not found") from e

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    if check and p.returncode != 0:
        raise CommandError(argv_list, p.returncode, stderr)

    return CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)


def run_with_retries(
    argv: Sequence[str],
    *,
    attempts: int,
    interactive: bool = False,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command until it succeeds, at most ``attempts`` times."""

    if attempts < 1:
        raise ValueError("attempts must be >= 1")

    last_error: CommandError | None = None
    for attempt in range(1, attempts + 1):
        try:
            return run_cmd(argv, interactive=interactive, dry_run=dry_run)
        except CommandError as e:
            last_error = e
            logger.warning("Attempt %d/%d failed: %s", attempt, attempts, _fmt_argv(list(argv)))

    assert last_error is not None
    raise last_error


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None
