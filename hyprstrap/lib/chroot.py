from __future__ import annotations

import logging
from typing import Sequence

from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


def _is_live_root(target_root: str) -> bool:
    return target_root.rstrip("/") == ""


def chroot_argv(target_root: str, argv: Sequence[str]) -> list[str]:
    """Prefix argv with arch-chroot, unless target_root is ``/`` (already inside)."""

    if _is_live_root(target_root):
        return list(argv)
    return ["arch-chroot", target_root, *argv]


def chroot_cmd(
    target_root: str,
    argv: Sequence[str],
    *,
    check: bool = True,
    interactive: bool = False,
    dry_run: bool = False,
) -> CmdResult:
    """Run a command inside target root.

    arch-chroot takes care of the /dev, /proc, /sys and resolv.conf binds.
    """

    return run_cmd(chroot_argv(target_root, argv), check=check, interactive=interactive, dry_run=dry_run)



def user_exists(target_root: str, user: str, *, dry_run: bool = False) -> bool:
    if dry_run:
        return False
    r = chroot_cmd(target_root, ["id", "-u", user], check=False)
    return r.returncode == 0
