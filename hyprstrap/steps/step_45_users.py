from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.chroot import chroot_argv, chroot_cmd, user_exists
from ..lib.command import run_with_retries
from ..lib.sysconfig import enable_wheel_sudo, read_target_file, write_target_file

logger = logging.getLogger(__name__)


class UsersStep:
    step_id = "45_users"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        username = str(cfg.get("username", "")).strip()
        if not username:
            raise RuntimeError("config.username is required")

        dry_run = bool(cfg.get("dry_run", False))
        attempts = int(cfg.get("password_attempts", 3))

        logger.info("Set the root password")
        run_with_retries(chroot_argv(target_root, ["passwd"]), attempts=attempts, interactive=True, dry_run=dry_run)

        if user_exists(target_root, username, dry_run=dry_run):
            logger.info("User %s already exists", username)
        else:
            chroot_cmd(target_root, ["useradd", "-mG", "wheel", "-s", "/bin/bash", username], dry_run=dry_run)

        logger.info("Set the password for %s", username)
        run_with_retries(
            chroot_argv(target_root, ["passwd", username]),
            attempts=attempts,
            interactive=True,
            dry_run=dry_run,
        )

        sudoers = enable_wheel_sudo(read_target_file(target_root, "/etc/sudoers"))
        write_target_file(target_root, "/etc/sudoers", sudoers, dry_run=dry_run, mode=0o440)

        state.setdefault("execution", {}).setdefault("decisions", {})["user"] = {
            "username": username,
            "groups": ["wheel"],
        }
        logger.info("Configured user %s with sudo via wheel", username)
        return state
