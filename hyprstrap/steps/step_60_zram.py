from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.chroot import chroot_cmd
from ..lib.manifests import profile_value
from ..lib.pkg import pacman_install
from ..lib.sysconfig import render_zram_config, write_target_file

logger = logging.getLogger(__name__)


class ZramStep:
    step_id = "60_zram"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        if not bool(profile_value(profile, "zram.enabled", False)):
            logger.info("ZRAM disabled by profile")
            return state

        dry_run = bool(cfg.get("dry_run", False))
        size = str(profile_value(profile, "zram.size", "ram * 0.95"))
        algorithm = str(profile_value(profile, "zram.algorithm", "zstd"))

        pacman_install(target_root, ["zram-generator"], dry_run=dry_run)
        write_target_file(
            target_root,
            "/etc/systemd/zram-generator.conf",
            render_zram_config(size, algorithm),
            dry_run=dry_run,
        )
        chroot_cmd(target_root, ["systemctl", "enable", "systemd-zram-setup@zram0.service"], dry_run=dry_run)

        logger.info("ZRAM configured (size=%s algorithm=%s)", size, algorithm)
        return state
