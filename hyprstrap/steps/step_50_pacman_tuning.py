from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.manifests import profile_value
from ..lib.sysconfig import add_pacman_option, read_target_file, write_target_file

logger = logging.getLogger(__name__)


class PacmanTuningStep:
    step_id = "50_pacman_tuning"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        options = [str(o) for o in profile_value(profile, "pacman_options", ["DisableDownloadTimeout"])]

        conf = read_target_file(target_root, "/etc/pacman.conf")
        for option in options:
            conf = add_pacman_option(conf, option)
        write_target_file(target_root, "/etc/pacman.conf", conf, dry_run=bool(cfg.get("dry_run", False)))

        logger.info("pacman.conf options enabled: %s", ", ".join(options))
        return state
