from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.manifests import profile_value
from ..lib.pkg import pacstrap, refresh_keyring
from ..state_store import record_decision

logger = logging.getLogger(__name__)


class PacstrapStep:
    step_id = "25_pacstrap"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing; run partition step first")

        dry_run = bool(cfg.get("dry_run", False))

        packages = [str(p) for p in profile_value(profile, "base_packages", [])]
        if not packages:
            raise RuntimeError("profile.base_packages is empty")

        if bool(profile_value(profile, "refresh_keyring", False)):
            refresh_keyring(dry_run=dry_run)

        pacstrap(target_root, packages, dry_run=dry_run)
        record_decision(state, "base_packages", packages)

        logger.info("Base system installed into %s (%d packages)", target_root, len(packages))
        return state
