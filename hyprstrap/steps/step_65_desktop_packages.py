from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.manifests import profile_value
from ..lib.pkg import pacman_install, pacman_upgrade

logger = logging.getLogger(__name__)


class DesktopPackagesStep:
    step_id = "65_desktop_packages"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        dry_run = bool(cfg.get("dry_run", False))

        groups = profile_value(profile, "package_groups", {})
        if not isinstance(groups, dict):
            raise RuntimeError("profile.package_groups must be a mapping of group -> packages")

        pacman_upgrade(target_root, dry_run=dry_run)

        installed: Dict[str, list[str]] = {}
        for name, pkgs in groups.items():
            if not isinstance(pkgs, list):
                raise RuntimeError(f"Package group {name} must be a list")
            packages = [str(p).strip() for p in pkgs if str(p).strip()]
            logger.info("Installing package group %s (%d packages)", name, len(packages))
            pacman_install(target_root, packages, dry_run=dry_run)
            installed[name] = packages

        state.setdefault("execution", {}).setdefault("plan", {})["package_groups"] = installed
        return state
