from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.manifests import profile_value
from ..lib.pkg import yay_install
from ..state_store import add_warning

logger = logging.getLogger(__name__)


class AurPackagesStep:
    step_id = "125_aur_packages"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        dry_run = bool(cfg.get("dry_run", False))

        installed: list[str] = []
        for pkg in [str(p) for p in profile_value(profile, "aur.packages", [])]:
            if yay_install(pkg, dry_run=dry_run):
                installed.append(pkg)
            else:
                add_warning(state, aur_package=pkg, reason="install_failed")

        state.setdefault("execution", {}).setdefault("decisions", {})["aur_packages"] = installed
        return state
