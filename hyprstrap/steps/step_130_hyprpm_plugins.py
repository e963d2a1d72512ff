from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.manifests import profile_value
from ..lib.pkg import hyprpm_setup

logger = logging.getLogger(__name__)


class HyprpmPluginsStep:
    step_id = "130_hyprpm_plugins"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}

        repositories = [str(r) for r in profile_value(profile, "hyprpm.repositories", [])]
        plugins = [str(p) for p in profile_value(profile, "hyprpm.plugins", [])]
        if not plugins:
            logger.info("No Hyprland plugins requested")
            return state

        hyprpm_setup(repositories, plugins, dry_run=bool(cfg.get("dry_run", False)))
        logger.info("Hyprland plugins enabled: %s", ", ".join(plugins))
        return state
