from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..lib.command import command_exists
from ..lib.desktop import render_quick_start, write_user_file
from ..lib.manifests import profile_value
from ..lib.pkg import flatpak_installed_apps
from ..state_store import add_warning

logger = logging.getLogger(__name__)


class VerifyStep:
    step_id = "190_verify"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        dry_run = bool(cfg.get("dry_run", False))

        commands = [str(c) for c in profile_value(profile, "verify.commands", [])]
        missing = [c for c in commands if not command_exists(c)]
        if missing:
            add_warning(state, missing_commands=missing)
        else:
            logger.info("All key applications are installed")

        apps = [str(a) for a in profile_value(profile, "flatpak.apps", [])]
        if apps:
            installed = flatpak_installed_apps(dry_run=dry_run)
            missing_apps = [a for a in apps if a not in installed]
            if missing_apps:
                add_warning(state, missing_flatpak_apps=missing_apps)

        home = Path(str(cfg.get("home") or Path.home()))
        write_user_file(
            home / "QUICK_START.md",
            render_quick_start(str(profile.get("id", cfg.get("profile", ""))), apps, decisions.get("config_dirs") or []),
            dry_run=dry_run,
        )

        logger.info("Desktop setup complete. Reboot to pick up the boot splash and cursor theme.")
        return state
