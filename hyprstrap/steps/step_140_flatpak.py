from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..lib.desktop import FLATPAK_EXPORTS, copy_flatpak_launchers
from ..lib.manifests import profile_value
from ..lib.pkg import FLATHUB_URL, flatpak_add_remote, flatpak_install
from ..state_store import add_warning, record_decision

logger = logging.getLogger(__name__)


class FlatpakStep:
    step_id = "140_flatpak"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        dry_run = bool(cfg.get("dry_run", False))

        remote = str(profile_value(profile, "flatpak.remote", "flathub"))
        flatpak_add_remote(remote, str(profile_value(profile, "flatpak.remote_url", FLATHUB_URL)), dry_run=dry_run)

        installed = []
        for app in [str(a) for a in profile_value(profile, "flatpak.apps", [])]:
            if flatpak_install(app, remote, dry_run=dry_run):
                installed.append(app)
            else:
                add_warning(state, flatpak_app=app, reason="install_failed")

        launchers = copy_flatpak_launchers(
            installed,
            Path(str(cfg.get("home") or Path.home())),
            exports_dir=str(cfg.get("flatpak_exports_dir") or FLATPAK_EXPORTS),
            dry_run=dry_run,
        )
        record_decision(state, "flatpak_launchers", launchers)

        logger.info("Flatpak configured with remote %s", remote)
        return state
