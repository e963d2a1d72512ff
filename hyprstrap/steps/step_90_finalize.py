from __future__ import annotations

import copy
import logging
import time
from pathlib import Path
from typing import Any, Dict

from ..lib.chroot import chroot_cmd
from ..lib.command import run_cmd
from ..lib.env import PATHS
from ..lib.storage import unmount_all
from ..state_store import save_state

logger = logging.getLogger(__name__)


class FinalizeStep:
    step_id = "90_finalize"

    def _hand_over_state(self, state: Dict[str, Any], target_root: str, username: str, dry_run: bool) -> str:
        """Leave the state document in the user's home for the post-reboot phase."""

        home = f"/home/{username}"
        rel = f"{home}/{PATHS.user_state_dir}/state.json"
        dest = Path(target_root) / rel.lstrip("/")

        handover = copy.deepcopy(state)
        handover.setdefault("config", {})["home"] = home
        handover.setdefault("execution", {})["current_step"] = None

        if dry_run:
            logger.info("Would write %s", str(dest))
        else:
            save_state(str(dest), handover)
        chroot_cmd(target_root, ["chown", "-R", f"{username}:{username}", f"{home}/.local"], dry_run=dry_run)
        return rel

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        dry_run = bool(cfg.get("dry_run", False))
        username = str(cfg.get("username", "")).strip()
        if not username:
            raise RuntimeError("config.username is required")

        rel = self._hand_over_state(state, target_root, username, dry_run)
        state.setdefault("execution", {}).setdefault("decisions", {})["desktop_state_path"] = rel

        logger.info("Finalize summary: %s", (state.get("execution") or {}).get("decisions") or {})
        logger.info("After reboot:")
        logger.info("  1. Log in as %s", username)
        logger.info("  2. rfkill unblock all")
        logger.info("  3. nmcli dev wifi connect <SSID> password <password>")
        logger.info("  4. hyprstrap desktop")

        # Unmounting and reboot are operational and must be explicitly enabled.
        if bool(cfg.get("finalize_reboot", False)):
            delay = int(cfg.get("reboot_delay", 10))
            for remaining in range(delay, 0, -1):
                logger.info("Rebooting in %d seconds (Ctrl+C to cancel)", remaining)
                if not dry_run:
                    time.sleep(1)
            run_cmd(["sync"], dry_run=dry_run)
            unmount_all(target_root, dry_run=dry_run)
            run_cmd(["reboot"], dry_run=dry_run)

        return state
