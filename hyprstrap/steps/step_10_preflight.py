from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.env import is_arch_iso, is_root
from ..lib.firmware import detect_firmware
from ..lib.net import is_online
from ..lib.prompt import require_confirmation
from ..state_store import add_warning

logger = logging.getLogger(__name__)


class PreflightStep:
    step_id = "10_preflight"

    def _fail(self, state: Dict[str, Any], check: str, message: str) -> None:
        if bool((state.get("config") or {}).get("dry_run", False)):
            add_warning(state, check=check, reason=message)
            return
        raise RuntimeError(message)

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        dry_run = bool(cfg.get("dry_run", False))

        if not is_root():
            self._fail(state, "root", "This installer must be run as root")

        if not is_arch_iso():
            self._fail(state, "live_iso", "Must run from the Arch Linux live ISO")

        logger.info("Verifying internet connection")
        if not is_online(dry_run=dry_run):
            self._fail(state, "internet", "No internet connection detected; connect first (iwctl / nmcli)")

        firmware = detect_firmware()
        state.setdefault("hardware", {})["firmware"] = firmware
        if firmware != "uefi":
            logger.warning("System is not booted in UEFI mode; the GRUB install targets x86_64-efi")
            require_confirmation("Continue without UEFI?", assume_yes=bool(cfg.get("assume_yes", False)))

        logger.info("Preflight passed (firmware=%s)", firmware)
        return state
