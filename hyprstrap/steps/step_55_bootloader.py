from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.bootloader import configure_grub, install_grub_efi
from ..lib.manifests import profile_value

logger = logging.getLogger(__name__)


class BootloaderStep:
    step_id = "55_bootloader"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        dry_run = bool(cfg.get("dry_run", False))
        bootloader_id = str(profile_value(profile, "bootloader.id", "Arch Linux"))

        install_grub_efi(target_root=target_root, bootloader_id=bootloader_id, dry_run=dry_run)
        configure_grub(
            target_root=target_root,
            timeout=int(profile_value(profile, "bootloader.timeout", 0)),
            cmdline_default=profile_value(profile, "bootloader.cmdline_default"),
            dry_run=dry_run,
        )

        state.setdefault("execution", {}).setdefault("decisions", {})["bootloader_id"] = bootloader_id
        return state
