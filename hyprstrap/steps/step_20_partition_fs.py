from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.env import PATHS
from ..lib.manifests import profile_value
from ..lib.prompt import require_confirmation
from ..lib.storage import PartitionPlan, block_device_exists, describe_layout, partition_and_format

logger = logging.getLogger(__name__)


class PartitionFilesystemStep:
    step_id = "20_partition_fs"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.setdefault("config", {})
        profile = state.get("profile") or {}
        exe = state.setdefault("execution", {})

        target_disk = cfg.get("target_disk")
        if not target_disk:
            raise RuntimeError("config.target_disk is required for partitioning")

        dry_run = bool(cfg.get("dry_run", False))
        target_root = cfg.get("target_root") or PATHS.target_root

        plan = PartitionPlan(
            disk=target_disk,
            esp_size=str(profile_value(profile, "disk.esp_size", "512M")),
            swap_size=profile_value(profile, "disk.swap_size"),
            root_fs=str(profile_value(profile, "disk.root_fs", "btrfs")),
        )

        if not block_device_exists(target_disk, dry_run=dry_run):
            raise RuntimeError(f"Disk {target_disk} not found")

        logger.warning("This will ERASE ALL DATA on %s and create:", target_disk)
        for line in describe_layout(plan):
            logger.warning("  - %s", line)
        require_confirmation(f"Erase {target_disk}?", assume_yes=bool(cfg.get("assume_yes", False)))

        result = partition_and_format(plan=plan, target_root=target_root, dry_run=dry_run)

        mounts = exe.setdefault("mounts", {})
        mounts["target_root"] = target_root
        mounts["esp_part"] = result.esp_part
        mounts["swap_part"] = result.swap_part
        mounts["root_part"] = result.root_part

        logger.info("Partitioned and mounted target_root=%s", target_root)
        return state
