from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional

from .command import run_cmd

logger = logging.getLogger(__name__)

# fdisk GPT partition type aliases.
FDISK_TYPE_EFI = "1"
FDISK_TYPE_SWAP = "19"
FDISK_TYPE_LINUX = "20"

MKFS_BY_FS = {
    "btrfs": ["mkfs.btrfs", "-f"],
    "ext4": ["mkfs.ext4", "-F"],
}


@dataclass(frozen=True)
class PartitionPlan:
    disk: str
    esp_size: str = "512M"
    swap_size: Optional[str] = None
    root_fs: str = "btrfs"


@dataclass(frozen=True)
class PartitionResult:
    esp_part: str
    swap_part: Optional[str]
    root_part: str


def part_path(disk: str, n: int) -> str:
    # nvme/mmcblk devices use p suffix
    if disk.endswith(tuple("0123456789")):
        return f"{disk}p{n}"
    return f"{disk}{n}"


def _layout(plan: PartitionPlan) -> List[tuple[str, str, str]]:
    """(role, size, fdisk type) in partition order; empty size means the rest."""

    parts = [("EFI", plan.esp_size, FDISK_TYPE_EFI)]
    if plan.swap_size:
        parts.append(("swap", plan.swap_size, FDISK_TYPE_SWAP))
    parts.append(("root", "", FDISK_TYPE_LINUX))
    return parts


def build_fdisk_script(plan: PartitionPlan) -> str:
    """Keystrokes for fdisk: new GPT label, create every partition, then set types."""

    lines = ["g"]
    layout = _layout(plan)
    for n, (_, size, _) in enumerate(layout, start=1):
        lines += ["n", str(n), "", f"+{size}" if size else ""]
    # With more than one partition fdisk asks which one to retype.
    for n, (_, _, typecode) in enumerate(layout, start=1):
        lines += ["t", str(n), typecode]
    lines.append("w")
    return "\n".join(lines) + "\n"


def describe_layout(plan: PartitionPlan) -> List[str]:
    out = []
    for n, (role, size, _) in enumerate(_layout(plan), start=1):
        out.append(f"{part_path(plan.disk, n)} ({role}, {size or 'remaining space'})")
    return out


def block_device_exists(disk: str, *, dry_run: bool = False) -> bool:
    r = run_cmd(["lsblk", disk], check=False, dry_run=dry_run)
    if r.stdout:
        logger.info("Current layout of %s:\n%s", disk, r.stdout.rstrip())
    return r.returncode == 0


def partition_and_format(
    *,
    plan: PartitionPlan,
    target_root: str,
    dry_run: bool = False,
) -> PartitionResult:
    """Wipe the disk, create a GPT layout, format and mount it.

    Layout:
    - ESP (FAT32) mounted at /boot/efi
    - optional swap, activated immediately
    - root (btrfs by default) mounted at target_root
    """

    mkfs = MKFS_BY_FS.get(plan.root_fs)
    if not mkfs:
        raise RuntimeError(f"Unsupported root filesystem {plan.root_fs!r} (expected one of {sorted(MKFS_BY_FS)})")

    disk = plan.disk
    logger.info("Partitioning disk=%s swap=%s root_fs=%s", disk, plan.swap_size, plan.root_fs)

    run_cmd(["fdisk", disk], input_text=build_fdisk_script(plan), dry_run=dry_run)

    esp_part = part_path(disk, 1)
    swap_part = part_path(disk, 2) if plan.swap_size else None
    root_part = part_path(disk, 3 if plan.swap_size else 2)

    # Format
    run_cmd(["mkfs.fat", "-F32", esp_part], dry_run=dry_run)
    if swap_part:
        run_cmd(["mkswap", swap_part], dry_run=dry_run)
        run_cmd(["swapon", swap_part], dry_run=dry_run)
    run_cmd([*mkfs, root_part], dry_run=dry_run)

    # Mount
    run_cmd(["mount", root_part, target_root], dry_run=dry_run)
    run_cmd(["mkdir", "-p", f"{target_root}/boot/efi"], dry_run=dry_run)
    run_cmd(["mount", esp_part, f"{target_root}/boot/efi"], dry_run=dry_run)

    return PartitionResult(esp_part=esp_part, swap_part=swap_part, root_part=root_part)


def unmount_all(target_root: str, *, dry_run: bool = False) -> None:
    r = run_cmd(["umount", "-R", target_root], check=False, dry_run=dry_run)
    if r.returncode != 0:
        logger.warning("umount -R %s failed (exit %s)", target_root, r.returncode)
