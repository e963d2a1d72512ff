from __future__ import annotations

import logging

from .chroot import chroot_cmd
from .sysconfig import read_target_file, set_grub_option, write_target_file

logger = logging.getLogger(__name__)


def install_grub_efi(
    *,
    target_root: str,
    bootloader_id: str = "Arch Linux",
    dry_run: bool = False,
) -> None:
    """Install GRUB for x86_64 EFI targets."""

    # Assumes /boot/efi is mounted in target.
    chroot_cmd(
        target_root,
        [
            "grub-install",
            "--target=x86_64-efi",
            "--efi-directory=/boot/efi",
            f"--bootloader-id={bootloader_id}",
        ],
        dry_run=dry_run,
    )
    logger.info("GRUB EFI installed (id=%s)", bootloader_id)


def configure_grub(
    *,
    target_root: str,
    timeout: int = 0,
    cmdline_default: str | None = None,
    dry_run: bool = False,
) -> None:
    """Adjust /etc/default/grub and regenerate grub.cfg."""

    defaults = read_target_file(target_root, "/etc/default/grub")
    defaults = set_grub_option(defaults, "GRUB_TIMEOUT", str(int(timeout)))
    if cmdline_default is not None:
        defaults = set_grub_option(defaults, "GRUB_CMDLINE_LINUX_DEFAULT", f'"{cmdline_default}"')
    write_target_file(target_root, "/etc/default/grub", defaults, dry_run=dry_run)

    chroot_cmd(target_root, ["grub-mkconfig", "-o", "/boot/grub/grub.cfg"], dry_run=dry_run)
