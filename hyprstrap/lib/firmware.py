from __future__ import annotations

from pathlib import Path


def is_uefi(efi_dir: str = "/sys/firmware/efi") -> bool:
    """True if the *currently running* environment was booted through UEFI."""

    return Path(efi_dir).is_dir()


def detect_firmware(efi_dir: str = "/sys/firmware/efi") -> str:
    """Return 'uefi' or 'bios'."""

    return "uefi" if is_uefi(efi_dir) else "bios"
