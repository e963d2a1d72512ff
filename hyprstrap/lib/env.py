from __future__ import annotations

import getpass
import os
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class Paths:
    target_root: str = "/mnt"
    state_default: str = "/var/lib/hyprstrap/state.json"
    log_default: str = "/var/log/hyprstrap.log"
    # Relative to the user's home; used by the post-reboot phase.
    user_state_dir: str = ".local/state/hyprstrap"


PATHS = Paths()


def is_root() -> bool:
    return os.geteuid() == 0


def current_user() -> str:
    return getpass.getuser()


def is_arch_iso(os_release: str = "/etc/os-release") -> bool:
    """True when running from the Arch Linux live environment."""

    try:
        return "Arch Linux" in Path(os_release).read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return False


def in_chroot() -> bool:
    """Compare / with PID 1's root; they differ inside arch-chroot."""

    try:
        ours = os.stat("/")
        init = os.stat("/proc/1/root/.")
    except OSError:
        return False
    return (ours.st_dev, ours.st_ino) != (init.st_dev, init.st_ino)


def user_state_path(home: str | Path) -> Path:
    return Path(home) / PATHS.user_state_dir / "state.json"
