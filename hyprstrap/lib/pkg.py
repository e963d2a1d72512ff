from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence, Set

from .chroot import chroot_cmd
from .command import CommandError, command_exists, run_cmd

logger = logging.getLogger(__name__)

PACMAN_INSTALL = ["pacman", "-S", "--noconfirm", "--needed", "--disable-download-timeout"]

YAY_REPO = "https://aur.archlinux.org/yay.git"
FLATHUB_URL = "https://dl.flathub.org/repo/flathub.flatpakrepo"


def refresh_keyring(*, dry_run: bool = False) -> None:
    run_cmd(["pacman", "-Sy", "--noconfirm", "archlinux-keyring"], dry_run=dry_run)


def pacstrap(target_root: str, packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        raise RuntimeError("pacstrap needs at least one package")
    run_cmd(["pacstrap", "-K", target_root, *packages], dry_run=dry_run)


def pacman_upgrade(target_root: str, *, dry_run: bool = False) -> None:
    chroot_cmd(target_root, ["pacman", "-Syu", "--noconfirm", "--disable-download-timeout"], dry_run=dry_run)


def pacman_install(target_root: str, packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    chroot_cmd(target_root, [*PACMAN_INSTALL, *packages], dry_run=dry_run)



def install_yay(build_dir: str = "/tmp/yay", repo: str = YAY_REPO, *, dry_run: bool = False) -> bool:
    """Build yay from the AUR. Returns False when it was already installed."""

    if not dry_run and command_exists("yay"):
        logger.info("yay already installed")
        return False

    d = Path(build_dir)
    if d.exists() and not dry_run:
        shutil.rmtree(d)
    run_cmd(["git", "clone", repo, str(d)], dry_run=dry_run)
    run_cmd(["makepkg", "-si", "--noconfirm", "--needed"], cwd=str(d), dry_run=dry_run)
    return True


def yay_install(package: str, *, dry_run: bool = False) -> bool:
    try:
        run_cmd(["yay", "-S", "--noconfirm", "--needed", package], dry_run=dry_run)
    except CommandError as e:
        logger.warning("AUR package %s failed: %s", package, e)
        return False
    return True


def flatpak_add_remote(name: str = "flathub", url: str = FLATHUB_URL, *, dry_run: bool = False) -> None:
    run_cmd(["flatpak", "remote-add", "--if-not-exists", name, url], dry_run=dry_run)


def flatpak_install(app: str, remote: str = "flathub", *, dry_run: bool = False) -> bool:
    try:
        run_cmd(["flatpak", "install", "-y", "--noninteractive", remote, app], dry_run=dry_run)
    except CommandError as e:
        logger.warning("Flatpak app %s failed: %s", app, e)
        return False
    return True


def flatpak_installed_apps(*, dry_run: bool = False) -> Set[str]:
    r = run_cmd(["flatpak", "list", "--app", "--columns=application"], check=False, dry_run=dry_run)
    return {line.strip() for line in r.stdout.splitlines() if line.strip()}


def hyprpm_setup(repositories: Sequence[str], plugins: Sequence[str], *, dry_run: bool = False) -> None:
    """Fetch headers, add plugin repositories and enable plugins."""

    run_cmd(["hyprpm", "update"], dry_run=dry_run)
    for repo in repositories:
        # hyprpm asks for confirmation before building an added repository.
        run_cmd(["hyprpm", "add", repo], input_text="y\n", dry_run=dry_run)
    for plugin in plugins:
        run_cmd(["hyprpm", "enable", plugin], dry_run=dry_run)
