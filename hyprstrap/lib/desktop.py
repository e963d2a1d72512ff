from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterable, List

from .command import run_cmd

logger = logging.getLogger(__name__)

FLATPAK_EXPORTS = "/var/lib/flatpak/exports/share/applications"


def clone_repo(url: str, dest: str, *, dry_run: bool = False) -> Path:
    """Fresh shallow clone; a leftover checkout from an earlier run is removed first."""

    d = Path(dest)
    if d.exists() and not dry_run:
        shutil.rmtree(d)
    run_cmd(["git", "clone", "--depth", "1", url, str(d)], dry_run=dry_run)
    return d


def download(url: str, dest: str, *, dry_run: bool = False) -> None:
    if not dry_run:
        Path(dest).parent.mkdir(parents=True, exist_ok=True)
    run_cmd(["curl", "-fL", "-o", dest, url], dry_run=dry_run)


def append_once(path: Path, marker: str, block: str, *, dry_run: bool = False) -> bool:
    """Append ``block`` (preceded by ``marker``) unless the marker is already there."""

    existing = path.read_text(encoding="utf-8") if path.exists() else ""
    if marker in existing.splitlines():
        return False
    if dry_run:
        logger.info("Would append %r block to %s", marker, str(path))
        return True
    path.parent.mkdir(parents=True, exist_ok=True)
    sep = "" if not existing or existing.endswith("\n") else "\n"
    with path.open("a", encoding="utf-8") as f:
        f.write(f"{sep}\n{marker}\n{block.rstrip()}\n")
    return True


def copy_flatpak_launchers(
    apps: Iterable[str],
    home: Path,
    *,
    exports_dir: str = FLATPAK_EXPORTS,
    dry_run: bool = False,
) -> List[str]:
    """Copy each app's exported .desktop file into ~/.local/share/applications.

    wofi only lists entries it finds there. Apps without an exported entry are
    skipped. Returns the apps whose launcher was copied.
    """

    src = Path(exports_dir)
    if not src.is_dir():
        logger.warning("No Flatpak exports at %s; launchers not copied", exports_dir)
        return []

    dst = Path(home) / ".local" / "share" / "applications"
    copied: List[str] = []
    for app in apps:
        entry = src / f"{app}.desktop"
        if not entry.is_file():
            logger.warning("No launcher exported for %s", app)
            continue
        if dry_run:
            logger.info("Would copy %s -> %s", str(entry), str(dst))
        else:
            dst.mkdir(parents=True, exist_ok=True)
            shutil.copy2(entry, dst / entry.name)
        copied.append(app)
    return copied


def write_user_file(path: Path, contents: str, *, dry_run: bool = False, executable: bool = False) -> None:
    if dry_run:
        logger.info("Would write %s", str(path))
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(contents, encoding="utf-8")
    if executable:
        os.chmod(path, 0o755)
    logger.info("Wrote %s", str(path))


def render_hyprpaper(wallpaper: str) -> str:
    return f"preload = {wallpaper}\nwallpaper = ,{wallpaper}\n"


def render_cursor_settings(theme: str, size: int = 24) -> str:
    return f"[Settings]\ngtk-cursor-theme-name={theme}\ngtk-cursor-theme-size={int(size)}\n"


def render_xresources(theme: str, size: int = 24) -> str:
    return f"Xcursor.theme: {theme}\nXcursor.size: {int(size)}\n"


SYSINFO_SCRIPT = """#!/bin/bash
echo "=== System Information ==="
echo "Hostname: $(hostname)"
echo "Kernel: $(uname -r)"
echo "Uptime: $(uptime -p)"
echo ""
echo "=== Memory Usage ==="
free -h
echo ""
echo "=== ZRAM Status ==="
zramctl 2>/dev/null || echo "ZRAM not available"
echo ""
echo "=== Disk Usage ==="
df -h / /boot/efi
echo ""
echo "=== Network Status ==="
ip addr show | grep "inet " | grep -v "127.0.0.1"
echo ""
echo "=== Installed Flatpak Apps ==="
flatpak list --app 2>/dev/null || echo "No Flatpak apps installed"
"""

SCREENSHOT_SCRIPT = """#!/bin/bash
# Screenshot helper for Hyprland
out=~/Pictures/screenshot-$(date +%Y%m%d-%H%M%S).png
case "$1" in
    area)
        grim -g "$(slurp)" "$out"
        ;;
    window)
        hyprctl -j activewindow | jq -r '"\\(.at[0]),\\(.at[1]) \\(.size[0])x\\(.size[1])"' | grim -g - "$out"
        ;;
    full)
        grim "$out"
        ;;
    *)
        echo "Usage: screenshot [area|window|full]"
        exit 1
        ;;
esac
"""


def render_quick_start(profile_id: str, flatpak_apps: list[str], config_dirs: list[str]) -> str:
    lines = [
        "# Arch Linux + Hyprland Quick Start",
        "",
        f"Installed with profile `{profile_id}`.",
        "",
        "## Configuration",
    ]
    lines += [f"- ~/.config/{d}" for d in config_dirs] or ["- ~/.config/hypr/hyprland.conf"]
    lines += ["", "## Applications"]
    lines += [f"- flatpak run {app}" for app in flatpak_apps]
    lines += [
        "- sysinfo",
        "- screenshot [area|window|full]",
        "",
        "## Tips",
        "- `hyprctl` talks to the running compositor",
        "- reboot once to see the boot splash and cursor theme",
        "",
    ]
    return "\n".join(lines)
