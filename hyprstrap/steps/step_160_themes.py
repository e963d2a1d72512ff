from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional

from ..lib.assets import copy_tree
from ..lib.command import run_cmd
from ..lib.desktop import render_cursor_settings, render_xresources, write_user_file
from ..lib.manifests import profile_value
from ..state_store import add_warning

logger = logging.getLogger(__name__)

PLYMOUTH_THEMES_DIR = "/usr/share/plymouth/themes"


class ThemesStep:
    step_id = "160_themes"

    def _plymouth(self, state: Dict[str, Any], checkout: Path, name: str, dry_run: bool) -> Optional[str]:
        src = checkout / name
        if not dry_run and not src.is_dir():
            add_warning(state, plymouth_theme=name, reason="not_found_in_dotfiles")
            return None

        run_cmd(["sudo", "cp", "-r", str(src), PLYMOUTH_THEMES_DIR], dry_run=dry_run)

        # The theme is named after its .plymouth descriptor, not the directory.
        descriptors = sorted(src.glob("*.plymouth")) if src.is_dir() else []
        if not descriptors and not dry_run:
            add_warning(state, plymouth_theme=name, reason="no_plymouth_file")
            return None
        theme = descriptors[0].stem if descriptors else name

        run_cmd(["sudo", "plymouth-set-default-theme", "-R", theme], dry_run=dry_run)
        run_cmd(["sudo", "mkinitcpio", "-p", "linux"], dry_run=dry_run)
        logger.info("Plymouth theme %s applied", theme)
        return theme

    def _cursor(self, state: Dict[str, Any], checkout: Path, home: Path, name: str, size: int, dry_run: bool) -> bool:
        src = checkout / name
        if not dry_run and not src.is_dir():
            add_warning(state, cursor_theme=name, reason="not_found_in_dotfiles")
            return False

        copy_tree(str(src), str(home / ".icons" / name), dry_run=dry_run)
        settings = render_cursor_settings(name, size)
        write_user_file(home / ".config/gtk-3.0/settings.ini", settings, dry_run=dry_run)
        write_user_file(home / ".config/gtk-4.0/settings.ini", settings, dry_run=dry_run)
        write_user_file(home / ".Xresources", render_xresources(name, size), dry_run=dry_run)
        logger.info("Cursor theme %s installed (active after next login)", name)
        return True

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        dry_run = bool(cfg.get("dry_run", False))

        plymouth = profile_value(profile, "themes.plymouth")
        cursor = profile_value(profile, "themes.cursor")
        if not plymouth and not cursor:
            logger.info("No themes requested")
            return state

        checkout_str = decisions.get("dotfiles_checkout")
        if not checkout_str:
            add_warning(state, themes="skipped", reason="themes are shipped in the dotfiles repository, none was cloned")
            return state

        checkout = Path(checkout_str)
        home = Path(str(cfg.get("home") or Path.home()))

        if plymouth:
            decisions["plymouth_theme"] = self._plymouth(state, checkout, str(plymouth), dry_run)
        if cursor:
            size = int(profile_value(profile, "themes.cursor_size", 24))
            if self._cursor(state, checkout, home, str(cursor), size, dry_run):
                decisions["cursor_theme"] = str(cursor)
        return state
