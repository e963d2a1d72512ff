from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Any, Dict, Optional

from ..lib.assets import ASSETS_DIR, copy_files, copy_tree
from ..lib.desktop import clone_repo, download, render_hyprpaper, write_user_file
from ..lib.manifests import profile_value
from ..state_store import add_warning

logger = logging.getLogger(__name__)


def _repo_name(url: str) -> str:
    name = url.rstrip("/").rsplit("/", 1)[-1]
    return name[: -len(".git")] if name.endswith(".git") else name


class DotfilesStep:
    step_id = "150_dotfiles"

    def _install_config(self, state: Dict[str, Any], config_dir: Path, dry_run: bool) -> Optional[Path]:
        """Copy configs into ~/.config. Returns the dotfiles checkout, if one was cloned."""

        cfg = state.get("config") or {}
        profile = state.get("profile") or {}

        repo = profile_value(profile, "dotfiles.repo")
        if not repo:
            copy_tree(str(ASSETS_DIR / "dotfiles"), str(config_dir), dry_run=dry_run)
            return None

        build_dir = Path(str(cfg.get("build_dir", "/tmp")))
        checkout = clone_repo(str(repo), str(build_dir / _repo_name(str(repo))), dry_run=dry_run)

        subdir = str(profile_value(profile, "dotfiles.subdir", ""))
        src = checkout / subdir if subdir else checkout
        if not dry_run and not src.is_dir():
            raise RuntimeError(f"{subdir or '.'} directory not found in {repo}")
        copy_tree(str(src), str(config_dir), dry_run=dry_run)
        return checkout

    def _install_wallpapers(self, state: Dict[str, Any], config_dir: Path, pictures: Path, dry_run: bool) -> Optional[Path]:
        profile = state.get("profile") or {}
        wallpaper: Optional[Path] = None

        for rel in profile_value(profile, "dotfiles.wallpaper_files", []):
            src = config_dir / str(rel)
            if src.is_file():
                dest = pictures / src.name
                if dry_run:
                    logger.info("Would copy %s -> %s", str(src), str(dest))
                else:
                    pictures.mkdir(parents=True, exist_ok=True)
                    shutil.copy2(src, dest)
                wallpaper = wallpaper or dest
            else:
                add_warning(state, wallpaper=str(src), reason="not_found")

        for rel in profile_value(profile, "dotfiles.wallpaper_dirs", []):
            src_dir = config_dir / str(rel)
            if not src_dir.is_dir():
                add_warning(state, wallpaper_dir=str(src_dir), reason="not_found")
                continue
            copied = copy_files(str(src_dir), str(pictures), dry_run=dry_run)
            logger.info("Copied %d wallpapers from %s", copied, src_dir)

        url = profile_value(profile, "dotfiles.wallpaper_url")
        if url:
            dest = pictures / "wallpaper.jpg"
            download(str(url), str(dest), dry_run=dry_run)
            wallpaper = wallpaper or dest

        return wallpaper

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        dry_run = bool(cfg.get("dry_run", False))

        home = Path(str(cfg.get("home") or Path.home()))
        config_dir = home / ".config"
        pictures = home / "Pictures"

        checkout = self._install_config(state, config_dir, dry_run)
        wallpaper = self._install_wallpapers(state, config_dir, pictures, dry_run)

        hyprpaper = config_dir / "hypr" / "hyprpaper.conf"
        if wallpaper and not hyprpaper.exists():
            write_user_file(hyprpaper, render_hyprpaper(str(wallpaper)), dry_run=dry_run)

        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["dotfiles_checkout"] = str(checkout) if checkout else None
        decisions["wallpaper"] = str(wallpaper) if wallpaper else None
        if config_dir.is_dir():
            decisions["config_dirs"] = sorted(p.name for p in config_dir.iterdir() if p.is_dir())

        logger.info("Dotfiles installed into %s (source=%s)", config_dir, checkout or "built-in")
        return state
