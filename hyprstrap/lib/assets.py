from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

# Built-in configuration shipped with the package (used when a profile names no dotfiles repo).
ASSETS_DIR = Path(__file__).resolve().parents[1] / "assets"


def copy_tree(src: str, dst: str, *, dry_run: bool = False) -> None:
    """Merge src into dst, overwriting files that already exist."""

    if dry_run:
        # Nothing was cloned in a dry run, so src may not exist yet.
        logger.info("Would copy tree %s -> %s", src, dst)
        return

    if not Path(src).is_dir():
        raise FileNotFoundError(src)
    shutil.copytree(src, dst, dirs_exist_ok=True)
    logger.info("Copied %s -> %s", src, dst)


def copy_files(src_dir: str, dst_dir: str, *, dry_run: bool = False) -> int:
    """Copy the regular files directly inside src_dir. Returns how many were copied."""

    s = Path(src_dir)
    files = sorted(p for p in s.iterdir() if p.is_file()) if s.is_dir() else []
    if dry_run:
        logger.info("Would copy %d files %s -> %s", len(files), src_dir, dst_dir)
        return len(files)
    d = Path(dst_dir)
    d.mkdir(parents=True, exist_ok=True)
    for f in files:
        shutil.copy2(f, d / f.name)
    return len(files)
