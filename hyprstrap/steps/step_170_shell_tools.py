from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict

from ..lib.command import command_exists, run_cmd
from ..lib.desktop import SCREENSHOT_SCRIPT, SYSINFO_SCRIPT, append_once, write_user_file
from ..lib.manifests import profile_value
from ..state_store import add_warning

logger = logging.getLogger(__name__)

ATUIN_MARKER = "# Atuin shell history"
PATH_MARKER = "# ~/bin helper scripts"


class ShellToolsStep:
    step_id = "170_shell_tools"

    def _resize_tmp(self, state: Dict[str, Any], size: str, dry_run: bool) -> None:
        r = run_cmd(["sudo", "mount", "-o", f"remount,size={size}", "/tmp"], check=False, dry_run=dry_run)
        if r.returncode != 0:
            add_warning(state, tmpfs=size, reason="remount_failed")

    def _atuin(self, state: Dict[str, Any], bashrc: Path, dry_run: bool) -> None:
        if not dry_run and not command_exists("atuin"):
            add_warning(state, atuin="missing", reason="not installed or not in PATH")
            return

        if run_cmd(["atuin", "import", "auto"], check=False, dry_run=dry_run).returncode != 0:
            add_warning(state, atuin="import", reason="history import failed")

        completions = run_cmd(["atuin", "gen-completions", "--shell", "bash"], check=False, dry_run=dry_run)
        block = completions.stdout.rstrip() if completions.returncode == 0 else ""
        block = (block + "\n" if block else "") + 'eval "$(atuin init bash)"'
        append_once(bashrc, ATUIN_MARKER, block, dry_run=dry_run)
        logger.info("atuin configured; active in new shells")

    def _scripts(self, home: Path, bashrc: Path, dry_run: bool) -> None:
        bin_dir = home / "bin"
        write_user_file(bin_dir / "sysinfo", SYSINFO_SCRIPT, dry_run=dry_run, executable=True)
        write_user_file(bin_dir / "screenshot", SCREENSHOT_SCRIPT, dry_run=dry_run, executable=True)
        append_once(bashrc, PATH_MARKER, 'export PATH="$HOME/bin:$PATH"', dry_run=dry_run)

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        dry_run = bool(cfg.get("dry_run", False))

        home = Path(str(cfg.get("home") or Path.home()))
        bashrc = home / ".bashrc"

        tmp_size = profile_value(profile, "shell.tmp_size")
        if tmp_size:
            self._resize_tmp(state, str(tmp_size), dry_run)
        if bool(profile_value(profile, "shell.atuin", False)):
            self._atuin(state, bashrc, dry_run)
        if bool(profile_value(profile, "shell.scripts", False)):
            self._scripts(home, bashrc, dry_run)
        return state
