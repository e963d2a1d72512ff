from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .lib.command import CommandError
from .lib.env import PATHS, in_chroot, user_state_path
from .lib.manifests import list_profiles, load_profile
from .logging_utils import configure_logging
from .pipeline import run_pipeline
from .state_store import ensure_defaults, load_state, save_state
from .steps import (
    AurHelperStep,
    AurPackagesStep,
    BootloaderStep,
    DesktopPackagesStep,
    DotfilesStep,
    FinalizeStep,
    FlatpakStep,
    HyprpmPluginsStep,
    PacmanTuningStep,
    PacstrapStep,
    PartitionFilesystemStep,
    PreflightStep,
    SessionServicesStep,
    ShellToolsStep,
    SystemIdentityStep,
    ThemesStep,
    UserPreflightStep,
    UsersStep,
    VerifyStep,
    WriteFstabStep,
    ZramStep,
)

logger = logging.getLogger(__name__)

PHASES = ("install", "configure", "desktop")


def _chroot_steps():
    return [
        SystemIdentityStep(),
        UsersStep(),
        PacmanTuningStep(),
        BootloaderStep(),
        ZramStep(),
        DesktopPackagesStep(),
        SessionServicesStep(),
    ]


def build_steps(phase: str):
    if phase == "install":
        return [
            PreflightStep(),
            PartitionFilesystemStep(),
            PacstrapStep(),
            WriteFstabStep(),
            *_chroot_steps(),
            FinalizeStep(),
        ]
    if phase == "configure":
        return _chroot_steps()
    if phase == "desktop":
        return [
            UserPreflightStep(),
            AurHelperStep(),
            AurPackagesStep(),
            HyprpmPluginsStep(),
            FlatpakStep(),
            DotfilesStep(),
            ThemesStep(),
            ShellToolsStep(),
            VerifyStep(),
        ]
    raise ValueError(f"Unknown phase {phase!r} (expected one of {', '.join(PHASES)})")


def default_paths(phase: str) -> tuple[str, str]:
    """(state_path, log_path) for a phase; the desktop phase runs unprivileged."""

    if phase == "desktop":
        state = user_state_path(Path.home())
        return str(state), str(state.parent / "hyprstrap.log")
    return PATHS.state_default, PATHS.log_default


def run(
    *,
    phase: str,
    state_path: Optional[str] = None,
    log_path: Optional[str] = None,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    overrides: Optional[Dict[str, Any]] = None,
    target_root: Optional[str] = None,
    verbose: bool = False,
) -> Dict[str, Any]:
    """Run one installer phase, persisting state for resume."""

    steps = build_steps(phase)
    default_state, default_log = default_paths(phase)
    state_path = state_path or default_state
    log_path = log_path or default_log

    actual_log_path = configure_logging(log_path=log_path, verbose=verbose)

    state = ensure_defaults(load_state(state_path))
    paths = state.setdefault("execution", {}).setdefault("paths", {})
    paths["log_path_requested"] = log_path
    paths["log_path_actual"] = actual_log_path

    cfg = state["config"]
    for key, value in (overrides or {}).items():
        if value is not None:
            cfg[key] = value

    if target_root and phase != "configure":
        cfg["target_root"] = target_root

    try:
        if phase == "configure":
            # Re-run from inside arch-chroot unless told where the target is mounted.
            if not target_root and not in_chroot():
                raise RuntimeError("Not inside arch-chroot; pass --target-root to configure a mounted system")
            state["execution"].setdefault("mounts", {})["target_root"] = target_root or "/"

        state["profile"] = load_profile(str(cfg["profile"]))
        logger.info("Phase %s with profile %s (dry_run=%s)", phase, cfg["profile"], cfg.get("dry_run"))

        result = run_pipeline(
            state=state,
            steps=steps,
            start_at=start_at,
            stop_after=stop_after,
            force=force,
        )
        state = result.state
        summary = state.setdefault("execution", {}).setdefault("summary", {})
        summary["phase"] = phase
        summary["ran_steps"] = result.ran_steps
        summary["skipped_steps"] = result.skipped_steps
        return state
    except Exception as e:
        logger.exception("Installer failed")
        state.setdefault("execution", {}).setdefault("errors", []).append(
            {
                "phase": phase,
                "step": (state.get("execution") or {}).get("current_step"),
                "error": str(e),
            }
        )
        raise
    finally:
        save_state(state_path, state)


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="hyprstrap", description="Arch Linux + Hyprland installer")
    p.add_argument("phase", nargs="?", choices=PHASES, help="install (live ISO), configure (chroot), desktop (after reboot)")
    p.add_argument("--state", default=None, help="Path to installer state (json|yaml)")
    p.add_argument("--log", default=None, help="Path to installer log")
    p.add_argument("--profile", default=None, help="Install profile (see --list-profiles)")
    p.add_argument("--list-profiles", action="store_true", help="List available profiles and exit")
    p.add_argument("--start-at", default=None, help="Start at step_id (e.g. 40_system_identity)")
    p.add_argument("--stop-after", default=None, help="Stop after step_id")
    p.add_argument("--force", action="store_true", help="Re-run steps even if marked completed")
    p.add_argument("--dry-run", action="store_true", default=None, help="Log commands without executing them")
    p.add_argument("--yes", action="store_true", default=None, help="Answer yes to every confirmation")
    p.add_argument("--reboot", action="store_true", default=None, help="Unmount and reboot at the end of install")
    p.add_argument("--target-root", default=None, help="Where the target is mounted (install: /mnt, configure: /)")
    p.add_argument("--disk", default=None, help="Target disk, e.g. /dev/sda or /dev/nvme0n1")
    p.add_argument("--hostname", default=None)
    p.add_argument("--username", default=None)
    p.add_argument("--timezone", default=None, help="Region/City under /usr/share/zoneinfo")
    p.add_argument("--verbose", action="store_true", help="Show command output on the console (always in the log)")
    return p


def main(argv: Optional[list[str]] = None) -> int:
    p = _parser()
    args = p.parse_args(argv)

    if args.list_profiles:
        for profile_id in list_profiles():
            description = " ".join(str(load_profile(profile_id).get("description", "")).split())
            print(f"{profile_id}: {description}")
        return 0

    if not args.phase:
        p.error("a phase is required (install, configure or desktop)")

    overrides = {
        "profile": args.profile,
        "dry_run": args.dry_run,
        "assume_yes": args.yes,
        "finalize_reboot": args.reboot,
        "target_disk": args.disk,
        "hostname": args.hostname,
        "username": args.username,
        "timezone": args.timezone,
    }

    try:
        run(
            phase=args.phase,
            state_path=args.state,
            log_path=args.log,
            start_at=args.start_at,
            stop_after=args.stop_after,
            force=args.force,
            overrides=overrides,
            target_root=args.target_root,
            verbose=args.verbose,
        )
    except KeyboardInterrupt:
        logger.warning("Installation aborted by user (Ctrl+C); state saved for --start-at")
        return 130
    except (CommandError, RuntimeError, ValueError, OSError, yaml.YAMLError) as e:
        logger.error("%s", e)
        if args.phase == "install":
            logger.error("Check the log; clean up manually if needed (umount -R /mnt)")
        return 1
    return 0
