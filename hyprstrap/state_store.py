from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict

import yaml

from .lib.env import PATHS

logger = logging.getLogger(__name__)

STATE_VERSION = 1


def _is_yaml(path: Path) -> bool:
    # Anything that is not .yaml/.yml is read and written as JSON.
    return path.suffix.lower() in {".yaml", ".yml"}


def load_state(path: str) -> Dict[str, Any]:
    """Read the state document; a missing file is an empty (fresh) state."""

    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}

    data = (yaml.safe_load(text) or {}) if _is_yaml(p) else json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"State file {p} must hold a mapping, got {type(data).__name__}")

    completed = (data.get("execution") or {}).get("completed_steps") or []
    logger.info("Loaded state %s (completed: %s)", p, ", ".join(completed) or "none")
    return data


def save_state(path: str, state: Dict[str, Any]) -> None:
    """Write via a temporary file so an interrupted run never leaves half a document."""

    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _is_yaml(p):
        text = yaml.safe_dump(state, sort_keys=False)
    else:
        text = json.dumps(state, indent=2, sort_keys=True) + "\n"

    tmp = p.with_name(p.name + ".tmp")
    tmp.write_text(text, encoding="utf-8")
    os.replace(tmp, p)


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    """Fill required keys with sane defaults (without overriding user values)."""

    state.setdefault("version", STATE_VERSION)
    state.setdefault("config", {})
    state.setdefault("hardware", {})
    state.setdefault("execution", {})

    cfg = state["config"]
    cfg.setdefault("profile", "hyprland-swap")
    cfg.setdefault("target_disk", "/dev/sda")
    cfg.setdefault("target_root", PATHS.target_root)
    cfg.setdefault("hostname", "Vendetta")
    cfg.setdefault("username", "CyberQuasar")
    cfg.setdefault("timezone", "Asia/Jakarta")
    cfg.setdefault("locale", "en_US.UTF-8")
    cfg.setdefault("keymap", "us")
    cfg.setdefault("dry_run", False)
    cfg.setdefault("assume_yes", False)
    # passwd is retried this many times before the step gives up.
    cfg.setdefault("password_attempts", 3)
    # Unmount + reboot only when explicitly requested.
    cfg.setdefault("finalize_reboot", False)
    cfg.setdefault("reboot_delay", 10)
    # Scratch space for AUR builds and dotfiles checkouts.
    cfg.setdefault("build_dir", "/tmp")

    exe = state["execution"]
    exe.setdefault("current_step", None)
    exe.setdefault("completed_steps", [])
    exe.setdefault("errors", [])
    exe.setdefault("warnings", [])

    return state


def mark_step_completed(state: Dict[str, Any], step_id: str) -> None:
    exe = state.setdefault("execution", {})
    completed = exe.setdefault("completed_steps", [])
    if step_id not in completed:
        completed.append(step_id)


def is_step_completed(state: Dict[str, Any], step_id: str) -> bool:
    exe = state.get("execution") or {}
    completed = exe.get("completed_steps") or []
    return step_id in completed


def add_warning(state: Dict[str, Any], **info: Any) -> None:
    """Record a non-fatal problem so it survives in the saved state."""

    state.setdefault("execution", {}).setdefault("warnings", []).append(info)
    logger.warning("%s", ", ".join(f"{k}={v}" for k, v in info.items()))


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value
