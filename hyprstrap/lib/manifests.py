from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List

import yaml


def _manifests_root() -> Path:
    # hyprstrap/lib/manifests.py -> hyprstrap/manifests
    return Path(__file__).resolve().parents[1] / "manifests"


def load_yaml_rel(rel_path: str) -> Dict[str, Any]:
    """Load a YAML file relative to the manifests directory."""

    p = _manifests_root() / rel_path.lstrip("/")
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Manifest must be a mapping/dict: {p}")
    return data


def list_profiles() -> List[str]:
    return sorted(p.stem for p in (_manifests_root() / "profiles").glob("*.yaml"))


def load_profile(profile_id: str) -> Dict[str, Any]:
    available = list_profiles()
    if profile_id not in available:
        raise FileNotFoundError(f"Unknown profile {profile_id!r}; available: {', '.join(available)}")
    profile = load_yaml_rel(f"profiles/{profile_id}.yaml")
    profile.setdefault("id", profile_id)
    return profile


def profile_value(profile: Dict[str, Any], dotted_key: str, default: Any = None) -> Any:
    """Look up ``a.b.c`` in nested mappings, returning default on any miss."""

    node: Any = profile
    for part in dotted_key.split("."):
        if not isinstance(node, dict) or part not in node:
            return default
        node = node[part]
    return default if node is None else node
