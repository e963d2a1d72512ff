from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.manifests import profile_value
from ..lib.pkg import YAY_REPO, install_yay

logger = logging.getLogger(__name__)


class AurHelperStep:
    step_id = "120_aur_helper"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}

        built = install_yay(
            build_dir=str(cfg.get("build_dir", "/tmp")) + "/yay",
            repo=str(profile_value(profile, "aur.helper_repo", YAY_REPO)),
            dry_run=bool(cfg.get("dry_run", False)),
        )
        state.setdefault("execution", {}).setdefault("decisions", {})["yay_built"] = built
        return state
