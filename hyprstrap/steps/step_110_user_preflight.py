from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.env import current_user, is_root
from ..lib.net import is_online

logger = logging.getLogger(__name__)


class UserPreflightStep:
    step_id = "110_user_preflight"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        dry_run = bool(cfg.get("dry_run", False))
        username = str(cfg.get("username", "")).strip()

        if is_root():
            raise RuntimeError(f"The desktop phase must NOT run as root; log in as {username or 'the regular user'}")

        user = current_user()
        if username and user != username:
            raise RuntimeError(f"The desktop phase must run as {username}, not {user}")

        if not is_online(dry_run=dry_run):
            raise RuntimeError("No internet connection; connect first (nmcli dev wifi connect ...)")

        logger.info("Desktop preflight passed for %s", user)
        return state
