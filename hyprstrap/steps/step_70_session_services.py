from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.chroot import chroot_cmd
from ..lib.manifests import profile_value
from ..lib.sysconfig import render_greetd_config, render_wayland_session, write_target_file

logger = logging.getLogger(__name__)


class SessionServicesStep:
    step_id = "70_session_services"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        profile = state.get("profile") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        dry_run = bool(cfg.get("dry_run", False))

        session_name = str(profile_value(profile, "session.name", "Hyprland"))
        session_exec = str(profile_value(profile, "session.exec", "Hyprland"))
        write_target_file(
            target_root,
            f"/usr/share/wayland-sessions/{session_name.lower()}.desktop",
            render_wayland_session(session_name, session_exec, str(profile_value(profile, "session.comment", ""))),
            dry_run=dry_run,
        )

        greeter_cmd = profile_value(profile, "greeter.command")
        if greeter_cmd:
            write_target_file(
                target_root,
                "/etc/greetd/config.toml",
                render_greetd_config(
                    str(greeter_cmd),
                    user=str(profile_value(profile, "greeter.user", "greeter")),
                    vt=int(profile_value(profile, "greeter.vt", 1)),
                ),
                dry_run=dry_run,
            )

        enable = [str(s) for s in profile_value(profile, "services.enable", [])]
        disable = [str(s) for s in profile_value(profile, "services.disable", [])]
        for svc in enable:
            chroot_cmd(target_root, ["systemctl", "enable", svc], dry_run=dry_run)
        for svc in disable:
            # Disabling a unit that was never installed is not an error.
            r = chroot_cmd(target_root, ["systemctl", "disable", svc], check=False, dry_run=dry_run)
            if r.returncode != 0:
                logger.info("Service %s not disabled (exit %s)", svc, r.returncode)

        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["services_enabled"] = enable
        decisions["services_disabled"] = disable
        logger.info("Session %s configured; services enabled: %s", session_name, ", ".join(enable))
        return state
