from __future__ import annotations

import logging
from typing import Any, Dict

from ..lib.chroot import chroot_cmd
from ..lib.sysconfig import (
    enable_locale,
    read_target_file,
    render_hosts,
    render_locale_conf,
    render_vconsole,
    write_target_file,
)

logger = logging.getLogger(__name__)


class SystemIdentityStep:
    step_id = "40_system_identity"

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        cfg = state.get("config") or {}
        mounts = (state.get("execution") or {}).get("mounts") or {}
        target_root = mounts.get("target_root")
        if not target_root:
            raise RuntimeError("execution.mounts.target_root missing")

        dry_run = bool(cfg.get("dry_run", False))

        timezone = str(cfg.get("timezone", "UTC")).strip() or "UTC"
        locale = str(cfg.get("locale", "en_US.UTF-8")).strip()
        keymap = str(cfg.get("keymap", "us")).strip()
        hostname = str(cfg.get("hostname", "archlinux")).strip() or "archlinux"

        chroot_cmd(target_root, ["ln", "-sf", f"/usr/share/zoneinfo/{timezone}", "/etc/localtime"], dry_run=dry_run)
        chroot_cmd(target_root, ["hwclock", "--systohc"], dry_run=dry_run)

        locale_gen = enable_locale(read_target_file(target_root, "/etc/locale.gen"), locale)
        write_target_file(target_root, "/etc/locale.gen", locale_gen, dry_run=dry_run)
        chroot_cmd(target_root, ["locale-gen"], dry_run=dry_run)
        write_target_file(target_root, "/etc/locale.conf", render_locale_conf(locale), dry_run=dry_run)
        write_target_file(target_root, "/etc/vconsole.conf", render_vconsole(keymap), dry_run=dry_run)

        write_target_file(target_root, "/etc/hostname", hostname + "\n", dry_run=dry_run)
        write_target_file(target_root, "/etc/hosts", render_hosts(hostname), dry_run=dry_run)

        decisions = state.setdefault("execution", {}).setdefault("decisions", {})
        decisions["hostname"] = hostname
        decisions["timezone"] = timezone
        decisions["locale"] = locale

        logger.info("Configured hostname=%s timezone=%s locale=%s", hostname, timezone, locale)
        return state
