"""Renderers and in-place editors for files under /etc of the target."""

from __future__ import annotations

import logging
import os
import re
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)


def write_target_file(
    root: str,
    rel: str,
    contents: str,
    *,
    dry_run: bool,
    mode: Optional[int] = None,
) -> Path:
    p = Path(root) / rel.lstrip("/")
    if dry_run:
        logger.info("Would write %s", str(p))
        return p
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(contents, encoding="utf-8")
    if mode is not None:
        os.chmod(p, mode)
    logger.info("Wrote %s", str(p))
    return p


def read_target_file(root: str, rel: str) -> str:
    p = Path(root) / rel.lstrip("/")
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ""


def render_hosts(hostname: str) -> str:
    return (
        "127.0.0.1    localhost\n"
        "::1          localhost\n"
        f"127.0.1.1    {hostname}.localdomain {hostname}\n"
    )


def enable_locale(locale_gen: str, locale: str) -> str:
    """Uncomment ``<locale> UTF-8`` in locale.gen, appending it if absent."""

    entry = f"{locale} UTF-8"
    pattern = re.compile(rf"^#[ \t]*{re.escape(entry)}[ \t]*$", re.MULTILINE)
    if re.search(rf"^{re.escape(entry)}[ \t]*$", locale_gen, re.MULTILINE):
        return locale_gen
    if pattern.search(locale_gen):
        return pattern.sub(entry, locale_gen, count=1)
    if locale_gen and not locale_gen.endswith("\n"):
        locale_gen += "\n"
    return locale_gen + entry + "\n"


def render_locale_conf(locale: str) -> str:
    return f"LANG={locale}\n"


def render_vconsole(keymap: str) -> str:
    return f"KEYMAP={keymap}\n"


_WHEEL_RULE = "%wheel ALL=(ALL:ALL) ALL"


def enable_wheel_sudo(sudoers: str) -> str:
    if re.search(rf"^{re.escape(_WHEEL_RULE)}[ \t]*$", sudoers, re.MULTILINE):
        return sudoers
    commented = re.compile(rf"^#[ \t]*{re.escape(_WHEEL_RULE)}[ \t]*$", re.MULTILINE)
    if commented.search(sudoers):
        return commented.sub(_WHEEL_RULE, sudoers, count=1)
    if sudoers and not sudoers.endswith("\n"):
        sudoers += "\n"
    return sudoers + _WHEEL_RULE + "\n"


def add_pacman_option(pacman_conf: str, option: str) -> str:
    """Set ``option`` inside the [options] section exactly once.

    ``Key = value`` options replace an existing or commented ``Key`` line so
    the requested value wins; a bare key only uncomments the existing line.
    """

    key = re.escape(option.split("=", 1)[0].strip())
    tail = r"(?:[ \t]*=.*)?[ \t]*$"

    def _replace(m: re.Match) -> str:
        if "=" in option:
            return option
        return m.group(0).lstrip("#").lstrip(" \t")

    for pattern in (rf"^{key}{tail}", rf"^#[ \t]*{key}{tail}"):
        found = re.compile(pattern, re.MULTILINE)
        if found.search(pacman_conf):
            return found.sub(_replace, pacman_conf, count=1)

    lines = pacman_conf.splitlines()
    try:
        idx = lines.index("[options]")
    except ValueError:
        return "[options]\n" + option + "\n" + pacman_conf
    lines.insert(idx + 1, option)
    return "\n".join(lines) + "\n"


def set_grub_option(grub_defaults: str, key: str, value: str) -> str:
    line = f"{key}={value}"
    pattern = re.compile(rf"^#?[ \t]*{re.escape(key)}=.*$", re.MULTILINE)
    if pattern.search(grub_defaults):
        return pattern.sub(lambda _m: line, grub_defaults, count=1)
    if grub_defaults and not grub_defaults.endswith("\n"):
        grub_defaults += "\n"
    return grub_defaults + line + "\n"


def render_zram_config(size: str = "ram * 0.95", algorithm: str = "zstd") -> str:
    return f"[zram0]\nzram-size = {size}\ncompression-algorithm = {algorithm}\n"


def _toml_string(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def render_greetd_config(command: str, user: str = "greeter", vt: int = 1) -> str:
    return (
        "[terminal]\n"
        f"vt = {int(vt)}\n"
        "\n"
        "[default_session]\n"
        f"command = {_toml_string(command)}\n"
        f"user = {_toml_string(user)}\n"
    )


def render_wayland_session(name: str, exec_cmd: str, comment: str = "") -> str:
    return (
        "[Desktop Entry]\n"
        f"Name={name}\n"
        f"Comment={comment or name}\n"
        f"Exec={exec_cmd}\n"
        "Type=Application\n"
    )
