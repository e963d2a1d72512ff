from __future__ import annotations

import logging
from pathlib import Path

DEFAULT_LOG_PATH = "/var/log/hyprstrap.log"

_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def _open_log(log_path: str) -> tuple[logging.FileHandler, str]:
    """FileHandler for log_path, or for ./hyprstrap.log if that is not writable."""

    try:
        Path(log_path).parent.mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / "hyprstrap.log")
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    *,
    verbose: bool = False,
    also_console: bool = True,
) -> str:
    """Send everything to the install log, and progress to the terminal.

    The file always gets DEBUG (command stdout/stderr included) so a failed
    install can be diagnosed after the fact; ``verbose`` lets the console see
    the same. Returns the log file actually in use, which differs from
    ``log_path`` when the live ISO or an unprivileged user cannot write there.
    """

    root = logging.getLogger()
    if getattr(root, "_hyprstrap_configured", False):
        return getattr(root, "_hyprstrap_log_path", log_path)

    setattr(root, "_hyprstrap_previous_level", root.level)
    root.setLevel(logging.DEBUG)
    installed: list[logging.Handler] = []

    file_handler, chosen_path = _open_log(log_path)
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    installed.append(file_handler)

    if also_console:
        console = logging.StreamHandler()
        console.setLevel(logging.DEBUG if verbose else logging.INFO)
        console.setFormatter(logging.Formatter(_CONSOLE_FORMAT))
        installed.append(console)

    for h in installed:
        root.addHandler(h)

    setattr(root, "_hyprstrap_configured", True)
    setattr(root, "_hyprstrap_handlers", installed)
    setattr(root, "_hyprstrap_log_path", chosen_path)

    logging.getLogger(__name__).info("Logging to %s (requested %s)", chosen_path, log_path)
    return chosen_path


def reset_logging() -> None:
    """Drop handlers installed by configure_logging()."""

    root = logging.getLogger()
    if not getattr(root, "_hyprstrap_configured", False):
        return
    for h in getattr(root, "_hyprstrap_handlers", []):
        root.removeHandler(h)
        h.close()
    root.setLevel(getattr(root, "_hyprstrap_previous_level", logging.WARNING))
    setattr(root, "_hyprstrap_configured", False)
