from __future__ import annotations

import logging
from typing import Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

DEFAULT_PING_HOSTS = ("archlinux.org", "8.8.8.8")


def is_online(
    hosts: Sequence[str] = DEFAULT_PING_HOSTS,
    *,
    count: int = 3,
    dry_run: bool = False,
) -> bool:
    """Best-effort online check.

    The IP fallback catches a working link with slow or broken DNS.
    """

    for host in hosts:
        r = run_cmd(["ping", "-c", str(count), "-W", "2", host], check=False, dry_run=dry_run)
        if r.returncode == 0:
            logger.info("Reached %s", host)
            return True
        logger.info("No reply from %s", host)
    return False
