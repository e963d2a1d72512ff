from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List

from .command import run_cmd
from .sysconfig import write_target_file

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FstabEntry:
    spec: str
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 0


def parse_fstab(text: str) -> List[FstabEntry]:
    entries: List[FstabEntry] = []
    for raw in text.splitlines():
        line = raw.strip()
        if not line or line.startswith("#"):
            continue
        fields = line.split()
        if len(fields) < 3:
            raise ValueError(f"Malformed fstab line: {raw!r}")
        entries.append(
            FstabEntry(
                spec=fields[0],
                mountpoint=fields[1],
                fstype=fields[2],
                options=fields[3] if len(fields) > 3 else "defaults",
                dump=int(fields[4]) if len(fields) > 4 else 0,
                passno=int(fields[5]) if len(fields) > 5 else 0,
            )
        )
    return entries


def render_fstab(entries: List[FstabEntry]) -> str:
    lines = ["# <file system> <dir> <type> <options> <dump> <pass>"]
    for e in entries:
        lines.append(f"{e.spec}\t{e.mountpoint}\t{e.fstype}\t{e.options}\t{e.dump} {e.passno}")
    return "\n".join(lines) + "\n"


def generate_fstab(target_root: str, *, dry_run: bool = False) -> List[FstabEntry]:
    """Run genfstab -U against the mounted target and write target/etc/fstab.

    The file is overwritten, so running the step twice does not duplicate entries.
    """

    r = run_cmd(["genfstab", "-U", target_root], dry_run=dry_run)
    entries = parse_fstab(r.stdout)
    if not dry_run and not any(e.mountpoint == "/" for e in entries):
        raise RuntimeError(f"genfstab produced no root entry for {target_root}")

    write_target_file(target_root, "/etc/fstab", r.stdout, dry_run=dry_run)
    logger.info("fstab written with %d entries", len(entries))
    return entries
