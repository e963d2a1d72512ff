from __future__ import annotations

import logging

logger = logging.getLogger(__name__)

_YES = {"y", "yes"}


def confirm(question: str, *, assume_yes: bool = False, default: bool = False) -> bool:
    """Ask a yes/no question on the terminal."""

    if assume_yes:
        logger.info("%s -> yes (assumed)", question)
        return True

    suffix = "(Y/n)" if default else "(y/N)"
    try:
        answer = input(f"{question} {suffix}: ").strip().lower()
    except EOFError:
        logger.info("%s -> no (no input)", question)
        return False

    if not answer:
        return default
    return answer in _YES


def require_confirmation(question: str, *, assume_yes: bool = False) -> None:
    if not confirm(question, assume_yes=assume_yes):
        raise RuntimeError(f"Installation cancelled by user ({question})")
