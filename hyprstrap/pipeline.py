from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .state_store import is_step_completed, mark_step_completed

logger = logging.getLogger(__name__)


class Step(Protocol):
    """One resumable unit of work; must tolerate being re-run with --force."""

    step_id: str

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]
    skipped_steps: List[str]


def _check_bounds(ids: List[str], start_at: Optional[str], stop_after: Optional[str]) -> None:
    for label, value in (("start", start_at), ("stop", stop_after)):
        if value is not None and value not in ids:
            raise ValueError(f"Unknown {label} step {value!r}; expected one of: {', '.join(ids)}")
    if start_at is not None and stop_after is not None and ids.index(stop_after) < ids.index(start_at):
        raise ValueError(f"--stop-after {stop_after} comes before --start-at {start_at}")


def _record(state: Dict[str, Any], step_id: str, status: str, started: float) -> None:
    state.setdefault("execution", {}).setdefault("history", []).append(
        {"step": step_id, "status": status, "seconds": round(time.monotonic() - started, 2)}
    )


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
) -> PipelineResult:
    """Run steps in order.

    Completed steps are skipped unless ``force``. A failing step stays as
    ``execution.current_step`` so the caller can report where to resume.
    """

    ids = [s.step_id for s in steps]
    _check_bounds(ids, start_at, stop_after)

    first = ids.index(start_at) if start_at is not None else 0
    last = ids.index(stop_after) if stop_after is not None else len(ids) - 1

    ran: List[str] = []
    skipped: List[str] = []

    for step in steps[first : last + 1]:
        exe = state.setdefault("execution", {})
        exe["current_step"] = step.step_id

        if not force and is_step_completed(state, step.step_id):
            logger.info("Skipping step %s (already completed)", step.step_id)
            skipped.append(step.step_id)
            continue

        logger.info("==> %s", step.step_id)
        started = time.monotonic()
        try:
            state = step.run(state)
        except BaseException:
            _record(state, step.step_id, "failed", started)
            raise
        _record(state, step.step_id, "ok", started)
        mark_step_completed(state, step.step_id)
        ran.append(step.step_id)

    if stop_after is not None:
        logger.info("Stopped after %s", stop_after)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran, skipped_steps=skipped)
