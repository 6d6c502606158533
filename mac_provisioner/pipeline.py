from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .state_store import record_step_result

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_SKIPPED = "skipped"
STATUS_PLANNED = "planned"
STATUS_FAILED = "failed"


class VerificationError(RuntimeError):
    pass


class Step(Protocol):
    """A single idempotent step.

    probe() is read-only and returns True when the action is needed.
    Steps may also define verify(state) -> bool, checked after run().
    """

    step_id: str
    description: str

    def probe(self, state: Dict[str, Any]) -> bool:
        ...

    def run(self, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass
class StepResult:
    step_id: str
    status: str
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {"step_id": self.step_id, "status": self.status}
        if self.error:
            d["error"] = self.error
        return d


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    results: List[StepResult] = field(default_factory=list)

    def _with_status(self, status: str) -> List[str]:
        return [r.step_id for r in self.results if r.status == status]

    @property
    def ran_steps(self) -> List[str]:
        return self._with_status(STATUS_OK)

    @property
    def skipped_steps(self) -> List[str]:
        return self._with_status(STATUS_SKIPPED)

    @property
    def planned_steps(self) -> List[str]:
        return self._with_status(STATUS_PLANNED)

    @property
    def failed_steps(self) -> List[str]:
        return self._with_status(STATUS_FAILED)

    @property
    def ok(self) -> bool:
        return not self.failed_steps

    def summary(self) -> Dict[str, List[str]]:
        return {
            "ran_steps": self.ran_steps,
            "skipped_steps": self.skipped_steps,
            "planned_steps": self.planned_steps,
            "failed_steps": self.failed_steps,
        }


def select_steps(
    steps: Sequence[Step],
    *,
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
) -> List[Step]:
    ids = [s.step_id for s in steps]
    for name, value in (("start_at", start_at), ("stop_after", stop_after)):
        if value is not None and value not in ids:
            raise ValueError(f"Unknown step id for {name}: {value} (known: {', '.join(ids)})")

    first = ids.index(start_at) if start_at is not None else 0
    last = ids.index(stop_after) if stop_after is not None else len(ids) - 1
    if last < first:
        raise ValueError(f"stop_after {stop_after} comes before start_at {start_at}")
    return list(steps[first : last + 1])


def _run_step(step: Step, state: Dict[str, Any], *, force: bool, dry_run: bool) -> StepResult:
    needed = step.probe(state)
    if not needed and not force:
        logger.info("Skipping step %s (already in place)", step.step_id)
        return StepResult(step.step_id, STATUS_SKIPPED)

    if dry_run:
        logger.info("Would run step %s: %s", step.step_id, step.description)
        return StepResult(step.step_id, STATUS_PLANNED)

    logger.info("Running step %s: %s", step.step_id, step.description)
    step.run(state)

    verify = getattr(step, "verify", None)
    if verify is not None and not verify(state):
        raise VerificationError(f"Step {step.step_id} ran but verification failed")
    return StepResult(step.step_id, STATUS_OK)


def run_pipeline(
    *,
    state: Dict[str, Any],
    steps: Sequence[Step],
    start_at: Optional[str] = None,
    stop_after: Optional[str] = None,
    force: bool = False,
    dry_run: bool = False,
    fail_fast: bool = False,
) -> PipelineResult:
    """Run steps in order: probe, act only if divergent, record the outcome.

    A failing step is recorded and the sequence continues with the next one
    unless fail_fast is set.
    """

    selected = select_steps(steps, start_at=start_at, stop_after=stop_after)
    results: List[StepResult] = []

    for step in selected:
        state.setdefault("execution", {})["current_step"] = step.step_id
        try:
            result = _run_step(step, state, force=force, dry_run=dry_run)
        except Exception as e:
            logger.exception("Step %s failed", step.step_id)
            result = StepResult(step.step_id, STATUS_FAILED, error=str(e) or type(e).__name__)

        results.append(result)
        record_step_result(state, result.to_dict())

        if fail_fast and result.status == STATUS_FAILED:
            logger.info("Stopping after failed step %s (fail-fast)", step.step_id)
            break

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, results=results)
