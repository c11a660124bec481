from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from .config import RunConfig
from .lib.identity import Identity

logger = logging.getLogger(__name__)


class StepOutcome(str, enum.Enum):
    ALREADY_SATISFIED = "already_satisfied"
    CREATED = "created"
    FAILED = "failed"


class ErrorPolicy(str, enum.Enum):
    FATAL = "fatal"
    LOGGED_AND_IGNORED = "logged_and_ignored"


@dataclass
class RunState:
    """Facts discovered while the pipeline runs."""

    identity: Optional[Identity] = None
    ram_mib: Optional[int] = None
    compiler: Optional[str] = None
    unison_version: Optional[str] = None
    current_step: Optional[str] = None
    outcomes: Dict[str, str] = field(default_factory=dict)
    errors: List[Dict[str, Any]] = field(default_factory=list)

    def require_identity(self) -> Identity:
        if self.identity is None:
            raise RuntimeError("Identity not resolved; run preflight first")
        return self.identity


class Step(Protocol):
    """A single idempotent step."""

    step_id: str
    policy: ErrorPolicy

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: RunState
    changed_steps: List[str]
    satisfied_steps: List[str]
    failed_steps: List[str]


def run_pipeline(
    *,
    config: RunConfig,
    state: RunState,
    steps: Sequence[Step],
) -> PipelineResult:
    """Run steps in order; fatal failures propagate, best-effort ones are recorded."""

    changed: List[str] = []
    satisfied: List[str] = []
    failed: List[str] = []

    for step in steps:
        state.current_step = step.step_id
        logger.info("Running step %s", step.step_id)

        try:
            outcome = step.run(config, state)
        except Exception as e:
            state.outcomes[step.step_id] = StepOutcome.FAILED.value
            state.errors.append({"step": step.step_id, "error": str(e), "policy": step.policy.value})
            if step.policy is ErrorPolicy.FATAL:
                raise
            logger.warning("Step %s failed (ignored): %s", step.step_id, e)
            failed.append(step.step_id)
            continue

        state.outcomes[step.step_id] = outcome.value
        if outcome is StepOutcome.ALREADY_SATISFIED:
            logger.info("Step %s: already satisfied", step.step_id)
            satisfied.append(step.step_id)
        elif outcome is StepOutcome.CREATED:
            changed.append(step.step_id)
        else:
            failed.append(step.step_id)

    state.current_step = None
    return PipelineResult(state=state, changed_steps=changed, satisfied_steps=satisfied, failed_steps=failed)
