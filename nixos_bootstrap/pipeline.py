from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

from .config import BootstrapConfig
from .executor import SystemExecutor
from .lib.storage import PartitionLayout

logger = logging.getLogger(__name__)


@dataclass
class RunContext:
    """Everything a step may read; later steps read what earlier ones set."""

    config: BootstrapConfig
    executor: SystemExecutor
    prompt: Callable[[str], str] = input
    keys: List[str] = field(default_factory=list)
    layout: Optional[PartitionLayout] = None
    config_path: Optional[str] = None
    current_step: Optional[str] = None
    decisions: Dict[str, Any] = field(default_factory=dict)


class Step(Protocol):
    """A single stage of the bootstrap."""

    step_id: str

    def run(self, ctx: RunContext) -> None:
        ...


@dataclass(frozen=True)
class PipelineResult:
    ran_steps: List[str]


def run_pipeline(*, ctx: RunContext, steps: Sequence[Step]) -> PipelineResult:
    """Run steps in order. Any exception stops the run where it happened."""

    ran: List[str] = []

    for step in steps:
        ctx.current_step = step.step_id
        logger.info("Running step %s", step.step_id)
        step.run(ctx)
        ran.append(step.step_id)

    ctx.current_step = None
    return PipelineResult(ran_steps=ran)
