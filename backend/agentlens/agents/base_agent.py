"""
Abstract base agent with a fixed, linear step pipeline.

Each agent provides its identity and an ordered list of step coroutines. The
base class owns the run lifecycle: it creates the run in ``running``, times
every step, persists the trace in one batch and closes the run exactly once.
"""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from agentlens.config import get_settings
from agentlens.models.agent_run import AgentRun, AgentStep, RunStatus, StepType
from agentlens.models.demo_session import DemoSession

logger = logging.getLogger(__name__)

# Confidence reported for a run whose pipeline raised
FAILED_RUN_CONFIDENCE = 0.3


@dataclass
class StepResult:
    """What a pipeline step produced, before timing and persistence."""
    step_type: StepType
    input: dict
    output: dict
    confidence: float
    base_latency_ms: int = 0
    tool_name: Optional[str] = None


@dataclass
class RunOutcome:
    run: AgentRun
    steps: list[AgentStep] = field(default_factory=list)
    total_latency_ms: int = 0

    @property
    def steps_count(self) -> int:
        return len(self.steps)


StepFn = Callable[[str, dict[str, Any]], Awaitable[StepResult]]


def mean_confidence(steps: list[AgentStep]) -> float:
    if not steps:
        return 0.0
    return sum(s.confidence or 0 for s in steps) / len(steps)


class BaseAgent(ABC):

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def description(self) -> str:
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        ...

    @property
    @abstractmethod
    def pipeline(self) -> list[StepFn]:
        """Step coroutines in execution order; list position becomes step_index."""
        ...

    async def run(self, query: str, session: DemoSession, db: AsyncSession) -> RunOutcome:
        settings = get_settings()

        agent_run = AgentRun(
            demo_session_id=session.id,
            agent_name=self.name,
            status=RunStatus.RUNNING.value,
            input_query=query,
        )
        db.add(agent_run)
        await db.flush()

        # Shared scratch space for the steps of this run only
        context: dict[str, Any] = {"query": query, "token_usage": None}
        steps: list[AgentStep] = []
        status = RunStatus.SUCCESS
        error_message: Optional[str] = None

        try:
            for index, step_fn in enumerate(self.pipeline):
                started = time.perf_counter()
                result = await step_fn(query, context)
                elapsed_ms = int((time.perf_counter() - started) * 1000)
                steps.append(AgentStep(
                    agent_run_id=agent_run.id,
                    step_index=index,
                    step_type=result.step_type.value,
                    tool_name=result.tool_name,
                    input=result.input,
                    output=result.output,
                    latency_ms=elapsed_ms + result.base_latency_ms,
                    confidence=result.confidence,
                ))
            confidence = mean_confidence(steps)
        except Exception as e:  # noqa: BLE001 - a broken step fails the run, not the request
            logger.exception("Agent execution error in run %s", agent_run.id)
            status = RunStatus.FAILED
            error_message = str(e) or "Execution failed"
            confidence = FAILED_RUN_CONFIDENCE

        db.add_all(steps)
        await db.flush()

        agent_run.status = status.value
        agent_run.confidence_score = confidence
        agent_run.completed_at = datetime.now(timezone.utc)
        agent_run.token_usage = context.get("token_usage") or settings.default_token_usage
        agent_run.error_message = error_message
        await db.flush()

        logger.info("Agent run %s completed with status: %s", agent_run.id, status.value)
        return RunOutcome(
            run=agent_run,
            steps=steps,
            total_latency_ms=sum(s.latency_ms or 0 for s in steps),
        )
