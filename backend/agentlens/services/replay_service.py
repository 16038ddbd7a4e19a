"""
Replay: one-time duplication of a finished run's trace into a new run.

Every copied step gets its latency scaled by a uniform factor in [0.9, 1.1]
and its confidence shifted by a uniform delta in [-0.05, 0.05], clamped to
[0, 1]. The original run is never transitioned; only its replay counter moves.
"""

import logging
import math
import random
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional
from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from agentlens.agents.base_agent import mean_confidence
from agentlens.config import get_settings
from agentlens.exceptions import NotFoundError, QuotaExceededError
from agentlens.models.agent_run import AgentRun, AgentStep, RunStatus
from agentlens.models.demo_session import DemoSession
from agentlens.services.session_service import session_service

logger = logging.getLogger(__name__)

LATENCY_JITTER = 0.10
CONFIDENCE_JITTER = 0.05
DEFAULT_LATENCY_MS = 100
DEFAULT_CONFIDENCE = 0.8


@dataclass
class ReplayOutcome:
    original_run_id: str
    run: AgentRun
    steps: list[AgentStep]
    total_latency_ms: int


def perturb_latency(latency_ms: Optional[int], rng: random.Random) -> int:
    base = DEFAULT_LATENCY_MS if latency_ms is None else latency_ms
    scaled = round(base * rng.uniform(1 - LATENCY_JITTER, 1 + LATENCY_JITTER))
    # Rounding must not push the value outside the jitter band
    low = math.ceil(base * (1 - LATENCY_JITTER))
    high = math.floor(base * (1 + LATENCY_JITTER))
    return min(high, max(low, scaled))


def perturb_confidence(confidence: Optional[float], rng: random.Random) -> float:
    base = DEFAULT_CONFIDENCE if confidence is None else confidence
    return min(1.0, max(0.0, base + rng.uniform(-CONFIDENCE_JITTER, CONFIDENCE_JITTER)))


class ReplayService:
    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.Random()

    async def replay(self, db: AsyncSession, session: DemoSession, run_id: str) -> ReplayOutcome:
        settings = get_settings()

        original = await db.scalar(
            select(AgentRun).where(AgentRun.id == run_id, AgentRun.demo_session_id == session.id)
        )
        if original is None:
            raise NotFoundError("Run not found")

        if original.replay_count >= settings.max_replays_per_run:
            raise QuotaExceededError("Run has already been replayed once")

        # Claim the replay slot before writing anything else
        claimed = await db.execute(
            update(AgentRun)
            .where(AgentRun.id == original.id, AgentRun.replay_count < settings.max_replays_per_run)
            .values(replay_count=AgentRun.replay_count + 1)
            .execution_options(synchronize_session=False)
        )
        if claimed.rowcount != 1:
            raise QuotaExceededError("Run has already been replayed once")

        result = await db.execute(
            select(AgentStep)
            .where(AgentStep.agent_run_id == original.id)
            .order_by(AgentStep.step_index)
        )
        original_steps = result.scalars().all()

        replayed = AgentRun(
            demo_session_id=session.id,
            agent_name=original.agent_name,
            status=RunStatus.RUNNING.value,
            input_query=original.input_query,
        )
        db.add(replayed)
        await db.flush()

        await session_service.record_replay(db, session)

        steps = [
            AgentStep(
                agent_run_id=replayed.id,
                step_index=step.step_index,
                step_type=step.step_type,
                tool_name=step.tool_name,
                input=step.input,
                output=step.output,
                latency_ms=perturb_latency(step.latency_ms, self.rng),
                confidence=perturb_confidence(step.confidence, self.rng),
            )
            for step in original_steps
        ]
        db.add_all(steps)

        replayed.status = RunStatus.SUCCESS.value
        replayed.confidence_score = mean_confidence(steps)
        replayed.completed_at = datetime.now(timezone.utc)
        replayed.token_usage = original.token_usage
        await db.flush()

        logger.info("Replayed run %s as %s", original.id, replayed.id)
        return ReplayOutcome(
            original_run_id=original.id,
            run=replayed,
            steps=steps,
            total_latency_ms=sum(s.latency_ms or 0 for s in steps),
        )


replay_service = ReplayService()
