from typing import Optional
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from agentlens.agents.base_agent import BaseAgent, RunOutcome
from agentlens.agents.research_agent import research_agent
from agentlens.exceptions import NotFoundError, ValidationError
from agentlens.models.agent_run import AgentRun, AgentStep
from agentlens.models.demo_session import DemoSession
from agentlens.services.session_service import session_service


class RunService:
    def __init__(self, agent: Optional[BaseAgent] = None):
        self.agent = agent or research_agent

    async def trigger_run(self, db: AsyncSession, session: DemoSession, query: Optional[str]) -> RunOutcome:
        session_service.check_run_quota(session)

        query = (query or "").strip()
        if not query:
            raise ValidationError("Missing query field")

        await session_service.reserve_run(db, session)
        return await self.agent.run(query, session, db)

    async def list_runs(self, db: AsyncSession, session: DemoSession) -> list[AgentRun]:
        result = await db.execute(
            select(AgentRun)
            .where(AgentRun.demo_session_id == session.id)
            .order_by(AgentRun.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_run(self, db: AsyncSession, session: DemoSession, run_id: str) -> AgentRun:
        run = await db.scalar(
            select(AgentRun).where(AgentRun.id == run_id, AgentRun.demo_session_id == session.id)
        )
        if run is None:
            raise NotFoundError("Run not found")
        return run

    async def get_steps(self, db: AsyncSession, run_id: str) -> list[AgentStep]:
        result = await db.execute(
            select(AgentStep)
            .where(AgentStep.agent_run_id == run_id)
            .order_by(AgentStep.step_index)
        )
        return list(result.scalars().all())


run_service = RunService()
