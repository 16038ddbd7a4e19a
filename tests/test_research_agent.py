from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from agentlens.agents.base_agent import BaseAgent, StepResult
from agentlens.agents.research_agent import ResearchAgent, _parse_json_object
from agentlens.models import AgentStep, DemoSession, StepType
from agentlens.services.llm_service import LLMService


class BrokenAgent(BaseAgent):
    """Two steps, the second of which blows up."""

    name = "Broken Agent"
    description = "fails halfway"
    system_prompt = ""

    @property
    def pipeline(self):
        return [self._ok, self._boom]

    async def _ok(self, query, context):
        return StepResult(step_type=StepType.PROMPT, input={"query": query}, output={}, confidence=0.9, base_latency_ms=10)

    async def _boom(self, query, context):
        raise RuntimeError("tool exploded")


@pytest.fixture
async def demo(db):
    now = datetime.now(timezone.utc)
    session = DemoSession(name="n", email="e@example.com", company="c", role="r",
                          created_at=now, expires_at=now + timedelta(hours=1))
    db.add(session)
    await db.flush()
    return session


def test_parse_json_object():
    assert _parse_json_object('{"analysis": "x"}') == {"analysis": "x"}
    assert _parse_json_object(' {"analysis": "x"}\n') == {"analysis": "x"}
    assert _parse_json_object('```json\n{"analysis": "x", "key_points": []}\n```') is None
    assert _parse_json_object('Here you go: {"analysis": "x"}') is None
    assert _parse_json_object("[1, 2, 3]") is None
    assert _parse_json_object("no json here") is None


async def test_unconfigured_gateway_is_never_called(db, demo):
    agent = ResearchAgent(llm=LLMService(api_key=""))
    assert agent.llm.is_configured is False

    outcome = await agent.run("quiet query", demo, db)
    assert outcome.run.status == "success"
    assert outcome.run.token_usage == 150
    assert outcome.run.completed_at is not None
    assert outcome.steps[0].latency_ms >= 45
    assert outcome.steps[3].latency_ms >= 450


async def test_failing_pipeline_marks_run_failed_and_keeps_partial_steps(db, demo):
    outcome = await BrokenAgent().run("q", demo, db)
    assert outcome.run.status == "failed"
    assert outcome.run.error_message == "tool exploded"
    assert outcome.run.confidence_score == pytest.approx(0.3)
    assert outcome.steps_count == 1

    result = await db.execute(select(AgentStep).where(AgentStep.agent_run_id == outcome.run.id))
    assert [s.step_index for s in result.scalars().all()] == [0]
