from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from agentlens.auth import get_active_demo_session, get_demo_session
from agentlens.database import get_db
from agentlens.exceptions import ValidationError
from agentlens.models.demo_session import DemoSession
from agentlens.schemas.agent import (
    AgentRunListResponse,
    AgentRunRequest,
    AgentRunResponse,
    AgentStepResponse,
    ReplayRequest,
    ReplayResponse,
    RunDetailResponse,
    RunTriggerResponse,
)
from agentlens.services.metrics_service import metrics_service
from agentlens.services.replay_service import replay_service
from agentlens.services.run_service import run_service

router = APIRouter()


@router.post("/agent-run", response_model=RunTriggerResponse)
async def trigger_agent_run(
    req: AgentRunRequest,
    db: AsyncSession = Depends(get_db),
    session: DemoSession = Depends(get_active_demo_session),
):
    outcome = await run_service.trigger_run(db, session, req.query)
    return RunTriggerResponse(
        run_id=outcome.run.id,
        status=outcome.run.status,
        confidence_score=outcome.run.confidence_score,
        total_latency_ms=outcome.total_latency_ms,
        token_usage=outcome.run.token_usage,
        steps_count=outcome.steps_count,
    )


@router.get("/agent-runs", response_model=AgentRunListResponse)
async def list_agent_runs(
    db: AsyncSession = Depends(get_db),
    session: DemoSession = Depends(get_demo_session),
):
    runs = await run_service.list_runs(db, session)
    return AgentRunListResponse(
        runs=[AgentRunResponse.model_validate(r) for r in runs],
        metrics=metrics_service.run_metrics(runs),
    )


@router.post("/replay-run", response_model=ReplayResponse)
async def replay_agent_run(
    req: ReplayRequest,
    db: AsyncSession = Depends(get_db),
    session: DemoSession = Depends(get_active_demo_session),
):
    if not req.run_id:
        raise ValidationError("Missing run_id")

    outcome = await replay_service.replay(db, session, req.run_id)
    return ReplayResponse(
        original_run_id=outcome.original_run_id,
        replayed_run_id=outcome.run.id,
        status=outcome.run.status,
        confidence_score=outcome.run.confidence_score,
        total_latency_ms=outcome.total_latency_ms,
        steps_count=len(outcome.steps),
    )


@router.get("/run-details", response_model=RunDetailResponse)
async def get_run_details(
    run_id: Optional[str] = Query(default=None),
    db: AsyncSession = Depends(get_db),
    session: DemoSession = Depends(get_demo_session),
):
    if not run_id:
        raise ValidationError("Missing run_id parameter")

    run = await run_service.get_run(db, session, run_id)
    steps = await run_service.get_steps(db, run.id)
    return RunDetailResponse(
        run=AgentRunResponse.model_validate(run),
        steps=[AgentStepResponse.model_validate(s) for s in steps],
        metrics=metrics_service.step_metrics(run, steps),
    )
