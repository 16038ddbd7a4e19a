from pydantic import BaseModel
from datetime import datetime
from typing import Optional, Any


class AgentRunRequest(BaseModel):
    query: Optional[str] = None


class ReplayRequest(BaseModel):
    run_id: Optional[str] = None


class AgentStepResponse(BaseModel):
    id: str
    agent_run_id: str
    step_index: int
    step_type: str
    tool_name: Optional[str] = None
    input: Optional[Any] = None
    output: Optional[Any] = None
    latency_ms: Optional[int] = None
    confidence: Optional[float] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class AgentRunResponse(BaseModel):
    id: str
    demo_session_id: str
    agent_name: str
    status: str
    input_query: Optional[str] = None
    confidence_score: Optional[float] = None
    token_usage: Optional[int] = None
    replay_count: int = 0
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    error_message: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class RunTriggerResponse(BaseModel):
    run_id: str
    status: str
    confidence_score: float
    total_latency_ms: int
    token_usage: int
    steps_count: int


class ReplayResponse(BaseModel):
    original_run_id: str
    replayed_run_id: str
    status: str
    confidence_score: float
    total_latency_ms: int
    steps_count: int


class RunListMetrics(BaseModel):
    total_runs: int
    success_count: int
    failure_count: int
    failure_rate: float
    avg_confidence: float
    avg_token_usage: float


class AgentRunListResponse(BaseModel):
    runs: list[AgentRunResponse]
    metrics: RunListMetrics


class StepMetrics(BaseModel):
    total_latency_ms: int
    avg_step_confidence: float
    steps_count: int
    low_confidence_steps: int
    high_latency_steps: int
    can_replay: bool


class RunDetailResponse(BaseModel):
    run: AgentRunResponse
    steps: list[AgentStepResponse]
    metrics: StepMetrics
