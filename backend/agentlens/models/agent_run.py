import uuid
from enum import Enum
from sqlalchemy import Column, Integer, Float, String, Text, DateTime, JSON, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from agentlens.database import Base
from agentlens.models.demo_session import _utcnow


class RunStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    SUCCESS = "success"
    FAILED = "failed"
    TIMEOUT = "timeout"


FAILURE_STATUSES = {RunStatus.FAILED.value, RunStatus.TIMEOUT.value}


class StepType(str, Enum):
    PROMPT = "prompt"
    TOOL_CALL = "tool_call"
    TOOL_RESULT = "tool_result"
    REASONING = "reasoning"
    OUTPUT = "output"


class AgentRun(Base):
    __tablename__ = "agent_runs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    demo_session_id = Column(String(36), ForeignKey("demo_sessions.id", ondelete="CASCADE"), nullable=False, index=True)
    agent_name = Column(String(100), nullable=False, default="Research Agent")
    status = Column(String(20), nullable=False, default=RunStatus.PENDING.value)
    input_query = Column(Text)
    confidence_score = Column(Float)
    token_usage = Column(Integer)
    replay_count = Column(Integer, nullable=False, default=0)
    started_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    completed_at = Column(DateTime(timezone=True))
    error_message = Column(Text)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)

    demo_session = relationship("DemoSession", back_populates="runs")
    steps = relationship(
        "AgentStep",
        back_populates="agent_run",
        order_by="AgentStep.step_index",
        cascade="all, delete-orphan",
    )


class AgentStep(Base):
    __tablename__ = "agent_steps"
    __table_args__ = (UniqueConstraint("agent_run_id", "step_index", name="uq_agent_steps_run_index"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    agent_run_id = Column(String(36), ForeignKey("agent_runs.id", ondelete="CASCADE"), nullable=False, index=True)
    step_index = Column(Integer, nullable=False)
    step_type = Column(String(30), nullable=False)
    tool_name = Column(String(100))
    input = Column(JSON)
    output = Column(JSON)
    latency_ms = Column(Integer)
    confidence = Column(Float)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    agent_run = relationship("AgentRun", back_populates="steps")
