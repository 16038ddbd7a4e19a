from agentlens.models.demo_session import DemoSession
from agentlens.models.agent_run import AgentRun, AgentStep, RunStatus, StepType

__all__ = ["DemoSession", "AgentRun", "AgentStep", "RunStatus", "StepType"]
