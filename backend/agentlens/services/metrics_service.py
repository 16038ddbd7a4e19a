from typing import Iterable
from agentlens.config import get_settings
from agentlens.models.agent_run import AgentRun, AgentStep, FAILURE_STATUSES, RunStatus

LOW_CONFIDENCE_THRESHOLD = 0.6
HIGH_LATENCY_MS = 500


class MetricsService:
    def run_metrics(self, runs: Iterable[AgentRun]) -> dict:
        total = success = failures = 0
        confidence_sum = 0.0
        token_sum = 0
        for run in runs:
            total += 1
            if run.status == RunStatus.SUCCESS.value:
                success += 1
            elif run.status in FAILURE_STATUSES:
                failures += 1
            confidence_sum += run.confidence_score or 0
            token_sum += run.token_usage or 0

        return {
            "total_runs": total,
            "success_count": success,
            "failure_count": failures,
            "failure_rate": (failures / total) * 100 if total else 0.0,
            "avg_confidence": confidence_sum / total if total else 0.0,
            "avg_token_usage": token_sum / total if total else 0.0,
        }

    def step_metrics(self, run: AgentRun, steps: Iterable[AgentStep]) -> dict:
        count = low_confidence = high_latency = 0
        latency_sum = 0
        confidence_sum = 0.0
        for step in steps:
            count += 1
            latency = step.latency_ms or 0
            confidence = step.confidence or 0
            latency_sum += latency
            confidence_sum += confidence
            if confidence < LOW_CONFIDENCE_THRESHOLD:
                low_confidence += 1
            if latency > HIGH_LATENCY_MS:
                high_latency += 1

        return {
            "total_latency_ms": latency_sum,
            "avg_step_confidence": confidence_sum / count if count else 0.0,
            "steps_count": count,
            "low_confidence_steps": low_confidence,
            "high_latency_steps": high_latency,
            "can_replay": (run.replay_count or 0) < get_settings().max_replays_per_run,
        }


metrics_service = MetricsService()
