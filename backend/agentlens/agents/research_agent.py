"""
Research Agent.
Turns a free-text query into a five-step trace: prompt, web search, result
processing, reasoning and final output. Only the reasoning step calls the
text-generation gateway; every other payload is fixed.
"""

import json
import logging
from typing import Any, Optional
from agentlens.agents.base_agent import BaseAgent, StepFn, StepResult
from agentlens.models.agent_run import StepType
from agentlens.services.llm_service import LLMService, llm_service

logger = logging.getLogger(__name__)

SEARCH_RESULTS = [
    {"title": "Recent developments in AI", "url": "https://example.com/ai-news", "snippet": "Latest AI research..."},
    {"title": "Research findings", "url": "https://example.com/research", "snippet": "Key findings include..."},
]
RELEVANCE_SCORES = [0.92, 0.87, 0.84, 0.76, 0.71]
FALLBACK_KEY_POINTS = ["Analysis completed", "Results synthesized", "Ready for output"]


def _parse_json_object(raw: str) -> Optional[dict]:
    """Whole reply must be a JSON object; fenced or prefixed JSON counts as prose."""
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError:
        return None
    return parsed if isinstance(parsed, dict) else None


class ResearchAgent(BaseAgent):
    """Agent that researches a query and returns structured findings."""

    def __init__(self, llm: Optional[LLMService] = None):
        self.llm = llm or llm_service

    @property
    def name(self) -> str:
        return "Research Agent"

    @property
    def description(self) -> str:
        return "Searches the web for a query, analyzes the results and returns key findings"

    @property
    def system_prompt(self) -> str:
        return (
            "You are a research agent. Analyze the query and provide 3 key insights. "
            "Keep response under 150 words. "
            'Format as JSON with "analysis" and "key_points" array.'
        )

    @property
    def pipeline(self) -> list[StepFn]:
        return [
            self._process_prompt,
            self._search_web,
            self._process_results,
            self._reason,
            self._compose_output,
        ]

    async def _process_prompt(self, query: str, context: dict[str, Any]) -> StepResult:
        return StepResult(
            step_type=StepType.PROMPT,
            input={"query": query},
            output={"processed_query": query, "intent": "research_request"},
            confidence=0.95,
            base_latency_ms=45,
        )

    async def _search_web(self, query: str, context: dict[str, Any]) -> StepResult:
        return StepResult(
            step_type=StepType.TOOL_CALL,
            tool_name="web_search",
            input={"search_query": query, "max_results": 5},
            output={"results": SEARCH_RESULTS, "result_count": 5},
            confidence=0.88,
            base_latency_ms=312,
        )

    async def _process_results(self, query: str, context: dict[str, Any]) -> StepResult:
        return StepResult(
            step_type=StepType.TOOL_RESULT,
            tool_name="web_search",
            input={"results_to_process": 5},
            output={
                "extracted_facts": 3,
                "relevance_scores": RELEVANCE_SCORES,
                "summary": "Found relevant information across 5 sources",
            },
            confidence=0.86,
            base_latency_ms=89,
        )

    async def _reason(self, query: str, context: dict[str, Any]) -> StepResult:
        output: dict = {"analysis": "Synthesizing information...", "key_points": []}
        confidence = 0.85

        if self.llm.is_configured:
            try:
                completion = await self.llm.generate(f"Research query: {query}", system=self.system_prompt)
                context["token_usage"] = completion.total_tokens
                parsed = _parse_json_object(completion.content)
                if parsed is not None:
                    output = parsed
                    confidence = 0.91
                else:
                    output = {"analysis": completion.content[:500], "key_points": list(FALLBACK_KEY_POINTS)}
            except Exception as e:  # noqa: BLE001 - generation failures fall back to the canned analysis
                logger.warning("Reasoning call failed, using default analysis: %s", e)

        context["reasoning"] = output
        return StepResult(
            step_type=StepType.REASONING,
            input={"context": "Analyzing search results and synthesizing response"},
            output=output,
            confidence=confidence,
            base_latency_ms=450,
        )

    async def _compose_output(self, query: str, context: dict[str, Any]) -> StepResult:
        reasoning = context.get("reasoning") or {}
        return StepResult(
            step_type=StepType.OUTPUT,
            input={"format": "structured_response"},
            output={
                "response": reasoning.get("analysis") or "Research completed successfully",
                "sources_used": 3,
                "confidence_level": "high",
                "key_findings": reasoning.get("key_points") or [],
            },
            confidence=0.89,
            base_latency_ms=23,
        )


# Singleton instance
research_agent = ResearchAgent()
