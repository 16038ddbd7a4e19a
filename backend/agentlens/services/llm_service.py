"""
LLM Service — thin client for an OpenAI-compatible chat-completions gateway.

Only the reasoning step of the research agent talks to it. Callers decide
what to do on failure; this module raises on transport errors and non-2xx
responses instead of hiding them.
"""

import logging
from dataclasses import dataclass
from typing import Optional
import httpx
from agentlens.config import get_settings

logger = logging.getLogger(__name__)


@dataclass
class Completion:
    content: str
    total_tokens: Optional[int] = None


class LLMService:
    def __init__(self, api_url: Optional[str] = None, api_key: Optional[str] = None,
                 model: Optional[str] = None, timeout: Optional[float] = None):
        settings = get_settings()
        self.api_url = api_url or settings.llm_api_url
        self.api_key = settings.llm_api_key if api_key is None else api_key
        self.model = model or settings.llm_model
        self.timeout = timeout or settings.llm_timeout_seconds

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def generate(self, prompt: str, system: str = "") -> Completion:
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.post(
                self.api_url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json={"model": self.model, "messages": messages},
            )
            response.raise_for_status()
            data = response.json()

        choices = data.get("choices") or [{}]
        content = (choices[0].get("message") or {}).get("content") or ""
        usage = data.get("usage") or {}
        logger.debug("Completion from %s used %s tokens", self.model, usage.get("total_tokens"))
        return Completion(content=content, total_tokens=usage.get("total_tokens"))


llm_service = LLMService()
