"""Fallback path: plain Chat Completions call with the whole conversation."""

import json
import logging
from typing import Optional, Sequence

import httpx

from chatbot_service.config import Settings
from chatbot_service.exceptions import FallbackFailed
from chatbot_service.models import ChatMessage
from chatbot_service.text_escape import find_string_field

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an AI Financial Copilot for PropLync.ai, a real estate investment platform. "
    "You help users analyze properties across Europe, calculate ROI for different rental "
    "strategies (Short-Term, Long-Term, Rent-to-Buy), understand local regulations, and find "
    "the best investment opportunities. Provide clear, actionable financial advice and insights. "
    "Be professional yet friendly."
)


def build_messages(messages: Sequence[ChatMessage]) -> list:
    conversation = [{"role": "system", "content": SYSTEM_PROMPT}]
    for msg in messages:
        conversation.append({"role": msg.role, "content": msg.content})
    return conversation


def _completion_content(body: str) -> Optional[str]:
    try:
        data = json.loads(body)
    except (ValueError, RecursionError):
        return find_string_field(body, "content")
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None


class FallbackClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    async def complete(self, messages: Sequence[ChatMessage]) -> str:
        logger.info("Using fallback Chat Completions API")
        try:
            async with httpx.AsyncClient(timeout=self.settings.message_timeout, transport=self.transport) as client:
                response = await client.post(
                    self.settings.completions_url,
                    headers={
                        "Authorization": f"Bearer {self.settings.openai_api_key}",
                        "Content-Type": "application/json",
                    },
                    json={
                        "model": self.settings.fallback_model,
                        "messages": build_messages(messages),
                    },
                )
        except httpx.TimeoutException as exc:
            logger.error("Fallback API timed out")
            raise FallbackFailed("Fallback API timeout") from exc
        except httpx.HTTPError as exc:
            logger.error("Fallback API request failed: %s", exc)
            raise FallbackFailed(f"Fallback API request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error("Fallback API error: %d - %s", response.status_code, response.text)
            raise FallbackFailed(f"Fallback API error: {response.status_code}")

        content = _completion_content(response.text)
        if content is None:
            raise FallbackFailed("Could not find content in response")
        return content
