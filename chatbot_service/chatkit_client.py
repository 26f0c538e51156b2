"""
ChatKit client — session creation and message dispatch.

Each call opens its own httpx.AsyncClient with that call's timeout. Passing a
transport lets tests (or a pooled transport) sit underneath without changing
any behaviour.
"""

import json
import logging
import uuid
from typing import Any, Optional, Sequence

import httpx

from chatbot_service.config import Settings
from chatbot_service.exceptions import InvalidRequest, ParseFailure, ProtocolError, UpstreamTimeout
from chatbot_service.models import ChatMessage
from chatbot_service.text_escape import find_string_field

logger = logging.getLogger(__name__)

CHATKIT_BETA_HEADER = "chatkit_beta=v1"
DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"
EMPTY_REPLY = "I received your message but couldn't generate a response."


def _delta_content(frame: Any) -> Optional[str]:
    """Pull delta.content out of a decoded frame (flat or OpenAI chunk shape)."""
    if not isinstance(frame, dict):
        return None
    delta = frame.get("delta")
    if delta is None:
        choices = frame.get("choices")
        if isinstance(choices, list) and choices and isinstance(choices[0], dict):
            delta = choices[0].get("delta")
    if isinstance(delta, dict) and isinstance(delta.get("content"), str):
        return delta["content"]
    return None


def _parse_frame(payload: str) -> Optional[str]:
    try:
        return _delta_content(json.loads(payload))
    except (ValueError, RecursionError):
        pass
    delta_at = payload.find('"delta":')
    if delta_at == -1:
        return None
    return find_string_field(payload, "content", delta_at)


def reconstruct_stream(body: str) -> str:
    """Concatenate every delta content fragment in arrival order."""
    parts = []
    for line in body.split("\n"):
        if not line.startswith(DATA_PREFIX):
            continue
        payload = line[len(DATA_PREFIX):].strip()
        if payload == DONE_SENTINEL:
            continue
        content = _parse_frame(payload)
        if content is None:
            logger.debug("Skipping stream frame without content: %.200s", payload)
            continue
        parts.append(content)

    result = "".join(parts)
    if not result:
        return EMPTY_REPLY
    return result


def _client_secret(body: str) -> Optional[str]:
    try:
        data = json.loads(body)
    except (ValueError, RecursionError):
        return find_string_field(body, "client_secret")
    if not isinstance(data, dict):
        return None
    secret = data.get("client_secret")
    if isinstance(secret, dict):
        secret = secret.get("value")
    return secret if isinstance(secret, str) else None


class ChatKitClient:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.transport = transport

    def _headers(self, token: str) -> dict:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "OpenAI-Beta": CHATKIT_BETA_HEADER,
        }

    async def _post(self, url: str, token: str, payload: dict, timeout: float, what: str) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
                return await client.post(url, headers=self._headers(token), json=payload)
        except httpx.TimeoutException as exc:
            logger.error("%s timed out after %ss", what, timeout)
            raise UpstreamTimeout(f"{what} timed out") from exc
        except httpx.HTTPError as exc:
            logger.error("%s failed: %s", what, exc)
            raise ProtocolError(f"{what} failed: {exc}") from exc

    async def create_session(self, session_id: Optional[str] = None) -> str:
        """Request a client secret for the configured workflow."""
        logger.info("Creating ChatKit session...")
        user = session_id if session_id and session_id.strip() else f"user_{uuid.uuid4().hex}"

        response = await self._post(
            f"{self.settings.chatkit_api_base}/v1/chatkit/sessions",
            self.settings.openai_api_key or "",
            {"workflow": {"id": self.settings.workflow_id}, "user": user},
            self.settings.session_timeout,
            "Session creation",
        )
        if response.status_code != 200:
            logger.error("Session creation failed: %d - %s", response.status_code, response.text)
            raise ProtocolError(f"Session creation failed: {response.status_code}")

        secret = _client_secret(response.text)
        if not secret:
            raise ParseFailure("Could not find client_secret in response")

        logger.info("Session created, client_secret obtained")
        return secret

    async def send_message(self, client_secret: str, messages: Sequence[ChatMessage]) -> str:
        """Send the trailing message and rebuild the streamed reply."""
        logger.info("Sending message via ChatKit API...")
        if not messages:
            raise InvalidRequest()

        response = await self._post(
            f"{self.settings.chatkit_api_base}/v1/chatkit/messages",
            client_secret,
            {"content": messages[-1].content, "role": "user"},
            self.settings.message_timeout,
            "ChatKit message API",
        )
        if response.status_code != 200:
            logger.error("ChatKit message API failed: %d - %s", response.status_code, response.text)
            raise ProtocolError(f"ChatKit message API failed: {response.status_code}")

        content = reconstruct_stream(response.text)
        if content != EMPTY_REPLY:
            logger.info("Response received via ChatKit workflow")
        return content
