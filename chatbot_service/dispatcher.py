"""
Request orchestration: primary ChatKit path, then the completions fallback.

dispatch() never raises for upstream trouble. It hands back one of the three
result types below and the route decides what the caller sees.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

from chatbot_service.chatkit_client import ChatKitClient
from chatbot_service.config import Settings
from chatbot_service.exceptions import ChatbotError, FallbackFailed, InvalidRequest, ProtocolError, Unconfigured
from chatbot_service.fallback_client import FallbackClient
from chatbot_service.models import ChatbotRequest

logger = logging.getLogger(__name__)


@dataclass
class PrimarySuccess:
    content: str


@dataclass
class FallbackSuccess:
    content: str
    primary_error: ChatbotError


@dataclass
class TerminalFailure:
    error: ChatbotError


DispatchResult = Union[PrimarySuccess, FallbackSuccess, TerminalFailure]


class ChatbotDispatcher:
    def __init__(
        self,
        settings: Settings,
        chatkit: Optional[ChatKitClient] = None,
        fallback: Optional[FallbackClient] = None,
    ):
        self.settings = settings
        self.chatkit = chatkit or ChatKitClient(settings)
        self.fallback = fallback or FallbackClient(settings)

    async def dispatch(self, request: ChatbotRequest) -> DispatchResult:
        if not self.settings.is_configured:
            logger.error("OPENAI_API_KEY is not configured")
            return TerminalFailure(Unconfigured())
        if not request.messages:
            return TerminalFailure(InvalidRequest())

        logger.info("Processing message for workflow: %s", self.settings.workflow_id)
        logger.info("Session ID: %s", request.sessionId or "new session")

        try:
            client_secret = await self.chatkit.create_session(request.sessionId)
            content = await self.chatkit.send_message(client_secret, request.messages)
            return PrimarySuccess(content)
        except InvalidRequest as exc:
            return TerminalFailure(exc)
        except ChatbotError as exc:
            primary_error = exc
        except Exception as exc:
            logger.exception("Unexpected error on the ChatKit path")
            primary_error = ProtocolError(f"ChatKit path failed: {exc}")

        logger.error("Error processing chatbot message: %s", primary_error.detail)
        try:
            content = await self.fallback.complete(request.messages)
        except ChatbotError as exc:
            fallback_error = exc
        except Exception as exc:
            logger.exception("Unexpected error on the fallback path")
            fallback_error = FallbackFailed(f"Fallback failed: {exc}")
        else:
            return FallbackSuccess(content, primary_error)

        logger.error("Fallback also failed: %s", fallback_error.detail)
        return TerminalFailure(fallback_error)
