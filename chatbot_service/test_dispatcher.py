"""Tests for the dispatch result types, independent of HTTP."""

import asyncio

from chatbot_service.config import Settings
from chatbot_service.dispatcher import ChatbotDispatcher, FallbackSuccess, PrimarySuccess, TerminalFailure
from chatbot_service.exceptions import (
    FallbackFailed,
    InvalidRequest,
    ProtocolError,
    Unconfigured,
    UpstreamTimeout,
)
from chatbot_service.models import ChatbotRequest

SETTINGS = Settings(openai_api_key="sk-test")


class StubChatKit:
    def __init__(self, session_error=None, message_error=None, reply="primary"):
        self.session_error = session_error
        self.message_error = message_error
        self.reply = reply
        self.calls = []

    async def create_session(self, session_id=None):
        self.calls.append(("session", session_id))
        if self.session_error:
            raise self.session_error
        return "cs"

    async def send_message(self, client_secret, messages):
        self.calls.append(("message", client_secret))
        if self.message_error:
            raise self.message_error
        return self.reply


class StubFallback:
    def __init__(self, error=None):
        self.error = error
        self.calls = []

    async def complete(self, messages):
        self.calls.append(list(messages))
        if self.error:
            raise self.error
        return "fallback"


def _request(*contents, session_id=None):
    return ChatbotRequest(
        messages=[{"role": "user", "content": c} for c in contents],
        sessionId=session_id,
    )


def _dispatch(chatkit, fallback, request, settings=SETTINGS):
    return asyncio.run(ChatbotDispatcher(settings, chatkit=chatkit, fallback=fallback).dispatch(request))


def test_primary_success():
    chatkit, fallback = StubChatKit(), StubFallback()
    result = _dispatch(chatkit, fallback, _request("Hi", session_id="s1"))

    assert result == PrimarySuccess("primary")
    assert chatkit.calls == [("session", "s1"), ("message", "cs")]
    assert fallback.calls == []


def test_session_error_falls_back():
    error = ProtocolError("Session creation failed: 500")
    chatkit, fallback = StubChatKit(session_error=error), StubFallback()
    result = _dispatch(chatkit, fallback, _request("a", "b"))

    assert isinstance(result, FallbackSuccess)
    assert result.content == "fallback"
    assert result.primary_error is error
    assert [m.content for m in fallback.calls[0]] == ["a", "b"]


def test_timeout_falls_back():
    chatkit = StubChatKit(message_error=UpstreamTimeout("ChatKit message API timed out"))
    result = _dispatch(chatkit, StubFallback(), _request("Hi"))
    assert isinstance(result, FallbackSuccess)


def test_fallback_failure_is_terminal():
    chatkit = StubChatKit(session_error=ProtocolError("down"))
    failure = FallbackFailed("Fallback API error: 503")
    result = _dispatch(chatkit, StubFallback(error=failure), _request("Hi"))
    assert result == TerminalFailure(failure)


def test_empty_messages_never_reach_upstream():
    chatkit, fallback = StubChatKit(), StubFallback()
    result = _dispatch(chatkit, fallback, ChatbotRequest(messages=[]))

    assert isinstance(result, TerminalFailure)
    assert isinstance(result.error, InvalidRequest)
    assert chatkit.calls == [] and fallback.calls == []


def test_unconfigured_never_reaches_upstream():
    chatkit, fallback = StubChatKit(), StubFallback()
    result = _dispatch(chatkit, fallback, _request("Hi"), settings=Settings(openai_api_key="  "))

    assert isinstance(result, TerminalFailure)
    assert isinstance(result.error, Unconfigured)
    assert chatkit.calls == []


def test_unexpected_primary_error_still_falls_back():
    chatkit, fallback = StubChatKit(message_error=RuntimeError("boom")), StubFallback()
    result = _dispatch(chatkit, fallback, _request("Hi"))

    assert isinstance(result, FallbackSuccess)
    assert isinstance(result.primary_error, ProtocolError)
    assert "boom" in result.primary_error.detail
    assert len(fallback.calls) == 1


def test_unexpected_fallback_error_is_terminal():
    chatkit = StubChatKit(session_error=ProtocolError("down"))
    result = _dispatch(chatkit, StubFallback(error=RuntimeError("kaput")), _request("Hi"))

    assert isinstance(result, TerminalFailure)
    assert isinstance(result.error, FallbackFailed)
    assert "kaput" in result.error.detail
