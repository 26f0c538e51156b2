"""Chatbot Service — error taxonomy.

Every error carries the HTTP status the route reports it with, so the endpoint
never has to guess how a failure should look to the caller.
"""


class ChatbotError(Exception):
    status_code = 500

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class Unconfigured(ChatbotError):
    status_code = 500

    def __init__(self, detail: str = "OpenAI API key not configured"):
        super().__init__(detail)


class InvalidRequest(ChatbotError):
    status_code = 400

    def __init__(self, detail: str = "Messages array is empty"):
        super().__init__(detail)


class ProtocolError(ChatbotError):
    status_code = 502


class ParseFailure(ProtocolError):
    """A successful response that is missing the field we came for."""


class UpstreamTimeout(ChatbotError):
    """Always answered by the fallback path, so it never reaches the caller."""


class FallbackFailed(ChatbotError):
    status_code = 502
