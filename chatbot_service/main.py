"""
Chatbot Service — PropLync AI copilot endpoint.
Port: 8004

Forwards the conversation to the ChatKit workflow and falls back to a plain
Chat Completions call when ChatKit fails. Nothing is stored between calls.
"""

import logging

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from chatbot_service.config import Settings, get_settings
from chatbot_service.dependencies import get_dispatcher
from chatbot_service.dispatcher import ChatbotDispatcher, FallbackSuccess, PrimarySuccess
from chatbot_service.models import ChatbotRequest, ChatbotResponse, ErrorResponse, HealthResponse

settings = get_settings()

logging.basicConfig(level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
logger = logging.getLogger(__name__)

# ── App ───────────────────────────────────────────────────────────────────────
app = FastAPI(title="Chatbot Service", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── Endpoints ─────────────────────────────────────────────────────────────────

@app.post(
    "/api/chatbot/message",
    response_model=ChatbotResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}, 502: {"model": ErrorResponse}},
)
async def send_message(
    request: ChatbotRequest,
    dispatcher: ChatbotDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings),
):
    result = await dispatcher.dispatch(request)

    if isinstance(result, PrimarySuccess):
        return ChatbotResponse(content=result.content, workflowId=settings.workflow_id)
    if isinstance(result, FallbackSuccess):
        return ChatbotResponse(content=result.content, workflowId=settings.workflow_id, fallback=True)

    error = result.error
    return JSONResponse(status_code=error.status_code, content={"error": error.detail})


@app.get("/health", response_model=HealthResponse)
async def health():
    return {"status": "ok", "service": "chatbot"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("chatbot_service.main:app", host="0.0.0.0", port=8004, reload=True)
