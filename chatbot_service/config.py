"""Chatbot Service — runtime configuration."""

import os
from functools import lru_cache
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

load_dotenv(os.path.join(os.path.dirname(__file__), "..", ".env"))

DEFAULT_WORKFLOW_ID = "wf_6907b12d71208190aebedcd7523c1d8d0a79856e2c61f448"
DEFAULT_CHATKIT_API_BASE = "https://api.openai.com"
DEFAULT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_FALLBACK_MODEL = "gpt-4o-mini"


class Settings(BaseModel):
    openai_api_key: Optional[str] = None
    workflow_id: str = DEFAULT_WORKFLOW_ID
    chatkit_api_base: str = DEFAULT_CHATKIT_API_BASE
    completions_url: str = DEFAULT_COMPLETIONS_URL
    fallback_model: str = DEFAULT_FALLBACK_MODEL
    session_timeout: float = 30.0
    message_timeout: float = 60.0
    cors_origins: List[str] = ["*"]
    log_level: str = "INFO"

    @property
    def is_configured(self) -> bool:
        return bool(self.openai_api_key and self.openai_api_key.strip())


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    origins = os.getenv("CORS_ORIGINS", "*")
    return Settings(
        openai_api_key=os.getenv("OPENAI_API_KEY") or None,
        workflow_id=os.getenv("CHATKIT_WORKFLOW_ID", DEFAULT_WORKFLOW_ID),
        chatkit_api_base=os.getenv("CHATKIT_API_BASE", DEFAULT_CHATKIT_API_BASE).rstrip("/"),
        completions_url=os.getenv("OPENAI_COMPLETIONS_URL", DEFAULT_COMPLETIONS_URL),
        fallback_model=os.getenv("FALLBACK_MODEL", DEFAULT_FALLBACK_MODEL),
        session_timeout=float(os.getenv("SESSION_TIMEOUT_SECONDS", "30")),
        message_timeout=float(os.getenv("MESSAGE_TIMEOUT_SECONDS", "60")),
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
