from fastapi import Depends

from chatbot_service.config import Settings, get_settings
from chatbot_service.dispatcher import ChatbotDispatcher


def get_dispatcher(settings: Settings = Depends(get_settings)) -> ChatbotDispatcher:
    return ChatbotDispatcher(settings)
