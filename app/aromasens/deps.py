from fastapi import Request

from .conversation import ConversationEngine
from .models import ChatSettings
from .recommendation import RecommendationGenerator
from .storage import Storage

# Services are built by server.create_app() and kept on app.state;
# tests pass fakes to create_app() or use app.dependency_overrides.


def get_engine(request: Request) -> ConversationEngine:
    return request.app.state.engine


def get_generator(request: Request) -> RecommendationGenerator:
    return request.app.state.generator


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_chat_settings(request: Request) -> ChatSettings:
    return request.app.state.chat_settings


__all__ = ["get_engine", "get_generator", "get_storage", "get_chat_settings"]
