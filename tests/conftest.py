"""
Shared pytest fixtures: scripted fake providers, a seeded in-memory store
and a TestClient wired to both.
"""
import json

import pytest
from fastapi.testclient import TestClient

from app.aromasens.catalog import seed_catalog
from app.aromasens.config import Settings
from app.aromasens.conversation import ConversationEngine
from app.aromasens.models import ChatPreferences
from app.aromasens.providers import AIProvider, AIService
from app.aromasens.recommendation import RecommendationGenerator
from app.aromasens.storage import MemStorage
from server import create_app

DEFAULT_PROFILE = {
    "psychologicalProfile": "Persona romántica y detallista.",
    "recommendedPerfumeId": 2,
    "recommendationReason": "Su calidez encaja con las notas de vainilla.",
}


class FakeProvider(AIProvider):
    """Records every call; answers with fixed text/JSON or raises when failing."""

    def __init__(self, provider_id, text="¡Hola! ¿Cuántos años tienes?", profile=None, fail=False):
        self.provider_id = provider_id
        self.text = text
        self.profile = DEFAULT_PROFILE if profile is None else profile
        self.fail = fail
        self.calls = []

    def _chat(self, system, prompt, json_mode=False):
        self.calls.append({"system": system, "prompt": prompt, "json_mode": json_mode})
        if self.fail:
            raise RuntimeError(f"{self.provider_id} is down")
        if json_mode:
            return self.profile if isinstance(self.profile, str) else json.dumps(self.profile)
        return self.text


@pytest.fixture
def providers():
    return {
        "primary": FakeProvider("primary", text="Respuesta de primary"),
        "secondary": FakeProvider("secondary", text="Respuesta de secondary"),
        "tertiary": FakeProvider("tertiary", text="Respuesta de tertiary"),
    }


@pytest.fixture
def ai_service(providers):
    return AIService(providers, "primary")


@pytest.fixture
def storage():
    store = MemStorage()
    seed_catalog(store)
    return store


@pytest.fixture
def engine(ai_service):
    return ConversationEngine(ai_service)


@pytest.fixture
def generator(ai_service, storage):
    return RecommendationGenerator(ai_service, storage)


@pytest.fixture
def preferences():
    return ChatPreferences(age="25", experience="ninguna", occasion="uso diario", preferences="floral")


@pytest.fixture
def client(ai_service, storage):
    app = create_app(settings=Settings(default_provider="primary", default_language="es"),
                     ai=ai_service, storage=storage)
    return TestClient(app)


def total_calls(providers):
    return sum(len(p.calls) for p in providers.values())
