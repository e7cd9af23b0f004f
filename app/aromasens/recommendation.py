from typing import Any, Optional, Sequence

from .conversation import resolve_language
from .errors import CatalogEmptyError, InvalidInputError, PerfumeNotFoundError
from .log import get_logger
from .models import (
    ChatPreferences,
    ChatResponse,
    ChatSession,
    ChatSettings,
    PerfumeRecommendation,
    Recommendation,
    normalize_gender,
)
from .prompts import RECOMMENDATION_MESSAGE
from .providers import AIService
from .storage import Storage

logger = get_logger(__name__)


class RecommendationGenerator:
    """Turns a finished conversation into a stored session and a perfume recommendation."""

    def __init__(self, ai: AIService, storage: Storage, settings: Optional[ChatSettings] = None):
        self.ai = ai
        self.storage = storage
        self.settings = settings or ChatSettings()

    def generate(self, gender: str, preferences: ChatPreferences, provider_id: Optional[str] = None,
                 language: Optional[str] = None, history: Optional[Sequence[Any]] = None) -> ChatResponse:
        gender = normalize_gender(gender)
        missing = preferences.missing_fields()
        if missing:
            raise InvalidInputError(f"Missing preference fields: {', '.join(missing)}")
        lang = resolve_language(language, self.settings.language)

        perfumes = self.storage.get_perfumes(gender)
        if not perfumes:
            raise CatalogEmptyError(f"No perfumes found for gender: {gender}")
        available_ids = [p.id for p in perfumes]

        # Provider errors propagate: there is no recommendation without a profile
        profile = self.ai.generate_profile(
            preferences,
            provider_id or self.settings.model.value,
            gender=gender,
            perfume_ids=available_ids,
            language=lang,
            history=history,
        )

        perfume_id = profile.recommended_perfume_id
        if perfume_id not in available_ids:
            logger.warning(f"Recommended perfume {perfume_id} is not in the {gender} catalog, using {available_ids[0]}")
            perfume_id = available_ids[0]

        perfume = self.storage.get_perfume(perfume_id)
        if perfume is None:
            raise PerfumeNotFoundError(perfume_id)

        # Session first: the recommendation references its id
        session = self.storage.create_chat_session(
            ChatSession(user_id=None, gender=gender, preferences=preferences)
        )
        self.storage.create_recommendation(
            Recommendation(chat_session_id=session.id, perfume_id=perfume.id, reason=profile.recommendation_reason)
        )

        return ChatResponse(
            session_id=str(session.id),
            message=RECOMMENDATION_MESSAGE[lang],
            is_complete=True,
            recommendation=PerfumeRecommendation(
                perfume_id=perfume.id,
                brand=perfume.brand,
                name=perfume.name,
                description=f"{profile.recommendation_reason} {perfume.description}".strip(),
                image_url=perfume.image_url,
                notes=list(perfume.notes),
                occasions=", ".join(perfume.occasions),
            ),
        )
