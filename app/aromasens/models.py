from enum import Enum, IntEnum
from typing import Any, Dict, List, Literal, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt
from pydantic.alias_generators import to_camel

from .errors import InvalidInputError

FEMININE = "femenino"
MASCULINE = "masculino"
GENDERS = (FEMININE, MASCULINE)


def normalize_gender(value: Optional[str]) -> str:
    """Return the catalog key for a gender value, or raise InvalidInputError."""
    gender = (value or "").strip().lower()
    if gender not in GENDERS:
        raise InvalidInputError(f"Gender must be one of: {', '.join(GENDERS)}")
    return gender


class ConversationStep(IntEnum):
    AGE = 0
    EXPERIENCE = 1
    OCCASION = 2
    PREFERENCES = 3
    COMPLETE = 4


class ProviderId(str, Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"
    TERTIARY = "tertiary"


class Language(str, Enum):
    ES = "es"
    EN = "en"


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ChatMessage(CamelModel):
    role: Literal["user", "assistant"]
    content: str


class ChatPreferences(CamelModel):
    age: str
    experience: str
    occasion: str
    preferences: str

    def missing_fields(self) -> List[str]:
        return [name for name, value in self.model_dump().items() if not value or not value.strip()]


class UserResponses(CamelModel):
    """Answers collected by a client; one field per processed step, in step order."""
    gender: str = ""
    age: str = ""
    experience: str = ""
    occasion: str = ""
    preferences: str = ""

    def to_preferences(self) -> ChatPreferences:
        return ChatPreferences(
            age=self.age,
            experience=self.experience,
            occasion=self.occasion,
            preferences=self.preferences,
        )


# Field written after the answer to each step
STEP_FIELDS = {
    ConversationStep.AGE: "age",
    ConversationStep.EXPERIENCE: "experience",
    ConversationStep.OCCASION: "occasion",
    ConversationStep.PREFERENCES: "preferences",
}


class PerfumeProfile(CamelModel):
    psychological_profile: str
    recommended_perfume_id: StrictInt
    recommendation_reason: str


class Perfume(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    id: int = 0
    name: str
    brand: str
    description: str = ""
    gender: str
    image_url: str = ""
    notes: List[str] = []
    occasions: List[str] = []
    profile_tags: List[str] = []


class ChatSession(CamelModel):
    id: int = 0
    user_id: Optional[int] = None
    gender: str
    preferences: ChatPreferences


class Recommendation(CamelModel):
    id: int = 0
    chat_session_id: int
    perfume_id: int
    reason: str


class PerfumeRecommendation(CamelModel):
    perfume_id: int
    brand: str
    name: str
    description: str
    image_url: str
    notes: List[str]
    occasions: str


class ChatResponse(CamelModel):
    message: str
    quick_responses: Optional[List[str]] = None
    step: Optional[int] = None
    is_complete: Optional[bool] = None
    recommendation: Optional[PerfumeRecommendation] = None
    session_id: Optional[str] = None


class ChatSettings(CamelModel):
    model: ProviderId = ProviderId.PRIMARY
    language: Language = Language.ES
    tts_enabled: bool = False


# Request bodies

class StartChatRequest(CamelModel):
    gender: str
    provider_id: Optional[str] = None
    language: Optional[str] = None


class SendMessageRequest(CamelModel):
    message: str
    gender: str
    step: StrictInt = Field(validation_alias=AliasChoices("step", "currentStep"))
    provider_id: Optional[str] = None
    language: Optional[str] = None
    # Raw entries; malformed ones are dropped when the prompt is built
    history: Optional[List[Dict[str, Any]]] = None


class RecommendationRequest(CamelModel):
    gender: str
    age: str
    experience: str
    occasion: str
    preferences: str
    provider_id: Optional[str] = None
    language: Optional[str] = None
    history: Optional[List[Dict[str, Any]]] = None

    def to_preferences(self) -> ChatPreferences:
        return ChatPreferences(
            age=self.age,
            experience=self.experience,
            occasion=self.occasion,
            preferences=self.preferences,
        )


class SessionDetails(CamelModel):
    session: ChatSession
    recommendations: List[Recommendation]


class SettingsResponse(CamelModel):
    defaults: ChatSettings
    providers: List[str]
    languages: List[str]
    genders: List[str]
