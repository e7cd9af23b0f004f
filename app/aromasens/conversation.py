"""
Four-question dialogue: age, experience, occasion, preferences.

The engine is stateless. Each call gets the gender and the step the client
is on; ``advance`` moves exactly one step forward and never revisits a step.
Step 4 (COMPLETE) is terminal and answered without calling a backend.
"""
from typing import Any, List, Optional, Sequence

from .config import Settings
from .errors import InvalidInputError, ProviderError
from .log import get_logger
from .models import ChatResponse, ChatSettings, ConversationStep, Language, ProviderId, normalize_gender
from .prompts import COMPLETION_MESSAGE, QUICK_RESPONSES, degraded_message, start_prompt, step_prompt
from .providers import AIService

logger = get_logger(__name__)


def resolve_language(value: Optional[str], default: Language = Language.ES) -> Language:
    if value is None or not str(value).strip():
        return default
    try:
        return Language(str(value).strip().lower())
    except ValueError:
        logger.warning(f"Unknown language '{value}', using '{default.value}'")
        return default


def quick_responses_for(next_step: int, language: Language = Language.ES) -> Optional[List[str]]:
    if next_step == ConversationStep.PREFERENCES:
        return list(QUICK_RESPONSES["occasions"][language])
    if next_step == ConversationStep.COMPLETE:
        return list(QUICK_RESPONSES["families"][language])
    return None


def validate_step(step: Any) -> ConversationStep:
    # bool is an int subclass; reject it explicitly
    if isinstance(step, bool) or not isinstance(step, int):
        raise InvalidInputError("Step is required and must be an integer")
    if not ConversationStep.AGE <= step <= ConversationStep.COMPLETE:
        raise InvalidInputError(f"Step must be between {int(ConversationStep.AGE)} and {int(ConversationStep.COMPLETE)}")
    return ConversationStep(step)


class ConversationEngine:
    def __init__(self, ai: AIService, settings: Optional[ChatSettings] = None):
        self.ai = ai
        self.settings = settings or ChatSettings()

    def _language(self, language: Optional[str]) -> Language:
        return resolve_language(language, self.settings.language)

    def _provider(self, provider_id: Optional[str]) -> str:
        return self.ai.resolve_provider_id(provider_id or self.settings.model.value)

    def _generate(self, prompt: str, provider_id: str, language: Language, step: ConversationStep) -> str:
        try:
            return self.ai.generate_text(prompt, provider_id, language)
        except ProviderError as e:
            logger.error(f"All providers failed at step {int(step)}, sending canned reply: {e}")
            return degraded_message(step, language)

    def start(self, gender: str, provider_id: Optional[str] = None, language: Optional[str] = None) -> ChatResponse:
        gender = normalize_gender(gender)
        lang = self._language(language)
        message = self._generate(start_prompt(gender, lang), self._provider(provider_id), lang, ConversationStep.AGE)
        return ChatResponse(message=message, step=int(ConversationStep.AGE))

    def advance(self, message: str, gender: str, current_step: Any, provider_id: Optional[str] = None,
                language: Optional[str] = None, history: Optional[Sequence[Any]] = None) -> ChatResponse:
        step = validate_step(current_step)
        gender = normalize_gender(gender)
        lang = self._language(language)

        if step == ConversationStep.COMPLETE:
            return ChatResponse(
                message=COMPLETION_MESSAGE[lang],
                step=int(ConversationStep.COMPLETE),
                is_complete=True,
            )

        if not message or not message.strip():
            raise InvalidInputError("Message must not be empty")

        next_step = ConversationStep(step + 1)
        prompt = step_prompt(message.strip(), gender, next_step, lang, history)
        reply = self._generate(prompt, self._provider(provider_id), lang, next_step)
        return ChatResponse(
            message=reply,
            quick_responses=quick_responses_for(next_step, lang),
            step=int(next_step),
        )


def default_chat_settings(settings: Settings, ai: AIService) -> ChatSettings:
    """Server-wide defaults; requests may still override provider and language."""
    return ChatSettings(
        model=ProviderId(ai.resolve_provider_id(settings.default_provider)),
        language=resolve_language(settings.default_language),
        tts_enabled=settings.tts_enabled,
    )
