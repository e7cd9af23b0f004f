"""
LLM backends behind one interface.

Each backend implements ``_chat`` (plain or JSON-mode completion) and gets
``generate_text`` / ``generate_profile`` from ``AIProvider``. ``AIService``
looks providers up by id and retries a failed call once on a fallback
provider: primary falls back to secondary, everything else to primary.
"""
import json
import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, TypeVar

from anthropic import Anthropic
from google import genai
from google.genai import types
from openai import OpenAI
from pydantic import ValidationError

from .config import Settings
from .errors import InvalidInputError, ProviderError, ProviderNotConfiguredError
from .log import get_logger
from .models import ChatPreferences, Language, PerfumeProfile, ProviderId
from .prompts import CHAT_SYSTEM_PROMPT, PROFILE_SYSTEM_PROMPT, profile_prompt

logger = get_logger(__name__)

T = TypeVar("T")

# Backend names used by older clients
PROVIDER_ALIASES = {
    "openai": ProviderId.PRIMARY,
    "anthropic": ProviderId.SECONDARY,
    "gemini": ProviderId.TERTIARY,
}

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


def parse_profile(raw: str, provider_id: str) -> PerfumeProfile:
    """Parse a JSON-mode completion into a PerfumeProfile; malformed output is a ProviderError."""
    text = (raw or "").strip()
    fenced = _FENCE_RE.match(text)
    if fenced:
        text = fenced.group(1)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProviderError(provider_id, f"Malformed JSON in profile response: {e}", cause=e)
    if not isinstance(data, dict):
        raise ProviderError(provider_id, "Profile response is not a JSON object")
    try:
        return PerfumeProfile.model_validate(data)
    except ValidationError as e:
        raise ProviderError(provider_id, f"Profile response has the wrong shape: {e}", cause=e)


class AIProvider(ABC):
    provider_id: str = ""

    @abstractmethod
    def _chat(self, system: str, prompt: str, json_mode: bool = False) -> str:
        ...

    def _complete(self, system: str, prompt: str, json_mode: bool = False) -> str:
        try:
            text = self._chat(system, prompt, json_mode)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(self.provider_id, f"{type(e).__name__}: {e}", cause=e)
        if not text or not text.strip():
            raise ProviderError(self.provider_id, "Empty response")
        return text.strip()

    def generate_text(self, prompt: str, language: Language = Language.ES) -> str:
        return self._complete(CHAT_SYSTEM_PROMPT[language], prompt)

    def generate_profile(self, preferences: ChatPreferences, gender: str, perfume_ids: Sequence[int],
                         language: Language = Language.ES, history: Optional[Sequence[Any]] = None) -> PerfumeProfile:
        prompt = profile_prompt(gender, preferences, perfume_ids, language, history)
        raw = self._complete(PROFILE_SYSTEM_PROMPT[language], prompt, json_mode=True)
        return parse_profile(raw, self.provider_id)


class OpenAIProvider(AIProvider):
    provider_id = ProviderId.PRIMARY.value

    def __init__(self, api_key: str = "", model: str = "gpt-4o", max_tokens: int = 1024, client: Any = None):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client
        if self.client is None and api_key:
            self.client = OpenAI(api_key=api_key)
        if self.client is None:
            logger.warning("OPENAI_API_KEY not found in environment variables")

    def _chat(self, system: str, prompt: str, json_mode: bool = False) -> str:
        if self.client is None:
            raise ProviderNotConfiguredError(self.provider_id, "OpenAI API key not configured")
        kwargs: Dict[str, Any] = {}
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system},
                {"role": "user", "content": prompt},
            ],
            max_tokens=self.max_tokens,
            **kwargs,
        )
        return response.choices[0].message.content


class AnthropicProvider(AIProvider):
    provider_id = ProviderId.SECONDARY.value

    def __init__(self, api_key: str = "", model: str = "claude-3-7-sonnet-20250219", max_tokens: int = 1024,
                 client: Any = None):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client
        if self.client is None and api_key:
            self.client = Anthropic(api_key=api_key)
        if self.client is None:
            logger.warning("ANTHROPIC_API_KEY not found in environment variables")

    def _chat(self, system: str, prompt: str, json_mode: bool = False) -> str:
        # No JSON mode in the Messages API; the prompt asks for JSON only
        if self.client is None:
            raise ProviderNotConfiguredError(self.provider_id, "Anthropic API key not configured")
        message = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            system=system,
            messages=[{"role": "user", "content": prompt}],
        )
        return "".join(block.text for block in message.content if getattr(block, "type", None) == "text")


class GeminiProvider(AIProvider):
    provider_id = ProviderId.TERTIARY.value

    def __init__(self, api_key: str = "", model: str = "gemini-1.5-flash", max_tokens: int = 1024, client: Any = None):
        self.model = model
        self.max_tokens = max_tokens
        self.client = client
        if self.client is None and api_key:
            self.client = genai.Client(api_key=api_key)
        if self.client is None:
            logger.warning("GEMINI_API_KEY not found in environment variables")

    def _chat(self, system: str, prompt: str, json_mode: bool = False) -> str:
        if self.client is None:
            raise ProviderNotConfiguredError(self.provider_id, "Gemini API key not configured")
        config = types.GenerateContentConfig(
            system_instruction=system,
            max_output_tokens=self.max_tokens,
            response_mime_type="application/json" if json_mode else None,
        )
        response = self.client.models.generate_content(model=self.model, contents=prompt, config=config)
        return response.text


def build_providers(settings: Settings) -> Dict[str, AIProvider]:
    return {
        ProviderId.PRIMARY.value: OpenAIProvider(settings.openai_api_key, settings.openai_model, settings.max_tokens),
        ProviderId.SECONDARY.value: AnthropicProvider(settings.anthropic_api_key, settings.anthropic_model,
                                                      settings.max_tokens),
        ProviderId.TERTIARY.value: GeminiProvider(settings.gemini_api_key, settings.gemini_model, settings.max_tokens),
    }


def fallback_for(provider_id: str) -> str:
    if provider_id == ProviderId.PRIMARY.value:
        return ProviderId.SECONDARY.value
    return ProviderId.PRIMARY.value


class AIService:
    """Provider lookup plus the single fallback retry."""

    def __init__(self, providers: Mapping[str, AIProvider], default_provider: str = ProviderId.PRIMARY.value):
        self.providers = dict(providers)
        self.default_provider = default_provider if default_provider in self.providers else ProviderId.PRIMARY.value

    def resolve_provider_id(self, provider_id: Optional[str]) -> str:
        """Map aliases onto provider ids; unknown values fall back to the default with a warning."""
        if provider_id is None or not str(provider_id).strip():
            return self.default_provider
        key = str(provider_id).strip().lower()
        key = PROVIDER_ALIASES[key].value if key in PROVIDER_ALIASES else key
        if key not in self.providers:
            logger.warning(f"Unknown providerId '{provider_id}', using '{self.default_provider}'")
            return self.default_provider
        return key

    def _call(self, provider_id: Optional[str], operation: str, fn: Callable[[AIProvider], T]) -> T:
        selected = self.resolve_provider_id(provider_id)
        logger.info(f"{operation} with provider {selected}")
        try:
            return fn(self.providers[selected])
        except Exception as error:
            logger.error(f"{operation} failed with {selected}: {error}")
            fallback = fallback_for(selected)
            if fallback not in self.providers or fallback == selected:
                raise
            logger.warning(f"Retrying {operation} with fallback provider {fallback}")
            try:
                return fn(self.providers[fallback])
            except Exception as fallback_error:
                logger.error(f"Fallback provider {fallback} failed: {fallback_error}")
                raise error

    def generate_text(self, prompt: str, provider_id: Optional[str] = None, language: Language = Language.ES) -> str:
        if not prompt or not prompt.strip():
            raise InvalidInputError("Prompt must not be empty")
        return self._call(provider_id, "Chat response", lambda p: p.generate_text(prompt, language))

    def generate_profile(self, preferences: ChatPreferences, provider_id: Optional[str] = None, *,
                         gender: str, perfume_ids: Sequence[int] = (), language: Language = Language.ES,
                         history: Optional[Sequence[Any]] = None) -> PerfumeProfile:
        missing = preferences.missing_fields()
        if missing:
            raise InvalidInputError(f"Missing preference fields: {', '.join(missing)}")
        return self._call(
            provider_id,
            "Perfume profile",
            lambda p: p.generate_profile(preferences, gender, perfume_ids, language, history),
        )
