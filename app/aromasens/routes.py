from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from .conversation import ConversationEngine, resolve_language
from .deps import get_chat_settings, get_engine, get_generator, get_storage
from .errors import InvalidInputError, PerfumeNotFoundError, SessionNotFoundError
from .log import get_logger
from .models import (
    GENDERS,
    ChatResponse,
    ChatSettings,
    Language,
    Perfume,
    ProviderId,
    RecommendationRequest,
    SendMessageRequest,
    SessionDetails,
    SettingsResponse,
    StartChatRequest,
)
from .prompts import APOLOGY_MESSAGE
from .recommendation import RecommendationGenerator
from .storage import Storage

logger = get_logger(__name__)

router = APIRouter()


@router.post("/chat/start", response_model=ChatResponse, response_model_exclude_none=True)
def start_chat(request: StartChatRequest,
               engine: ConversationEngine = Depends(get_engine),
               chat_settings: ChatSettings = Depends(get_chat_settings)):
    """Open a conversation: greeting plus the age question."""
    try:
        return engine.start(request.gender, request.provider_id, request.language)
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Error starting chat")
        lang = resolve_language(request.language, chat_settings.language)
        raise HTTPException(status_code=500, detail=APOLOGY_MESSAGE[lang])


@router.post("/chat/message", response_model=ChatResponse, response_model_exclude_none=True)
def send_message(request: SendMessageRequest,
                 engine: ConversationEngine = Depends(get_engine),
                 chat_settings: ChatSettings = Depends(get_chat_settings)):
    """Record an answer for the current step and ask the next question."""
    try:
        return engine.advance(
            request.message,
            request.gender,
            request.step,
            provider_id=request.provider_id,
            language=request.language,
            history=request.history,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Error processing message")
        lang = resolve_language(request.language, chat_settings.language)
        raise HTTPException(status_code=500, detail=APOLOGY_MESSAGE[lang])


@router.post("/chat/recommendation", response_model=ChatResponse, response_model_exclude_none=True)
def get_recommendation(request: RecommendationRequest,
                       generator: RecommendationGenerator = Depends(get_generator)):
    """Build the profile, pick a perfume from the gender's catalog and store the session."""
    try:
        return generator.generate(
            request.gender,
            request.to_preferences(),
            provider_id=request.provider_id,
            language=request.language,
            history=request.history,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception:
        logger.exception("Error generating recommendation")
        raise HTTPException(status_code=500, detail="Failed to generate recommendation")


@router.get("/perfumes", response_model=List[Perfume])
def list_perfumes(gender: Optional[str] = None, storage: Storage = Depends(get_storage)):
    if gender is None:
        return storage.list_perfumes()
    return storage.get_perfumes(gender)


@router.get("/perfumes/{perfume_id}", response_model=Perfume)
def get_perfume_details(perfume_id: int, storage: Storage = Depends(get_storage)):
    """Get a single catalog perfume by id."""
    perfume = storage.get_perfume(perfume_id)
    if perfume is None:
        raise HTTPException(status_code=404, detail=str(PerfumeNotFoundError(perfume_id)))
    return perfume


@router.get("/sessions/{session_id}", response_model=SessionDetails)
def get_session(session_id: int, storage: Storage = Depends(get_storage)):
    session = storage.get_chat_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail=str(SessionNotFoundError(session_id)))
    return SessionDetails(session=session, recommendations=storage.get_recommendations_by_session(session_id))


@router.get("/settings", response_model=SettingsResponse)
def get_settings(chat_settings: ChatSettings = Depends(get_chat_settings)):
    """Server defaults and the options a client can choose from."""
    return SettingsResponse(
        defaults=chat_settings,
        providers=[p.value for p in ProviderId],
        languages=[lang.value for lang in Language],
        genders=list(GENDERS),
    )


@router.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}
