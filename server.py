from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.aromasens.catalog import seed_catalog
from app.aromasens.config import Settings, settings as default_settings
from app.aromasens.conversation import ConversationEngine, default_chat_settings
from app.aromasens.log import build_log_config, configure_logging, get_logger
from app.aromasens.providers import AIService, build_providers
from app.aromasens.recommendation import RecommendationGenerator
from app.aromasens.routes import router as aromasens_router
from app.aromasens.storage import MemStorage, Storage

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body")
        parts.append(f"{field}: {error.get('msg')}" if field else str(error.get("msg")))
    return "Invalid request: " + "; ".join(parts)


def create_app(settings: Optional[Settings] = None, ai: Optional[AIService] = None,
               storage: Optional[Storage] = None) -> FastAPI:
    settings = settings or default_settings

    app = FastAPI(
        title="AROMASENS Perfume Assistant API",
        description="Guided conversation that ends in a personalised perfume recommendation",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if ai is None:
        ai = AIService(build_providers(settings), settings.default_provider)
    if storage is None:
        storage = MemStorage()
        seed_catalog(storage)

    chat_settings = default_chat_settings(settings, ai)
    app.state.storage = storage
    app.state.chat_settings = chat_settings
    app.state.engine = ConversationEngine(ai, chat_settings)
    app.state.generator = RecommendationGenerator(ai, storage, chat_settings)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(status_code=exc.status_code, content={"message": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    # Include routes with /api prefix
    app.include_router(aromasens_router, prefix="/api")

    @app.get("/health")
    async def health_check():
        return {"status": "healthy", "message": "AROMASENS API is running"}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    configure_logging()
    logger.info(f"Starting server on {default_settings.host}:{default_settings.port}")
    uvicorn.run(
        "server:app",
        host=default_settings.host,
        port=default_settings.port,
        workers=default_settings.workers,
        reload=False,
        access_log=True,
        log_level=default_settings.log_level.lower(),
        log_config=build_log_config(),
    )
