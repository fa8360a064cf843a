"""FastAPI application entry point."""

from contextlib import asynccontextmanager

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gm_assistant.core.errors import GMAssistantError
from gm_assistant.core.logging import configure_logging
from gm_assistant.db.database import engine, async_session, Base
from gm_assistant.db.redis import close_redis

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()

    # Startup: create tables and seed default areas
    import gm_assistant.models  # noqa: F401
    from gm_assistant.services.campaign_service import campaign_service

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with async_session() as db:
        await campaign_service.seed_defaults(db)
        await db.commit()
    logger.info("app_started")
    yield
    # Shutdown: close connections
    await engine.dispose()
    await close_redis()


app = FastAPI(
    title="GM Assistant API",
    description="Campaign data and memory-backed NPC conversations for tabletop game masters",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GMAssistantError)
async def handle_gm_assistant_error(request: Request, exc: GMAssistantError):
    if exc.status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=exc.code, detail=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.code, "detail": exc.message},
    )


# --- Routes ---
from gm_assistant.api.routes import npcs, areas, world, chat  # noqa: E402

app.include_router(npcs.router, prefix="/api/npcs", tags=["npcs"])
app.include_router(areas.router, prefix="/api/areas", tags=["areas"])
app.include_router(world.router, prefix="/api/world", tags=["world"])
app.include_router(chat.router, prefix="/api/npc-chat", tags=["chat"])


@app.get("/health")
async def health_check():
    return {"status": "ok"}
