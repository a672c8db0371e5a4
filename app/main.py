import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.dependencies.redis import close_redis_client
from app.routers import auth, lists, profile, sessions

logger = logging.getLogger(__name__)
settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting Warband Companion API")
    logger.debug("Debug mode: %s", settings.DEBUG)

    yield

    logger.info("Shutting down Warband Companion API")
    await close_redis_client()
    logger.info("Redis cleanup complete")


app = FastAPI(
    title="Warband Companion API",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
logger.debug("CORS configured with origins: %s", settings.CORS_ORIGINS)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(profile.router, prefix="/api/v1")
app.include_router(lists.router, prefix="/api/v1")
app.include_router(sessions.router, prefix="/api/v1")
logger.debug("Routers registered: /api/v1/auth, /api/v1/profile, /api/v1/lists, /api/v1/sessions")


@app.get("/")
def root():
    return {"message": "Warband Companion API"}


@app.get("/health")
def health():
    return {"status": "healthy"}
