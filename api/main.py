import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core import db, settings
from events import router as events_router

logging.basicConfig(
    level=settings.log_level(),
    format="%(asctime)s %(name)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    # The DB pool opens on the first lookup; only closing happens here.
    if not settings.raw_database_url():
        logger.warning("database_url_missing lookups will fail until DATABASE_URL is set")
    try:
        yield
    finally:
        await db.database.close()


app = FastAPI(lifespan=lifespan)

# Allow the frontend dev server to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins(),
    allow_credentials=True,
    allow_methods=["GET"],
    allow_headers=["*"],
)

app.include_router(events_router.router, prefix="/api", tags=["events"])


@app.get("/health")
def health() -> dict:
    return {
        "status": "ok",
        "database": "connected" if db.database.is_connected else "idle",
    }


@app.get("/")
def root() -> dict:
    return {"message": "event lookup api"}
