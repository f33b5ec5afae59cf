"""CodeCase engine - FastAPI app entry point."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from codecase.core.config import get_settings
from codecase.core.logging import configure_logging
from codecase.db.base import Base
from codecase.db.session import engine
from codecase.routers import api
from codecase.services.content_loader import load_catalog, load_catalog_from_dir
from codecase.services.ledger import UnknownUnlockError

logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    if settings.content_dir is not None:
        app.state.catalog = load_catalog_from_dir(settings.content_dir)
    else:
        app.state.catalog = load_catalog()

    yield


app = FastAPI(
    title=settings.app_name,
    description="Code validation and progressive hint unlocks for detective coding cases",
    lifespan=lifespan,
)

app.include_router(api.router)


@app.exception_handler(UnknownUnlockError)
async def unknown_unlock_handler(request: Request, exc: UnknownUnlockError):
    logger.warning("Unknown unlock id requested: %s", exc.args[0] if exc.args else exc)
    return JSONResponse(status_code=404, content={"detail": "Hint not found"})


@app.get("/health")
async def health():
    return {"status": "ok"}
