from contextlib import asynccontextmanager
from typing import Optional
import logging

import uvicorn
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.api.health_routes import router as health_router
from backend.api.form_routes import router as form_router
from backend.core.config import Settings, settings
from backend.core.logging import setup_logging
from backend.services.form_store import FormStore

setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    store: FormStore = app.state.store
    try:
        await store.load()
    except (OSError, ValueError):
        logger.exception("Could not load form file %s", store.path)
        raise
    yield
    if not await store.drain():
        logger.error("Shutting down with unsaved changes in %s", store.path)

def create_app(config: Settings = settings, store: Optional[FormStore] = None) -> FastAPI:
    app = FastAPI(
        title="Form Server",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.store = store or FormStore(config.filename, seed_path=config.seed_filename)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(RequestValidationError)
    async def bad_request(request: Request, exc: RequestValidationError):
        # malformed bodies are client errors (400), not FastAPI's default 422
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    app.include_router(health_router)
    app.include_router(form_router)
    return app

app = create_app()

def run() -> None:
    logger.info("Starting form server on port %d", settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())

if __name__ == "__main__":
    run()
