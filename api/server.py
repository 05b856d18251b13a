from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from typing import Any, Dict, List, Optional
from contextlib import asynccontextmanager

from api.models import EntryCreate, EntryUpdate, MessageResponse
from orchestrator.entries import EntryManager
from settings.manager import SettingsManager
from storage.journal import FileJournalStorage
from utils.errors import AppError
from utils.telemetry import get_logger, setup_logging

logger = get_logger(__name__)


def build_entry_manager(settings_mgr: SettingsManager) -> EntryManager:
    """Binds the manager to the file-backed store, creating the document if absent."""
    config = settings_mgr.get_config()
    store = FileJournalStorage(config.storage_path, config.journal_file)
    store.ensure_initialized()
    logger.info(f"Journal document at {store.path}")
    return EntryManager(store)


def get_entry_manager(request: Request) -> EntryManager:
    return request.app.state.entries


def create_app(
    entry_manager: Optional[EntryManager] = None,
    settings_mgr: Optional[SettingsManager] = None,
) -> FastAPI:
    """
    Builds the API. Pass an EntryManager to skip the file-backed bootstrap
    (tests hand in one bound to an in-memory store).
    """
    settings_mgr = settings_mgr or SettingsManager()
    config = settings_mgr.get_config()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        setup_logging(config.log_level, config.log_dir)
        if getattr(app.state, "entries", None) is None:
            app.state.entries = build_entry_manager(settings_mgr)
        yield

    app = FastAPI(title="Journal API", lifespan=lifespan)
    app.state.entries = entry_manager

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # --- Error mapping ---

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc.message}")
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"{request.method} {request.url.path} rejected: invalid body")
        return JSONResponse(status_code=400, content={"error": "Invalid request body"})

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"error": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    # --- Endpoints ---

    @app.get("/api/entries")
    def list_entries(entries: EntryManager = Depends(get_entry_manager)) -> List[Dict[str, Any]]:
        return [e.to_json() for e in entries.list()]

    @app.post("/api/entries", status_code=201)
    def create_entry(
        body: Optional[EntryCreate] = None,
        entries: EntryManager = Depends(get_entry_manager),
    ) -> Dict[str, Any]:
        body = body or EntryCreate()
        return entries.create(body.text, body.date).to_json()

    @app.put("/api/entries/{entry_id}")
    def update_entry(
        entry_id: str,
        body: Optional[EntryUpdate] = None,
        entries: EntryManager = Depends(get_entry_manager),
    ) -> Dict[str, Any]:
        body = body or EntryUpdate()
        return entries.update(entry_id, text=body.text, date=body.date).to_json()

    @app.delete("/api/entries/{entry_id}", response_model=MessageResponse)
    def delete_entry(entry_id: str, entries: EntryManager = Depends(get_entry_manager)):
        return MessageResponse(message=entries.delete(entry_id))

    return app


def main(settings_mgr: Optional[SettingsManager] = None):
    """Runs the API under uvicorn. The app is built here, not at import time."""
    import uvicorn
    settings_mgr = settings_mgr or SettingsManager()
    config = settings_mgr.get_config()
    setup_logging(config.log_level, config.log_dir)
    logger.info(f"Server running on port {config.port}")
    uvicorn.run(create_app(settings_mgr=settings_mgr), host=config.host, port=config.port)


if __name__ == "__main__":
    main()
