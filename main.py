import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse

from auth_service import AuthProvider
from config import CORS_ORIGINS, LOG_DIR, LOG_LEVEL, MAX_OPEN_READERS
from document_store import DocumentStore
from exceptions import (
    AuthFailure, NotFoundError, PermissionDenied, StoreError, ValidationFailure,
)
from logging_config import setup_logging
from routes import auth_routes, chapter_routes, library_routes, novel_routes, profile_routes
from tracking import BackgroundWriter, CounterUpdater, ReaderRegistry, SessionStateResolver

logger = logging.getLogger(__name__)


def _error_handler(status_code: int):
    async def handler(request: Request, exc: Exception) -> JSONResponse:
        if status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=status_code, content={"detail": exc.message})
    return handler


def create_app(store: Optional[DocumentStore] = None, configure_logging: bool = True) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if configure_logging:
            setup_logging(LOG_LEVEL, LOG_DIR)

        app_store = store
        if app_store is None:
            from dataBase import store as app_store
        try:
            await app_store.ensure_indexes()
        except StoreError as e:
            logger.warning("Could not ensure indexes: %s", e)

        writer = BackgroundWriter()
        counters = CounterUpdater(app_store, writer)
        resolver = SessionStateResolver(app_store, writer)

        app.state.store = app_store
        app.state.writer = writer
        app.state.counters = counters
        app.state.resolver = resolver
        app.state.auth_provider = AuthProvider(app_store)
        app.state.readers = ReaderRegistry(resolver, counters, MAX_OPEN_READERS)
        logger.info("NovelNest API started")
        try:
            yield
        finally:
            app.state.readers.close_all()
            await writer.close()
            logger.info("NovelNest API stopped")

    app = FastAPI(title="NovelNest API", version="1.0.0", lifespan=lifespan)

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(NotFoundError, _error_handler(404))
    app.add_exception_handler(AuthFailure, _error_handler(401))
    app.add_exception_handler(PermissionDenied, _error_handler(403))
    app.add_exception_handler(ValidationFailure, _error_handler(422))
    app.add_exception_handler(StoreError, _error_handler(503))

    @app.get("/", include_in_schema=False)
    def root():
        return RedirectResponse(url="/docs")

    for router in (auth_routes, novel_routes, chapter_routes, library_routes, profile_routes):
        app.include_router(router)

    return app


app = create_app()
