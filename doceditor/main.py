import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from doceditor.api.router import api_router
from doceditor.core.config import Settings, settings as default_settings
from doceditor.core.db import create_engine, create_session_factory, init_models
from doceditor.core.logging import configure_logging
from doceditor.domains.documents.cache import DocumentCache, VersionCache
from doceditor.domains.documents.services import DocumentService
from doceditor.domains.documents.store import SessionRegistry
from doceditor.infrastructure.auth_client import AuthClient
from doceditor.infrastructure.store_client import DocumentStoreClient

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None
) -> FastAPI:
    """Сборка приложения; session_factory передается в тестах"""
    settings = settings or default_settings
    configure_logging(settings.log_level)

    engine = None
    if session_factory is None:
        engine = create_engine(settings)
        session_factory = create_session_factory(engine)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if engine is not None and settings.auto_create_tables:
            await init_models(engine)
            logger.info("Database tables created")
        yield
        if engine is not None:
            await engine.dispose()

    app = FastAPI(
        title="DocEditor",
        description="Редактор документов с историей версий",
        version="1.0.0",
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    store_client = DocumentStoreClient(session_factory)

    def document_service() -> DocumentService:
        return DocumentService(
            store_client,
            document_cache=DocumentCache(ttl_seconds=settings.document_cache_ttl_seconds),
            version_cache=VersionCache()
        )

    app.state.settings = settings
    app.state.store_client = store_client
    app.state.auth_client = AuthClient(session_factory, settings)
    app.state.sessions = SessionRegistry(document_service)

    app.include_router(api_router)
    return app


app = create_app()
