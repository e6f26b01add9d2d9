from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from doceditor.core.config import Settings, settings as default_settings


def create_engine(settings: Optional[Settings] = None) -> AsyncEngine:
    """Асинхронный движок по настройкам приложения"""
    settings = settings or default_settings
    return create_async_engine(settings.database_url, future=True, echo=settings.sql_echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Фабрика сессий"""
    return async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)


async def init_models(engine: AsyncEngine) -> None:
    """Создание таблиц (для разработки и тестов, в продакшене - alembic)"""
    from doceditor.db.base import Base
    import doceditor.db.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
