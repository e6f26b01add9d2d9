import uuid

from sqlalchemy import Column, DateTime, Uuid
from sqlalchemy.orm import declarative_base

from doceditor.core.time_utils import utcnow

# Базовый класс для моделей
Base = declarative_base()


class BaseModel(Base):
    """Общие колонки: uuid, created_at, updated_at"""
    __abstract__ = True

    uuid = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow)
