from pydantic import BaseModel, Field, ConfigDict
from typing import Optional, List
import uuid
from datetime import datetime

from doceditor.core.time_utils import format_absolute_time, format_relative_time
from doceditor.domains.documents.entities import DocumentPermission


class DocumentCreate(BaseModel):
    """Схема для создания документа"""
    title: str = Field(..., min_length=1)
    content: str = Field(default="", max_length=1000000)  # 1MB max content


class DocumentUpdate(BaseModel):
    """Схема для частичного обновления документа"""
    title: Optional[str] = None
    content: Optional[str] = Field(None, max_length=1000000)
    permission: Optional[DocumentPermission] = None
    # updated_at копии, на которой основано изменение (оптимистичная блокировка)
    base_updated_at: Optional[datetime] = None

    def changes(self) -> dict:
        """Переданные поля без служебных"""
        return self.model_dump(exclude_none=True, exclude={"base_updated_at"})


class DocumentResponse(BaseModel):
    """Схема для ответа с данными документа"""
    id: uuid.UUID
    title: str
    content: str
    user_id: uuid.UUID
    permission: DocumentPermission
    created_at: datetime
    updated_at: datetime
    word_count: int

    model_config = ConfigDict(from_attributes=True)

    @classmethod
    def from_entity(cls, document) -> "DocumentResponse":
        return cls(
            id=document.id,
            title=document.title,
            content=document.content,
            user_id=document.user_id,
            permission=document.permission,
            created_at=document.created_at,
            updated_at=document.updated_at,
            word_count=document.get_word_count()
        )


class DocumentListResponse(BaseModel):
    """Схема для списка документов"""
    documents: List[DocumentResponse]
    total: int


class DocumentVersionResponse(BaseModel):
    """Схема для ответа с данными версии документа"""
    id: uuid.UUID
    document_id: uuid.UUID
    title: str
    content: str
    version_number: int
    change_description: str
    created_at: datetime
    created_by: uuid.UUID
    created_by_email: Optional[str] = None
    preview: str
    relative_time: str
    absolute_time: str

    @classmethod
    def from_entity(cls, version, now: Optional[datetime] = None) -> "DocumentVersionResponse":
        return cls(
            id=version.id,
            document_id=version.document_id,
            title=version.title,
            content=version.content,
            version_number=version.version_number,
            change_description=version.change_description,
            created_at=version.created_at,
            created_by=version.created_by,
            created_by_email=version.created_by_email,
            preview=version.get_content_preview(),
            relative_time=format_relative_time(version.created_at, now),
            absolute_time=format_absolute_time(version.created_at)
        )


class DocumentVersionListResponse(BaseModel):
    document_id: uuid.UUID
    versions: List[DocumentVersionResponse]


class VersionGroupResponse(BaseModel):
    """Группа версий за один день"""
    label: str
    versions: List[DocumentVersionResponse]
