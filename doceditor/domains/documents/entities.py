import re
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from doceditor.core.time_utils import utcnow

_TAG_RE = re.compile(r"<[^>]*>")


class DocumentPermission(str, Enum):
    """Уровни доступа к документу"""
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"


class VersionChangeType(str, Enum):
    """Тип изменения, породившего версию (вычисляется, а не выбирается вызывающим)"""
    CREATED = "created"
    TITLE_UPDATED = "title_updated"
    CONTENT_MODIFIED = "content_modified"
    RESTORED = "restored"


@dataclass
class Document:
    """Сущность документа домена Documents"""
    id: uuid.UUID
    title: str
    content: str
    user_id: uuid.UUID
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    permission: DocumentPermission = DocumentPermission.OWNER

    def get_content_length(self) -> int:
        """Получение длины содержимого документа"""
        return len(self.content)

    def get_word_count(self) -> int:
        """Подсчет количества слов в документе (без HTML-тегов)"""
        text = _TAG_RE.sub(" ", self.content)
        return len(text.split())


@dataclass(frozen=True)
class DocumentVersion:
    """Неизменяемый снимок заголовка и содержимого документа"""
    id: uuid.UUID
    document_id: uuid.UUID
    title: str
    content: str
    version_number: int
    change_description: str
    created_by: uuid.UUID
    created_at: datetime = field(default_factory=utcnow)
    created_by_email: Optional[str] = None

    def get_content_preview(self, limit: int = 100) -> str:
        """Превью содержимого без тегов"""
        text = _TAG_RE.sub("", self.content)
        return text[:limit] + "..." if len(text) > limit else text
