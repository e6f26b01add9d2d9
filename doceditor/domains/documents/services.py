import logging
import uuid
from typing import TYPE_CHECKING, List, Optional

from doceditor.core.errors import ConflictError, DocumentEditorError, NotFoundError, wrap_remote_error
from doceditor.core.time_utils import to_datetime
from doceditor.domains.documents.cache import DocumentCache, VersionCache
from doceditor.domains.documents.entities import Document, DocumentVersion
from doceditor.domains.documents.sanitizer import sanitize_content, sanitize_title
from doceditor.domains.documents.schemas import DocumentUpdate
from doceditor.domains.documents.sequencer import classify_change

if TYPE_CHECKING:
    from doceditor.infrastructure.store_client import DocumentStoreClient

logger = logging.getLogger(__name__)


class DocumentService:
    """Сервис для работы с документами: санитизация, кэши, политика версий"""

    def __init__(
        self,
        client: "DocumentStoreClient",
        document_cache: Optional[DocumentCache] = None,
        version_cache: Optional[VersionCache] = None
    ):
        self.client = client
        self.document_cache = document_cache if document_cache is not None else DocumentCache()
        self.version_cache = version_cache if version_cache is not None else VersionCache()

    async def fetch_user_documents(self, user_id: uuid.UUID) -> List[Document]:
        """Получение всех документов пользователя (полное обновление кэша)"""
        try:
            documents = await self.client.fetch_documents(user_id)
        except DocumentEditorError as e:
            raise wrap_remote_error("Failed to fetch documents", e) from e

        self.document_cache.put_many(documents)
        return documents

    async def fetch_document(
        self,
        document_id: uuid.UUID,
        user_id: uuid.UUID,
        use_cache: bool = True
    ) -> Optional[Document]:
        """Получение документа; свежий кэш отвечает без обращения к хранилищу"""
        if use_cache:
            cached = self.document_cache.get(document_id)
            if cached is not None and cached.user_id == user_id:
                logger.debug(f"Document cache hit: {document_id}")
                return cached

        try:
            document = await self.client.fetch_document(document_id, user_id)
        except DocumentEditorError as e:
            raise wrap_remote_error("Failed to fetch document", e) from e

        if document is not None:
            self.document_cache.put(document)
        return document

    async def create_document(self, title: str, content: str, user_id: uuid.UUID) -> Document:
        """Создание нового документа (версия 1 создается в той же транзакции)"""
        try:
            document = await self.client.create_document(
                sanitize_title(title), sanitize_content(content), user_id
            )
        except DocumentEditorError as e:
            raise wrap_remote_error("Failed to create document", e) from e

        self.document_cache.put(document)
        logger.info(f"Document {document.id} created by {user_id}")
        return document

    async def update_document(
        self,
        document_id: uuid.UUID,
        update_data: DocumentUpdate,
        user_id: uuid.UUID,
        previous: Optional[Document] = None
    ) -> Document:
        """
        Partial update with version recording.

        The change is diffed against ``previous`` (or the last known copy,
        fetched if nothing is held) and guarded by the updated_at that copy
        carries, so a stale baseline is rejected with ConflictError instead
        of producing a wrong version decision.
        """
        changes = update_data.changes()
        if "title" in changes:
            changes["title"] = sanitize_title(changes["title"])
        if "content" in changes:
            changes["content"] = sanitize_content(changes["content"])

        if previous is None:
            previous = self.document_cache.peek(document_id)

        try:
            if previous is None:
                previous = await self.client.fetch_document(document_id, user_id)
            if previous is None:
                raise NotFoundError("Document not found")
            if not changes:
                return previous

            expected = update_data.base_updated_at or previous.updated_at
            change_type = classify_change(previous, changes)
            document = await self.client.update_document(
                document_id,
                changes,
                user_id,
                expected_updated_at=to_datetime(expected),
                change_type=change_type
            )
        except ConflictError as e:
            # Базовая копия устарела: следующая попытка должна перечитать документ
            self.document_cache.invalidate(document_id)
            raise wrap_remote_error("Failed to update document", e) from e
        except DocumentEditorError as e:
            raise wrap_remote_error("Failed to update document", e) from e

        self.document_cache.put(document)
        self.version_cache.invalidate(document_id)
        return document

    async def delete_document(self, document_id: uuid.UUID, user_id: uuid.UUID) -> None:
        """Удаление документа"""
        try:
            await self.client.delete_document(document_id, user_id)
        except DocumentEditorError as e:
            raise wrap_remote_error("Failed to delete document", e) from e

        self.document_cache.invalidate(document_id)
        self.version_cache.invalidate(document_id)
        logger.info(f"Document {document_id} deleted by {user_id}")

    async def fetch_document_versions(self, document_id: uuid.UUID) -> List[DocumentVersion]:
        """Получение версий документа (кэшируются до следующего изменения)"""
        cached = self.version_cache.get(document_id)
        if cached is not None:
            return cached

        try:
            versions = await self.client.fetch_document_versions(document_id)
        except DocumentEditorError as e:
            raise wrap_remote_error("Failed to fetch document versions", e) from e

        self.version_cache.put(document_id, versions)
        return self.version_cache.get(document_id)

    async def restore_document_version(
        self,
        document_id: uuid.UUID,
        version_id: uuid.UUID,
        user_id: uuid.UUID
    ) -> Document:
        """Восстановление документа из версии"""
        try:
            document = await self.client.restore_document_version(document_id, version_id, user_id)
        except DocumentEditorError as e:
            raise wrap_remote_error("Failed to restore document version", e) from e

        self.document_cache.put(document)
        self.version_cache.invalidate(document_id)
        return document

    async def validate_document_access(self, document_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Проверка доступа к документу: существует и принадлежит пользователю"""
        try:
            document = await self.fetch_document(document_id, user_id)
        except DocumentEditorError:
            return False
        return document is not None and document.user_id == user_id

    def clear_caches(self) -> None:
        self.document_cache.clear()
        self.version_cache.clear()
