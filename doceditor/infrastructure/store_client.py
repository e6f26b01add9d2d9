"""Document store client.

Authenticated CRUD for documents and their versions over the async
SQLAlchemy session factory. Every public method runs in its own
transaction; database failures surface as RemoteError.
"""

import logging
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import Any, AsyncIterator, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from doceditor.core.errors import ConflictError, NotFoundError, RemoteError
from doceditor.core.time_utils import utcnow
from doceditor.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository
from doceditor.domains.documents.entities import Document, DocumentVersion, VersionChangeType
from doceditor.domains.documents.sequencer import VersionSequencer

logger = logging.getLogger(__name__)


def _next_timestamp(previous: datetime) -> datetime:
    """updated_at строго возрастает, даже при совпадении часов"""
    now = utcnow()
    if now <= previous:
        now = previous + timedelta(microseconds=1)
    return now


class DocumentStoreClient:
    """Клиент хранилища документов"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self.session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        """Сессия с commit при успехе и rollback при ошибке"""
        async with self.session_factory() as session:
            try:
                async with session.begin():
                    yield session
            except SQLAlchemyError as e:
                logger.error(f"Store operation failed: {e}")
                raise RemoteError(str(e)) from e

    async def _record_version(
        self,
        session: AsyncSession,
        document_id: uuid.UUID,
        title: str,
        content: str,
        user_id: uuid.UUID,
        change_type: VersionChangeType,
        created_at: datetime
    ) -> DocumentVersion:
        versions = DocumentVersionRepository(session)
        sequencer = VersionSequencer(versions)
        version_number = await sequencer.next_version_number(document_id)
        version = await versions.create(
            document_id=document_id,
            title=title,
            content=content,
            version_number=version_number,
            change_description=sequencer.change_description(change_type, title),
            created_by=user_id,
            created_at=created_at
        )
        logger.info(f"Recorded version {version_number} ({change_type.value}) for document {document_id}")
        return version

    async def create_document(self, title: str, content: str, user_id: uuid.UUID) -> Document:
        """Создание документа вместе с версией 1"""
        now = utcnow()
        async with self._transaction() as session:
            document = await DocumentRepository(session).create(title, content, user_id, now)
            await self._record_version(
                session, document.id, title, content, user_id, VersionChangeType.CREATED, now
            )
        return document

    async def fetch_documents(self, user_id: uuid.UUID) -> List[Document]:
        async with self._transaction() as session:
            return await DocumentRepository(session).get_by_owner(user_id)

    async def fetch_document(self, document_id: uuid.UUID, user_id: uuid.UUID) -> Optional[Document]:
        """Документ владельца или None, если не найден"""
        async with self._transaction() as session:
            return await DocumentRepository(session).get(document_id, user_id)

    async def update_document(
        self,
        document_id: uuid.UUID,
        changes: Dict[str, Any],
        user_id: uuid.UUID,
        expected_updated_at: Optional[datetime] = None,
        change_type: Optional[VersionChangeType] = None
    ) -> Document:
        """
        Partial update; sets updated_at to now.

        Args:
            expected_updated_at: updated_at of the copy the change is based on;
                the update is rejected with ConflictError when it no longer matches
            change_type: record a version of the result in the same transaction

        Returns:
            The refreshed document
        """
        async with self._transaction() as session:
            repository = DocumentRepository(session)
            current = await repository.get(document_id, user_id)
            if current is None:
                raise NotFoundError("Document not found")

            now = _next_timestamp(current.updated_at)
            updated = await repository.update(document_id, user_id, changes, now, expected_updated_at)
            if not updated:
                raise ConflictError("Document was modified since it was last fetched")

            document = await repository.get(document_id, user_id)
            if change_type is not None:
                await self._record_version(
                    session, document_id, document.title, document.content, user_id, change_type, now
                )
        return document

    async def delete_document(self, document_id: uuid.UUID, user_id: uuid.UUID) -> None:
        async with self._transaction() as session:
            if not await DocumentRepository(session).delete(document_id, user_id):
                raise NotFoundError("Document not found")

    async def create_document_version(
        self,
        document_id: uuid.UUID,
        title: str,
        content: str,
        user_id: uuid.UUID,
        change_type: VersionChangeType
    ) -> DocumentVersion:
        async with self._transaction() as session:
            return await self._record_version(
                session, document_id, title, content, user_id, VersionChangeType(change_type), utcnow()
            )

    async def fetch_document_versions(self, document_id: uuid.UUID) -> List[DocumentVersion]:
        """Версии документа, новые первыми"""
        async with self._transaction() as session:
            return await DocumentVersionRepository(session).get_by_document(document_id)

    async def fetch_document_version(self, version_id: uuid.UUID) -> Optional[DocumentVersion]:
        async with self._transaction() as session:
            return await DocumentVersionRepository(session).get(version_id)

    async def restore_document_version(
        self,
        document_id: uuid.UUID,
        version_id: uuid.UUID,
        user_id: uuid.UUID
    ) -> Document:
        """Восстановление документа из версии с записью новой версии 'restored'"""
        async with self._transaction() as session:
            version = await DocumentVersionRepository(session).get(version_id)
            if version is None or version.document_id != document_id:
                raise NotFoundError("Version not found")

            repository = DocumentRepository(session)
            current = await repository.get(document_id, user_id)
            if current is None:
                raise NotFoundError("Document not found")

            now = _next_timestamp(current.updated_at)
            await repository.update(
                document_id, user_id, {"title": version.title, "content": version.content}, now
            )
            await self._record_version(
                session, document_id, version.title, version.content, user_id, VersionChangeType.RESTORED, now
            )
            document = await repository.get(document_id, user_id)

        logger.info(f"Document {document_id} restored from version {version.version_number}")
        return document
