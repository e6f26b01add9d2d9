from typing import Any, Dict, List, Optional
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete
import uuid

from doceditor.db.models.document import Document as DocumentModel, DocumentVersion as DocumentVersionModel
from doceditor.db.models.user import User as UserModel
from doceditor.domains.documents.entities import Document, DocumentPermission, DocumentVersion

# Поля документа, которые разрешено менять частичным обновлением
UPDATABLE_FIELDS = ("title", "content", "permission")


class DocumentRepository:
    """Репозиторий для работы с документами (без commit - транзакцией управляет вызывающий)"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, title: str, content: str, user_id: uuid.UUID, created_at: datetime) -> Document:
        """Создание нового документа"""
        db_document = DocumentModel(
            uuid=uuid.uuid4(),
            title=title,
            content=content,
            user_id=user_id,
            permission=DocumentPermission.OWNER.value,
            created_at=created_at,
            updated_at=created_at
        )
        self.session.add(db_document)
        await self.session.flush()
        return self._to_domain(db_document)

    async def get(self, document_id: uuid.UUID, user_id: Optional[uuid.UUID] = None) -> Optional[Document]:
        """Получение документа по UUID (опционально только владельца)"""
        query = (
            select(DocumentModel)
            .where(DocumentModel.uuid == document_id)
            .execution_options(populate_existing=True)
        )
        if user_id is not None:
            query = query.where(DocumentModel.user_id == user_id)
        result = await self.session.execute(query)
        db_document = result.scalar_one_or_none()
        return self._to_domain(db_document) if db_document else None

    async def get_by_owner(self, user_id: uuid.UUID) -> List[Document]:
        """Получение документов по владельцу, новые изменения первыми"""
        result = await self.session.execute(
            select(DocumentModel)
            .where(DocumentModel.user_id == user_id)
            .order_by(DocumentModel.updated_at.desc())
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]

    async def update(
        self,
        document_id: uuid.UUID,
        user_id: uuid.UUID,
        changes: Dict[str, Any],
        updated_at: datetime,
        expected_updated_at: Optional[datetime] = None
    ) -> bool:
        """
        Частичное обновление документа.

        Returns:
            False, если ни одна строка не обновлена (нет документа или
            updated_at не совпал с ожидаемым)
        """
        values = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS}
        if "permission" in values:
            values["permission"] = DocumentPermission(values["permission"]).value
        values["updated_at"] = updated_at

        stmt = (
            update(DocumentModel)
            .where(DocumentModel.uuid == document_id)
            .where(DocumentModel.user_id == user_id)
        )
        if expected_updated_at is not None:
            stmt = stmt.where(DocumentModel.updated_at == expected_updated_at)

        result = await self.session.execute(stmt.values(**values))
        return result.rowcount > 0

    async def delete(self, document_id: uuid.UUID, user_id: uuid.UUID) -> bool:
        """Удаление документа вместе с версиями"""
        exists = await self.get(document_id, user_id)
        if not exists:
            return False
        await self.session.execute(
            delete(DocumentVersionModel).where(DocumentVersionModel.document_id == document_id)
        )
        result = await self.session.execute(
            delete(DocumentModel)
            .where(DocumentModel.uuid == document_id)
            .where(DocumentModel.user_id == user_id)
        )
        return result.rowcount > 0

    def _to_domain(self, db_document: DocumentModel) -> Document:
        """Преобразование модели БД в доменную сущность"""
        return Document(
            id=db_document.uuid,
            title=db_document.title,
            content=db_document.content,
            user_id=db_document.user_id,
            created_at=db_document.created_at,
            updated_at=db_document.updated_at,
            permission=DocumentPermission(db_document.permission)
        )


class DocumentVersionRepository:
    """Репозиторий для работы с версиями документов"""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        document_id: uuid.UUID,
        title: str,
        content: str,
        version_number: int,
        change_description: str,
        created_by: uuid.UUID,
        created_at: datetime
    ) -> DocumentVersion:
        """Создание новой версии документа"""
        db_version = DocumentVersionModel(
            uuid=uuid.uuid4(),
            document_id=document_id,
            title=title,
            content=content,
            version_number=version_number,
            change_description=change_description,
            created_by=created_by,
            created_at=created_at,
            updated_at=created_at
        )
        self.session.add(db_version)
        await self.session.flush()

        email = await self.session.scalar(select(UserModel.email).where(UserModel.uuid == created_by))
        return self._to_domain(db_version, email)

    async def get(self, version_id: uuid.UUID) -> Optional[DocumentVersion]:
        """Получение версии по UUID"""
        result = await self.session.execute(
            select(DocumentVersionModel, UserModel.email)
            .outerjoin(UserModel, UserModel.uuid == DocumentVersionModel.created_by)
            .where(DocumentVersionModel.uuid == version_id)
        )
        row = result.one_or_none()
        return self._to_domain(*row) if row else None

    async def get_by_document(self, document_id: uuid.UUID) -> List[DocumentVersion]:
        """Получение версий документа, новые первыми"""
        result = await self.session.execute(
            select(DocumentVersionModel, UserModel.email)
            .outerjoin(UserModel, UserModel.uuid == DocumentVersionModel.created_by)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.created_at.desc(), DocumentVersionModel.version_number.desc())
        )
        return [self._to_domain(version, email) for version, email in result.all()]

    async def get_latest_version_number(self, document_id: uuid.UUID) -> Optional[int]:
        """Наибольший номер версии документа"""
        result = await self.session.execute(
            select(DocumentVersionModel.version_number)
            .where(DocumentVersionModel.document_id == document_id)
            .order_by(DocumentVersionModel.version_number.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    def _to_domain(self, db_version: DocumentVersionModel, email: Optional[str] = None) -> DocumentVersion:
        """Преобразование модели БД в доменную сущность"""
        return DocumentVersion(
            id=db_version.uuid,
            document_id=db_version.document_id,
            title=db_version.title,
            content=db_version.content,
            version_number=db_version.version_number,
            change_description=db_version.change_description,
            created_by=db_version.created_by,
            created_at=db_version.created_at,
            created_by_email=email
        )
