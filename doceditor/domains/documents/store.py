"""Document session store.

Single source of truth for what a client session observes: the document
list, the open document, the version history of a document, per-slice
loading flags and one shared error slot. State is an immutable snapshot
replaced on every change; subscribers are notified with the new snapshot.

Failures never escape the store; they are captured into ``error`` /
``error_code``. The one exception is ``create_document``, which re-raises
so the caller can decide where to navigate.
"""

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import ValidationError as SchemaValidationError

from doceditor.core.errors import DocumentEditorError, ValidationError
from doceditor.domains.documents.entities import Document, DocumentVersion
from doceditor.domains.documents.schemas import DocumentUpdate
from doceditor.domains.documents.services import DocumentService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocumentSessionState:
    """Снимок наблюдаемого состояния"""
    documents: Tuple[Document, ...] = ()
    current_document: Optional[Document] = None
    versions: Tuple[DocumentVersion, ...] = ()
    versions_document_id: Optional[uuid.UUID] = None
    documents_loading: bool = False
    document_loading: bool = False
    versions_loading: bool = False
    error: Optional[str] = None
    error_code: Optional[str] = None

    @property
    def loading(self) -> bool:
        return self.documents_loading or self.document_loading


Listener = Callable[[DocumentSessionState], None]


def _as_update(updates: Union[DocumentUpdate, Mapping[str, Any]]) -> DocumentUpdate:
    """Словарь изменений в DocumentUpdate; ошибки схемы становятся ValidationError"""
    if isinstance(updates, DocumentUpdate):
        return updates
    try:
        return DocumentUpdate(**updates)
    except SchemaValidationError as e:
        field_errors = {".".join(str(p) for p in err["loc"]): err["msg"] for err in e.errors()}
        raise ValidationError("Invalid document update", field_errors=field_errors) from e


class DocumentSessionStore:
    """Хранилище состояния документов одной клиентской сессии"""

    def __init__(self, service: DocumentService):
        self.service = service
        self._state = DocumentSessionState()
        self._listeners: List[Listener] = []

    @property
    def state(self) -> DocumentSessionState:
        return self._state

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Подписка на изменения; возвращает функцию отписки"""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        self._notify()

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener(self._state)

    def _fail(self, error: DocumentEditorError, **changes: Any) -> None:
        logger.warning(f"{error.code}: {error}")
        self._set(error=str(error), error_code=error.code, **changes)

    def _known_document(self, document_id: uuid.UUID) -> Optional[Document]:
        """Последняя известная сессии копия документа"""
        current = self._state.current_document
        if current is not None and current.id == document_id:
            return current
        for document in self._state.documents:
            if document.id == document_id:
                return document
        return None

    def _replace_document(self, document: Document) -> Dict[str, Any]:
        documents = tuple(document if d.id == document.id else d for d in self._state.documents)
        current = self._state.current_document
        if current is not None and current.id == document.id:
            current = document
        return {"documents": documents, "current_document": current}

    async def fetch_documents(self, user_id: uuid.UUID) -> None:
        self._set(documents_loading=True, error=None, error_code=None)
        try:
            documents = await self.service.fetch_user_documents(user_id)
        except DocumentEditorError as e:
            self._fail(e, documents_loading=False)
            return
        self._set(documents=tuple(documents), documents_loading=False)

    async def fetch_document(self, document_id: uuid.UUID, user_id: uuid.UUID, force: bool = False) -> None:
        """Открытие документа; отсутствующий документ дает current_document = None"""
        self._set(document_loading=True, error=None, error_code=None)
        try:
            document = await self.service.fetch_document(document_id, user_id, use_cache=not force)
        except DocumentEditorError as e:
            self._fail(e, document_loading=False)
            return

        changes = {"current_document": document, "document_loading": False}
        if document is not None:
            changes["documents"] = self._replace_document(document)["documents"]
        else:
            changes["documents"] = tuple(d for d in self._state.documents if d.id != document_id)
        self._set(**changes)

    async def create_document(self, title: str, content: str, user_id: uuid.UUID) -> Document:
        self._set(documents_loading=True, error=None, error_code=None)
        try:
            document = await self.service.create_document(title, content, user_id)
        except DocumentEditorError as e:
            self._fail(e, documents_loading=False)
            raise
        self._set(documents=(document,) + self._state.documents, documents_loading=False)
        return document

    async def update_document(
        self,
        document_id: uuid.UUID,
        updates: Union[DocumentUpdate, Mapping[str, Any]],
        user_id: uuid.UUID
    ) -> None:
        self._set(document_loading=True, error=None, error_code=None)
        try:
            updates = _as_update(updates)
            document = await self.service.update_document(
                document_id, updates, user_id, previous=self._known_document(document_id)
            )
        except DocumentEditorError as e:
            self._fail(e, document_loading=False)
            return

        self._set(document_loading=False, **self._replace_document(document))

        # История открыта для этого документа - перечитываем ее
        if self._state.versions_document_id == document_id:
            await self.fetch_document_versions(document_id)

    async def delete_document(self, document_id: uuid.UUID, user_id: uuid.UUID) -> None:
        self._set(documents_loading=True, error=None, error_code=None)
        try:
            await self.service.delete_document(document_id, user_id)
        except DocumentEditorError as e:
            self._fail(e, documents_loading=False)
            return

        changes = {
            "documents": tuple(d for d in self._state.documents if d.id != document_id),
            "documents_loading": False,
        }
        current = self._state.current_document
        if current is not None and current.id == document_id:
            changes["current_document"] = None
        if self._state.versions_document_id == document_id:
            changes["versions"] = ()
            changes["versions_document_id"] = None
        self._set(**changes)

    async def fetch_document_versions(self, document_id: uuid.UUID) -> None:
        """Загрузка истории версий с отдельным флагом загрузки"""
        self._set(versions_loading=True, error=None, error_code=None)
        try:
            versions = await self.service.fetch_document_versions(document_id)
        except DocumentEditorError as e:
            self._fail(e, versions_loading=False)
            return
        self._set(versions=tuple(versions), versions_document_id=document_id, versions_loading=False)

    async def restore_document_version(
        self,
        document_id: uuid.UUID,
        version_id: uuid.UUID,
        user_id: uuid.UUID
    ) -> None:
        """Восстановление версии, затем повторная загрузка документа и истории"""
        self._set(document_loading=True, error=None, error_code=None)
        try:
            await self.service.restore_document_version(document_id, version_id, user_id)
        except DocumentEditorError as e:
            self._fail(e, document_loading=False)
            return

        await self.fetch_document(document_id, user_id, force=True)
        if self._state.error is None:
            await self.fetch_document_versions(document_id)

    def clear_error(self) -> None:
        self._set(error=None, error_code=None)

    def clear_current_document(self) -> None:
        self._set(current_document=None)

    def reset(self) -> None:
        """Сброс состояния и кэшей сессии"""
        self.service.clear_caches()
        self._state = DocumentSessionState()
        self._notify()


class SessionRegistry:
    """
    Document services per user.

    Caches live in the per-user DocumentService and are shared by every
    store opened for that user; each store (one per request) keeps its own
    state and error slot, so concurrent requests never read each other's
    results.
    """

    def __init__(self, service_factory: Callable[[], DocumentService]):
        self.service_factory = service_factory
        self._services: Dict[uuid.UUID, DocumentService] = {}

    def service(self, user_id: uuid.UUID) -> DocumentService:
        service = self._services.get(user_id)
        if service is None:
            service = self.service_factory()
            self._services[user_id] = service
        return service

    def open(self, user_id: uuid.UUID) -> DocumentSessionStore:
        """Новое хранилище сессии поверх кэшей пользователя"""
        return DocumentSessionStore(self.service(user_id))

    def drop(self, user_id: uuid.UUID) -> None:
        service = self._services.pop(user_id, None)
        if service is not None:
            service.clear_caches()

    def __len__(self) -> int:
        return len(self._services)
