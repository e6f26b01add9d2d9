from typing import List
import uuid

from fastapi import APIRouter, Depends, HTTPException, Response, status

from doceditor.api.deps import (
    ensure_document_access, get_current_user, get_document_store, http_error, raise_for_store_error
)
from doceditor.core.errors import DocumentEditorError
from doceditor.core.time_utils import group_versions_by_day, utcnow
from doceditor.domains.documents.schemas import (
    DocumentCreate, DocumentListResponse, DocumentResponse, DocumentUpdate,
    DocumentVersionListResponse, DocumentVersionResponse, VersionGroupResponse
)
from doceditor.domains.documents.store import DocumentSessionStore
from doceditor.domains.identity.entities import User

router = APIRouter(prefix="/documents", tags=["documents"])


async def _open_document(store: DocumentSessionStore, document_id: uuid.UUID, user: User):
    await store.fetch_document(document_id, user.id)
    raise_for_store_error(store)
    document = store.state.current_document
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return document


@router.get("", response_model=DocumentListResponse)
async def list_documents(
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """Документы пользователя, последние измененные первыми"""
    await store.fetch_documents(user.id)
    raise_for_store_error(store)
    documents = store.state.documents
    return DocumentListResponse(
        documents=[DocumentResponse.from_entity(doc) for doc in documents],
        total=len(documents)
    )


@router.post("", response_model=DocumentResponse, status_code=status.HTTP_201_CREATED)
async def create_document(
    document_data: DocumentCreate,
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """Создание нового документа"""
    try:
        document = await store.create_document(document_data.title, document_data.content, user.id)
    except DocumentEditorError as e:
        store.clear_error()
        raise http_error(e)
    return DocumentResponse.from_entity(document)


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: uuid.UUID,
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """Получение документа"""
    return DocumentResponse.from_entity(await _open_document(store, document_id, user))


@router.patch("/{document_id}", response_model=DocumentResponse)
async def update_document(
    document_id: uuid.UUID,
    update_data: DocumentUpdate,
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """Частичное обновление документа (409, если документ изменился с base_updated_at)"""
    await _open_document(store, document_id, user)
    await store.update_document(document_id, update_data, user.id)
    raise_for_store_error(store)
    return DocumentResponse.from_entity(store.state.current_document)


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: uuid.UUID,
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """Удаление документа вместе с историей"""
    await store.delete_document(document_id, user.id)
    raise_for_store_error(store)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{document_id}/versions", response_model=DocumentVersionListResponse)
async def list_versions(
    document_id: uuid.UUID,
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """История версий, новые первыми"""
    await ensure_document_access(store, document_id, user.id)
    await store.fetch_document_versions(document_id)
    raise_for_store_error(store)
    now = utcnow()
    return DocumentVersionListResponse(
        document_id=document_id,
        versions=[DocumentVersionResponse.from_entity(v, now) for v in store.state.versions]
    )


@router.get("/{document_id}/versions/grouped", response_model=List[VersionGroupResponse])
async def list_versions_grouped(
    document_id: uuid.UUID,
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """История версий по дням: Today, Yesterday, дата"""
    await ensure_document_access(store, document_id, user.id)
    await store.fetch_document_versions(document_id)
    raise_for_store_error(store)
    now = utcnow()
    groups = group_versions_by_day(store.state.versions, now)
    return [
        VersionGroupResponse(
            label=label,
            versions=[DocumentVersionResponse.from_entity(v, now) for v in versions]
        )
        for label, versions in groups.items()
    ]


@router.post("/{document_id}/versions/{version_id}/restore", response_model=DocumentResponse)
async def restore_version(
    document_id: uuid.UUID,
    version_id: uuid.UUID,
    user: User = Depends(get_current_user),
    store: DocumentSessionStore = Depends(get_document_store)
):
    """Восстановление документа из версии"""
    await store.restore_document_version(document_id, version_id, user.id)
    raise_for_store_error(store)
    document = store.state.current_document
    if document is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
    return DocumentResponse.from_entity(document)
