import uuid

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from doceditor.core.errors import DocumentEditorError
from doceditor.domains.documents.store import DocumentSessionStore
from doceditor.domains.identity.entities import User

security = HTTPBearer()

# error_code хранилища -> HTTP статус
ERROR_STATUS = {
    "validation_error": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "not_found": status.HTTP_404_NOT_FOUND,
    "conflict": status.HTTP_409_CONFLICT,
    "auth_error": status.HTTP_401_UNAUTHORIZED,
    "remote_error": status.HTTP_502_BAD_GATEWAY,
}


def error_status(code: str) -> int:
    return ERROR_STATUS.get(code, status.HTTP_500_INTERNAL_SERVER_ERROR)


def http_error(error: DocumentEditorError) -> HTTPException:
    return HTTPException(status_code=error_status(error.code), detail=str(error))


def raise_for_store_error(store: DocumentSessionStore) -> None:
    """Ошибка, сохраненная хранилищем сессии, превращается в HTTP ответ"""
    state = store.state
    if state.error is None:
        return
    store.clear_error()
    raise HTTPException(status_code=error_status(state.error_code), detail=state.error)


async def get_current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> User:
    """Зависимость для получения текущего пользователя"""
    try:
        user = await request.app.state.auth_client.get_current_user(credentials.credentials)
    except DocumentEditorError as e:
        raise http_error(e)

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


def get_document_store(request: Request, user: User = Depends(get_current_user)) -> DocumentSessionStore:
    """Хранилище сессии документов на время запроса (кэши общие для пользователя)"""
    return request.app.state.sessions.open(user.id)


async def ensure_document_access(store: DocumentSessionStore, document_id: uuid.UUID, user_id: uuid.UUID) -> None:
    if not await store.service.validate_document_access(document_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Document not found")
