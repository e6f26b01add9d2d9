import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, List, Optional

from doceditor.core.errors import DocumentEditorError, ValidationError
from doceditor.domains.identity.entities import AuthResponse, User
from doceditor.domains.identity.validation import ensure_valid_credentials

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSessionState:
    """Состояние аутентификации клиентской сессии"""
    user: Optional[User] = None
    access_token: Optional[str] = None
    loading: bool = False
    error: Optional[str] = None


class AuthSessionStore:
    """Вход, регистрация и выход; ошибки попадают в state.error"""

    def __init__(self, auth_client, document_service=None):
        self.auth_client = auth_client
        self.document_service = document_service
        self._state = AuthSessionState()
        self._listeners: List[Callable[[AuthSessionState], None]] = []

    @property
    def state(self) -> AuthSessionState:
        return self._state

    @property
    def is_authenticated(self) -> bool:
        return self._state.user is not None

    def subscribe(self, listener: Callable[[AuthSessionState], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)

    def _apply(self, response: AuthResponse) -> AuthResponse:
        if response.error:
            logger.warning(f"Authentication failed: {response.error}")
            self._set(loading=False, error=response.error)
        else:
            self._set(user=response.user, access_token=response.access_token, loading=False, error=None)
        return response

    async def _authenticate(self, email: str, password: str, signup: bool) -> AuthResponse:
        try:
            ensure_valid_credentials(email, password, signup=signup)
        except ValidationError as e:
            # Первое сообщение по полям - то, что показывает форма
            message = next(iter(e.field_errors.values()), e.message)
            self._set(error=message)
            return AuthResponse(user=None, error=message)

        self._set(loading=True, error=None)
        try:
            if signup:
                response = await self.auth_client.sign_up(email, password)
            else:
                response = await self.auth_client.sign_in(email, password)
        except DocumentEditorError as e:
            response = AuthResponse(user=None, error=str(e))
        return self._apply(response)

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        return await self._authenticate(email, password, signup=False)

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        return await self._authenticate(email, password, signup=True)

    async def sign_out(self) -> None:
        """Выход: отзыв токена и очистка кэшей документов"""
        self._set(loading=True)
        try:
            await self.auth_client.sign_out(self._state.access_token)
        finally:
            if self.document_service is not None:
                self.document_service.clear_caches()
            self._set(user=None, access_token=None, loading=False, error=None)

    async def restore_session(self, token: Optional[str]) -> Optional[User]:
        """Восстановление сессии по сохраненному токену"""
        if not token:
            return None

        self._set(loading=True, error=None)
        try:
            user = await self.auth_client.get_current_user(token)
        except DocumentEditorError as e:
            logger.warning(f"Session restore failed: {e}")
            self._set(loading=False, error=str(e))
            return None

        if user is None:
            self._set(user=None, access_token=None, loading=False)
        else:
            self._set(user=user, access_token=token, loading=False)
        return user

    def clear_error(self) -> None:
        self._set(error=None)
