import logging
import time
import uuid
from datetime import timedelta
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from doceditor.core.config import Settings
from doceditor.core.errors import RemoteError
from doceditor.core.security import create_access_token, get_password_hash, verify_password, verify_token
from doceditor.db.repositories.user_repository import UserRepository
from doceditor.domains.identity.entities import AuthResponse, User

logger = logging.getLogger(__name__)


class AuthClient:
    """Регистрация, вход и проверка токенов"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], settings: Settings):
        self.session_factory = session_factory
        self.settings = settings
        # jti отозванных токенов (logout) -> exp; запись живет, пока токен не истечет
        self._revoked_tokens: Dict[str, float] = {}

    def _issue_token(self, user: User) -> str:
        return create_access_token(
            data={"sub": str(user.id), "email": user.email, "jti": uuid.uuid4().hex},
            secret=self.settings.jwt_secret,
            algorithm=self.settings.jwt_algorithm,
            expires_delta=timedelta(minutes=self.settings.access_token_expire_minutes)
        )

    async def sign_up(self, email: str, password: str) -> AuthResponse:
        """Регистрация; ошибка возвращается в AuthResponse.error"""
        try:
            async with self.session_factory() as session:
                async with session.begin():
                    repository = UserRepository(session)
                    if await repository.email_exists(email):
                        return AuthResponse(user=None, error="Email already registered")
                    user = await repository.create(email, get_password_hash(password))
        except SQLAlchemyError as e:
            logger.error(f"Sign up failed for {email}: {e}")
            return AuthResponse(user=None, error=str(e))

        logger.info(f"User {user.id} registered")
        return AuthResponse(user=user.public(), access_token=self._issue_token(user))

    async def sign_in(self, email: str, password: str) -> AuthResponse:
        """Вход по email и паролю"""
        try:
            async with self.session_factory() as session:
                user = await UserRepository(session).get_by_email(email)
        except SQLAlchemyError as e:
            logger.error(f"Sign in failed for {email}: {e}")
            return AuthResponse(user=None, error=str(e))

        if user is None or not verify_password(password, user.password_hash):
            return AuthResponse(user=None, error="Invalid email or password")

        return AuthResponse(user=user.public(), access_token=self._issue_token(user))

    def _decode(self, token: str) -> Optional[dict]:
        return verify_token(token, self.settings.jwt_secret, self.settings.jwt_algorithm)

    def _prune_revoked(self) -> None:
        """Удаление истекших токенов из списка отозванных"""
        now = time.time()
        expired = [jti for jti, exp in self._revoked_tokens.items() if exp <= now]
        for jti in expired:
            del self._revoked_tokens[jti]

    def is_revoked(self, payload: dict) -> bool:
        self._prune_revoked()
        return payload.get("jti") in self._revoked_tokens

    async def sign_out(self, token: Optional[str] = None) -> None:
        """Выход: токен больше не принимается"""
        payload = self._decode(token) if token else None
        if payload and payload.get("jti"):
            self._revoked_tokens[payload["jti"]] = float(payload.get("exp", 0))
        logger.debug("Signed out")

    async def get_current_user(self, token: Optional[str]) -> Optional[User]:
        """Пользователь по JWT токену или None"""
        if not token:
            return None

        payload = self._decode(token)
        if not payload or not payload.get("sub") or self.is_revoked(payload):
            return None

        try:
            user_id = uuid.UUID(payload["sub"])
        except ValueError:
            return None

        try:
            async with self.session_factory() as session:
                user = await UserRepository(session).get_by_uuid(user_id)
        except SQLAlchemyError as e:
            raise RemoteError(str(e)) from e
        return user.public() if user else None
