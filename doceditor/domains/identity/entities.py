import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from doceditor.core.time_utils import utcnow


@dataclass
class User:
    """Сущность пользователя домена Identity"""
    id: uuid.UUID
    email: str
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    password_hash: Optional[str] = field(default=None, repr=False, compare=False)

    def public(self) -> "User":
        """Копия без хеша пароля (то, что видит клиент)"""
        return User(id=self.id, email=self.email, created_at=self.created_at, updated_at=self.updated_at)


@dataclass
class AuthResponse:
    """Результат входа/регистрации: ошибка возвращается, а не выбрасывается"""
    user: Optional[User]
    access_token: Optional[str] = None
    error: Optional[str] = None
