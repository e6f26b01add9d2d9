from pydantic import BaseModel, ConfigDict, field_validator
from datetime import datetime
import uuid

from doceditor.domains.identity.validation import validate_email, validate_password


class UserLogin(BaseModel):
    """Схема для входа пользователя"""
    email: str
    password: str

    @field_validator('email')
    @classmethod
    def check_email(cls, v):
        error = validate_email(v)
        if error:
            raise ValueError(error)
        return v

    @field_validator('password')
    @classmethod
    def check_password(cls, v):
        valid, error = validate_password(v)
        if not valid:
            raise ValueError(error)
        return v


class UserCreate(UserLogin):
    """Схема для регистрации пользователя"""

    @field_validator('password')
    @classmethod
    def check_password(cls, v):
        valid, error = validate_password(v, signup=True)
        if not valid:
            raise ValueError(error)
        return v


class UserResponse(BaseModel):
    """Схема для ответа с данными пользователя"""
    id: uuid.UUID
    email: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    """Схема для JWT токена"""
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
