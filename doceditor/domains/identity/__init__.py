from doceditor.domains.identity.entities import AuthResponse, User
from doceditor.domains.identity.schemas import Token, UserCreate, UserLogin, UserResponse

__all__ = [
    "AuthResponse", "User",
    "Token", "UserCreate", "UserLogin", "UserResponse"
]
