import re
from typing import Dict, Optional, Tuple

from doceditor.core.errors import ValidationError

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def validate_email(email: str) -> Optional[str]:
    """Сообщение об ошибке для поля email или None"""
    if not email:
        return "Email is required"
    if not EMAIL_RE.match(email):
        return "Please enter a valid email address"
    return None


def validate_password(password: str, signup: bool = False) -> Tuple[bool, Optional[str]]:
    """Проверка пароля; требования к регистру только при регистрации"""
    if not password:
        return False, "Password is required"
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters"
    if signup:
        if not any(c.islower() for c in password):
            return False, "Password must contain at least one lowercase letter"
        if not any(c.isupper() for c in password):
            return False, "Password must contain at least one uppercase letter"
    return True, None


def validate_credentials(email: str, password: str, signup: bool = False) -> Dict[str, str]:
    """Ошибки по полям формы входа/регистрации"""
    errors = {}
    email_error = validate_email(email)
    if email_error:
        errors["email"] = email_error
    valid, password_error = validate_password(password, signup=signup)
    if not valid:
        errors["password"] = password_error
    return errors


def ensure_valid_credentials(email: str, password: str, signup: bool = False) -> None:
    errors = validate_credentials(email, password, signup=signup)
    if errors:
        raise ValidationError("Invalid credentials", field_errors=errors)
