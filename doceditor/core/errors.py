from typing import Dict, Optional


class DocumentEditorError(Exception):
    """Базовая ошибка приложения"""

    code = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ValidationError(DocumentEditorError):
    """Неверный формат email/пароля, обрабатывается на уровне формы"""

    code = "validation_error"

    def __init__(self, message: str, field_errors: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.field_errors = field_errors or {}


class NotFoundError(DocumentEditorError):
    code = "not_found"


class RemoteError(DocumentEditorError):
    """Ошибка хранилища (с контекстным префиксом)"""

    code = "remote_error"


class ConflictError(RemoteError):
    """Документ изменился после того, как была получена его копия"""

    code = "conflict"


class AuthError(DocumentEditorError):
    code = "auth_error"


def wrap_remote_error(context: str, error: Exception) -> DocumentEditorError:
    """Оборачивание ошибки хранилища с префиксом контекста, e.g. 'Failed to fetch document: ...'"""
    # Класс (и code) исходной ошибки сохраняется
    error_class = type(error) if isinstance(error, DocumentEditorError) else RemoteError
    return error_class(f"{context}: {error}")
