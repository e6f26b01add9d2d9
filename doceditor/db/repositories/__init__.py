from doceditor.db.repositories.user_repository import UserRepository
from doceditor.db.repositories.document_repository import DocumentRepository, DocumentVersionRepository

__all__ = [
    "UserRepository",
    "DocumentRepository",
    "DocumentVersionRepository",
]
