from doceditor.db.models.user import User
from doceditor.db.models.document import Document, DocumentVersion

__all__ = [
    "User",
    "Document",
    "DocumentVersion",
]
