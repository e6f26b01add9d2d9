from doceditor.domains.documents.entities import (
    Document, DocumentPermission, DocumentVersion, VersionChangeType
)
from doceditor.domains.documents.schemas import (
    DocumentCreate, DocumentUpdate, DocumentResponse, DocumentListResponse,
    DocumentVersionResponse, DocumentVersionListResponse, VersionGroupResponse
)

__all__ = [
    "Document", "DocumentPermission", "DocumentVersion", "VersionChangeType",
    "DocumentCreate", "DocumentUpdate", "DocumentResponse", "DocumentListResponse",
    "DocumentVersionResponse", "DocumentVersionListResponse", "VersionGroupResponse"
]
