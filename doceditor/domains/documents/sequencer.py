import logging
import uuid
from typing import Any, Mapping, Optional, Protocol

from doceditor.domains.documents.entities import Document, VersionChangeType

logger = logging.getLogger(__name__)

CHANGE_DESCRIPTIONS = {
    VersionChangeType.CREATED: "Document created",
    VersionChangeType.TITLE_UPDATED: "Title updated",
    VersionChangeType.CONTENT_MODIFIED: "Content modified",
    VersionChangeType.RESTORED: "Document restored from version",
}
DEFAULT_CHANGE_DESCRIPTION = "Document updated"


class LatestVersionSource(Protocol):
    async def get_latest_version_number(self, document_id: uuid.UUID) -> Optional[int]:
        ...


class VersionSequencer:
    """Нумерация версий документа и описание изменений"""

    def __init__(self, source: LatestVersionSource):
        self.source = source

    async def next_version_number(self, document_id: uuid.UUID) -> int:
        """
        Next version number for a document: highest existing + 1, or 1.

        Must run in the same transaction as the insert of the new version;
        the (document_id, version_number) unique constraint rejects a
        concurrent insert that read the same maximum.
        """
        latest = await self.source.get_latest_version_number(document_id)
        next_number = (latest or 0) + 1
        logger.debug(f"Next version for document {document_id}: {next_number}")
        return next_number

    @staticmethod
    def change_description(change_type: Any, title: Optional[str] = None) -> str:
        """Человекочитаемое описание изменения"""
        try:
            change_type = VersionChangeType(change_type)
        except ValueError:
            return DEFAULT_CHANGE_DESCRIPTION
        return CHANGE_DESCRIPTIONS.get(change_type, DEFAULT_CHANGE_DESCRIPTION)


def classify_change(previous: Document, changes: Mapping[str, Any]) -> Optional[VersionChangeType]:
    """
    Decide whether an update warrants a new version.

    Content change wins over title change; updates touching neither
    (e.g. permission only) produce no version.
    """
    content_changed = "content" in changes and changes["content"] != previous.content
    title_changed = "title" in changes and changes["title"] != previous.title

    if content_changed:
        return VersionChangeType.CONTENT_MODIFIED
    if title_changed:
        return VersionChangeType.TITLE_UPDATED
    return None
