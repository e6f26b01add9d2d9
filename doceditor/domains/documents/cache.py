"""In-memory caches for documents and their version lists.

Cache Strategy:
- Document cache: id -> last known snapshot. A single shared "last full
  refresh" timestamp gates validity; once the freshness window has passed
  every entry is stale, including ones written a moment ago.
- Version cache: document id -> versions, newest first. No expiry; the
  list is invalidated whenever its document is updated, deleted or restored.

Both caches are constructed per process/session and injected into the
document service; nothing here is module-global.
"""

import logging
import time
import uuid
from dataclasses import replace
from typing import Callable, Dict, Iterable, List, Optional

from doceditor.domains.documents.entities import Document, DocumentVersion

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30.0


class DocumentCache:
    """Кэш документов с общим окном свежести"""

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: Dict[uuid.UUID, Document] = {}
        self._last_refresh: Optional[float] = None

    def is_fresh(self) -> bool:
        """Открыто ли окно свежести"""
        if self._last_refresh is None:
            return False
        return self._clock() - self._last_refresh < self.ttl_seconds

    def mark_refreshed(self) -> None:
        self._last_refresh = self._clock()

    def get(self, document_id: uuid.UUID) -> Optional[Document]:
        """
        Get document if cached and the freshness window is open.

        Returns:
            Copy of the cached document, None on miss or when stale
        """
        document = self._entries.get(document_id)
        if document is None or not self.is_fresh():
            return None
        return replace(document)

    def peek(self, document_id: uuid.UUID) -> Optional[Document]:
        """Последняя известная копия без учета окна свежести"""
        document = self._entries.get(document_id)
        return replace(document) if document else None

    def put(self, document: Document) -> None:
        self._entries[document.id] = replace(document)

    def put_many(self, documents: Iterable[Document]) -> None:
        """Полное обновление: сохраняет документы и открывает окно свежести"""
        for document in documents:
            self.put(document)
        self.mark_refreshed()

    def invalidate(self, document_id: uuid.UUID) -> None:
        self._entries.pop(document_id, None)

    def clear(self) -> None:
        self._entries.clear()
        self._last_refresh = None

    def __contains__(self, document_id: uuid.UUID) -> bool:
        return document_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)


class VersionCache:
    """Кэш списков версий по документу"""

    def __init__(self):
        self._entries: Dict[uuid.UUID, List[DocumentVersion]] = {}

    def get(self, document_id: uuid.UUID) -> Optional[List[DocumentVersion]]:
        versions = self._entries.get(document_id)
        return list(versions) if versions is not None else None

    def put(self, document_id: uuid.UUID, versions: Iterable[DocumentVersion]) -> None:
        self._entries[document_id] = sorted(
            versions,
            key=lambda v: (v.created_at, v.version_number),
            reverse=True,
        )

    def invalidate(self, document_id: uuid.UUID) -> None:
        if self._entries.pop(document_id, None) is not None:
            logger.debug(f"Version cache invalidated for document {document_id}")

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, document_id: uuid.UUID) -> bool:
        return document_id in self._entries
