"""Tests for version numbering and the version trigger policy."""

import uuid

import pytest

from doceditor.domains.documents.entities import Document, VersionChangeType
from doceditor.domains.documents.sequencer import (
    DEFAULT_CHANGE_DESCRIPTION,
    VersionSequencer,
    classify_change,
)


class StubVersionSource:
    """Latest version numbers kept in a dict."""

    def __init__(self, latest=None):
        self.latest = latest or {}

    async def get_latest_version_number(self, document_id):
        return self.latest.get(document_id)


@pytest.fixture
def document():
    return Document(id=uuid.uuid4(), title="Title", content="<p>body</p>", user_id=uuid.uuid4())


@pytest.mark.asyncio
class TestNextVersionNumber:
    """Tests for next version number computation."""

    async def test_first_version_is_one(self):
        sequencer = VersionSequencer(StubVersionSource())
        assert await sequencer.next_version_number(uuid.uuid4()) == 1

    async def test_increments_highest(self):
        document_id = uuid.uuid4()
        sequencer = VersionSequencer(StubVersionSource({document_id: 7}))
        assert await sequencer.next_version_number(document_id) == 8

    async def test_numbering_is_per_document(self):
        first, second = uuid.uuid4(), uuid.uuid4()
        sequencer = VersionSequencer(StubVersionSource({first: 3}))

        assert await sequencer.next_version_number(first) == 4
        assert await sequencer.next_version_number(second) == 1


class TestChangeDescription:
    """Tests for human readable change descriptions."""

    @pytest.mark.parametrize("change_type, expected", [
        (VersionChangeType.CREATED, "Document created"),
        (VersionChangeType.TITLE_UPDATED, "Title updated"),
        (VersionChangeType.CONTENT_MODIFIED, "Content modified"),
        (VersionChangeType.RESTORED, "Document restored from version"),
    ])
    def test_known_types(self, change_type, expected):
        assert VersionSequencer.change_description(change_type) == expected

    def test_accepts_raw_values(self):
        assert VersionSequencer.change_description("content_modified") == "Content modified"

    def test_unknown_type_falls_back(self):
        assert VersionSequencer.change_description("renamed") == DEFAULT_CHANGE_DESCRIPTION


class TestClassifyChange:
    """Tests for the diff-based version trigger."""

    def test_content_change(self, document):
        assert classify_change(document, {"content": "<p>new</p>"}) == VersionChangeType.CONTENT_MODIFIED

    def test_title_change(self, document):
        assert classify_change(document, {"title": "New title"}) == VersionChangeType.TITLE_UPDATED

    def test_content_wins_over_title(self, document):
        changes = {"title": "New title", "content": "<p>new</p>"}
        assert classify_change(document, changes) == VersionChangeType.CONTENT_MODIFIED

    def test_permission_only_creates_no_version(self, document):
        assert classify_change(document, {"permission": "viewer"}) is None

    def test_unchanged_values_create_no_version(self, document):
        changes = {"title": document.title, "content": document.content}
        assert classify_change(document, changes) is None

    def test_empty_content_is_a_change(self, document):
        assert classify_change(document, {"content": ""}) == VersionChangeType.CONTENT_MODIFIED
