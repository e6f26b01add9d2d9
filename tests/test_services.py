"""Tests for DocumentService: sanitization, caching and the update policy.

The store client is wrapped in an AsyncMock spy so each test can assert
exactly which calls reached the database.
"""

import uuid
from datetime import timedelta

import pytest

from doceditor.core.errors import ConflictError, NotFoundError, RemoteError
from doceditor.domains.documents.schemas import DocumentUpdate


@pytest.mark.asyncio
class TestFetch:
    """Tests for cached document reads."""

    async def test_fresh_cache_hit_skips_remote(self, service, remote, user):
        created = await service.create_document("Doc", "", user.id)
        await service.fetch_user_documents(user.id)

        document = await service.fetch_document(created.id, user.id)

        assert document.id == created.id
        assert remote.fetch_document.await_count == 0

    async def test_stale_cache_goes_remote(self, service, remote, clock, user):
        created = await service.create_document("Doc", "", user.id)
        await service.fetch_user_documents(user.id)
        clock.advance(31)

        await service.fetch_document(created.id, user.id)

        assert remote.fetch_document.await_count == 1

    async def test_create_alone_does_not_make_cache_fresh(self, service, remote, user):
        created = await service.create_document("Doc", "", user.id)

        await service.fetch_document(created.id, user.id)

        assert remote.fetch_document.await_count == 1

    async def test_use_cache_false_bypasses_cache(self, service, remote, user):
        created = await service.create_document("Doc", "", user.id)
        await service.fetch_user_documents(user.id)

        await service.fetch_document(created.id, user.id, use_cache=False)

        assert remote.fetch_document.await_count == 1

    async def test_cached_document_of_other_user_not_served(self, service, remote, user, other_user):
        created = await service.create_document("Doc", "", user.id)
        await service.fetch_user_documents(user.id)

        assert await service.fetch_document(created.id, other_user.id) is None
        assert remote.fetch_document.await_count == 1

    async def test_missing_document_returns_none(self, service, user):
        assert await service.fetch_document(uuid.uuid4(), user.id) is None

    async def test_remote_failure_is_wrapped(self, service, remote, user):
        remote.fetch_documents.side_effect = RemoteError("connection refused")

        with pytest.raises(RemoteError) as exc_info:
            await service.fetch_user_documents(user.id)

        assert str(exc_info.value) == "Failed to fetch documents: connection refused"


@pytest.mark.asyncio
class TestCreate:
    async def test_sanitizes_before_persisting(self, service, store_client, user):
        created = await service.create_document(
            "  <b>Hi</b> ", "<script>alert(1)</script><p>hi</p>", user.id
        )

        stored = await store_client.fetch_document(created.id, user.id)
        assert stored.title == "bHi/b"
        assert stored.content == "<p>hi</p>"


@pytest.mark.asyncio
class TestUpdate:
    """Tests for partial updates through the service."""

    async def test_content_update_records_version(self, service, store_client, user):
        created = await service.create_document("Doc", "<p>a</p>", user.id)

        updated = await service.update_document(
            created.id, DocumentUpdate(content="<p onclick=\"x()\">b</p>"), user.id
        )

        assert updated.content == "<p >b</p>"
        versions = await store_client.fetch_document_versions(created.id)
        assert versions[0].version_number == 2
        assert versions[0].change_description == "Content modified"

    async def test_permission_only_update_records_no_version(self, service, store_client, user):
        created = await service.create_document("Doc", "", user.id)

        await service.update_document(created.id, DocumentUpdate(permission="editor"), user.id)

        assert len(await store_client.fetch_document_versions(created.id)) == 1

    async def test_same_values_record_no_version(self, service, store_client, user):
        created = await service.create_document("Doc", "<p>a</p>", user.id)

        await service.update_document(
            created.id, DocumentUpdate(title="Doc", content="<p>a</p>"), user.id
        )

        assert len(await store_client.fetch_document_versions(created.id)) == 1

    async def test_empty_update_makes_no_remote_call(self, service, remote, user):
        created = await service.create_document("Doc", "", user.id)

        result = await service.update_document(created.id, DocumentUpdate(), user.id)

        assert result.id == created.id
        assert remote.update_document.await_count == 0

    async def test_baseline_fetched_when_not_held(self, service, remote, user):
        created = await service.create_document("Doc", "", user.id)
        service.clear_caches()

        await service.update_document(created.id, DocumentUpdate(title="New"), user.id)

        assert remote.fetch_document.await_count == 1

    async def test_missing_document(self, service, user):
        with pytest.raises(NotFoundError):
            await service.update_document(uuid.uuid4(), DocumentUpdate(title="x"), user.id)

    async def test_update_invalidates_version_cache(self, service, version_cache, user):
        created = await service.create_document("Doc", "", user.id)
        await service.fetch_document_versions(created.id)
        assert created.id in version_cache

        await service.update_document(created.id, DocumentUpdate(content="<p>x</p>"), user.id)

        assert created.id not in version_cache

    async def test_stale_baseline_conflicts_and_drops_cache_entry(
        self, service, store_client, document_cache, user
    ):
        created = await service.create_document("Doc", "", user.id)
        # Another tab changes the document behind this cache
        await store_client.update_document(created.id, {"title": "Elsewhere"}, user.id)

        with pytest.raises(ConflictError) as exc_info:
            await service.update_document(created.id, DocumentUpdate(title="Mine"), user.id)

        assert str(exc_info.value).startswith("Failed to update document: ")
        assert created.id not in document_cache

        # The retry re-reads the document and succeeds
        updated = await service.update_document(created.id, DocumentUpdate(title="Mine"), user.id)
        assert updated.title == "Mine"

    async def test_explicit_base_updated_at_is_checked(self, service, user):
        created = await service.create_document("Doc", "", user.id)

        with pytest.raises(ConflictError):
            await service.update_document(
                created.id,
                DocumentUpdate(title="x", base_updated_at=created.updated_at - timedelta(seconds=5)),
                user.id
            )


@pytest.mark.asyncio
class TestVersionsAndRestore:
    async def test_versions_cached_until_change(self, service, remote, user):
        created = await service.create_document("Doc", "", user.id)

        await service.fetch_document_versions(created.id)
        await service.fetch_document_versions(created.id)
        assert remote.fetch_document_versions.await_count == 1

        await service.update_document(created.id, DocumentUpdate(content="<p>x</p>"), user.id)
        await service.fetch_document_versions(created.id)
        assert remote.fetch_document_versions.await_count == 2

    async def test_delete_clears_both_caches(self, service, remote, document_cache, version_cache, user):
        created = await service.create_document("Doc", "", user.id)
        await service.fetch_document_versions(created.id)

        await service.delete_document(created.id, user.id)

        assert created.id not in document_cache
        assert created.id not in version_cache
        assert await service.fetch_document_versions(created.id) == []
        assert remote.fetch_document_versions.await_count == 2

    async def test_restore_invalidates_versions(self, service, version_cache, user):
        created = await service.create_document("Original", "<p>one</p>", user.id)
        await service.update_document(created.id, DocumentUpdate(content="<p>two</p>"), user.id)
        versions = await service.fetch_document_versions(created.id)

        restored = await service.restore_document_version(created.id, versions[-1].id, user.id)

        assert restored.content == "<p>one</p>"
        assert created.id not in version_cache

    async def test_restore_of_missing_version_keeps_not_found_code(self, service, user):
        created = await service.create_document("Doc", "", user.id)

        with pytest.raises(NotFoundError) as exc_info:
            await service.restore_document_version(created.id, uuid.uuid4(), user.id)

        assert exc_info.value.code == "not_found"


@pytest.mark.asyncio
class TestValidateDocumentAccess:
    async def test_owner_has_access(self, service, user):
        created = await service.create_document("Doc", "", user.id)
        assert await service.validate_document_access(created.id, user.id) is True

    async def test_other_user_has_no_access(self, service, user, other_user):
        created = await service.create_document("Doc", "", user.id)
        assert await service.validate_document_access(created.id, other_user.id) is False

    async def test_missing_document(self, service, user):
        assert await service.validate_document_access(uuid.uuid4(), user.id) is False

    async def test_failure_means_no_access(self, service, remote, user):
        remote.fetch_document.side_effect = RemoteError("timeout")
        assert await service.validate_document_access(uuid.uuid4(), user.id) is False
