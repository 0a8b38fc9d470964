"""Tests for DocumentService over the in-memory store.

Dependencies: pytest
System role: Document management verification
"""

import pytest

from kbcopilot.application.services import DocumentService
from kbcopilot.core.exceptions import (
    DocumentNotFoundError,
    UnsupportedFileTypeError,
    ValidationError,
)


@pytest.fixture
def document_service(pipeline, memory_store) -> DocumentService:
    pipeline.max_tokens = 1000
    return DocumentService(pipeline=pipeline, vector_store=memory_store)


class TestIngestText:
    @pytest.mark.asyncio
    async def test_returns_new_id_and_chunk_count(self, document_service, memory_store) -> None:
        document_id, count = await document_service.ingest_text("Refunds take five business days.")

        assert count == 1
        page = await memory_store.list_chunks(document_id)
        assert page.chunks[0].text == "Refunds take five business days."

    @pytest.mark.asyncio
    async def test_each_upload_gets_distinct_id(self, document_service) -> None:
        first, _ = await document_service.ingest_text("same text")
        second, _ = await document_service.ingest_text("same text")
        assert first != second


class TestIngestFiles:
    @pytest.mark.asyncio
    async def test_one_document_per_file(self, document_service) -> None:
        results = await document_service.ingest_files(
            [("faq.txt", b"Shipping is free over fifty dollars."), ("guide.md", b"# Setup\n\nRun the installer.")]
        )

        assert [r.original_name for r in results] == ["faq.txt", "guide.md"]
        assert all(r.chunk_count == 1 for r in results)
        assert results[0].document_id != results[1].document_id

    @pytest.mark.asyncio
    async def test_unsupported_extension_rejects_whole_upload(self, document_service, memory_store) -> None:
        with pytest.raises(UnsupportedFileTypeError) as exc_info:
            await document_service.ingest_files([("ok.txt", b"fine"), ("scan.pdf", b"%PDF-1.4")])

        assert exc_info.value.details["filename"] == "scan.pdf"
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_non_utf8_content_rejected(self, document_service) -> None:
        with pytest.raises(ValidationError, match="UTF-8"):
            await document_service.ingest_files([("notes.txt", b"\xff\xfe\x00bad")])

    @pytest.mark.asyncio
    async def test_empty_upload_rejected(self, document_service) -> None:
        with pytest.raises(ValidationError):
            await document_service.ingest_files([])


class TestListing:
    @pytest.mark.asyncio
    async def test_empty_store_lists_nothing(self, document_service) -> None:
        listing = await document_service.list_documents()

        assert listing.total_count == 0
        assert listing.total_pages == 0
        assert listing.results == []

    @pytest.mark.asyncio
    async def test_pagination_metadata(self, document_service) -> None:
        for i in range(3):
            await document_service.ingest_text(f"Document number {i}")

        listing = await document_service.list_documents(page=2, limit=2)

        assert listing.total_count == 3
        assert listing.total_pages == 2
        assert len(listing.results) == 1
        assert listing.results[0].text == "Document number 2"

    @pytest.mark.asyncio
    async def test_page_below_one_rejected(self, document_service) -> None:
        with pytest.raises(ValidationError):
            await document_service.list_documents(page=0)


class TestDocumentContent:
    @pytest.mark.asyncio
    async def test_full_text_when_page_holds_every_chunk(self, document_service, pipeline) -> None:
        pipeline.max_tokens = 50
        text = "\n\n".join(f"Paragraph {i} explains step {i} of the returns process in detail." for i in range(8))
        document_id, count = await document_service.ingest_text(text)

        content = await document_service.get_document_content(document_id, limit=100)

        assert content.total_count == count > 1
        assert content.full_text == "\n\n".join(chunk.text for chunk in content.chunks)

    @pytest.mark.asyncio
    async def test_partial_page_has_no_full_text(self, document_service, pipeline) -> None:
        pipeline.max_tokens = 50
        text = "\n\n".join(f"Paragraph {i} explains step {i} of the returns process in detail." for i in range(8))
        document_id, _ = await document_service.ingest_text(text)

        content = await document_service.get_document_content(document_id, page=1, limit=1)

        assert len(content.chunks) == 1
        assert content.full_text is None

    @pytest.mark.asyncio
    async def test_unknown_document_not_found(self, document_service) -> None:
        with pytest.raises(DocumentNotFoundError):
            await document_service.get_document_content("missing")


class TestReplaceAndDelete:
    @pytest.mark.asyncio
    async def test_replace_keeps_id(self, document_service, memory_store) -> None:
        document_id, _ = await document_service.ingest_text("old answer")

        assert await document_service.replace_document(document_id, "new answer") == 1

        page = await memory_store.list_chunks(document_id)
        assert [c.text for c in page.chunks] == ["new answer"]

    @pytest.mark.asyncio
    async def test_delete_removes_chunks(self, document_service, memory_store) -> None:
        document_id, _ = await document_service.ingest_text("to be removed")

        assert await document_service.delete_document(document_id) == 1
        assert len(memory_store) == 0

    @pytest.mark.asyncio
    async def test_delete_unknown_document_not_found(self, document_service) -> None:
        with pytest.raises(DocumentNotFoundError):
            await document_service.delete_document("missing")
