"""Tests for the in-memory vector store.

Dependencies: pytest, numpy
System role: Ranking, pagination and constraint verification
"""

import numpy as np
import pytest

from kbcopilot.boundary.vdb.memory_store import InMemoryVectorStore, cosine_distance
from kbcopilot.core.exceptions import StorageError, ValidationError


@pytest.fixture
def store() -> InMemoryVectorStore:
    return InMemoryVectorStore(dimension=3)


class TestCosineDistance:
    def test_identical_vectors_have_zero_distance(self) -> None:
        assert cosine_distance(np.array([1.0, 2.0, 3.0]), np.array([2.0, 4.0, 6.0])) == pytest.approx(0.0)

    def test_opposite_vectors_have_distance_two(self) -> None:
        assert cosine_distance(np.array([1.0, 0.0]), np.array([-1.0, 0.0])) == pytest.approx(2.0)

    def test_zero_vector_treated_as_orthogonal(self) -> None:
        assert cosine_distance(np.array([0.0, 0.0]), np.array([1.0, 0.0])) == 1.0


class TestSave:
    @pytest.mark.asyncio
    async def test_ids_increase(self, store: InMemoryVectorStore) -> None:
        first = await store.save("doc", 0, "a", [1.0, 0.0, 0.0])
        second = await store.save("doc", 1, "b", [0.0, 1.0, 0.0])
        assert second > first
        assert len(store) == 2

    @pytest.mark.asyncio
    async def test_duplicate_position_rejected(self, store: InMemoryVectorStore) -> None:
        await store.save("doc", 0, "a", [1.0, 0.0, 0.0])
        with pytest.raises(StorageError):
            await store.save("doc", 0, "again", [1.0, 0.0, 0.0])

    @pytest.mark.asyncio
    async def test_wrong_dimension_rejected(self, store: InMemoryVectorStore) -> None:
        with pytest.raises(StorageError):
            await store.save("doc", 0, "a", [1.0, 0.0])


class TestQuery:
    @pytest.mark.asyncio
    async def test_nearest_first(self, store: InMemoryVectorStore) -> None:
        await store.save("far", 0, "far", [0.0, 0.0, 1.0])
        await store.save("near", 0, "near", [1.0, 0.1, 0.0])
        await store.save("exact", 0, "exact", [1.0, 0.0, 0.0])

        results = await store.query([1.0, 0.0, 0.0], limit=3)

        assert [r.document_id for r in results] == ["exact", "near", "far"]
        assert results[0].distance == pytest.approx(0.0)
        assert results[0].embedding == [1.0, 0.0, 0.0]

    @pytest.mark.asyncio
    async def test_ties_broken_by_ascending_id(self, store: InMemoryVectorStore) -> None:
        ids = [await store.save(f"doc-{i}", 0, "same", [0.0, 1.0, 0.0]) for i in range(3)]

        results = await store.query([0.0, 1.0, 0.0], limit=3)

        assert [r.id for r in results] == ids

    @pytest.mark.asyncio
    async def test_limit_respected(self, store: InMemoryVectorStore) -> None:
        for i in range(5):
            await store.save("doc", i, f"t{i}", [1.0, float(i), 0.0])

        assert len(await store.query([1.0, 0.0, 0.0], limit=2)) == 2

    @pytest.mark.asyncio
    async def test_empty_store_returns_nothing(self, store: InMemoryVectorStore) -> None:
        assert await store.query([1.0, 0.0, 0.0]) == []

    @pytest.mark.asyncio
    async def test_limit_below_one_rejected(self, store: InMemoryVectorStore) -> None:
        with pytest.raises(ValidationError):
            await store.query([1.0, 0.0, 0.0], limit=0)


class TestDeleteAndList:
    @pytest.mark.asyncio
    async def test_delete_returns_count_and_leaves_other_documents(self, store: InMemoryVectorStore) -> None:
        await store.save("a", 0, "a0", [1.0, 0.0, 0.0])
        await store.save("a", 1, "a1", [1.0, 0.0, 0.0])
        await store.save("b", 0, "b0", [1.0, 0.0, 0.0])

        assert await store.delete_document("a") == 2
        assert await store.delete_document("a") == 0
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_list_chunks_ordered_and_paged(self, store: InMemoryVectorStore) -> None:
        for index in (2, 0, 1):
            await store.save("doc", index, f"chunk {index}", [1.0, 0.0, 0.0])

        first = await store.list_chunks("doc", page=1, page_size=2)
        second = await store.list_chunks("doc", page=2, page_size=2)

        assert first.total == 3
        assert [c.chunk_index for c in first.chunks] == [0, 1]
        assert [c.chunk_index for c in second.chunks] == [2]

    @pytest.mark.asyncio
    async def test_list_documents_summarizes_first_chunk(self, store: InMemoryVectorStore) -> None:
        await store.save("a", 0, "alpha start", [1.0, 0.0, 0.0])
        await store.save("a", 1, "alpha end", [1.0, 0.0, 0.0])
        await store.save("b", 0, "beta", [1.0, 0.0, 0.0])

        page = await store.list_documents(page=1, page_size=10)

        assert page.total == 2
        assert [(d.document_id, d.chunk_count, d.text) for d in page.documents] == [
            ("a", 2, "alpha start"),
            ("b", 1, "beta"),
        ]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(("page", "page_size"), [(0, 10), (1, 0)])
    async def test_invalid_pagination_rejected(
        self, store: InMemoryVectorStore, page: int, page_size: int
    ) -> None:
        with pytest.raises(ValidationError):
            await store.list_documents(page=page, page_size=page_size)
