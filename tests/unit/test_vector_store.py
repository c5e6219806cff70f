"""Unit tests for JsonVectorStore and cosine similarity."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ragdesk.providers.vector_store.json_vector_store import JsonVectorStore, cosine_similarity
from tests.conftest import make_entry


class TestCosineSimilarity:
    def test_identical_vectors_score_one(self) -> None:
        assert cosine_similarity([1.0, 2.0, 3.0], [1.0, 2.0, 3.0]) == pytest.approx(1.0)

    def test_orthogonal_vectors_score_zero(self) -> None:
        assert cosine_similarity([1.0, 0.0], [0.0, 1.0]) == pytest.approx(0.0)

    def test_opposite_vectors_score_minus_one(self) -> None:
        assert cosine_similarity([1.0, 1.0], [-1.0, -1.0]) == pytest.approx(-1.0)

    def test_is_symmetric(self) -> None:
        a, b = [0.3, 0.1, 0.9], [0.5, 0.4, 0.2]
        assert cosine_similarity(a, b) == pytest.approx(cosine_similarity(b, a))

    def test_dimension_mismatch_scores_zero(self) -> None:
        assert cosine_similarity([1.0, 2.0], [1.0, 2.0, 3.0]) == 0.0

    def test_zero_vector_scores_zero(self) -> None:
        assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0.0

    def test_empty_vectors_score_zero(self) -> None:
        assert cosine_similarity([], []) == 0.0


class TestAddAndSearch:
    @pytest.mark.asyncio
    async def test_add_entries_returns_count_and_persists(
        self, vector_store: JsonVectorStore, tmp_path: Path
    ) -> None:
        await vector_store.initialize()
        added = await vector_store.add_entries(
            [make_entry("doc-1", [1.0, 0.0]), make_entry("doc-1", [0.0, 1.0], chunk_index=1)]
        )

        assert added == 2
        assert vector_store.get_count() == 2
        on_disk = json.loads((tmp_path / "vectors" / "store.json").read_text())
        assert len(on_disk) == 2
        assert on_disk[0]["document_id"] == "doc-1"

    @pytest.mark.asyncio
    async def test_add_empty_list_is_noop(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        assert await vector_store.add_entries([]) == 0
        assert vector_store.get_count() == 0

    @pytest.mark.asyncio
    async def test_search_orders_by_score_descending(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries(
            [
                make_entry("doc-1", [0.0, 1.0], text="far"),
                make_entry("doc-1", [1.0, 0.0], text="exact"),
                make_entry("doc-1", [1.0, 1.0], text="near"),
            ]
        )

        results = await vector_store.search([1.0, 0.0], top_k=5)

        assert [r.entry.text for r in results] == ["exact", "near", "far"]
        assert results[0].score == pytest.approx(1.0)

    @pytest.mark.asyncio
    async def test_search_respects_top_k(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries([make_entry("doc-1", [1.0, float(i)]) for i in range(10)])

        results = await vector_store.search([1.0, 0.0], top_k=3)
        assert len(results) == 3

    @pytest.mark.asyncio
    async def test_ties_keep_insertion_order(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries(
            [make_entry("doc-1", [1.0, 0.0], text=name) for name in ("first", "second", "third")]
        )

        results = await vector_store.search([1.0, 0.0], top_k=3)
        assert [r.entry.text for r in results] == ["first", "second", "third"]

    @pytest.mark.asyncio
    async def test_search_filters_by_document_ids(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries(
            [
                make_entry("doc-a", [1.0, 0.0]),
                make_entry("doc-b", [1.0, 0.0]),
                make_entry("doc-c", [1.0, 0.0]),
            ]
        )

        results = await vector_store.search([1.0, 0.0], top_k=5, document_ids=["doc-b", "doc-c"])
        assert {r.entry.document_id for r in results} == {"doc-b", "doc-c"}

    @pytest.mark.asyncio
    async def test_empty_document_filter_searches_everything(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries([make_entry("doc-a", [1.0]), make_entry("doc-b", [1.0])])

        results = await vector_store.search([1.0], top_k=5, document_ids=[])
        assert len(results) == 2

    @pytest.mark.asyncio
    async def test_mismatched_dimension_entries_score_zero(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries(
            [make_entry("doc-1", [1.0, 0.0, 0.0], text="wrong"), make_entry("doc-1", [1.0, 0.0], text="right")]
        )

        results = await vector_store.search([1.0, 0.0], top_k=2)
        assert results[0].entry.text == "right"
        assert results[1].score == 0.0


class TestRemovalAndListing:
    @pytest.mark.asyncio
    async def test_remove_by_document_id(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries(
            [make_entry("doc-a", [1.0]), make_entry("doc-a", [1.0]), make_entry("doc-b", [1.0])]
        )

        removed = await vector_store.remove_by_document_id("doc-a")

        assert removed == 2
        assert vector_store.list_documents() == ["doc-b"]
        results = await vector_store.search([1.0], top_k=10)
        assert all(r.entry.document_id != "doc-a" for r in results)

    @pytest.mark.asyncio
    async def test_remove_unknown_document_returns_zero(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        assert await vector_store.remove_by_document_id("missing") == 0

    @pytest.mark.asyncio
    async def test_list_documents_unique_in_first_seen_order(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries(
            [make_entry("doc-b", [1.0]), make_entry("doc-a", [1.0]), make_entry("doc-b", [1.0])]
        )
        assert vector_store.list_documents() == ["doc-b", "doc-a"]

    @pytest.mark.asyncio
    async def test_stats(self, vector_store: JsonVectorStore) -> None:
        await vector_store.initialize()
        await vector_store.add_entries(
            [make_entry("doc-a", [1.0]), make_entry("doc-a", [1.0]), make_entry("doc-b", [1.0])]
        )
        stats = vector_store.get_stats()
        assert stats.total_vectors == 3
        assert stats.documents == 2


class TestPersistence:
    @pytest.mark.asyncio
    async def test_reload_restores_entries(self, tmp_path: Path) -> None:
        path = str(tmp_path / "store.json")
        store = JsonVectorStore(path)
        await store.initialize()
        await store.add_entries([make_entry("doc-1", [0.5, 0.5], text="persisted")])

        reloaded = JsonVectorStore(path)
        await reloaded.initialize()

        assert reloaded.get_count() == 1
        results = await reloaded.search([0.5, 0.5], top_k=1)
        assert results[0].entry.text == "persisted"

    @pytest.mark.asyncio
    async def test_corrupt_file_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        path.write_text("{not valid json")

        store = JsonVectorStore(str(path))
        await store.initialize()

        assert store.get_count() == 0

    @pytest.mark.asyncio
    async def test_wrong_shape_starts_empty(self, tmp_path: Path) -> None:
        path = tmp_path / "store.json"
        path.write_text(json.dumps([{"unexpected": True}]))

        store = JsonVectorStore(str(path))
        await store.initialize()

        assert store.get_count() == 0

    @pytest.mark.asyncio
    async def test_initialize_creates_parent_directory(self, tmp_path: Path) -> None:
        store = JsonVectorStore(str(tmp_path / "nested" / "dir" / "store.json"))
        await store.initialize()
        assert (tmp_path / "nested" / "dir").is_dir()
