import random

import pytest

from src.notebook.embeddings import cosine_similarity
from src.notebook.vector_store import InMemoryVectorStore, EmbeddedChunk, ScoredChunk


# ============ cosine_similarity ============

def test_cosine_similarity_identical_and_orthogonal():
    assert cosine_similarity([1.0, 0.0, 0.0], [1.0, 0.0, 0.0]) == pytest.approx(1.0)
    assert cosine_similarity([1.0, 0.0, 0.0], [0.0, 1.0, 0.0]) == pytest.approx(0.0)
    assert cosine_similarity([1.0, 2.0], [-1.0, -2.0]) == pytest.approx(-1.0)


def test_cosine_similarity_is_symmetric_and_bounded():
    rng = random.Random(7)
    for _ in range(200):
        dim = rng.randint(1, 16)
        a = [rng.uniform(-1, 1) for _ in range(dim)]
        b = [rng.uniform(-1, 1) for _ in range(dim)]
        if not any(a) or not any(b):
            continue
        sim = cosine_similarity(a, b)
        assert sim == cosine_similarity(b, a)
        assert -1.0 <= sim <= 1.0


def test_cosine_similarity_degenerate_inputs_are_zero():
    assert cosine_similarity([1.0, 0.0], [1.0, 0.0, 0.0]) == 0
    assert cosine_similarity([0.0, 0.0], [1.0, 2.0]) == 0
    assert cosine_similarity([1.0, 2.0], [0.0, 0.0]) == 0
    assert cosine_similarity([], []) == 0


# ============ InMemoryVectorStore ============

def _chunk(source, content, embedding):
    return EmbeddedChunk(source=source, content=content, embedding=embedding)


def test_search_on_empty_store_returns_nothing():
    assert InMemoryVectorStore().search([1.0, 0.0], 5) == []


def test_search_orders_by_similarity_and_breaks_ties_by_insertion():
    store = InMemoryVectorStore()
    a = _chunk("doc.txt", "A", [1.0, 0.0])
    b = _chunk("doc.txt", "B", [1.0, 0.0])
    c = _chunk("doc.txt", "C", [0.0, 1.0])
    store.add([a, b, c])

    query = [0.9, 0.1]
    top_two = store.search(query, 2)
    assert [r.content for r in top_two] == ["A", "B"]
    assert top_two[0].similarity == top_two[1].similarity

    everything = store.search(query, 5)
    assert [r.content for r in everything] == ["A", "B", "C"]
    assert all(isinstance(r, ScoredChunk) for r in everything)


def test_ties_keep_insertion_order_when_a_worse_chunk_comes_first():
    store = InMemoryVectorStore()
    store.add([
        _chunk("x", "low", [0.0, 1.0]),
        _chunk("x", "first", [2.0, 0.0]),
        _chunk("x", "second", [1.0, 0.0]),
    ])
    assert [r.content for r in store.search([1.0, 0.0], 3)] == ["first", "second", "low"]


def test_search_is_repeatable():
    rng = random.Random(3)
    store = InMemoryVectorStore()
    store.add([
        _chunk("s", str(i), [rng.choice([0.0, 1.0]), rng.choice([0.0, 1.0]), 1.0])
        for i in range(50)
    ])
    first = [r.content for r in store.search([1.0, 0.0, 1.0], 10)]
    second = [r.content for r in store.search([1.0, 0.0, 1.0], 10)]
    assert first == second


def test_search_scores_mismatched_dimensions_as_zero():
    store = InMemoryVectorStore()
    store.add([_chunk("bad", "short", [1.0]), _chunk("good", "ok", [1.0, 1.0])])
    results = store.search([1.0, 1.0], 2)
    assert [r.source for r in results] == ["good", "bad"]
    assert results[1].similarity == 0


def test_non_positive_top_k_returns_nothing():
    store = InMemoryVectorStore()
    store.add([_chunk("a", "A", [1.0])])
    assert store.search([1.0], 0) == []


def test_remove_by_source():
    store = InMemoryVectorStore()
    store.add([_chunk("X", "from x", [1.0, 0.0]), _chunk("Y", "from y", [0.0, 1.0])])

    assert store.remove_by_source("X") == 1

    assert store.get_sources() == ["Y"]
    assert all(r.source != "X" for r in store.search([1.0, 0.0], 5))


def test_remove_missing_source_is_noop():
    store = InMemoryVectorStore()
    store.add([_chunk("Y", "from y", [0.0, 1.0])])
    assert store.remove_by_source("nope") == 0
    assert store.size() == 1


def test_sources_are_unique_in_insertion_order():
    store = InMemoryVectorStore()
    store.add([_chunk("b", "1", [1.0]), _chunk("a", "2", [1.0]), _chunk("b", "3", [1.0])])
    assert store.get_sources() == ["b", "a"]
    assert store.has_source("a")
    assert not store.has_source("c")


def test_add_keeps_duplicates():
    store = InMemoryVectorStore()
    chunk = _chunk("a", "same", [1.0])
    store.add([chunk])
    store.add([chunk])
    assert len(store) == 2


def test_clear():
    store = InMemoryVectorStore()
    store.add([_chunk("a", "1", [1.0])])
    store.clear()
    assert store.size() == 0
    assert store.get_sources() == []
