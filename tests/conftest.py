"""Shared fixtures: deterministic embeddings and throwaway Chroma collections."""

import hashlib
import math
import re
import uuid

import pytest

from src.embedding.provider import EmbeddingProvider
from src.ingestion.pipeline import IngestionEngine
from src.retrieval.retriever import Retriever
from src.vectorstore.chroma_store import ChromaStore

DIM = 32
TOKEN = re.compile(r"\w+")


class HashingEmbeddingProvider(EmbeddingProvider):
    """Bag-of-words hashed into a fixed-size, L2-normalized vector.

    Texts sharing words land close together; no model download or network.
    Records every call so tests can assert on batching.
    """

    def __init__(self, model_name: str = "test-hash-v1"):
        self._model_name = model_name
        self.calls: list[dict] = []

    @property
    def model_name(self) -> str:
        return self._model_name

    def _embed(self, texts, model, input_type):
        self.calls.append({"texts": list(texts), "model": model, "input_type": input_type})
        return [_hash_vector(t) for t in texts]


def _hash_vector(text: str) -> list[float]:
    vec = [0.0] * DIM
    vec[0] = 0.1  # keeps empty-token texts off the zero vector
    for token in TOKEN.findall(text.lower()):
        bucket = int(hashlib.md5(token.encode("utf-8")).hexdigest(), 16) % (DIM - 1) + 1
        vec[bucket] += 1.0
    norm = math.sqrt(sum(v * v for v in vec))
    return [v / norm for v in vec]


@pytest.fixture
def provider():
    return HashingEmbeddingProvider()


@pytest.fixture
def store():
    """In-memory store on a uniquely named collection.

    ChromaDB in-memory clients share state within a process, so each test
    gets its own collection.
    """
    return ChromaStore(path=":memory:", collection_name=f"test_{uuid.uuid4().hex}")


@pytest.fixture
def engine(store, provider):
    return IngestionEngine(store, provider)


@pytest.fixture
def retriever(store, provider):
    return Retriever(store, provider)


@pytest.fixture
def tokyo_flight():
    return {
        "origin": "SFO",
        "destination": "TYO",
        "departureDate": "2026-03-10",
        "returnDate": "2026-03-13",
        "price": 920,
        "duration": "11h",
        "stops": 0,
    }
