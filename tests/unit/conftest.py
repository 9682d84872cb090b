"""Unit test fixtures - small in-memory collections"""

import pytest

from src.bm25.index_store import Document, IndexStore
from src.search_engine import SearchEngine


@pytest.fixture
def sample_documents():
    """Three short documents with overlapping vocabulary"""
    return [
        Document(
            id="k8s",
            content="Kubernetes deployment guide. Pods, deployment strategies and rolling updates.",
            filename="k8s_guide.txt",
        ),
        Document(
            id="docker",
            content="Docker container basics: images, containers and the container registry.",
            filename="docker_tutorial.txt",
        ),
        Document(
            id="db",
            content="Database indexing with PostgreSQL. A database index speeds up queries.",
            filename="postgres.txt",
        ),
    ]


@pytest.fixture
def index_store():
    return IndexStore()


@pytest.fixture
def engine():
    """Engine with explicit defaults (independent of environment overrides)"""
    return SearchEngine(k1=1.5, b=0.75, chunk_size=100, default_limit=20, snippet_window=(60, 200, 150))


@pytest.fixture
def populated_engine(engine, sample_documents):
    engine.ingest(sample_documents)
    return engine
