# -----------------------------------------------------------------------------
# Author: Frank Campbell Bogle
# Created: 2025-11-12
# Updated: 2026-10-01
# Description: conftest.py
# -----------------------------------------------------------------------------

import sys
from pathlib import Path

import pytest

# add project root to sys.path
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from fakes import FakeChat, FakeEmbedder, HashingEmbedder, InMemoryForumRepository  # noqa: E402
from services.MPIndexService import MPIndexService  # noqa: E402
from services.MPSearchService import MPSearchService  # noqa: E402


@pytest.fixture
def repo() -> InMemoryForumRepository:
    return InMemoryForumRepository()


@pytest.fixture
def embedder() -> HashingEmbedder:
    return HashingEmbedder()


@pytest.fixture
def unconfigured_embedder() -> FakeEmbedder:
    return FakeEmbedder(configured=False)


@pytest.fixture
def chat() -> FakeChat:
    return FakeChat("- Use a 32A MCB.\n- Cable sized at 6 mm2.")


@pytest.fixture
def search_service(repo, embedder) -> MPSearchService:
    return MPSearchService(repository=repo, embedder=embedder)


@pytest.fixture
def index_service(repo, embedder) -> MPIndexService:
    return MPIndexService(repository=repo, embedder=embedder)
