"""
Pytest configuration and shared fixtures.

The FastAPI app is exercised through dependency overrides: the LLM client is an
AsyncMock, the product store and cache are in-memory fakes, and the lifespan
(database engine, Redis) never runs.
"""

import json

import pytest
from unittest.mock import AsyncMock, MagicMock

from app.services.product_store import ProductNotFoundError, ProductRecord


# ============================================================
# Fakes
# ============================================================

class FakeProductStore:
    """In-memory stand-in for ProductStore that records every write."""

    def __init__(self, products: list[ProductRecord]):
        self.products = {p.id: p for p in products}
        self.writes: list[tuple[str, object]] = []

    async def list_products(self) -> list[ProductRecord]:
        return [self.products[k] for k in sorted(self.products)]

    async def get_product(self, product_id: str) -> ProductRecord | None:
        return self.products.get(product_id)

    async def update_metadata(self, product_id: str, metadata) -> None:
        if product_id not in self.products:
            raise ProductNotFoundError(product_id)
        self.writes.append((product_id, metadata))


class FakeCache:
    """Dict-backed stand-in for CacheService's context helpers."""

    def __init__(self):
        self.data: dict[tuple, dict] = {}
        self.sets = 0

    async def get_context(self, query: str, year: int, month: int) -> dict | None:
        return self.data.get((query.lower(), year, month))

    async def set_context(self, query: str, year: int, month: int, data: dict, ttl: int = 0) -> bool:
        self.sets += 1
        self.data[(query.lower(), year, month)] = data
        return True


class FakeClock:
    """Monotonic clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


# ============================================================
# Canned model replies
# ============================================================

PARIS_WEDDING_REPLY = "```json\n" + json.dumps({
    "destination": "Paris",
    "occasion": "wedding",
    "timePeriod": "nextTwoMonths",
    "season": "fall",
    "specificMonths": [11],
    "contextExplanation": "Showing results for the wedding in Paris next month",
}) + "\n```"

TAGS_REPLY = json.dumps({
    "keywords": ["Linen", " breathable ", "beach", ""],
    "season": "SUMMER",
    "bestFor": ["CASUAL", "DATE", "BRUNCH"],
})


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def mock_llm():
    """LLM client mock: configured, replying with the Paris wedding context."""
    llm = MagicMock()
    llm.available = True
    llm.complete = AsyncMock(return_value=PARIS_WEDDING_REPLY)
    return llm


@pytest.fixture
def sample_products() -> list[ProductRecord]:
    return [
        ProductRecord(
            id=f"p{i:02d}",
            name=f"Product {i}",
            description=f"Description for product {i}",
            category="dresses" if i % 2 else "jackets",
        )
        for i in range(1, 8)
    ]


@pytest.fixture
def product_store(sample_products) -> FakeProductStore:
    return FakeProductStore(sample_products)


@pytest.fixture
def fake_cache() -> FakeCache:
    return FakeCache()


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def client(mock_llm, product_store):
    """TestClient with every external dependency overridden."""
    from fastapi.testclient import TestClient

    from app.dependencies import (
        get_cache,
        get_enrichment_service,
        get_llm_client,
        get_product_store,
    )
    from app.main import app
    from app.services.enrichment_service import EnrichmentService
    from app.services.product_tagger import ProductTagger

    app.dependency_overrides[get_llm_client] = lambda: mock_llm
    app.dependency_overrides[get_product_store] = lambda: product_store
    app.dependency_overrides[get_cache] = lambda: None
    app.dependency_overrides[get_enrichment_service] = lambda: EnrichmentService(
        product_store,
        ProductTagger(mock_llm),
        sub_batch_delay=0,
        batch_delay=0,
    )

    yield TestClient(app)

    app.dependency_overrides.clear()
