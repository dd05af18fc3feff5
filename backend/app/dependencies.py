"""Request dependencies. Clients are built once in the app lifespan and read from app.state."""

from fastapi import Depends, Request

from app.config import settings
from app.services.cache_service import CacheService
from app.services.context_extractor import ContextExtractor
from app.services.enrichment_service import EnrichmentService
from app.services.llm_client import LLMClient
from app.services.product_store import ProductStore
from app.services.product_tagger import ProductTagger


def get_llm_client(request: Request) -> LLMClient:
    return request.app.state.llm_client


def get_product_store(request: Request) -> ProductStore:
    return request.app.state.product_store


def get_cache(request: Request) -> CacheService | None:
    return getattr(request.app.state, "cache", None)


def get_context_extractor(
    llm: LLMClient = Depends(get_llm_client),
    cache: CacheService | None = Depends(get_cache),
) -> ContextExtractor:
    return ContextExtractor(
        llm,
        cache,
        temperature=settings.context_temperature,
        max_tokens=settings.context_max_tokens,
        cache_ttl=settings.context_cache_ttl_seconds,
    )


def get_enrichment_service(
    llm: LLMClient = Depends(get_llm_client),
    store: ProductStore = Depends(get_product_store),
) -> EnrichmentService:
    tagger = ProductTagger(
        llm,
        temperature=settings.enrich_temperature,
        max_tokens=settings.enrich_max_tokens,
        description_max_chars=settings.enrich_description_max_chars,
    )
    return EnrichmentService(
        store,
        tagger,
        default_batch_size=settings.enrich_default_batch_size,
        concurrency=settings.enrich_concurrency,
        sub_batch_delay=settings.enrich_sub_batch_delay_seconds,
        batch_delay=settings.enrich_batch_delay_seconds,
        time_budget_seconds=settings.enrich_time_budget_seconds,
    )
