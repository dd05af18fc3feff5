"""Enrichment service — backfills catalog products with generated keywords, season and occasion tags."""

import asyncio
import logging
import math
import time

from app.schemas.enrichment import (
    EnrichmentResults,
    ProductError,
    SingleProductResults,
    TaggedProduct,
)
from app.services.pacing import Clock, Deadline, RateLimiter, Sleep
from app.services.product_store import ProductNotFoundError, ProductRecord, ProductStore
from app.services.product_tagger import ProductTagger

logger = logging.getLogger(__name__)


class EnrichmentService:
    """Walks the catalog in paced batches, tagging each product via the completion API.

    Each request gets a fresh Deadline and fresh limiters, so no pacing state
    leaks between invocations.
    """

    def __init__(
        self,
        store: ProductStore,
        tagger: ProductTagger,
        *,
        default_batch_size: int = 5,
        concurrency: int = 3,
        sub_batch_delay: float = 0.5,
        batch_delay: float = 1.0,
        time_budget_seconds: float = 50.0,
        clock: Clock = time.monotonic,
        sleep: Sleep = asyncio.sleep,
    ):
        self.store = store
        self.tagger = tagger
        self.default_batch_size = default_batch_size
        self.concurrency = max(1, concurrency)
        self.sub_batch_delay = sub_batch_delay
        self.batch_delay = batch_delay
        self.time_budget_seconds = time_budget_seconds
        self._clock = clock
        self._sleep = sleep

    async def enrich_one(self, product_id: str, dry_run: bool = False) -> SingleProductResults:
        """Tag a single product. Raises ProductNotFoundError if the id is unknown."""
        product = await self.store.get_product(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)

        results = SingleProductResults()
        try:
            metadata = await self.tagger.generate(product)
            if not dry_run:
                await self.store.update_metadata(product.id, metadata)
            results.products.append(
                TaggedProduct(
                    id=product.id,
                    name=product.name,
                    keywords=metadata.keywords,
                    season=metadata.season,
                    best_for=metadata.best_for,
                )
            )
        except Exception as e:
            logger.error(f"Error processing product {product.id}: {e}")
            results.errors.append(ProductError(product_id=product.id, product_name=product.name, error=str(e)))
        return results

    async def enrich_catalog(
        self,
        *,
        batch_size: int | None = None,
        dry_run: bool = False,
        skip: int = 0,
        limit: int | None = None,
    ) -> EnrichmentResults:
        """
        Tag every product in the [skip, skip+limit) window of the catalog.

        Stops before starting a batch once the time budget is spent; the
        returned next_batch_start can be passed back as `skip` to resume.
        """
        batch_size = batch_size or self.default_batch_size
        deadline = Deadline(self.time_budget_seconds, clock=self._clock)
        batch_limiter = RateLimiter(self.batch_delay, clock=self._clock, sleep=self._sleep)
        sub_batch_limiter = RateLimiter(self.sub_batch_delay, clock=self._clock, sleep=self._sleep)

        all_products = await self.store.list_products()
        end = skip + limit if limit is not None else None
        window = all_products[skip:end]
        logger.info(f"Found {len(all_products)} products; processing {len(window)} from offset {skip}")

        results = EnrichmentResults(
            total=len(all_products),
            window_size=len(window),
            skip=skip,
            limit=limit,
            batch_size=batch_size,
            dry_run=dry_run,
        )

        total_batches = math.ceil(len(window) / batch_size) if window else 0
        for batch_no, start in enumerate(range(0, len(window), batch_size), start=1):
            if deadline.expired:
                results.partial = True
                logger.warning(
                    f"Time budget of {self.time_budget_seconds}s spent after {deadline.elapsed:.1f}s; "
                    f"stopping at offset {skip + start}"
                )
                break

            await batch_limiter.acquire()
            batch = window[start:start + batch_size]
            logger.info(f"Processing batch {batch_no}/{total_batches} ({len(batch)} products)")

            for sub_start in range(0, len(batch), self.concurrency):
                await sub_batch_limiter.acquire()
                sub_batch = batch[sub_start:sub_start + self.concurrency]
                await asyncio.gather(*(self._process(product, dry_run, results) for product in sub_batch))

        attempted = results.attempted
        if results.partial or (limit is not None and skip + attempted < len(all_products)):
            results.next_batch_start = skip + attempted
        results.elapsed_seconds = round(deadline.elapsed, 3)

        logger.info(
            f"Enrichment finished: processed={results.processed} updated={results.updated} "
            f"errors={len(results.errors)} partial={results.partial}"
        )
        return results

    async def _process(self, product: ProductRecord, dry_run: bool, results: EnrichmentResults) -> None:
        """Tag and (unless dry run) persist one product; failures are recorded, not raised."""
        try:
            metadata = await self.tagger.generate(product)
            if not dry_run:
                await self.store.update_metadata(product.id, metadata)
                results.updated += 1
            results.processed += 1
        except Exception as e:
            logger.error(f"Error processing product {product.id}: {e}")
            results.errors.append(ProductError(product_id=product.id, product_name=product.name, error=str(e)))
