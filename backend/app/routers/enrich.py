"""Enrich router — backfills catalog products with generated search metadata."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response
from fastapi.responses import JSONResponse

from app.dependencies import get_enrichment_service, get_llm_client
from app.schemas.enrichment import EnrichmentResults, EnrichRequest
from app.services.enrichment_service import EnrichmentService
from app.services.llm_client import LLMClient
from app.services.product_store import ProductNotFoundError

logger = logging.getLogger(__name__)

router = APIRouter()


def _summary_message(results: EnrichmentResults) -> str:
    if results.dry_run:
        message = f"Generated keywords for {results.processed} products (dry run - no updates)"
    else:
        message = f"Updated {results.updated} products with keywords"
    if results.partial:
        message += (
            f" (stopped early to stay within the time limit; "
            f"resume with skip={results.next_batch_start})"
        )
    return message


@router.options("/enrich-products", include_in_schema=False)
async def enrich_products_preflight():
    return Response(status_code=200)


@router.post("/enrich-products")
async def enrich_products(
    req: EnrichRequest | None = None,
    llm: LLMClient = Depends(get_llm_client),
    service: EnrichmentService = Depends(get_enrichment_service),
):
    """Generate keywords, season and bestFor tags for one product or a window of the catalog."""
    req = req or EnrichRequest()

    if not llm.available:
        raise HTTPException(status_code=500, detail="OPENAI_API_KEY not configured")

    try:
        if req.product_id:
            single = await service.enrich_one(req.product_id, dry_run=req.dry_run)
            return {
                "success": True,
                "dryRun": req.dry_run,
                "results": single.model_dump(by_alias=True),
            }

        results = await service.enrich_catalog(
            batch_size=req.batch_size,
            dry_run=req.dry_run,
            skip=req.skip,
            limit=req.limit,
        )
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except Exception as e:
        logger.error(f"Error in enrich-products: {e}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal Server Error", "message": str(e)},
        )

    return {
        "success": True,
        "message": _summary_message(results),
        "results": results.model_dump(by_alias=True),
    }
