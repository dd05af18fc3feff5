"""Context router — structured trip/occasion context for free-text shop searches."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Response

from app.dependencies import get_context_extractor
from app.schemas.context import ContextRequest, SearchContext
from app.services.context_extractor import ContextExtractor

logger = logging.getLogger(__name__)

router = APIRouter()


@router.options("/extract-context", include_in_schema=False)
async def extract_context_preflight():
    return Response(status_code=200)


@router.post("/extract-context", response_model=SearchContext)
async def extract_context(
    req: ContextRequest | None = None,
    extractor: ContextExtractor = Depends(get_context_extractor),
):
    """Extract destination, occasion and timing from a search query.

    Always answers 200 for a valid query; dependency failures degrade to a
    context carrying only the original query.
    """
    if req is None:
        raise HTTPException(status_code=400, detail="Query is required")

    try:
        return await extractor.extract(req.query)
    except Exception as e:
        logger.error(f"Error extracting context: {e}", exc_info=True)
        return SearchContext.fallback(req.query)
