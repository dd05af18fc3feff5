"""Product tagger — generates search keywords, season and occasion tags for a catalog product."""

import logging
from typing import Any

from app.schemas.enrichment import (
    MAX_BEST_FOR,
    MAX_KEYWORDS,
    BestFor,
    ProductMetadata,
    Season,
)
from app.services.json_extract import JSONExtractionError, extract_json_object
from app.services.llm_client import LLMClient
from app.services.product_store import ProductRecord

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that generates product metadata. "
    "Always respond with valid JSON objects only."
)

USER_PROMPT = """You are a product tagging assistant for an e-commerce store. Analyze a product and generate structured metadata.

Product Name: "{name}"
Category: "{category}"
Description: "{description}"{ellipsis}

Analyze this product and return a JSON object with:
1. "keywords": Array of 10-15 relevant search keywords (material, style, use case, etc.)
2. "season": One of "SUMMER", "WINTER", or "ALL_SEASON" based on when this product is best worn
3. "bestFor": Array of one or more from: "DATE", "CASUAL", "OFFICIAL_PURPOSE", "FESTIVE", "PARTY" - select all that apply

Season Guidelines:
- SUMMER: Light fabrics, sleeveless, shorts, breathable materials, beach wear
- WINTER: Warm fabrics, jackets, sweaters, wool, thermal wear
- ALL_SEASON: Versatile items that work year-round

Best For Guidelines:
- DATE: Romantic, elegant, special occasion wear
- CASUAL: Everyday wear, comfortable, relaxed
- OFFICIAL_PURPOSE: Formal, professional, office-appropriate
- FESTIVE: Traditional, celebration, cultural events
- PARTY: Fun, trendy, night-out wear

Return ONLY a valid JSON object in this exact format:
{{
  "keywords": ["cotton", "casual", "summer", "comfortable"],
  "season": "SUMMER",
  "bestFor": ["CASUAL", "DATE"]
}}"""

_SEASONS = {s.value for s in Season}
_BEST_FOR = {b.value for b in BestFor}


def build_prompt(name: str, description: str, category: str, max_chars: int = 500) -> str:
    return USER_PROMPT.format(
        name=name,
        category=category,
        description=description[:max_chars],
        ellipsis=" ..." if len(description) > max_chars else "",
    )


def normalize_metadata(raw: Any) -> ProductMetadata:
    """Clamp a model reply to the allowed keyword/season/bestFor shapes."""
    if not isinstance(raw, dict):
        raise JSONExtractionError("expected a JSON object for product metadata")

    keywords: list[str] = []
    if isinstance(raw.get("keywords"), list):
        keywords = [
            k.strip().lower()
            for k in raw["keywords"]
            if isinstance(k, str) and k.strip()
        ][:MAX_KEYWORDS]

    season = raw.get("season")
    if not isinstance(season, str) or season not in _SEASONS:
        season = Season.ALL_SEASON.value

    best_for: list[str] = []
    if isinstance(raw.get("bestFor"), list):
        best_for = [b for b in raw["bestFor"] if isinstance(b, str) and b in _BEST_FOR][:MAX_BEST_FOR]

    return ProductMetadata(
        keywords=keywords,
        season=season,
        best_for=best_for or [BestFor.CASUAL.value],
    )


class ProductTagger:
    """Calls the completion API once per product and validates the reply."""

    def __init__(
        self,
        llm: LLMClient,
        *,
        temperature: float = 0.5,
        max_tokens: int = 300,
        description_max_chars: int = 500,
    ):
        self.llm = llm
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.description_max_chars = description_max_chars

    async def generate(self, product: ProductRecord) -> ProductMetadata:
        """Raises LLMError or JSONExtractionError; callers record the failure."""
        prompt = build_prompt(
            product.name or "",
            product.description or "",
            product.category or "",
            self.description_max_chars,
        )
        raw = await self.llm.complete(
            system=SYSTEM_PROMPT,
            user=prompt,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            json_mode=True,
        )
        try:
            return normalize_metadata(extract_json_object(raw))
        except JSONExtractionError:
            logger.warning(f"Unparseable metadata for product {product.id}: {raw[:300]}")
            raise
