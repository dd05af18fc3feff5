"""Context extractor — uses the completion API to pull trip/occasion context out of a search query."""

import logging
from collections.abc import Callable
from datetime import date

from pydantic import ValidationError

from app.schemas.context import SearchContext
from app.services.cache_service import TTL_SEARCH_CONTEXT, CacheService
from app.services.json_extract import JSONExtractionError, extract_json_object
from app.services.llm_client import LLMClient, LLMError

logger = logging.getLogger(__name__)

MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]

SYSTEM_PROMPT = (
    "You are a helpful assistant that extracts contextual information from user queries. "
    "Always respond with valid JSON only."
)

USER_PROMPT = """You are a helpful shopping assistant. Analyze the following user search query and extract contextual information.

User Query: "{query}"

Current Date: {month_name} {year}

Extract the following information from the query:
1. Destination (if mentioned): e.g., "New York", "Paris", "Mumbai"
2. Occasion type: "trip", "wedding", "event", "party", "vacation", etc.
3. Time period: Determine if the user is planning for:
   - Current month (this month)
   - Next 2 months
   - Next 3 months
   - Specific months mentioned
4. Season: If time period suggests a season, identify it (winter, spring, summer, fall)
5. Specific months: If months are mentioned, list them as numbers (1-12)

IMPORTANT: If the user mentions a trip or travel, assume they need items for that time period.
If no specific time is mentioned but a destination is given, suggest items suitable for the next 2-3 months.

Respond ONLY with a valid JSON object in this exact format:
{{
  "destination": "destination name or null",
  "occasion": "occasion type or null",
  "timePeriod": "currentMonth" | "nextTwoMonths" | "nextThreeMonths" | "nextSixMonths" | "specificMonths" | null,
  "season": "winter" | "spring" | "summer" | "fall" | null,
  "specificMonths": [1, 2, 3] or null,
  "contextExplanation": "Human-readable explanation like 'Showing results for your trip to New York in the next 2 months'"
}}

If information cannot be determined, use null. Be concise and accurate."""


def build_prompt(query: str, today: date) -> str:
    return USER_PROMPT.format(
        query=query,
        month_name=MONTH_NAMES[today.month - 1],
        year=today.year,
    )


class ContextExtractor:
    """Turns a free-text search query into a SearchContext, never failing hard."""

    def __init__(
        self,
        llm: LLMClient,
        cache: CacheService | None = None,
        *,
        temperature: float = 0.3,
        max_tokens: int = 300,
        cache_ttl: int = TTL_SEARCH_CONTEXT,
        today: Callable[[], date] = date.today,
    ):
        self.llm = llm
        self.cache = cache
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.cache_ttl = cache_ttl
        self._today = today

    async def extract(self, query: str) -> SearchContext:
        """
        Extract context for a search query.

        Any failure (no key, provider error, unparseable or invalid reply)
        yields SearchContext.fallback(query) so the caller can always answer 200.
        """
        if not self.llm.available:
            logger.warning("No completion API key configured — returning basic context")
            return SearchContext.fallback(query)

        today = self._today()

        if self.cache:
            cached = await self.cache.get_context(query, today.year, today.month)
            if cached:
                try:
                    return SearchContext.model_validate({**cached, "originalQuery": query})
                except ValidationError as e:
                    logger.warning(f"Discarding invalid cached context: {e}")

        raw = ""
        try:
            raw = await self.llm.complete(
                system=SYSTEM_PROMPT,
                user=build_prompt(query, today),
                max_tokens=self.max_tokens,
                temperature=self.temperature,
                json_mode=True,
            )
            parsed = extract_json_object(raw)
            parsed["originalQuery"] = query
            context = SearchContext.model_validate(parsed)
        except LLMError as e:
            logger.warning(f"Context extraction: completion failed: {e}")
            return SearchContext.fallback(query)
        except JSONExtractionError as e:
            logger.warning(f"Context extraction: unparseable reply: {e}\nRaw: {raw[:500]}")
            return SearchContext.fallback(query)
        except ValidationError as e:
            logger.warning(f"Context extraction: reply failed validation: {e}")
            return SearchContext.fallback(query)

        if self.cache and not context.is_fallback:
            await self.cache.set_context(
                query, today.year, today.month,
                context.model_dump(by_alias=True, exclude={"original_query"}),
                ttl=self.cache_ttl,
            )

        return context
