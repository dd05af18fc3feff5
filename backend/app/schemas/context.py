from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

TimePeriod = Literal[
    "currentMonth",
    "nextTwoMonths",
    "nextThreeMonths",
    "nextSixMonths",
    "specificMonths",
]
ContextSeason = Literal["winter", "spring", "summer", "fall"]

TIME_PERIODS: tuple[str, ...] = TimePeriod.__args__
CONTEXT_SEASONS: tuple[str, ...] = ContextSeason.__args__

_SEASON_ALIASES = {"autumn": "fall"}
_NULL_STRINGS = {"", "null", "none", "n/a", "unknown"}

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


def fallback_explanation(query: str) -> str:
    return f"Showing results for: {query}"


class ContextRequest(BaseModel):
    query: Any = Field(default=None, validate_default=True)

    @field_validator("query")
    @classmethod
    def _require_text(cls, v: Any) -> str:
        if not isinstance(v, str) or not v.strip():
            raise ValueError("Query is required")
        return v


class SearchContext(BaseModel):
    """Trip/occasion context extracted from a shopper's search query."""

    destination: str | None = None
    occasion: str | None = None
    time_period: TimePeriod | None = None
    season: ContextSeason | None = None
    specific_months: list[int] | None = None
    original_query: str
    context_explanation: str = ""

    model_config = _CAMEL

    @field_validator("destination", "occasion", mode="before")
    @classmethod
    def _blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return None if v.lower() in _NULL_STRINGS else v
        return v

    @field_validator("time_period", mode="before")
    @classmethod
    def _known_time_period(cls, v: Any) -> str | None:
        if not isinstance(v, str):
            return None
        return v if v in TIME_PERIODS else None

    @field_validator("season", mode="before")
    @classmethod
    def _known_season(cls, v: Any) -> str | None:
        if not isinstance(v, str):
            return None
        v = v.strip().lower()
        v = _SEASON_ALIASES.get(v, v)
        return v if v in CONTEXT_SEASONS else None

    @field_validator("specific_months", mode="before")
    @classmethod
    def _valid_months(cls, v: Any) -> list[int] | None:
        if not isinstance(v, list):
            return None
        months = []
        for m in v:
            if isinstance(m, bool):
                continue
            if isinstance(m, str) and m.strip().isdigit():
                m = int(m.strip())
            if isinstance(m, int) and 1 <= m <= 12 and m not in months:
                months.append(m)
        return months or None

    @field_validator("context_explanation", mode="before")
    @classmethod
    def _explanation_text(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    def model_post_init(self, __context: Any) -> None:
        if not self.context_explanation:
            self.context_explanation = fallback_explanation(self.original_query)

    @classmethod
    def fallback(cls, query: str) -> "SearchContext":
        """Degraded context: only the query and a generic explanation."""
        return cls(original_query=query, context_explanation=fallback_explanation(query))

    @property
    def is_fallback(self) -> bool:
        return (
            self.destination is None
            and self.occasion is None
            and self.time_period is None
            and self.season is None
            and self.specific_months is None
        )
