from enum import Enum

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

MAX_KEYWORDS = 15
MAX_BEST_FOR = 5

_CAMEL = {"alias_generator": to_camel, "populate_by_name": True}


class Season(str, Enum):
    SUMMER = "SUMMER"
    WINTER = "WINTER"
    ALL_SEASON = "ALL_SEASON"


class BestFor(str, Enum):
    DATE = "DATE"
    CASUAL = "CASUAL"
    OFFICIAL_PURPOSE = "OFFICIAL_PURPOSE"
    FESTIVE = "FESTIVE"
    PARTY = "PARTY"


class ProductMetadata(BaseModel):
    keywords: list[str] = Field(default_factory=list, max_length=MAX_KEYWORDS)
    season: Season = Season.ALL_SEASON
    best_for: list[BestFor] = Field(
        default_factory=lambda: [BestFor.CASUAL], min_length=1, max_length=MAX_BEST_FOR
    )

    model_config = {**_CAMEL, "use_enum_values": True}


class EnrichRequest(BaseModel):
    batch_size: int | None = Field(default=None, ge=1)
    dry_run: bool = False
    product_id: str | None = None
    skip: int = Field(default=0, ge=0)
    limit: int | None = Field(default=None, ge=1)

    model_config = _CAMEL


class ProductError(BaseModel):
    product_id: str
    product_name: str | None = None
    error: str

    model_config = _CAMEL


class TaggedProduct(BaseModel):
    id: str
    name: str | None = None
    keywords: list[str]
    season: Season
    best_for: list[BestFor]

    model_config = {**_CAMEL, "use_enum_values": True}


class SingleProductResults(BaseModel):
    products: list[TaggedProduct] = Field(default_factory=list)
    errors: list[ProductError] = Field(default_factory=list)

    model_config = _CAMEL


class EnrichmentResults(BaseModel):
    total: int
    window_size: int
    skip: int
    limit: int | None
    batch_size: int
    processed: int = 0
    updated: int = 0
    errors: list[ProductError] = Field(default_factory=list)
    dry_run: bool
    partial: bool = False
    next_batch_start: int | None = None
    elapsed_seconds: float = 0.0

    model_config = _CAMEL

    @property
    def attempted(self) -> int:
        return self.processed + len(self.errors)
