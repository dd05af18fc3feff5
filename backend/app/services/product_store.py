"""Product store — reads catalog products and writes generated metadata back."""

import logging
from dataclasses import dataclass, field

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.models.product import ShopProduct
from app.schemas.enrichment import ProductMetadata

logger = logging.getLogger(__name__)


class ProductNotFoundError(LookupError):
    def __init__(self, product_id: str):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


@dataclass
class ProductRecord:
    id: str
    name: str | None = None
    description: str | None = None
    category: str | None = None
    keywords: list[str] = field(default_factory=list)
    season: str | None = None
    best_for: list[str] = field(default_factory=list)

    @classmethod
    def from_row(cls, row: ShopProduct) -> "ProductRecord":
        return cls(
            id=row.id,
            name=row.name,
            # Older catalog rows only carry the short `desc` field
            description=row.desc or row.description,
            category=row.category,
            keywords=list(row.keywords or []),
            season=row.season,
            best_for=list(row.best_for or []),
        )


class ProductStore:
    """SQLAlchemy-backed access to the shop_products collection."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def list_products(self) -> list[ProductRecord]:
        """Full collection, ordered by id so offsets stay stable between calls."""
        async with self._session_factory() as db:
            result = await db.execute(select(ShopProduct).order_by(ShopProduct.id))
            return [ProductRecord.from_row(row) for row in result.scalars().all()]

    async def get_product(self, product_id: str) -> ProductRecord | None:
        async with self._session_factory() as db:
            row = await db.get(ShopProduct, product_id)
            return ProductRecord.from_row(row) if row else None

    async def update_metadata(self, product_id: str, metadata: ProductMetadata) -> None:
        """Single-row update; keywords_updated_at is assigned by the database."""
        async with self._session_factory() as db:
            result = await db.execute(
                update(ShopProduct)
                .where(ShopProduct.id == product_id)
                .values(
                    keywords=metadata.keywords,
                    season=metadata.season,
                    best_for=metadata.best_for,
                    keywords_updated_at=func.now(),
                )
            )
            if result.rowcount == 0:
                await db.rollback()
                raise ProductNotFoundError(product_id)
            await db.commit()
        logger.debug(f"Updated metadata for product {product_id}")
