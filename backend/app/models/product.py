from datetime import datetime

from sqlalchemy import JSON, DateTime, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

JSONType = JSON().with_variant(JSONB, "postgresql")


class ShopProduct(Base):
    __tablename__ = "shop_products"

    id: Mapped[str] = mapped_column(String(128), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(500))
    desc: Mapped[str | None] = mapped_column(Text)
    description: Mapped[str | None] = mapped_column(Text)
    category: Mapped[str | None] = mapped_column(String(200))
    keywords: Mapped[list | None] = mapped_column(JSONType)
    season: Mapped[str | None] = mapped_column(String(20))
    best_for: Mapped[list | None] = mapped_column(JSONType)
    keywords_updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
