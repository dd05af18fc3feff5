from app.models.product import ShopProduct

__all__ = [
    "ShopProduct",
]
