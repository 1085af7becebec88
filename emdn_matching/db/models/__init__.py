"""Database models for recategorization and price matching."""
from emdn_matching.db.models.category import Category
from emdn_matching.db.models.product import Product
from emdn_matching.db.models.reference_price import ReferencePrice
from emdn_matching.db.models.product_price_match import ProductPriceMatch

__all__ = [
    "Category",
    "Product",
    "ReferencePrice",
    "ProductPriceMatch",
]
