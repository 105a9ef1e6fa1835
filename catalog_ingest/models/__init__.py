from catalog_ingest.models.product import Product
from catalog_ingest.models.color import ProductColor
from catalog_ingest.models.image import ProductImage

__all__ = ["Product", "ProductColor", "ProductImage"]
