from datetime import datetime, timezone
from catalog_ingest.extensions import db


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    title = db.Column(db.String(255), nullable=False, default="")
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    # Relationships
    colors = db.relationship(
        "ProductColor",
        backref="product",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="(ProductColor.sort_order, ProductColor.id)",
    )

    def color(self, value):
        """Return the colour whose value matches exactly, or None."""
        for c in self.colors:
            if c.value == value:
                return c
        return None

    @property
    def default_image(self):
        for c in self.colors:
            for img in c.images:
                if img.is_default:
                    return img
        return None

    def to_dict(self):
        """Render the persisted record shape with nested colors[].images[]."""
        return {
            "productId": self.product_id,
            "colors": [c.to_dict() for c in self.colors],
        }

    def __repr__(self):
        return f"<Product {self.product_id}>"
