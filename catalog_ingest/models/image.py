from datetime import datetime, timezone
from catalog_ingest.extensions import db


class ProductImage(db.Model):
    __tablename__ = "product_images"

    id = db.Column(db.Integer, primary_key=True)
    # Denormalized from the colour so the default-image index can span colours
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    color_id = db.Column(
        db.Integer,
        db.ForeignKey("product_colors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = db.Column(db.String(512), nullable=False)  # original file base name
    sizes = db.Column(db.JSON, nullable=False, default=dict)  # {"thumbnail": url}
    is_default = db.Column(db.Boolean, nullable=False, default=False)
    order = db.Column(db.Integer, nullable=True)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
    )

    __table_args__ = (
        # At most one default image per product, across all colours
        db.Index(
            "uq_product_default_image",
            "product_id",
            unique=True,
            postgresql_where=db.text("is_default"),
            sqlite_where=db.text("is_default"),
        ),
    )

    def to_dict(self):
        return {
            "name": self.name,
            "sizes": dict(self.sizes or {}),
            "isDefault": bool(self.is_default),
            "order": self.order,
        }

    def __repr__(self):
        return f"<ProductImage {self.name}{' [default]' if self.is_default else ''}>"
