from catalog_ingest.extensions import db


class ProductColor(db.Model):
    __tablename__ = "product_colors"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    value = db.Column(db.String(100), nullable=False)  # "Red"
    has_uploaded_image = db.Column(db.Boolean, nullable=False, default=False)
    sort_order = db.Column(db.Integer, default=0)

    images = db.relationship(
        "ProductImage",
        backref="color",
        lazy="select",
        cascade="all, delete-orphan",
        order_by="(ProductImage.order, ProductImage.id)",
    )

    __table_args__ = (
        db.UniqueConstraint("product_id", "value", name="uq_product_color"),
    )

    def to_dict(self):
        return {
            "value": self.value,
            "hasUploadedImage": bool(self.has_uploaded_image),
            "images": [img.to_dict() for img in self.images],
        }

    def __repr__(self):
        return f"<ProductColor {self.value}>"
