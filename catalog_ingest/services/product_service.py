import logging
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from catalog_ingest.extensions import db
from catalog_ingest.models.product import Product
from catalog_ingest.models.color import ProductColor
from catalog_ingest.models.image import ProductImage

logger = logging.getLogger(__name__)


def find_product_with_color(product_id, color):
    """Return the product owning a colour whose value equals ``color``.

    The colour match is exact and case-sensitive. Returns None when no
    product has that id or the product has no such colour.
    """
    return (
        Product.query.join(ProductColor)
        .filter(Product.product_id == product_id, ProductColor.value == color)
        .first()
    )


def _color_query(product_id, color):
    return ProductColor.query.join(Product).filter(
        Product.product_id == product_id, ProductColor.value == color
    )


def mark_color_uploaded(product_id, color):
    """Set ``has_uploaded_image`` on the matched colour and commit.

    Returns the number of colours updated (0 or 1).
    """
    updated = 0
    for product_color in _color_query(product_id, color).all():
        product_color.has_uploaded_image = True
        updated += 1
    db.session.commit()
    return updated


def _claim_default(image):
    """Flag ``image`` as the product default if it is the first image of its
    colour and no image of the product is default yet.

    A single conditional UPDATE inside a savepoint. The partial unique index
    on ``(product_id) WHERE is_default`` rejects a concurrent second claim,
    which leaves this image non-default.
    """
    other = aliased(ProductImage)
    others = db.session.query(other.id).filter(
        other.product_id == image.product_id,
        other.is_default.is_(True),
    )
    sibling = aliased(ProductImage)
    siblings = db.session.query(sibling.id).filter(
        sibling.color_id == image.color_id,
        sibling.id != image.id,
    )
    try:
        with db.session.begin_nested():
            claimed = (
                ProductImage.query.filter(
                    ProductImage.id == image.id,
                    ~others.exists(),
                    ~siblings.exists(),
                )
                .update({"is_default": True}, synchronize_session=False)
            )
    except IntegrityError:
        logger.info(
            "Default image for product %s claimed concurrently", image.product_id
        )
        claimed = 0
    db.session.refresh(image)
    return bool(claimed)


def append_image(product_id, color, name, sizes):
    """Append an image to the matched colour and commit.

    The new image is ordered after the colour's existing images. It becomes
    the product default only if it is the colour's first image and no image
    of the product is default yet.
    Returns the stored ``ProductImage``; raises ``LookupError`` when the
    product colour no longer exists.
    """
    product_color = _color_query(product_id, color).first()
    if product_color is None:
        raise LookupError(f"Colour {color!r} not found on product {product_id!r}")

    position = ProductImage.query.filter_by(color_id=product_color.id).count()
    image = ProductImage(
        product_id=product_color.product_id,
        color_id=product_color.id,
        name=name,
        sizes=dict(sizes),
        is_default=False,
        order=position,
    )
    db.session.add(image)
    db.session.flush()

    _claim_default(image)
    db.session.commit()
    return image


def get_product_document(product_id):
    """Return the product record as a dict, or None."""
    product = Product.query.filter_by(product_id=product_id).first()
    return product.to_dict() if product else None


def create_product(product_id, colors, title=""):
    """Create a product with the given colour values (used for seeding)."""
    product = Product(product_id=product_id, title=title)
    for i, value in enumerate(colors):
        product.colors.append(ProductColor(value=value, sort_order=i))
    db.session.add(product)
    db.session.commit()
    return product


def get_stats():
    """Counts of products, colours that received an upload, and images."""
    return {
        "products": Product.query.count(),
        "colors_with_uploads": ProductColor.query.filter_by(
            has_uploaded_image=True
        ).count(),
        "images": ProductImage.query.count(),
        "default_images": ProductImage.query.filter_by(is_default=True).count(),
    }
