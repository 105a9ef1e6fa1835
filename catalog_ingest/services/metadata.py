"""Decide whether a finalized object should be ingested.

``validate`` returns a :class:`Decision` for objects that are derived,
quarantined or already handled (skip), raises ``ValidationError`` for
uploads whose metadata is missing or matches no product colour, and on
acceptance records that an upload was attempted for the colour.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from catalog_ingest.errors import ValidationError
from catalog_ingest.services import product_service

logger = logging.getLogger(__name__)

STATUS_KEY = "status"
DEAD_LETTER_STATUS = "dead-letter"
PROCESSED_KEY = "processed"

ACCEPT = "accept"
SKIP = "skip"


@dataclass(frozen=True)
class UploadTarget:
    product_id: str
    color: str


@dataclass
class Decision:
    outcome: str
    reason: str = ""
    target: Optional[UploadTarget] = None
    product: object = None

    @property
    def accepted(self):
        return self.outcome == ACCEPT


def _lookup(metadata, key):
    """Case-insensitive metadata lookup; empty strings count as absent."""
    for k, v in metadata.items():
        if k.lower() == key.lower() and v is not None and str(v).strip():
            return str(v).strip()
    return None


def normalize_metadata(metadata):
    """Return an ``UploadTarget`` from upload metadata, or None if incomplete."""
    metadata = metadata or {}
    product_id = _lookup(metadata, "productId")
    color = _lookup(metadata, "color")
    if not product_id or not color:
        return None
    return UploadTarget(product_id=product_id, color=color)


def _under(path, prefix):
    return path.startswith(prefix) or f"/{prefix}" in path


def skip_reason(path, metadata, processed_prefix="products/",
                dead_letter_prefix="dead-letter/"):
    """Return why an object must not be ingested, or None."""
    metadata = metadata or {}
    if _under(path, processed_prefix):
        return "derived object"
    if _under(path, dead_letter_prefix):
        return "dead-lettered object"
    if metadata.get(STATUS_KEY) == DEAD_LETTER_STATUS:
        return "already dead-lettered"
    if metadata.get(PROCESSED_KEY) == "true":
        return "already processed"
    return None


def validate(path, metadata, processed_prefix="products/",
             dead_letter_prefix="dead-letter/"):
    reason = skip_reason(path, metadata, processed_prefix, dead_letter_prefix)
    if reason:
        return Decision(SKIP, reason=reason)

    target = normalize_metadata(metadata)
    if target is None:
        raise ValidationError("missing productId or color metadata")

    product = product_service.find_product_with_color(target.product_id, target.color)
    if product is None:
        raise ValidationError(
            f"no product {target.product_id!r} with color {target.color!r}"
        )

    product_service.mark_color_uploaded(target.product_id, target.color)
    return Decision(ACCEPT, target=target, product=product)
