"""Tests for upload metadata validation."""
import pytest
from catalog_ingest.errors import ValidationError
from catalog_ingest.models.product import Product
from catalog_ingest.services.metadata import (
    UploadTarget,
    normalize_metadata,
    skip_reason,
    validate,
)


@pytest.mark.parametrize(
    "metadata",
    [
        {"productId": "123", "color": "Red"},
        {"productid": "123", "Color": "Red"},
        {"PRODUCTID": " 123 ", "color": "Red"},
    ],
)
def test_normalize_metadata_key_variants(metadata):
    assert normalize_metadata(metadata) == UploadTarget("123", "Red")


@pytest.mark.parametrize(
    "metadata",
    [None, {}, {"productId": "123"}, {"color": "Red"}, {"productId": "", "color": "Red"}],
)
def test_normalize_metadata_incomplete(metadata):
    assert normalize_metadata(metadata) is None


def test_skip_reasons():
    assert skip_reason("products/123/Red/shirt_200.jpg", {}) == "derived object"
    assert skip_reason("uploads/products/x.jpg", {}) == "derived object"
    assert skip_reason("dead-letter/123_shirt.webp", {}) == "dead-lettered object"
    assert skip_reason("raw/shirt.webp", {"status": "dead-letter"}) == "already dead-lettered"
    assert skip_reason("raw/shirt.webp", {"processed": "true"}) == "already processed"
    assert skip_reason("raw/shirt.webp", {"productId": "123"}) is None


def test_validate_skips_before_touching_database():
    decision = validate("raw/shirt.webp", {"processed": "true"})
    assert not decision.accepted
    assert decision.reason == "already processed"


def test_validate_rejects_missing_metadata(db):
    with pytest.raises(ValidationError) as exc:
        validate("raw/shirt.webp", {"productId": "123"})
    assert "missing" in exc.value.reason


def test_validate_rejects_unknown_color(product):
    with pytest.raises(ValidationError):
        validate("raw/shirt.webp", {"productId": "123", "color": "Blue"})


def test_validate_color_match_is_case_sensitive(product):
    with pytest.raises(ValidationError):
        validate("raw/shirt.webp", {"productId": "123", "color": "red"})


def test_validate_rejects_unknown_product(product):
    with pytest.raises(ValidationError):
        validate("raw/shirt.webp", {"productId": "999", "color": "Red"})


def test_validate_accepts_and_marks_upload(db, product):
    decision = validate("raw/shirt.webp", {"productid": "123", "Color": "Red"})

    assert decision.accepted
    assert decision.target == UploadTarget("123", "Red")
    stored = Product.query.filter_by(product_id="123").one()
    assert stored.color("Red").has_uploaded_image is True
    assert stored.color("Green").has_uploaded_image is False
