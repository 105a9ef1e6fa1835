"""Tests for admin CLI commands."""
from unittest.mock import patch
from catalog_ingest.services import product_service
from catalog_ingest.services.storage_service import StorageGateway


def test_seed_demo_is_idempotent(app, db):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["seed-demo"])
    second = runner.invoke(args=["seed-demo"])

    assert "Seeded product 123" in first.output
    assert "skipping" in second.output
    doc = product_service.get_product_document("123")
    assert [c["value"] for c in doc["colors"]] == ["Red", "Blue"]


def test_stats(app, product):
    result = app.test_cli_runner().invoke(args=["stats"])
    assert "products: 1" in result.output
    assert "images: 0" in result.output


def test_ingest_replays_object(app, product, storage, make_image):
    storage.put("raw/shirt.webp", make_image(), {"productid": "123", "color": "Red"})

    with patch.object(StorageGateway, "from_app", return_value=storage):
        result = app.test_cli_runner().invoke(args=["ingest", "raw/shirt.webp"])

    assert result.exit_code == 0, result.output
    assert "raw/shirt.webp: completed" in result.output
    assert "thumbnail: https://storage.googleapis.com/test-bucket/" in result.output


def test_ingest_with_explicit_metadata(app, product, storage, make_image):
    storage.put("raw/shirt.webp", make_image(), {})

    with patch.object(StorageGateway, "from_app", return_value=storage):
        result = app.test_cli_runner().invoke(
            args=["ingest", "raw/shirt.webp", "--meta", "productId=123", "--meta", "color=Blue"]
        )

    assert "quarantined" in result.output
    assert "Dead-lettered to dead-letter/" in result.output
