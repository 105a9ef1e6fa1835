"""Tests for the dead-letter router."""
import random
import re
from unittest.mock import MagicMock
from catalog_ingest.services.dead_letter import DeadLetterRouter, dead_letter_path


def test_dead_letter_path_format():
    path = dead_letter_path("raw/shirt.webp", rng=random.Random(7))
    assert re.fullmatch(r"dead-letter/[1-9]\d{2}_shirt\.webp", path)


def test_dead_letter_path_number_range():
    rng = MagicMock()
    rng.randint.return_value = 100
    assert dead_letter_path("a/b/c.png", rng=rng) == "dead-letter/100_c.png"
    rng.randint.assert_called_once_with(100, 999)


def test_quarantine_tags_then_moves(storage):
    storage.put("raw/shirt.webp", b"data", {"productId": "123"})

    destination = DeadLetterRouter(storage).quarantine("raw/shirt.webp")

    assert destination.startswith("dead-letter/")
    assert "raw/shirt.webp" not in storage.objects
    assert storage.objects[destination]["metadata"]["status"] == "dead-letter"
    assert storage.calls == ["set_metadata", "move"]


def test_quarantine_moves_even_if_tagging_fails(storage):
    storage.put("raw/shirt.webp", b"data")
    storage.fail_on["set_metadata"] = PermissionError("denied")

    destination = DeadLetterRouter(storage).quarantine("raw/shirt.webp")

    assert destination in storage.objects


def test_quarantine_never_raises(storage):
    storage.fail_on["set_metadata"] = ConnectionError("network down")
    storage.fail_on["move"] = ConnectionError("network down")

    assert DeadLetterRouter(storage).quarantine("raw/missing.webp") is None
