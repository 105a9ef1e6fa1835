"""Ingestion of one finalized upload into the product catalog.

Flow for a single event::

    validate -> (skip | reject -> dead-letter)
             -> download -> resize + upload per tier -> delete original
             -> append image record

Any failure after validation sends the original object to the dead-letter
namespace. ``IngestionWorkflow.handle`` never raises; the outcome is
returned and logged.
"""
import logging
import os
import posixpath
import tempfile
from dataclasses import dataclass, field
from typing import Dict, Optional

from catalog_ingest.errors import ProcessingError, ValidationError
from catalog_ingest.services import image_service, metadata as metadata_service
from catalog_ingest.services import product_service
from catalog_ingest.services.dead_letter import DeadLetterRouter
from catalog_ingest.services.metadata import PROCESSED_KEY
from catalog_ingest.services.storage_service import IMMUTABLE_CACHE_CONTROL

logger = logging.getLogger(__name__)

COMPLETED = "completed"
SKIPPED = "skipped"
QUARANTINED = "quarantined"


@dataclass
class StorageEvent:
    """A finalized object as delivered by the storage trigger."""

    name: str
    metadata: Dict[str, str] = field(default_factory=dict)
    size: Optional[int] = None

    @classmethod
    def from_dict(cls, data):
        size = data.get("size")
        return cls(
            name=data["name"],
            metadata=dict(data.get("metadata") or {}),
            size=int(size) if size not in (None, "") else None,
        )


@dataclass
class IngestionResult:
    status: str
    reason: str = ""
    sizes: Dict[str, str] = field(default_factory=dict)
    is_default: Optional[bool] = None
    dead_letter_path: Optional[str] = None


def output_key(product_id, color, filename, prefix="products/"):
    return f"{prefix}{product_id}/{color}/{filename}"


class IngestionWorkflow:
    def __init__(self, storage, router=None, processed_prefix="products/",
                 dead_letter_prefix="dead-letter/", tiers=image_service.IMAGE_TIERS,
                 tmp_dir=None):
        self.storage = storage
        self.router = router or DeadLetterRouter(storage, dead_letter_prefix)
        self.processed_prefix = processed_prefix
        self.dead_letter_prefix = dead_letter_prefix
        self.tiers = tiers
        self.tmp_dir = tmp_dir

    @classmethod
    def from_app(cls, app, storage=None):
        from catalog_ingest.services.storage_service import StorageGateway

        storage = storage or StorageGateway.from_app(app)
        return cls(
            storage,
            processed_prefix=app.config["PROCESSED_PREFIX"],
            dead_letter_prefix=app.config["DEAD_LETTER_PREFIX"],
        )

    def handle(self, event):
        """Process one finalize event and return an ``IngestionResult``."""
        if not event.name:
            return IngestionResult(SKIPPED, reason="event without object name")
        logger.info("Received %s (%s bytes) metadata=%s",
                    event.name, event.size, event.metadata)

        try:
            decision = metadata_service.validate(
                event.name,
                event.metadata,
                self.processed_prefix,
                self.dead_letter_prefix,
            )
        except ValidationError as e:
            logger.warning("Rejected %s: %s", event.name, e.reason)
            return self._quarantine(event.name, e.reason)
        except Exception as e:
            logger.exception("Validation of %s failed", event.name)
            return self._quarantine(event.name, f"validation failed: {e}")

        if not decision.accepted:
            logger.info("Skipping %s: %s", event.name, decision.reason)
            return IngestionResult(SKIPPED, reason=decision.reason)

        target = decision.target
        logger.info("Processing %s for productId=%s, color=%s",
                    event.name, target.product_id, target.color)
        try:
            return self._process(event.name, target)
        except Exception as e:
            logger.exception("Processing failed for %s", event.name)
            return self._quarantine(event.name, str(e))

    def _process(self, storage_key, target):
        file_name = posixpath.basename(storage_key)
        with tempfile.TemporaryDirectory(dir=self.tmp_dir) as workdir:
            local_input = os.path.join(workdir, file_name)
            try:
                self.storage.download(storage_key, local_input)
            except Exception as e:
                raise ProcessingError(f"download of {storage_key} failed: {e}") from e

            sizes = self._publish_variants(local_input, workdir, file_name, target)
            os.remove(local_input)

        try:
            self.storage.delete(storage_key)
        except Exception as e:
            raise ProcessingError(f"deleting {storage_key} failed: {e}") from e
        logger.info("Deleted original %s", storage_key)

        try:
            image = product_service.append_image(
                target.product_id, target.color, file_name, sizes
            )
        except Exception as e:
            raise ProcessingError(f"recording image failed: {e}") from e

        logger.info("Processed %s -> %s (%s) default=%s",
                    file_name, target.product_id, target.color, image.is_default)
        return IngestionResult(COMPLETED, sizes=sizes, is_default=image.is_default)

    def _publish_variants(self, local_input, workdir, file_name, target):
        sizes = {}
        variants = image_service.iter_variants(
            local_input, workdir, file_name, tiers=self.tiers
        )
        while True:
            try:
                tier, width, path = next(variants)
            except StopIteration:
                break
            except Exception as e:
                raise ProcessingError(f"resize of {file_name} failed: {e}") from e

            key = output_key(target.product_id, target.color,
                             os.path.basename(path), self.processed_prefix)
            try:
                sizes[tier] = self.storage.upload(
                    path,
                    key,
                    cache_control=IMMUTABLE_CACHE_CONTROL,
                    metadata={PROCESSED_KEY: "true"},
                )
            except Exception as e:
                raise ProcessingError(f"upload of {key} failed: {e}") from e
            finally:
                os.remove(path)
            logger.info("Uploaded %s variant %s", tier, key)
        return sizes

    def _quarantine(self, storage_key, reason):
        destination = self.router.quarantine(storage_key)
        return IngestionResult(QUARANTINED, reason=reason, dead_letter_path=destination)
