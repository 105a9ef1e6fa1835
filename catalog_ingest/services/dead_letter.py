import logging
import posixpath
import random

from catalog_ingest.errors import QuarantineError
from catalog_ingest.services.metadata import STATUS_KEY, DEAD_LETTER_STATUS

logger = logging.getLogger(__name__)


def dead_letter_path(storage_key, prefix="dead-letter/", rng=random):
    """Return ``<prefix><nnn>_<baseName>`` with a random 3-digit number."""
    number = rng.randint(100, 999)
    return f"{prefix}{number}_{posixpath.basename(storage_key)}"


class DeadLetterRouter:
    """Tags a failed object and moves it into the dead-letter namespace.

    ``quarantine`` never raises: each step is attempted on its own and a
    failure is logged, so the error that caused the quarantine stays the
    one reported.
    """

    def __init__(self, storage, prefix="dead-letter/", rng=random):
        self.storage = storage
        self.prefix = prefix
        self.rng = rng

    def _step(self, description, func, *args):
        try:
            func(*args)
        except Exception as exc:
            error = QuarantineError(f"{description} failed: {exc}")
            logger.error("Dead-letter step failed: %s", error, exc_info=exc)
            return False
        return True

    def quarantine(self, storage_key):
        """Move ``storage_key`` to the dead-letter namespace.

        Returns the destination key, or None if the object was not moved.
        """
        destination = dead_letter_path(storage_key, self.prefix, self.rng)
        self._step(
            f"tagging {storage_key}",
            self.storage.set_metadata,
            storage_key,
            {STATUS_KEY: DEAD_LETTER_STATUS},
        )
        moved = self._step(
            f"moving {storage_key} to {destination}",
            self.storage.move,
            storage_key,
            destination,
        )
        if not moved:
            return None
        logger.warning("Moved to dead-letter: %s -> %s", storage_key, destination)
        return destination
