"""RQ worker job: ingest one finalized upload."""
import logging
from flask import current_app, has_app_context
from catalog_ingest.services.ingestion import IngestionWorkflow, StorageEvent

logger = logging.getLogger(__name__)

_worker_app = None


def _get_app():
    """Return an app instance for worker execution.

    Reuse the current app when already inside an app context (tests/CLI),
    otherwise lazily create the worker app once per process.
    """
    global _worker_app
    if has_app_context():
        return current_app._get_current_object()
    if _worker_app is None:
        from catalog_ingest import create_app

        _worker_app = create_app()
    return _worker_app


def ingest_object(name, metadata=None, size=None, storage=None):
    """Run the ingestion workflow for one object.

    ``storage`` overrides the app's storage gateway (tests, replays).
    Failures are handled inside the workflow; the job itself only fails
    if the app cannot be created.
    """
    app = _get_app()
    with app.app_context():
        workflow = IngestionWorkflow.from_app(app, storage=storage)
        event = StorageEvent(name=name, metadata=dict(metadata or {}), size=size)
        result = workflow.handle(event)
        logger.info("Ingestion of %s finished: %s %s",
                    name, result.status, result.reason)
        return result
