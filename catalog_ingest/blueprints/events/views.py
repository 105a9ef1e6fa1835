import logging
from cloudevents.exceptions import GenericException
from cloudevents.http import from_http
from flask import request, current_app
from catalog_ingest.blueprints.events import events_bp
from catalog_ingest import extensions
from catalog_ingest.workers.ingest_object import ingest_object

logger = logging.getLogger(__name__)

FINALIZED_EVENT_TYPE = "google.cloud.storage.object.v1.finalized"


@events_bp.route("/storage", methods=["POST"])
def storage_event():
    """Object-finalize trigger endpoint (CloudEvents over HTTP).

    The object is handed to the ingest queue and the delivery is always
    acknowledged once parsed: processing failures are dead-lettered by the
    job, never reported back to the event source.
    """
    try:
        event = from_http(request.headers, request.get_data())
    except GenericException as e:
        logger.warning("Rejected malformed event: %s", e)
        return "", 400

    if event["type"] != FINALIZED_EVENT_TYPE:
        logger.info("Ignoring event type %s", event["type"])
        return "", 204

    data = event.data
    if not isinstance(data, dict) or not data.get("name"):
        logger.warning("Finalize event %s without object name", event["id"])
        return "", 400

    bucket = data.get("bucket")
    expected_bucket = current_app.config["BUCKET_NAME"]
    if bucket and bucket != expected_bucket:
        logger.info("Ignoring object from bucket %s", bucket)
        return "", 204

    try:
        extensions.task_queue.enqueue(
            ingest_object,
            data["name"],
            data.get("metadata") or {},
            data.get("size"),
            job_timeout=current_app.config["INGEST_TIMEOUT_SECONDS"],
        )
    except Exception:
        logger.exception("Could not enqueue %s", data["name"])
        return "", 503  # let the event source redeliver

    return "", 202
