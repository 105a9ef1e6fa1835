from flask import Blueprint

events_bp = Blueprint("events", __name__)

from catalog_ingest.blueprints.events import views  # noqa: F401, E402
