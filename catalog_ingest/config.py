import os


class Config:
    """Base configuration. All values from env vars."""

    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "")
    # Fix Heroku/Railway postgres:// → postgresql://
    if SQLALCHEMY_DATABASE_URI.startswith("postgres://"):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace(
            "postgres://", "postgresql://", 1
        )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
    }

    REDIS_URL = os.environ.get("REDIS_URL", "")

    # Object storage (S3-compatible XML API, HMAC interoperability keys)
    BUCKET_NAME = os.environ.get("BUCKET_NAME", "")
    REGION = os.environ.get("REGION", "")
    STORAGE_ENDPOINT_URL = os.environ.get(
        "STORAGE_ENDPOINT_URL", "https://storage.googleapis.com"
    )
    STORAGE_ACCESS_KEY = os.environ.get("STORAGE_ACCESS_KEY", "")
    STORAGE_SECRET_KEY = os.environ.get("STORAGE_SECRET_KEY", "")
    STORAGE_PUBLIC_URL = os.environ.get("STORAGE_PUBLIC_URL", "")

    # Ingestion
    PROCESSED_PREFIX = "products/"
    DEAD_LETTER_PREFIX = "dead-letter/"
    INGEST_TIMEOUT_SECONDS = int(os.environ.get("INGEST_TIMEOUT_SECONDS", "300"))

    REQUIRED_SETTINGS = ("SQLALCHEMY_DATABASE_URI", "BUCKET_NAME", "REGION")

    @classmethod
    def init_app(cls, app):
        missing = [key for key in cls.REQUIRED_SETTINGS if not app.config.get(key)]
        if missing:
            raise RuntimeError(
                "Missing required configuration: " + ", ".join(missing)
            )
        if not app.config["STORAGE_PUBLIC_URL"]:
            app.config["STORAGE_PUBLIC_URL"] = (
                f"https://storage.googleapis.com/{app.config['BUCKET_NAME']}"
            )


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_ENGINE_OPTIONS = {}


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_ECHO = False

    @classmethod
    def init_app(cls, app):
        import logging
        import sys

        super().init_app(app)

        # Stream logs to stdout for the platform log collector
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        app.logger.setLevel(logging.INFO)
        logging.getLogger("catalog_ingest").addHandler(handler)
        logging.getLogger("catalog_ingest").setLevel(logging.INFO)
        app.logger.info(
            "Catalog ingest listening to bucket %s", app.config["BUCKET_NAME"]
        )


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    REDIS_URL = ""
    BUCKET_NAME = "test-bucket"
    REGION = "europe-west1"
    STORAGE_PUBLIC_URL = ""


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
