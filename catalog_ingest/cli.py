"""Flask CLI commands for admin operations."""
import click


def _parse_meta(pairs):
    metadata = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected key=value, got {pair!r}")
        key, value = pair.split("=", 1)
        metadata[key.strip()] = value.strip()
    return metadata


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        from catalog_ingest.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed a demo product with Red and Blue colours (idempotent)."""
        from catalog_ingest.models.product import Product
        from catalog_ingest.services.product_service import create_product

        if Product.query.first():
            click.echo("Products already exist — skipping demo seed.")
            return

        create_product("123", ["Red", "Blue"], title="Demo Shirt")
        click.echo("Seeded product 123 with colours Red, Blue.")

    @app.cli.command("ingest")
    @click.argument("storage_key")
    @click.option(
        "--meta",
        multiple=True,
        help="Metadata as key=value; read from the object when omitted.",
    )
    def ingest(storage_key, meta):
        """Run ingestion for an existing object (manual replay)."""
        from flask import current_app
        from catalog_ingest.services.storage_service import StorageGateway
        from catalog_ingest.workers.ingest_object import ingest_object

        storage = StorageGateway.from_app(current_app)
        metadata = _parse_meta(meta) if meta else storage.get_metadata(storage_key)
        result = ingest_object(storage_key, metadata, storage=storage)
        click.echo(f"{storage_key}: {result.status} {result.reason}".rstrip())
        if result.dead_letter_path:
            click.echo(f"Dead-lettered to {result.dead_letter_path}")
        for tier, url in result.sizes.items():
            click.echo(f"  {tier}: {url}")

    @app.cli.command("stats")
    def stats():
        """Show ingestion statistics."""
        from catalog_ingest.services.product_service import get_stats

        s = get_stats()
        for key, count in s.items():
            click.echo(f"{key}: {count}")
