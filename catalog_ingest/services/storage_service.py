import logging
import boto3
from botocore.config import Config as BotoConfig
from flask import current_app

logger = logging.getLogger(__name__)

IMMUTABLE_CACHE_CONTROL = "public, max-age=31536000, immutable"


def _get_client(config):
    return boto3.client(
        "s3",
        endpoint_url=config["STORAGE_ENDPOINT_URL"] or None,
        aws_access_key_id=config["STORAGE_ACCESS_KEY"] or None,
        aws_secret_access_key=config["STORAGE_SECRET_KEY"] or None,
        region_name=config["REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


class StorageGateway:
    """Object operations against the ingest bucket.

    Every call is a single request; nothing here retries. Callers treat
    any exception as terminal for the event being handled.
    """

    def __init__(self, client, bucket, public_base_url):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_app(cls, app=None):
        config = (app or current_app).config
        return cls(
            _get_client(config),
            config["BUCKET_NAME"],
            config["STORAGE_PUBLIC_URL"],
        )

    def public_url(self, storage_key):
        """Return the public URL for a storage key."""
        return f"{self.public_base_url}/{storage_key}"

    def download(self, storage_key, local_path):
        """Download an object to a local file and return the path."""
        self.client.download_file(self.bucket, storage_key, str(local_path))
        return local_path

    def upload(self, local_path, storage_key, cache_control=None, metadata=None,
               content_type="image/jpeg"):
        """Upload a local file and return its public URL."""
        extra = {"ContentType": content_type}
        if cache_control:
            extra["CacheControl"] = cache_control
        if metadata:
            extra["Metadata"] = {k: str(v) for k, v in metadata.items()}
        self.client.upload_file(
            str(local_path), self.bucket, storage_key, ExtraArgs=extra
        )
        return self.public_url(storage_key)

    def get_metadata(self, storage_key):
        """Return the custom metadata of an object."""
        response = self.client.head_object(Bucket=self.bucket, Key=storage_key)
        return response.get("Metadata", {})

    def set_metadata(self, storage_key, metadata):
        """Merge custom metadata into an object (self-copy with REPLACE)."""
        head = self.client.head_object(Bucket=self.bucket, Key=storage_key)
        merged = dict(head.get("Metadata", {}))
        merged.update({k: str(v) for k, v in metadata.items()})
        kwargs = {
            "Bucket": self.bucket,
            "Key": storage_key,
            "CopySource": {"Bucket": self.bucket, "Key": storage_key},
            "Metadata": merged,
            "MetadataDirective": "REPLACE",
        }
        if head.get("ContentType"):
            kwargs["ContentType"] = head["ContentType"]
        if head.get("CacheControl"):
            kwargs["CacheControl"] = head["CacheControl"]
        self.client.copy_object(**kwargs)

    def move(self, storage_key, new_storage_key):
        """Copy an object to a new key, keeping its metadata, then delete it."""
        self.client.copy_object(
            Bucket=self.bucket,
            Key=new_storage_key,
            CopySource={"Bucket": self.bucket, "Key": storage_key},
            MetadataDirective="COPY",
        )
        self.client.delete_object(Bucket=self.bucket, Key=storage_key)

    def delete(self, storage_key):
        """Delete an object."""
        self.client.delete_object(Bucket=self.bucket, Key=storage_key)
