#!/usr/bin/env python3
"""Upload a test image under raw/ with product metadata.

Usage:
    python scripts/upload_test_file.py [path/to/image] [productId] [color]

Reads bucket and storage credentials from environment variables. The
finalize event for the uploaded object triggers ingestion; check
products/<productId>/<color>/ (or dead-letter/) afterwards.
"""
import os
import sys
import boto3
from botocore.config import Config as BotoConfig
from dotenv import load_dotenv

load_dotenv()

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_FILE = os.path.join(PROJECT_ROOT, "test-images", "product-test.webp")


def main():
    bucket = os.environ.get("BUCKET_NAME")
    if not bucket:
        print("Error: BUCKET_NAME not set")
        sys.exit(1)

    file_path = sys.argv[1] if len(sys.argv) > 1 else DEFAULT_FILE
    product_id = sys.argv[2] if len(sys.argv) > 2 else "123"
    color = sys.argv[3] if len(sys.argv) > 3 else "Red"

    if not os.path.isfile(file_path):
        print(f"Error: {file_path} not found")
        sys.exit(1)

    client = boto3.client(
        "s3",
        endpoint_url=os.environ.get(
            "STORAGE_ENDPOINT_URL", "https://storage.googleapis.com"
        ),
        aws_access_key_id=os.environ.get("STORAGE_ACCESS_KEY"),
        aws_secret_access_key=os.environ.get("STORAGE_SECRET_KEY"),
        region_name=os.environ.get("REGION", "auto"),
        config=BotoConfig(signature_version="s3v4"),
    )

    key = f"raw/{os.path.basename(file_path)}"
    print("Uploading test file with metadata...")
    try:
        client.upload_file(
            file_path,
            bucket,
            key,
            ExtraArgs={"Metadata": {"productId": product_id, "color": color}},
        )
    except Exception as e:
        print(f"Upload failed: {e}")
        sys.exit(1)

    print(f"Uploaded gs://{bucket}/{key} (productId={product_id}, color={color})")


if __name__ == "__main__":
    main()
