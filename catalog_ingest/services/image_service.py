import os
from PIL import Image as PILImage


# (tier, max edge in px), processed in this order
IMAGE_TIERS = (
    ("thumbnail", 200),
    ("medium", 800),
    ("large", 1500),
)
JPEG_QUALITY = 85
VARIANT_EXTENSION = "jpg"


def variant_filename(original_name, width):
    """Return ``<stem>_<width>.jpg`` for an original file name."""
    stem = os.path.splitext(os.path.basename(original_name))[0]
    return f"{stem}_{width}.{VARIANT_EXTENSION}"


def create_variant(source_path, output_path, max_edge):
    """Resize to fit inside ``max_edge`` x ``max_edge`` and write a JPEG.

    Pillow's ``thumbnail`` keeps the aspect ratio and never enlarges, so an
    image already smaller than the bound keeps its dimensions.
    """
    with PILImage.open(source_path) as img:
        img.load()
        if img.mode != "RGB":
            img = img.convert("RGB")
        img.thumbnail((max_edge, max_edge), PILImage.LANCZOS)
        img.save(output_path, format="JPEG", quality=JPEG_QUALITY)
    return output_path


def iter_variants(source_path, output_dir, original_name=None, tiers=IMAGE_TIERS):
    """Yield ``(tier, width, path)`` for each tier, one at a time.

    Each variant is written just before it is yielded so the caller can
    upload and remove it before the next one is produced. An exception on
    any tier stops the iteration.
    """
    name = original_name or os.path.basename(source_path)
    for tier, width in tiers:
        output_path = os.path.join(output_dir, variant_filename(name, width))
        create_variant(source_path, output_path, width)
        yield tier, width, output_path


def generate_variants(source_path, output_dir, original_name=None):
    """Generate every tier and return the list of ``(tier, width, path)``."""
    return list(iter_variants(source_path, output_dir, original_name))
