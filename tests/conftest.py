import io
import shutil
import pytest
from PIL import Image as PILImage
from catalog_ingest import create_app
from catalog_ingest.extensions import db as _db


@pytest.fixture(scope="session")
def app():
    """Create application for testing."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    """Per-test database with fresh tables."""
    with app.app_context():
        _db.session.remove()
        _db.drop_all()
        _db.create_all()
        yield _db
        _db.session.remove()


class FakeStorage:
    """In-memory stand-in for StorageGateway.

    ``fail_on`` maps an operation name to the exception it should raise.
    """

    def __init__(self, bucket="test-bucket"):
        self.bucket = bucket
        self.objects = {}
        self.fail_on = {}
        self.calls = []

    def _maybe_fail(self, op):
        self.calls.append(op)
        if op in self.fail_on:
            raise self.fail_on[op]

    def put(self, key, data, metadata=None):
        self.objects[key] = {
            "data": data,
            "metadata": dict(metadata or {}),
            "cache_control": None,
        }

    def public_url(self, key):
        return f"https://storage.googleapis.com/{self.bucket}/{key}"

    def download(self, key, local_path):
        self._maybe_fail("download")
        if key not in self.objects:
            raise FileNotFoundError(key)
        with open(local_path, "wb") as f:
            f.write(self.objects[key]["data"])
        return local_path

    def upload(self, local_path, key, cache_control=None, metadata=None,
               content_type="image/jpeg"):
        self._maybe_fail("upload")
        with open(local_path, "rb") as f:
            self.put(key, f.read(), metadata)
        self.objects[key]["cache_control"] = cache_control
        return self.public_url(key)

    def get_metadata(self, key):
        return dict(self.objects[key]["metadata"])

    def set_metadata(self, key, metadata):
        self._maybe_fail("set_metadata")
        self.objects[key]["metadata"].update(metadata)

    def move(self, key, new_key):
        self._maybe_fail("move")
        self.objects[new_key] = self.objects.pop(key)

    def delete(self, key):
        self._maybe_fail("delete")
        del self.objects[key]

    def keys(self, prefix=""):
        return sorted(k for k in self.objects if k.startswith(prefix))


@pytest.fixture
def storage():
    return FakeStorage()


def image_bytes(size=(3000, 1500), fmt="WEBP", mode="RGB", color=(200, 30, 30)):
    if mode == "RGBA":
        color = color + (128,)
    img = PILImage.new(mode, size, color)
    buffer = io.BytesIO()
    img.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_image():
    return image_bytes


@pytest.fixture
def image_file(tmp_path):
    def _write(name="shirt.webp", **kwargs):
        path = tmp_path / name
        path.write_bytes(image_bytes(**kwargs))
        return str(path)

    return _write


@pytest.fixture
def workdir(tmp_path):
    path = tmp_path / "work"
    path.mkdir()
    yield str(path)
    shutil.rmtree(path, ignore_errors=True)


@pytest.fixture
def product(db):
    from catalog_ingest.services.product_service import create_product

    return create_product("123", ["Red", "Green"], title="Shirt")
