"""Shared fixtures: an app in testing mode, its client, and small media files."""
import io
import os
import struct
import tempfile
import zlib

import pytest
from PIL import Image
from werkzeug.datastructures import FileStorage

# Configure the environment BEFORE importing the app module (it builds an app on import).
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="complaint-desk-logs-"))
os.environ.setdefault("SECRET_KEY", "test-secret")

from app import create_app
from extensions import media_store
from utils.wizard import ComplaintWizard


def png_bytes(color=(200, 40, 40), size=(8, 8)) -> bytes:
    out = io.BytesIO()
    Image.new("RGB", size, color).save(out, format="PNG")
    return out.getvalue()


def bomb_png(width: int = 20000, height: int = 20000) -> bytes:
    """A tiny PNG whose header claims far more pixels than Pillow will open."""

    def chunk(tag: bytes, data: bytes) -> bytes:
        crc = zlib.crc32(tag + data) & 0xFFFFFFFF
        return struct.pack(">I", len(data)) + tag + data + struct.pack(">I", crc)

    header = struct.pack(">IIBBBBB", width, height, 8, 2, 0, 0, 0)
    return b"\x89PNG\r\n\x1a\n" + chunk(b"IHDR", header) + chunk(b"IDAT", zlib.compress(b"\x00")) + chunk(b"IEND", b"")


@pytest.fixture
def app():
    app = create_app("testing")
    yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def png():
    return png_bytes()


@pytest.fixture
def make_upload():
    def _make(content: bytes, filename: str, content_type: str = "image/png") -> FileStorage:
        return FileStorage(stream=io.BytesIO(content), filename=filename, content_type=content_type)

    return _make


@pytest.fixture
def store():
    return media_store


@pytest.fixture
def wizard(store):
    return ComplaintWizard(acquire=store.put, release=lambda a: store.release(a.token))
