import io

import pytest
from PIL import Image

from utils.media_store import MediaStore, MediaValidationError, make_thumbnail, read_media_file

from conftest import bomb_png


def test_put_stores_image_with_sniffed_type(store, png, make_upload):
    attachment = store.put(make_upload(png, "photo.png"))
    assert attachment.kind == "image"
    assert attachment.mime_type == "image/png"
    assert attachment.size == len(png)
    assert store.get(attachment.token).content == png
    assert store.release(attachment.token)
    assert attachment.token not in store
    assert store.release(attachment.token) is False


def test_image_extension_must_match_content(store, make_upload):
    with pytest.raises(MediaValidationError):
        store.put(make_upload(b"\x00\x01garbage", "photo.jpg", "image/jpeg"))


def test_video_accepted_by_extension_and_mimetype(store, make_upload):
    attachment = store.put(make_upload(b"\x00\x00\x00\x18ftypmp42", "clip.mp4", "video/mp4"))
    assert attachment.is_video
    assert attachment.mime_type == "video/mp4"
    assert store.thumbnail(attachment.token) is None
    store.release(attachment.token)


@pytest.mark.parametrize(
    "content,filename,content_type",
    [
        (b"", "empty.png", "image/png"),
        (b"hello", "notes.txt", "text/plain"),
        (b"hello", "noextension", "image/png"),
        (b"\x00\x00\x00\x18ftypmp42", "clip.mp4", "text/html"),
    ],
)
def test_rejects_invalid_uploads(make_upload, content, filename, content_type):
    with pytest.raises(MediaValidationError):
        read_media_file(make_upload(content, filename, content_type))


def test_rejects_oversized_upload(make_upload, png):
    with pytest.raises(MediaValidationError, match="size"):
        read_media_file(make_upload(png, "photo.png"), max_bytes=len(png) - 1)


def test_rejection_is_a_value_error(make_upload):
    with pytest.raises(ValueError):
        read_media_file(make_upload(b"x", "script.exe", "application/octet-stream"))


def test_thumbnail_is_cached_jpeg(make_upload):
    store = MediaStore()
    store.thumbnail_size = 16
    big = io.BytesIO()
    Image.new("RGB", (64, 32), (0, 120, 0)).save(big, format="PNG")
    attachment = store.put(make_upload(big.getvalue(), "wide.png"))

    thumb = store.thumbnail(attachment.token)
    with Image.open(io.BytesIO(thumb)) as img:
        assert img.format == "JPEG"
        assert img.size == (16, 8)
    assert store.thumbnail(attachment.token) is thumb


def test_make_thumbnail_handles_palette_images():
    out = io.BytesIO()
    Image.new("P", (10, 10)).save(out, format="GIF")
    with Image.open(io.BytesIO(make_thumbnail(out.getvalue(), 4))) as img:
        assert img.size == (4, 4)


def test_release_all_counts_live_tokens(make_upload, png):
    store = MediaStore()
    first = store.put(make_upload(png, "a.png"))
    second = store.put(make_upload(png, "b.png"))
    store.release(first.token)
    assert store.release_all([first, second]) == 1
    assert len(store) == 0


def test_init_app_reads_limits(app):
    store = MediaStore(app)
    assert store.max_bytes == app.config["MAX_MEDIA_UPLOAD_BYTES"]
    assert store.thumbnail_size == app.config["THUMBNAIL_SIZE"]


def test_oversized_dimensions_are_rejected(store, make_upload):
    with pytest.raises(MediaValidationError, match="dimensions"):
        store.put(make_upload(bomb_png(), "huge.png"))
