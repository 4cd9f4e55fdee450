"""In-memory holding area for complaint media and their preview handles."""
import io
import os
import threading
from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from PIL import Image, UnidentifiedImageError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from models import Attachment
from utils.security import generate_token

ALLOWED_IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "webp"}
ALLOWED_VIDEO_EXTENSIONS = {"mp4", "webm", "mov", "ogg"}
DEFAULT_MAX_MEDIA_BYTES = 25 * 1024 * 1024  # 25 MB

_PIL_FORMATS = {"JPEG": "jpeg", "PNG": "png", "GIF": "gif", "WEBP": "webp"}


class MediaValidationError(ValueError):
    """Raised when an uploaded file cannot be accepted as complaint media."""


def _fail_if(condition: bool, message: str) -> None:
    if condition:
        raise MediaValidationError(message)


def _get_mime_type(ext: str) -> str:
    mapping = {
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "png": "image/png",
        "gif": "image/gif",
        "webp": "image/webp",
        "mp4": "video/mp4",
        "webm": "video/webm",
        "mov": "video/quicktime",
        "ogg": "video/ogg",
    }
    return mapping.get(ext, "application/octet-stream")


@dataclass
class StoredMedia:
    attachment: Attachment
    content: bytes
    thumbnail: Optional[bytes] = None


def _verify_image(content: bytes) -> str:
    try:
        with Image.open(io.BytesIO(content)) as img:
            fmt = img.format
            img.verify()
    except Image.DecompressionBombError as exc:
        raise MediaValidationError("Image dimensions too large") from exc
    except (UnidentifiedImageError, OSError, SyntaxError) as exc:
        raise MediaValidationError("Invalid image data") from exc
    sniffed = _PIL_FORMATS.get(fmt or "")
    _fail_if(sniffed is None, "Unsupported image format")
    return sniffed


def read_media_file(file: FileStorage, max_bytes: int = DEFAULT_MAX_MEDIA_BYTES) -> tuple[bytes, str, str, str]:
    """Validate an upload and return ``(content, file_name, extension, kind)``."""
    _fail_if(not file, "No file provided")
    filename = secure_filename(file.filename or "")
    _fail_if(not filename or "." not in filename, "Unsupported file name")
    ext = filename.rsplit(".", 1)[1].lower()
    _fail_if(ext not in ALLOWED_IMAGE_EXTENSIONS | ALLOWED_VIDEO_EXTENSIONS, "File type not allowed")

    file.stream.seek(0, os.SEEK_END)
    size = file.stream.tell()
    file.stream.seek(0)
    _fail_if(size == 0, "Empty file")
    _fail_if(size > max_bytes, "File exceeds size limits")

    content = file.read()
    _fail_if(len(content) > max_bytes, "File exceeds size limits")

    if ext in ALLOWED_IMAGE_EXTENSIONS:
        return content, filename, _verify_image(content), "image"

    content_type = (file.mimetype or "").lower()
    _fail_if(content_type and not content_type.startswith("video/") and content_type != "application/octet-stream", "Invalid video data")
    return content, filename, ext, "video"


def make_thumbnail(content: bytes, size: int) -> bytes:
    with Image.open(io.BytesIO(content)) as img:
        img = img.convert("RGB")
        img.thumbnail((size, size))
        out = io.BytesIO()
        img.save(out, format="JPEG", quality=85)
    return out.getvalue()


class MediaStore:
    """Process-wide map of preview tokens to uploaded bytes.

    ``put`` acquires a preview handle and ``release`` frees it. The store never
    releases on its own; owners (draft or complaint) decide when.
    """

    def __init__(self, app=None) -> None:
        self._items: Dict[str, StoredMedia] = {}
        self._lock = threading.Lock()
        self.max_bytes = DEFAULT_MAX_MEDIA_BYTES
        self.thumbnail_size = 320
        if app is not None:
            self.init_app(app)

    def init_app(self, app) -> None:
        self.max_bytes = int(app.config.get("MAX_MEDIA_UPLOAD_BYTES", DEFAULT_MAX_MEDIA_BYTES))
        self.thumbnail_size = int(app.config.get("THUMBNAIL_SIZE", 320))
        app.extensions["media_store"] = self

    def put(self, file: FileStorage) -> Attachment:
        content, file_name, ext, kind = read_media_file(file, max_bytes=self.max_bytes)
        attachment = Attachment(
            token=generate_token(24),
            file_name=file_name,
            mime_type=_get_mime_type(ext),
            kind=kind,
            size=len(content),
        )
        with self._lock:
            self._items[attachment.token] = StoredMedia(attachment=attachment, content=content)
        return attachment

    def get(self, token: str) -> Optional[StoredMedia]:
        with self._lock:
            return self._items.get(token)

    def thumbnail(self, token: str) -> Optional[bytes]:
        stored = self.get(token)
        if stored is None or stored.attachment.kind != "image":
            return None
        if stored.thumbnail is None:
            stored.thumbnail = make_thumbnail(stored.content, self.thumbnail_size)
        return stored.thumbnail

    def release(self, token: str) -> bool:
        with self._lock:
            return self._items.pop(token, None) is not None

    def release_all(self, attachments: Iterable[Attachment]) -> int:
        return sum(1 for attachment in attachments if self.release(attachment.token))

    def __contains__(self, token: str) -> bool:
        with self._lock:
            return token in self._items

    def __len__(self) -> int:
        with self._lock:
            return len(self._items)
