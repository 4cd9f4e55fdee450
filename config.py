"""Environment-aware configuration for the complaint desk application."""
import os
from datetime import timedelta

DEFAULT_SECRET_KEY = "dev-secret-key-change-me"


def _float_pair(raw: str, default: tuple[float, float]) -> tuple[float, float]:
    try:
        lat, lng = (float(part) for part in raw.split(","))
    except (AttributeError, TypeError, ValueError):
        return default
    return lat, lng


class BaseConfig:
    def __init__(self) -> None:
        # Defaults are good enough for local dev. Override via env for production.
        self.SECRET_KEY = os.getenv("SECRET_KEY", DEFAULT_SECRET_KEY)
        self.SESSION_COOKIE_HTTPONLY = True
        self.SESSION_COOKIE_SAMESITE = "Lax"
        self.PERMANENT_SESSION_LIFETIME = timedelta(hours=12)
        self.PREFERRED_URL_SCHEME = os.getenv("PREFERRED_URL_SCHEME", "https")
        self.WTF_CSRF_TIME_LIMIT = 3600
        self.WTF_CSRF_ENABLED = True
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.LOG_DIR = os.getenv("LOG_DIR", os.path.join(os.getcwd(), "logs"))

        # Geocoding (OpenStreetMap Nominatim requires an identifying User-Agent)
        self.GEOCODER_URL = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/search")
        self.GEOCODER_TIMEOUT = float(os.getenv("GEOCODER_TIMEOUT", 10))
        self.GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "complaint-desk/1.0")
        self.GEOCODER_RESULT_LIMIT = int(os.getenv("GEOCODER_RESULT_LIMIT", 0))

        # Map widget
        self.MAP_DEFAULT_CENTER = _float_pair(os.getenv("MAP_DEFAULT_CENTER", ""), (28.6139, 77.2090))
        self.MAP_EDIT_ZOOM = int(os.getenv("MAP_EDIT_ZOOM", 13))
        self.MAP_FLY_ZOOM = int(os.getenv("MAP_FLY_ZOOM", 15))
        self.MAP_STATIC_ZOOM = int(os.getenv("MAP_STATIC_ZOOM", 15))
        self.MAP_TILE_URL = os.getenv("MAP_TILE_URL", "https://{s}.tile.openstreetmap.org/{z}/{x}/{y}.png")
        self.EXTERNAL_MAP_URL = os.getenv("EXTERNAL_MAP_URL", "https://www.google.com/maps?q={lat},{lng}")

        # Media attachments are held in memory only
        self.MAX_MEDIA_UPLOAD_BYTES = int(os.getenv("MAX_MEDIA_UPLOAD_BYTES", 25 * 1024 * 1024))
        self.MAX_CONTENT_LENGTH = int(os.getenv("MAX_REQUEST_BYTES", 100 * 1024 * 1024))
        self.THUMBNAIL_SIZE = int(os.getenv("THUMBNAIL_SIZE", 320))

        self.WORKSPACE_IDLE_MINUTES = int(os.getenv("WORKSPACE_IDLE_MINUTES", 120))


class DevelopmentConfig(BaseConfig):
    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = True
        self.ENV = "development"
        self.SESSION_COOKIE_SECURE = False


class TestingConfig(BaseConfig):
    def __init__(self) -> None:
        super().__init__()
        self.TESTING = True
        self.DEBUG = False
        self.ENV = "testing"
        self.WTF_CSRF_ENABLED = False
        self.SESSION_COOKIE_SECURE = False
        self.PREFERRED_URL_SCHEME = "http"


class ProductionConfig(BaseConfig):
    def __init__(self) -> None:
        super().__init__()
        self.DEBUG = False
        self.ENV = "production"
        self.SESSION_COOKIE_SECURE = True
        self.SEND_FILE_MAX_AGE_DEFAULT = int(os.getenv("STATIC_MAX_AGE", 86400))
