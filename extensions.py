"""Shared extension singletons to avoid circular imports."""
from flask_wtf import CSRFProtect

from utils.geocoding import NominatimGeocoder
from utils.media_store import MediaStore
from utils.workspace import WorkspaceRegistry

# Initialize extensions without app; the app factory will bind them.
csrf = CSRFProtect()
media_store = MediaStore()
geocoder = NominatimGeocoder()
workspaces = WorkspaceRegistry(media_store=media_store)
