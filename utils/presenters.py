"""View models for the complaint grid, cards, and detail overlay."""
from __future__ import annotations

from typing import Callable, Mapping, Optional, Sequence

from models import Attachment, Complaint
from utils.maps import DEFAULT_EXTERNAL_MAP_URL, external_map_url, format_coordinates, static_map

UrlFor = Callable[[Attachment], str]


def _preview(attachment: Attachment, preview_url: UrlFor, thumbnail_url: Optional[UrlFor] = None) -> dict:
    url = preview_url(attachment)
    thumb = thumbnail_url(attachment) if thumbnail_url and not attachment.is_video else url
    return {
        "url": url,
        "thumbnail_url": thumb,
        "is_video": attachment.is_video,
        "mime_type": attachment.mime_type,
        "file_name": attachment.file_name,
    }


def card_view(
    complaint: Complaint,
    preview_url: UrlFor,
    thumbnail_url: Optional[UrlFor] = None,
    map_url_template: str = DEFAULT_EXTERNAL_MAP_URL,
) -> dict:
    thumbnail = None
    if complaint.media:
        thumbnail = _preview(complaint.media[0], preview_url, thumbnail_url)
    return {
        "id": complaint.id,
        "heading": complaint.heading,
        "text": complaint.text,
        "department": complaint.department,
        "map_url": external_map_url(complaint.location, map_url_template),
        "thumbnail": thumbnail,
        "extra_media_count": max(len(complaint.media) - 1, 0),
    }


def grid_view(
    complaints: Sequence[Complaint],
    preview_url: UrlFor,
    thumbnail_url: Optional[UrlFor] = None,
    map_url_template: str = DEFAULT_EXTERNAL_MAP_URL,
) -> list[dict]:
    return [card_view(c, preview_url, thumbnail_url, map_url_template) for c in complaints]


def detail_view(
    complaint: Optional[Complaint],
    preview_url: UrlFor,
    config: Mapping,
) -> Optional[dict]:
    """Everything the detail overlay shows; ``None`` when nothing is selected."""
    if complaint is None:
        return None
    view = {
        "id": complaint.id,
        "heading": complaint.heading,
        "text": complaint.text,
        "department": complaint.department,
        "department_label": complaint.department_label,
        "submitted_at": complaint.created_at.strftime("%Y-%m-%d %H:%M UTC"),
        "media": [_preview(m, preview_url) for m in complaint.media],
        "location": None,
    }
    if complaint.location is not None:
        view["location"] = {
            "coordinates": format_coordinates(complaint.location),
            "map_url": external_map_url(
                complaint.location, config.get("EXTERNAL_MAP_URL") or DEFAULT_EXTERNAL_MAP_URL
            ),
            "map": static_map(config, complaint.location),
        }
    return view
