"""Blueprint registration and the single-page complaint board."""
from flask import Blueprint, current_app, redirect, render_template, url_for

from models import TABS
from utils.decorators import with_workspace
from utils.maps import DEFAULT_EXTERNAL_MAP_URL, editable_map
from utils.presenters import detail_view, grid_view
from .complaints import (
    ComplaintContentForm,
    ComplaintLocationForm,
    ComplaintMediaForm,
    complaints_bp,
)

main_bp = Blueprint("main", __name__)

TAB_LABELS = {"complaints": "Complaints", "notifications": "Notification"}


def _preview_url(attachment) -> str:
    return url_for("complaints.media_preview", token=attachment.token)


def _thumbnail_url(attachment) -> str:
    return url_for("complaints.media_thumbnail", token=attachment.token)


def _wizard_context(workspace) -> dict | None:
    wizard = workspace.wizard
    if not wizard.is_open:
        return None
    draft = wizard.draft
    return {
        "step": wizard.step,
        "can_advance": wizard.can_advance(),
        "can_submit": wizard.can_submit(),
        "content_form": ComplaintContentForm(formdata=None, heading=draft.heading, text=draft.text),
        "media_form": ComplaintMediaForm(formdata=None),
        "location_form": ComplaintLocationForm(
            formdata=None, department=draft.department, query=draft.search_query
        ),
        "media": [
            {"url": _preview_url(m), "is_video": m.is_video, "file_name": m.file_name}
            for m in draft.media
        ],
        "search_results": draft.search_results,
        "is_searching": draft.is_searching,
        "location": draft.location,
        "map": editable_map(current_app.config, draft.map_center, draft.location),
    }


def build_board_context(workspace) -> dict:
    config = current_app.config
    map_template = config.get("EXTERNAL_MAP_URL") or DEFAULT_EXTERNAL_MAP_URL
    return {
        "tabs": [{"key": key, "label": TAB_LABELS[key]} for key in TABS],
        "active_tab": workspace.active_tab,
        "cards": grid_view(workspace.complaints, _preview_url, _thumbnail_url, map_template),
        "detail": detail_view(workspace.selected, _preview_url, config),
        "wizard": _wizard_context(workspace),
    }


@main_bp.route("/", methods=["GET"])
@with_workspace()
def index(workspace):
    context = build_board_context(workspace)
    return render_template("index.html", page_title="Complaints", **context)


@main_bp.route("/tab/<string:tab>", methods=["POST"])
@with_workspace()
def set_tab(workspace, tab):
    if not workspace.set_active_tab(tab):
        current_app.logger.warning("unknown_tab", extra={"tab": tab})
    return redirect(url_for("main.index"))
