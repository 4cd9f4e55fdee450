"""Complaint wizard, selection, and media preview blueprint."""
import io

from flask import (
    Blueprint,
    abort,
    current_app,
    flash,
    jsonify,
    redirect,
    request,
    send_file,
    url_for,
)
from flask_wtf import FlaskForm
from flask_wtf.file import MultipleFileField
from wtforms import HiddenField, SelectField, StringField, TextAreaField

from extensions import geocoder, media_store
from models import DEPARTMENT_LABELS, DEPARTMENTS
from utils.decorators import with_workspace

complaints_bp = Blueprint("complaints", __name__, url_prefix="/complaints")


class ComplaintContentForm(FlaskForm):
    heading = StringField(
        "Heading",
        render_kw={"placeholder": "E.g., Broken street light", "autofocus": True, "class": "complaint-input"},
    )
    text = TextAreaField(
        "Context",
        render_kw={"placeholder": "Provide more details about the issue...", "rows": 5, "class": "complaint-input"},
    )


class ComplaintMediaForm(FlaskForm):
    media = MultipleFileField("+ Add Photos/Videos", render_kw={"accept": "image/*,video/*"})


class ComplaintLocationForm(FlaskForm):
    department = SelectField(
        "Relevant Department",
        choices=[("", "Select a department", {"disabled": True})] + [(d, DEPARTMENT_LABELS[d]) for d in DEPARTMENTS],
        validate_choice=False,
        render_kw={"class": "complaint-input"},
    )
    query = StringField(
        "Pinpoint Location",
        render_kw={"placeholder": "Search for a location...", "class": "complaint-input search-input"},
    )
    lat = HiddenField()
    lng = HiddenField()


def _back_to_index():
    return redirect(url_for("main.index"))


def _parse_float(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _apply_location_form(wizard, form: ComplaintLocationForm) -> None:
    if "department" in request.form:
        wizard.set_department(form.department.data)
    if "query" in request.form:
        wizard.draft.search_query = form.query.data or ""


# ---------------------------------------------------------------------------
# Wizard lifecycle
# ---------------------------------------------------------------------------


@complaints_bp.route("/wizard/open", methods=["POST"])
@with_workspace()
def open_wizard(workspace):
    workspace.open_wizard()
    current_app.logger.info("wizard_opened")
    return _back_to_index()


@complaints_bp.route("/wizard/close", methods=["POST"])
@with_workspace()
def close_wizard(workspace):
    discarded = len(workspace.wizard.draft.media)
    workspace.close_wizard()
    current_app.logger.info("wizard_closed", extra={"released_media": discarded})
    return _back_to_index()


@complaints_bp.route("/wizard/state", methods=["GET"])
@with_workspace()
def wizard_state(workspace):
    wizard = workspace.wizard
    payload = wizard.draft.to_dict()
    payload.update(
        {
            "is_open": wizard.is_open,
            "can_advance": wizard.can_advance(),
            "can_submit": wizard.can_submit(),
        }
    )
    return jsonify(payload)


# ---------------------------------------------------------------------------
# Step 1: heading and context
# ---------------------------------------------------------------------------


@complaints_bp.route("/wizard/content", methods=["POST"])
@with_workspace()
def save_content(workspace):
    wizard = workspace.wizard
    if not wizard.is_open:
        return _back_to_index()
    form = ComplaintContentForm()
    wizard.set_content(form.heading.data, form.text.data)
    if request.form.get("action") == "next" and not wizard.next():
        current_app.logger.debug("wizard_next_blocked", extra={"step": wizard.step})
    return _back_to_index()


# ---------------------------------------------------------------------------
# Step 2: media
# ---------------------------------------------------------------------------


@complaints_bp.route("/wizard/media", methods=["POST"])
@with_workspace()
def save_media(workspace):
    wizard = workspace.wizard
    if not wizard.is_open:
        return _back_to_index()
    form = ComplaintMediaForm()
    files = [f for f in (form.media.data or []) if f and getattr(f, "filename", "")]
    if files:
        added, rejected = wizard.add_media(files)
        current_app.logger.info(
            "wizard_media_added",
            extra={"added": len(added), "rejected": len(rejected), "total": len(wizard.draft.media)},
        )
        for file, reason in rejected:
            current_app.logger.warning("wizard_media_rejected", extra={"file_name": file.filename, "reason": reason})
            flash(f"{file.filename}: {reason}", "warning")

    action = request.form.get("action")
    if action == "next":
        wizard.next()
    elif action == "back":
        wizard.back()
    return _back_to_index()


@complaints_bp.route("/wizard/media/<int:index>/remove", methods=["POST"])
@with_workspace()
def remove_media(workspace, index):
    removed = workspace.wizard.remove_media(index)
    if removed is not None:
        current_app.logger.info("wizard_media_removed", extra={"index": index, "token": removed.token})
    return _back_to_index()


# ---------------------------------------------------------------------------
# Step 3: department and location
# ---------------------------------------------------------------------------


@complaints_bp.route("/wizard/location", methods=["POST"])
@with_workspace(locked=False)
def save_location(workspace):
    form = ComplaintLocationForm()
    action = request.form.get("action")

    with workspace.lock:
        wizard = workspace.wizard
        if not wizard.is_open:
            return _back_to_index()
        _apply_location_form(wizard, form)
        if action == "pin":
            lat, lng = _parse_float(form.lat.data), _parse_float(form.lng.data)
            if lat is not None and lng is not None:
                wizard.pin(lat, lng)
        elif action == "back":
            wizard.back()
        if action != "search":
            return _back_to_index()
        query = wizard.draft.search_query
        ticket = wizard.begin_search(query)

    if ticket is None:
        current_app.logger.debug("wizard_search_dropped", extra={"query": query})
        return _back_to_index()

    # The lookup runs without the workspace lock so other controls stay usable.
    results = []
    try:
        results = geocoder.search(query)
    finally:
        # Always release the search slot, even when the lookup raised.
        with workspace.lock:
            if not workspace.wizard.finish_search(ticket, results):
                current_app.logger.debug("wizard_search_stale", extra={"query": query})
    return _back_to_index()


@complaints_bp.route("/wizard/search/<int:index>/select", methods=["POST"])
@with_workspace()
def select_search_result(workspace, index):
    wizard = workspace.wizard
    if not wizard.is_open:
        return _back_to_index()
    # Result buttons belong to the location form.
    _apply_location_form(wizard, ComplaintLocationForm())
    result = wizard.select_result(index)
    if result is not None:
        current_app.logger.info("wizard_location_selected", extra={"place_id": result.place_id})
    return _back_to_index()


@complaints_bp.route("/wizard/submit", methods=["POST"])
@with_workspace()
def submit_complaint(workspace):
    wizard = workspace.wizard
    if not wizard.is_open:
        return _back_to_index()
    _apply_location_form(wizard, ComplaintLocationForm())
    complaint = workspace.submit_wizard()
    if complaint is None:
        current_app.logger.debug("wizard_submit_blocked", extra={"step": wizard.step})
        return _back_to_index()
    current_app.logger.info(
        "complaint_submitted",
        extra={
            "complaint_id": complaint.id,
            "department": complaint.department,
            "media_count": len(complaint.media),
            "has_location": complaint.location is not None,
        },
    )
    return _back_to_index()


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------


@complaints_bp.route("/<string:complaint_id>/select", methods=["POST"])
@with_workspace()
def select_complaint(workspace, complaint_id):
    if workspace.select_complaint(complaint_id) is None:
        abort(404)
    return _back_to_index()


@complaints_bp.route("/selection/clear", methods=["POST"])
@with_workspace()
def clear_selection(workspace):
    workspace.clear_selection()
    return _back_to_index()


# ---------------------------------------------------------------------------
# Media previews
# ---------------------------------------------------------------------------


def _stored_or_404(workspace, token):
    if not workspace.owns_media(token):
        abort(404)
    stored = media_store.get(token)
    if stored is None:
        abort(404)
    return stored


@complaints_bp.route("/media/<string:token>", methods=["GET"])
@with_workspace()
def media_preview(workspace, token):
    stored = _stored_or_404(workspace, token)
    return send_file(
        io.BytesIO(stored.content),
        mimetype=stored.attachment.mime_type,
        as_attachment=False,
        download_name=stored.attachment.file_name,
    )


@complaints_bp.route("/media/<string:token>/thumbnail", methods=["GET"])
@with_workspace()
def media_thumbnail(workspace, token):
    stored = _stored_or_404(workspace, token)
    if stored.attachment.is_video:
        return redirect(url_for("complaints.media_preview", token=token))
    thumbnail = media_store.thumbnail(token)
    if thumbnail is None:
        abort(404)
    return send_file(io.BytesIO(thumbnail), mimetype="image/jpeg", as_attachment=False)
