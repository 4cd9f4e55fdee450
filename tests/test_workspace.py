import time

from models import Location, TAB_COMPLAINTS, TAB_NOTIFICATIONS
from utils.workspace import Workspace, WorkspaceRegistry


def _submit(workspace, heading="Pothole", department="Roads", files=()):
    wizard = workspace.wizard
    workspace.open_wizard()
    wizard.set_content(heading, "Details")
    wizard.next()
    if files:
        wizard.add_media(files)
    wizard.next()
    wizard.set_department(department)
    return workspace.submit_wizard()


def test_submit_appends_complaint_once(store):
    workspace = Workspace("ws-1", store)
    complaint = _submit(workspace)
    assert workspace.complaints == [complaint]
    assert complaint.department == "Roads"
    assert complaint.department_label == "Road & Safety"
    assert workspace.wizard_open is False
    assert workspace.submit_wizard() is None
    assert len(workspace.complaints) == 1


def test_complaints_keep_submission_order_and_unique_ids(store):
    workspace = Workspace("ws-2", store)
    first = _submit(workspace, "First")
    second = _submit(workspace, "Second", "Water")
    assert [c.heading for c in workspace.complaints] == ["First", "Second"]
    assert first.id != second.id


def test_select_unknown_id_keeps_selection(store):
    workspace = Workspace("ws-3", store)
    complaint = _submit(workspace)
    assert workspace.select_complaint(complaint.id) is complaint
    assert workspace.select_complaint("missing") is None
    assert workspace.selected is complaint
    workspace.clear_selection()
    assert workspace.selected is None


def test_active_tab(store):
    workspace = Workspace("ws-4", store)
    assert workspace.active_tab == TAB_COMPLAINTS
    assert workspace.set_active_tab(TAB_NOTIFICATIONS)
    assert workspace.set_active_tab("settings") is False
    assert workspace.active_tab == TAB_NOTIFICATIONS


def test_add_complaint_directly(store):
    workspace = Workspace("ws-5", store)
    complaint = workspace.add_complaint("Leak", "Water main", "Water", location=Location(1.0, 2.0))
    assert workspace.find(complaint.id) is complaint
    assert complaint.location == Location(1.0, 2.0)


def test_owns_media_covers_draft_and_complaints(store, png, make_upload):
    workspace = Workspace("ws-6", store)
    complaint = _submit(workspace, files=[make_upload(png, "a.png")])
    token = complaint.media[0].token
    assert workspace.owns_media(token)
    assert Workspace("ws-7", store).owns_media(token) is False

    workspace.open_wizard()
    added, _ = workspace.wizard.add_media([make_upload(png, "b.png")])
    assert workspace.owns_media(added[0].token)


def test_registry_reuses_workspace(app):
    registry = WorkspaceRegistry(app)
    first = registry.get_or_create("abc")
    assert registry.get_or_create("abc") is first
    assert registry.get("missing") is None
    assert len(registry) == 1


def test_idle_workspace_is_expired_and_releases_media(app, store, png, make_upload):
    registry = WorkspaceRegistry(app, media_store=store)
    workspace = registry.get_or_create("idle")
    complaint = _submit(workspace, files=[make_upload(png, "a.png")])
    workspace.open_wizard()
    draft_media, _ = workspace.wizard.add_media([make_upload(png, "b.png")])
    registry.get_or_create("busy")

    later = time.monotonic() + registry.idle_seconds + 1
    registry.get_or_create("busy").last_seen = later

    assert registry.expire_idle(now=later) == ["idle"]
    assert registry.get("idle") is None
    assert registry.get("busy") is not None
    assert complaint.media[0].token not in store
    assert draft_media[0].token not in store


def test_pothole_complaint_without_media_or_location(store):
    workspace = Workspace("ws-8", store)
    workspace.open_wizard()
    wizard = workspace.wizard
    wizard.set_content("Pothole on Main St", "Deep hole")
    wizard.next()
    wizard.next()
    wizard.set_department("Roads")

    complaint = workspace.submit_wizard()

    assert (complaint.heading, complaint.text, complaint.department) == ("Pothole on Main St", "Deep hole", "Roads")
    assert complaint.media == ()
    assert complaint.location is None
    assert [c.id for c in workspace.complaints] == [complaint.id]
