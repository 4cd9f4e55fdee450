"""Per-browser-session coordinator state held in process memory."""
from __future__ import annotations

import threading
import time
from typing import Dict, Optional, Sequence

from models import TAB_COMPLAINTS, TABS, Attachment, Complaint, Location, generate_id
from utils.media_store import MediaStore
from utils.wizard import ComplaintWizard


class Workspace:
    """Complaint list, selection, active tab and the wizard for one browser session.

    Every operation is synchronous and total. Callers serving concurrent
    requests hold ``lock`` around mutations.
    """

    def __init__(
        self,
        workspace_id: str,
        media_store: Optional[MediaStore] = None,
        default_center: tuple[float, float] = (28.6139, 77.2090),
    ) -> None:
        self.id = workspace_id
        self.media_store = media_store
        self.complaints: list[Complaint] = []
        self.selected_id: Optional[str] = None
        self.active_tab = TAB_COMPLAINTS
        self.lock = threading.RLock()
        self.last_seen = time.monotonic()
        self.wizard = ComplaintWizard(
            acquire=media_store.put if media_store else None,
            release=self._release_attachment,
            default_center=default_center,
        )

    def _release_attachment(self, attachment: Attachment) -> None:
        if self.media_store is not None:
            self.media_store.release(attachment.token)

    def touch(self) -> None:
        self.last_seen = time.monotonic()

    # -- wizard ----------------------------------------------------------------

    @property
    def wizard_open(self) -> bool:
        return self.wizard.is_open

    def open_wizard(self) -> None:
        self.wizard.open()

    def close_wizard(self) -> None:
        self.wizard.close()

    def submit_wizard(self) -> Optional[Complaint]:
        record = self.wizard.submit()
        if record is None:
            return None
        return self.add_complaint(**record)

    # -- complaints ------------------------------------------------------------

    def add_complaint(
        self,
        heading: str,
        text: str,
        department: str,
        media: Sequence[Attachment] = (),
        location: Optional[Location] = None,
    ) -> Complaint:
        existing = {c.id for c in self.complaints}
        complaint_id = generate_id()
        while complaint_id in existing:
            complaint_id = generate_id()
        complaint = Complaint(
            id=complaint_id,
            heading=heading,
            text=text,
            department=department,
            media=tuple(media),
            location=location,
        )
        self.complaints = [*self.complaints, complaint]
        return complaint

    def find(self, complaint_id: str) -> Optional[Complaint]:
        for complaint in self.complaints:
            if complaint.id == complaint_id:
                return complaint
        return None

    @property
    def selected(self) -> Optional[Complaint]:
        if self.selected_id is None:
            return None
        return self.find(self.selected_id)

    def select_complaint(self, complaint_id: str) -> Optional[Complaint]:
        complaint = self.find(complaint_id)
        if complaint is not None:
            self.selected_id = complaint.id
        return complaint

    def clear_selection(self) -> None:
        self.selected_id = None

    def set_active_tab(self, tab: str) -> bool:
        if tab not in TABS:
            return False
        self.active_tab = tab
        return True

    def owns_media(self, token: str) -> bool:
        if any(m.token == token for m in self.wizard.draft.media):
            return True
        return any(m.token == token for c in self.complaints for m in c.media)

    def release(self) -> None:
        """Free every preview held by the draft and by submitted complaints."""
        self.wizard.close()
        if self.media_store is not None:
            self.media_store.release_all(m for c in self.complaints for m in c.media)


class WorkspaceRegistry:
    """Maps the workspace id stored in a session cookie to its live :class:`Workspace`."""

    def __init__(self, app=None, media_store: Optional[MediaStore] = None) -> None:
        self._workspaces: Dict[str, Workspace] = {}
        self._lock = threading.Lock()
        self.media_store = media_store
        self.idle_seconds = 120 * 60
        self.default_center: tuple[float, float] = (28.6139, 77.2090)
        if app is not None:
            self.init_app(app, media_store)

    def init_app(self, app, media_store: Optional[MediaStore] = None) -> None:
        if media_store is not None:
            self.media_store = media_store
        self.idle_seconds = int(app.config.get("WORKSPACE_IDLE_MINUTES", 120)) * 60
        self.default_center = tuple(app.config.get("MAP_DEFAULT_CENTER", self.default_center))
        app.extensions["workspaces"] = self

    def get(self, workspace_id: str) -> Optional[Workspace]:
        with self._lock:
            return self._workspaces.get(workspace_id)

    def get_or_create(self, workspace_id: str) -> Workspace:
        with self._lock:
            workspace = self._workspaces.get(workspace_id)
            if workspace is None:
                workspace = Workspace(workspace_id, self.media_store, self.default_center)
                self._workspaces[workspace_id] = workspace
            workspace.touch()
            return workspace

    def expire_idle(self, now: Optional[float] = None) -> list[str]:
        now = time.monotonic() if now is None else now
        with self._lock:
            stale = [ws for ws in self._workspaces.values() if now - ws.last_seen > self.idle_seconds]
            for workspace in stale:
                del self._workspaces[workspace.id]
        for workspace in stale:
            with workspace.lock:
                workspace.release()
        return [ws.id for ws in stale]

    def __len__(self) -> int:
        with self._lock:
            return len(self._workspaces)
