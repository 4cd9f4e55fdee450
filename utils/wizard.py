"""Three-step complaint submission wizard.

The wizard owns a private :class:`models.Draft`. Steps advance strictly one
at a time (content -> media -> department/location) and only while the
current step's required fields are present. Attachments are acquired through
the ``acquire`` callable and handed back through ``release`` whenever they
leave the draft without becoming part of a complaint.
"""
from __future__ import annotations

import itertools
from typing import Any, Callable, Iterable, Optional

from models import (
    DEPARTMENTS,
    WIZARD_FIRST_STEP,
    WIZARD_LAST_STEP,
    Attachment,
    Draft,
    Location,
    SearchResult,
)

AcquireFn = Callable[[Any], Attachment]
ReleaseFn = Callable[[Attachment], Any]

_ticket_counter = itertools.count(1)


def _no_release(attachment: Attachment) -> None:
    return None


class ComplaintWizard:
    def __init__(
        self,
        acquire: Optional[AcquireFn] = None,
        release: Optional[ReleaseFn] = None,
        default_center: tuple[float, float] = (28.6139, 77.2090),
    ) -> None:
        self._acquire = acquire
        self._release = release or _no_release
        self.draft = Draft(default_center=tuple(default_center))
        self.is_open = False
        self._search_ticket: Optional[int] = None

    # -- lifecycle ------------------------------------------------------------

    def open(self) -> None:
        self.is_open = True

    def close(self) -> None:
        """Discard the draft without emitting anything (cancel, close button, overlay)."""
        self._discard()
        self.is_open = False

    def _discard(self) -> None:
        for attachment in self.draft.media:
            self._release(attachment)
        self._search_ticket = None
        self.draft.reset()

    # -- step gating ------------------------------------------------------------

    @property
    def step(self) -> int:
        return self.draft.step

    def can_advance(self) -> bool:
        if self.step == 1:
            return self.draft.has_content()
        if self.step == 2:
            return True
        return self.draft.has_department()

    def can_submit(self) -> bool:
        return self.step == WIZARD_LAST_STEP and self.draft.has_content() and self.draft.has_department()

    def next(self) -> bool:
        if self.step >= WIZARD_LAST_STEP or not self.can_advance():
            return False
        self.draft.step = min(self.step + 1, WIZARD_LAST_STEP)
        return True

    def back(self) -> bool:
        if self.step <= WIZARD_FIRST_STEP:
            return False
        self.draft.step = max(self.step - 1, WIZARD_FIRST_STEP)
        return True

    # -- step 1 -------------------------------------------------------------

    def set_content(self, heading: Optional[str], text: Optional[str]) -> None:
        if heading is not None:
            self.draft.heading = heading
        if text is not None:
            self.draft.text = text

    # -- step 2 -------------------------------------------------------------

    def add_media(self, files: Iterable[Any]) -> tuple[list[Attachment], list[tuple[Any, str]]]:
        """Acquire a preview for each file and append it; returns ``(added, rejected)``."""
        if self._acquire is None:
            raise RuntimeError("Wizard was created without a media acquirer")
        added: list[Attachment] = []
        rejected: list[tuple[Any, str]] = []
        try:
            for file in files:
                try:
                    attachment = self._acquire(file)
                except ValueError as exc:
                    rejected.append((file, str(exc)))
                    continue
                added.append(attachment)
        finally:
            # acquired files belong to the draft even if a later one raises
            self.draft.media = [*self.draft.media, *added]
        return added, rejected

    def remove_media(self, index: int) -> Optional[Attachment]:
        if index < 0 or index >= len(self.draft.media):
            return None
        removed = self.draft.media[index]
        self.draft.media = [m for i, m in enumerate(self.draft.media) if i != index]
        self._release(removed)
        return removed

    # -- step 3 -------------------------------------------------------------

    def set_department(self, department: Optional[str]) -> None:
        value = (department or "").strip()
        self.draft.department = value if value in DEPARTMENTS else ""

    def begin_search(self, query: Optional[str]) -> Optional[int]:
        """Record the query and claim the single search slot.

        Returns a ticket to hand to :meth:`finish_search`, or ``None`` when the
        query is blank or another lookup is still outstanding (the trigger is
        dropped, not queued).
        """
        self.draft.search_query = query or ""
        if not self.draft.search_query.strip() or self.draft.is_searching:
            return None
        self.draft.is_searching = True
        self._search_ticket = next(_ticket_counter)
        return self._search_ticket

    def finish_search(self, ticket: Optional[int], results: Iterable[SearchResult]) -> bool:
        """Apply a lookup response; stale tickets (wizard closed or reset meanwhile) are ignored."""
        if ticket is None or ticket != self._search_ticket:
            return False
        self._search_ticket = None
        self.draft.is_searching = False
        self.draft.search_results = list(results)
        return True

    def select_result(self, index: int) -> Optional[SearchResult]:
        if index < 0 or index >= len(self.draft.search_results):
            return None
        result = self.draft.search_results[index]
        try:
            location = result.to_location()
        except ValueError:
            return None
        self.draft.location = location
        self.draft.map_center = location
        self.draft.search_results = []
        self.draft.search_query = result.display_name
        return result

    def pin(self, lat: float, lng: float) -> bool:
        if not (-90.0 <= lat <= 90.0 and -180.0 <= lng <= 180.0):
            return False
        location = Location(lat=lat, lng=lng)
        self.draft.location = location
        self.draft.map_center = location
        return True

    # -- terminal ------------------------------------------------------------

    def submit(self) -> Optional[dict]:
        """Validate once more and emit the complaint fields, or ``None`` when rejected.

        On success the attachments move to the emitted record (no release),
        the draft is reset and the wizard closes.
        """
        if not self.is_open or not self.can_submit():
            return None
        draft = self.draft
        record = {
            "heading": draft.heading,
            "text": draft.text,
            "media": tuple(draft.media),
            "department": draft.department,
            "location": draft.location,
        }
        draft.media = []
        self.close()
        return record
