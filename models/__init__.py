"""Core data models for complaints, their attachments, and the wizard draft."""
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping, Optional


def generate_id() -> str:
	return uuid.uuid4().hex


DEPARTMENTS: tuple[str, ...] = (
	"Health",
	"Roads",
	"Water",
	"Electricity",
	"Other",
)

DEPARTMENT_LABELS: dict[str, str] = {
	"Health": "Health Department",
	"Roads": "Road & Safety",
	"Water": "Water & Sanitation",
	"Electricity": "Electricity Board",
	"Other": "Other Public Departments",
}

TAB_COMPLAINTS = "complaints"
TAB_NOTIFICATIONS = "notifications"
TABS: tuple[str, ...] = (TAB_COMPLAINTS, TAB_NOTIFICATIONS)

WIZARD_FIRST_STEP = 1
WIZARD_LAST_STEP = 3


@dataclass(frozen=True)
class Location:
	lat: float
	lng: float

	def to_dict(self) -> dict:
		return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Attachment:
	"""An uploaded file held in the media store; ``token`` addresses its preview."""

	token: str
	file_name: str
	mime_type: str
	kind: str
	size: int = 0

	@property
	def is_video(self) -> bool:
		return self.kind == "video"


@dataclass(frozen=True)
class SearchResult:
	"""One geocoder candidate. Coordinates stay as the text the geocoder sent."""

	place_id: str
	display_name: str
	lat: str
	lon: str

	@classmethod
	def from_payload(cls, payload: Mapping[str, Any]) -> Optional["SearchResult"]:
		if not isinstance(payload, Mapping):
			return None
		try:
			return cls(
				place_id=str(payload["place_id"]),
				display_name=str(payload["display_name"]),
				lat=str(payload["lat"]),
				lon=str(payload["lon"]),
			)
		except KeyError:
			return None

	def to_location(self) -> Location:
		return Location(lat=float(self.lat), lng=float(self.lon))

	def to_dict(self) -> dict:
		return {
			"place_id": self.place_id,
			"display_name": self.display_name,
			"lat": self.lat,
			"lon": self.lon,
		}


@dataclass(frozen=True)
class Complaint:
	id: str
	heading: str
	text: str
	department: str
	media: tuple[Attachment, ...] = ()
	location: Optional[Location] = None
	created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

	@property
	def department_label(self) -> str:
		return DEPARTMENT_LABELS.get(self.department, self.department)


@dataclass
class Draft:
	"""Wizard-local form state; ``reset`` restores every documented initial value."""

	default_center: tuple[float, float] = (28.6139, 77.2090)
	step: int = WIZARD_FIRST_STEP
	heading: str = ""
	text: str = ""
	media: list[Attachment] = field(default_factory=list)
	department: str = ""
	location: Optional[Location] = None
	map_center: Optional[Location] = None
	search_query: str = ""
	search_results: list[SearchResult] = field(default_factory=list)
	is_searching: bool = False

	def __post_init__(self) -> None:
		if self.map_center is None:
			self.map_center = Location(*self.default_center)

	def reset(self) -> None:
		self.step = WIZARD_FIRST_STEP
		self.heading = ""
		self.text = ""
		self.media = []
		self.department = ""
		self.location = None
		self.map_center = Location(*self.default_center)
		self.search_query = ""
		self.search_results = []
		self.is_searching = False

	def has_content(self) -> bool:
		return bool(self.heading.strip()) and bool(self.text.strip())

	def has_department(self) -> bool:
		return self.department in DEPARTMENTS

	def to_dict(self) -> dict:
		return {
			"step": self.step,
			"heading": self.heading,
			"text": self.text,
			"media": [{"token": m.token, "file_name": m.file_name, "kind": m.kind} for m in self.media],
			"department": self.department,
			"location": self.location.to_dict() if self.location else None,
			"map_center": self.map_center.to_dict() if self.map_center else None,
			"search_query": self.search_query,
			"search_results": [r.to_dict() for r in self.search_results],
			"is_searching": self.is_searching,
		}
