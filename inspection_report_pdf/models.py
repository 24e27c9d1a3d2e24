"""
Report data model: entries, header metadata and derived layout records.
"""

# Standard Library
import base64
import dataclasses
import datetime
import pathlib

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config


NO_LOCATION_TEXT = irp.config.NO_LOCATION_TEXT
NO_OBSERVATIONS_TEXT = irp.config.NO_OBSERVATIONS_TEXT
DEFAULT_COMPANY = irp.config.DEFAULT_COMPANY
DEFAULT_CREATED_BY = irp.config.DEFAULT_CREATED_BY
DEFAULT_REPORT_FOR = irp.config.DEFAULT_REPORT_FOR
DEFAULT_REPORT_TITLE = irp.config.DEFAULT_REPORT_TITLE
DATE_FORMAT = irp.config.DATE_FORMAT


@dataclasses.dataclass(frozen=True)
class EmbeddableImage:
	data: bytes
	width: int
	height: int
	mime_type: str = "image/jpeg"

	@property
	def base64(self) -> str:
		return base64.b64encode(self.data).decode("ascii")

	@property
	def data_uri(self) -> str:
		return f"data:{self.mime_type};base64,{self.base64}"


# raw photo references accepted before normalization
ImageRef = str | pathlib.Path | bytes | EmbeddableImage


@dataclasses.dataclass(frozen=True)
class ReportEntry:
	location: str = ""
	observations: str = ""
	photo: ImageRef | None = None
	timestamp: str | None = None

	def __post_init__(self) -> None:
		if self.location is None:
			object.__setattr__(self, "location", "")
		if self.observations is None:
			object.__setattr__(self, "observations", "")
		if not isinstance(self.location, str):
			raise ValueError(f"location must be a string, got {type(self.location).__name__}")
		if not isinstance(self.observations, str):
			raise ValueError(f"observations must be a string, got {type(self.observations).__name__}")
		if self.timestamp is not None and not isinstance(self.timestamp, str):
			raise ValueError(f"timestamp must be a string or None, got {type(self.timestamp).__name__}")
		if self.photo is not None and not isinstance(self.photo, (str, pathlib.Path, bytes, EmbeddableImage)):
			raise ValueError(f"unsupported photo reference type {type(self.photo).__name__}")
		# an empty reference means the same thing as no photo
		if isinstance(self.photo, (str, bytes)) and not self.photo:
			object.__setattr__(self, "photo", None)

	@property
	def has_photo(self) -> bool:
		return self.photo is not None

	@property
	def visible_timestamp(self) -> str | None:
		"""
		Timestamp to draw, which is never shown without a photo.
		"""
		if not self.has_photo or not self.timestamp:
			return None
		return self.timestamp

	@property
	def display_location(self) -> str:
		return self.location or NO_LOCATION_TEXT

	@classmethod
	def from_dict(cls, data: dict, base_dir: pathlib.Path | None = None) -> "ReportEntry":
		"""
		Build an entry from a JSON mapping.

		Args:
			data: Mapping with location, observations, photo and timestamp keys.
			base_dir: Folder that relative photo paths are resolved against.

		Returns:
			ReportEntry.
		"""
		photo = data.get("photo")
		if isinstance(photo, str) and photo and not photo.startswith("data:"):
			photo_path = pathlib.Path(photo)
			if base_dir is not None and not photo_path.is_absolute():
				photo_path = base_dir / photo_path
			photo = photo_path
		return cls(
			location=data.get("location") or "",
			observations=data.get("observations") or "",
			photo=photo,
			timestamp=data.get("timestamp"),
		)


@dataclasses.dataclass(frozen=True)
class HeaderMetadata:
	company: str = ""
	created_by: str = ""
	report_for: str = ""
	type_of_report: str = ""
	date: str = ""
	contact: str = ""
	include_header: bool = True

	@property
	def display_company(self) -> str:
		return self.company or DEFAULT_COMPANY

	@property
	def display_created_by(self) -> str:
		return self.created_by or DEFAULT_CREATED_BY

	@property
	def display_report_for(self) -> str:
		return self.report_for or DEFAULT_REPORT_FOR

	@property
	def display_title(self) -> str:
		return self.type_of_report or DEFAULT_REPORT_TITLE

	def display_date(self, today: datetime.date | None = None) -> str:
		"""
		Return the header date, falling back to today's date.

		Args:
			today: Optional date used for the fallback.

		Returns:
			Date string.
		"""
		if self.date:
			return self.date
		if today is None:
			today = datetime.date.today()
		return today.strftime(DATE_FORMAT)

	@classmethod
	def from_dict(cls, data: dict) -> "HeaderMetadata":
		"""
		Build header metadata from a mapping with snake_case or camelCase keys.

		Args:
			data: Header mapping.

		Returns:
			HeaderMetadata.
		"""
		def pick(*keys: str) -> str:
			for key in keys:
				value = data.get(key)
				if value:
					return str(value)
			return ""

		include_header = data.get("include_header", data.get("includeHeader", True))
		return cls(
			company=pick("company"),
			created_by=pick("created_by", "createdBy"),
			report_for=pick("report_for", "reportFor"),
			type_of_report=pick("type_of_report", "typeOfReport"),
			date=pick("date"),
			contact=pick("contact"),
			include_header=bool(include_header),
		)


@dataclasses.dataclass(frozen=True)
class Rect:
	x: float
	y: float
	width: float
	height: float

	@property
	def right(self) -> float:
		return self.x + self.width

	@property
	def bottom(self) -> float:
		return self.y + self.height

	def contains(self, other: "Rect", epsilon: float = 1e-6) -> bool:
		"""
		Check whether another rect lies fully inside this one.

		Args:
			other: Rect to test.
			epsilon: Tolerance in mm.

		Returns:
			True if other is inside.
		"""
		return (
			other.x >= self.x - epsilon
			and other.y >= self.y - epsilon
			and other.right <= self.right + epsilon
			and other.bottom <= self.bottom + epsilon
		)

	def intersects(self, other: "Rect") -> bool:
		left = max(self.x, other.x)
		right = min(self.right, other.right)
		top = max(self.y, other.y)
		bottom = min(self.bottom, other.bottom)
		return right > left and bottom > top


@dataclasses.dataclass(frozen=True)
class Page:
	page_number: int
	total_pages: int
	entries: tuple[ReportEntry, ...]
	first_index: int

	def global_indices(self) -> list[int]:
		return [self.first_index + offset for offset in range(len(self.entries))]


@dataclasses.dataclass(frozen=True)
class PlacedCell:
	entry: ReportEntry
	global_index: int
	card_rect: Rect
	header_rect: Rect
	image_rect: Rect
	observations_rect: Rect | None
	observation_lines: tuple[str, ...]
	timestamp_rect: Rect | None

	@property
	def label(self) -> str:
		return f"[{self.global_index}]"
