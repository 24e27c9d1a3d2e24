"""
Shared configuration and constants.
"""

# Standard Library
import dataclasses


MM_TO_POINTS = 72.0 / 25.4
A4_SHORT_SIDE = 210.0
A4_LONG_SIDE = 297.0

DEFAULT_FONT_REGULAR = "Helvetica"
DEFAULT_FONT_BOLD = "Helvetica-Bold"
DEFAULT_FONT_ITALIC = "Helvetica-Oblique"

IMAGE_TARGET_WIDTH = 700
IMAGE_JPEG_QUALITY = 75

# page header block heights returned to the grid placement, in mm
FULL_HEADER_HEIGHT = 10.0
MINIMAL_HEADER_HEIGHT = 12.0
FULL_HEADER_FONT_SIZE = 9.0
FULL_HEADER_TITLE_SIZE = 12.0
MINIMAL_TITLE_SIZE = 16.0
FULL_HEADER_ROW1_Y = 15.0
FULL_HEADER_ROW2_Y = 21.0
FULL_HEADER_TITLE_Y = 31.0
MINIMAL_TITLE_Y = 18.0
# lowest point of the drawn header text; the card grid starts at or below it
FULL_HEADER_BOTTOM = FULL_HEADER_TITLE_Y + 2.0
MINIMAL_HEADER_BOTTOM = MINIMAL_TITLE_Y + 2.0
HEADER_FIELD_GAP = 10.0

FOOTER_FONT_SIZE = 8.0
FOOTER_BASELINE_OFFSET = 8.0
# lowest point (from the page bottom) the grid may reach without touching the footer
FOOTER_CLEARANCE = 11.0
FOOTER_ATTRIBUTION = "Developer: PDF Report Maker"

CARD_HEADER_HEIGHT = 8.0
CARD_HEADER_FONT_SIZE = 8.0
CARD_HEADER_TEXT_INSET = 2.0
CARD_HEADER_BASELINE = 5.5
CARD_BORDER_WIDTH = 0.2

PLACEHOLDER_FONT_SIZE = 8.0

TIMESTAMP_FONT_SIZE = 6.0
TIMESTAMP_PADDING = 0.6
TIMESTAMP_INSET = 1.0
TIMESTAMP_BACKGROUND_ALPHA = 0.5

OBSERVATIONS_TITLE = "Observations:"
OBSERVATIONS_TITLE_SIZE = 8.0
OBSERVATIONS_TEXT_SIZE = 7.0
OBSERVATIONS_TEXT_INSET = 0.5
OBSERVATIONS_TITLE_OFFSET = 2.0
OBSERVATIONS_FIRST_LINE_OFFSET = 6.0
OBSERVATIONS_LINE_HEIGHT = 2.5
OBSERVATIONS_SIDE_INSET = 1.0
OBSERVATIONS_WIDTH_TRIM = 4.0
ELLIPSIS = "..."

NO_LOCATION_TEXT = "No Location"
NO_OBSERVATIONS_TEXT = "No observations"
NO_IMAGE_TEXT = "No Image"
IMAGE_ERROR_TEXT = "Image Error"
DEFAULT_COMPANY = "Company Name"
DEFAULT_CREATED_BY = "Inspector"
DEFAULT_REPORT_FOR = "Client"
DEFAULT_REPORT_TITLE = "Inspection Report"

DATE_FORMAT = "%m/%d/%Y"
TIMESTAMP_FORMAT = "%m/%d/%Y, %H:%M"
OUTPUT_NAME_FORMAT = "PDF_%Y%m%d_%H%M%S.pdf"

PROGRESS_BAR_WIDTH = 20


@dataclasses.dataclass(frozen=True)
class StyleConstants:
	black: tuple[int, int, int] = (0, 0, 0)
	white: tuple[int, int, int] = (255, 255, 255)
	gray: tuple[int, int, int] = (204, 204, 204)
	light_gray: tuple[int, int, int] = (224, 224, 224)
	dark_gray: tuple[int, int, int] = (136, 136, 136)
	observations_fill: tuple[int, int, int] = (249, 249, 249)
	timestamp_text: tuple[int, int, int] = (221, 221, 221)


DEFAULT_STYLE = StyleConstants()


@dataclasses.dataclass
class GenerationResult:
	success: bool
	message: str
	document: bytes | None = None
	output_path: str | None = None
	template_id: str | None = None
	pages: int = 0
	entries: int = 0
	warnings: list[str] = dataclasses.field(default_factory=list)


#============================================
def mm_to_points(value: float) -> float:
	"""
	Convert millimetres to points.

	Args:
		value: Millimetre value.

	Returns:
		Points value.
	"""
	return value * MM_TO_POINTS


#============================================
def points_to_mm(value: float) -> float:
	"""
	Convert points to millimetres.
	"""
	return value / MM_TO_POINTS
