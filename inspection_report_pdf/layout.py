"""
Cell layout engine.

All geometry is in millimetres with the origin at the top-left corner of the
page. One placement function serves every template; the template table
supplies the constants.
"""

# Standard Library
import dataclasses
import math

# PIP3 modules
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.models
import inspection_report_pdf.templates


Page = irp.models.Page
PlacedCell = irp.models.PlacedCell
Rect = irp.models.Rect
ReportEntry = irp.models.ReportEntry
TemplateSpec = irp.templates.TemplateSpec

mm_to_points = irp.config.mm_to_points
points_to_mm = irp.config.points_to_mm

DEFAULT_FONT_REGULAR = irp.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = irp.config.DEFAULT_FONT_BOLD
CARD_HEADER_HEIGHT = irp.config.CARD_HEADER_HEIGHT
TIMESTAMP_FONT_SIZE = irp.config.TIMESTAMP_FONT_SIZE
TIMESTAMP_PADDING = irp.config.TIMESTAMP_PADDING
TIMESTAMP_INSET = irp.config.TIMESTAMP_INSET
OBSERVATIONS_TEXT_SIZE = irp.config.OBSERVATIONS_TEXT_SIZE
OBSERVATIONS_FIRST_LINE_OFFSET = irp.config.OBSERVATIONS_FIRST_LINE_OFFSET
OBSERVATIONS_LINE_HEIGHT = irp.config.OBSERVATIONS_LINE_HEIGHT
OBSERVATIONS_SIDE_INSET = irp.config.OBSERVATIONS_SIDE_INSET
OBSERVATIONS_WIDTH_TRIM = irp.config.OBSERVATIONS_WIDTH_TRIM
OBSERVATIONS_TEXT_INSET = irp.config.OBSERVATIONS_TEXT_INSET
NO_OBSERVATIONS_TEXT = irp.config.NO_OBSERVATIONS_TEXT
ELLIPSIS = irp.config.ELLIPSIS


@dataclasses.dataclass(frozen=True)
class CardGeometry:
	card_width: float
	card_height: float
	image_width: float
	image_height: float


#============================================
def compute_card_geometry(spec: TemplateSpec) -> CardGeometry:
	"""
	Collect the card and image size for a template.

	Args:
		spec: Template spec.

	Returns:
		CardGeometry in mm.
	"""
	return CardGeometry(
		card_width=spec.card_width,
		card_height=spec.card_height,
		image_width=spec.card_width,
		image_height=spec.image_height,
	)


#============================================
def compute_content_top(spec: TemplateSpec, include_header: bool) -> float:
	"""
	Compute the y position of the first card row.

	Args:
		spec: Template spec.
		include_header: Whether the full page header is drawn.

	Returns:
		Top of the grid in mm.
	"""
	return spec.grid_top(include_header)


#============================================
def compute_cell_origin(
	spec: TemplateSpec,
	slot: int,
	include_header: bool,
	geometry: CardGeometry | None = None,
) -> tuple[float, float]:
	"""
	Compute the top-left corner of a grid slot.

	Slots fill left to right, then top to bottom, and the whole grid is
	centered between the content margins.

	Args:
		spec: Template spec.
		slot: Zero-based slot on the page.
		include_header: Whether the full page header is drawn.
		geometry: Precomputed card geometry.

	Returns:
		Tuple of (x, y) in mm.
	"""
	if slot < 0 or slot >= spec.entries_per_page:
		raise ValueError(f"slot {slot} outside a {spec.columns}x{spec.rows} grid")
	if geometry is None:
		geometry = compute_card_geometry(spec)
	col = slot % spec.columns
	row = slot // spec.columns
	total_used_width = spec.columns * geometry.card_width + (spec.columns - 1) * spec.cell_gap_x
	horizontal_offset = (spec.page_width - 2.0 * spec.content_margin - total_used_width) / 2.0
	cell_x = spec.content_margin + horizontal_offset + col * (geometry.card_width + spec.cell_gap_x)
	cell_y = compute_content_top(spec, include_header) + row * (geometry.card_height + spec.cell_gap_y)
	return (cell_x, cell_y)


#============================================
def truncate_text(text: str | None, budget: int) -> str:
	"""
	Cut observation text to a character budget.

	Args:
		text: Observation text.
		budget: Maximum characters kept before the ellipsis.

	Returns:
		The text unchanged when it fits, otherwise the first budget
		characters followed by the ellipsis. Empty text becomes the
		"No observations" fallback.
	"""
	if not text:
		return NO_OBSERVATIONS_TEXT
	if len(text) <= budget:
		return text
	return text[:budget] + ELLIPSIS


#============================================
def wrap_text(text: str, width: float, font_name: str, font_size: float) -> list[str]:
	"""
	Wrap text to a band width.

	Args:
		text: Text to wrap.
		width: Band width in mm.
		font_name: ReportLab font name.
		font_size: Font size in points.

	Returns:
		Wrapped lines.
	"""
	if width <= 0:
		return []
	return reportlab.lib.utils.simpleSplit(text, font_name, font_size, mm_to_points(width))


#============================================
def max_observation_lines(band_height: float) -> int:
	"""
	Number of text lines an observations band can hold.
	"""
	usable = band_height - OBSERVATIONS_FIRST_LINE_OFFSET
	if usable < 0:
		return 0
	return int(math.floor(usable / OBSERVATIONS_LINE_HEIGHT + 1e-9))


#============================================
def layout_observation_lines(text: str | None, band: Rect, budget: int) -> tuple[str, ...]:
	"""
	Truncate, wrap and clip observation text for one band.

	Args:
		text: Observation text.
		band: Observations band rect.
		budget: Character budget.

	Returns:
		Lines that fit in the band; overflow lines are dropped.
	"""
	truncated = truncate_text(text, budget)
	text_width = band.width - 2.0 * OBSERVATIONS_TEXT_INSET
	lines = wrap_text(truncated, text_width, DEFAULT_FONT_REGULAR, OBSERVATIONS_TEXT_SIZE)
	return tuple(lines[:max_observation_lines(band.height)])


#============================================
def compute_timestamp_rect(timestamp: str, image_rect: Rect) -> Rect:
	"""
	Place the timestamp badge in the image's bottom-right corner.

	Args:
		timestamp: Timestamp text.
		image_rect: Image region.

	Returns:
		Badge rect in mm.
	"""
	text_width = points_to_mm(
		reportlab.pdfbase.pdfmetrics.stringWidth(timestamp, DEFAULT_FONT_BOLD, TIMESTAMP_FONT_SIZE)
	)
	text_height = points_to_mm(TIMESTAMP_FONT_SIZE)
	width = min(text_width + 2.0 * TIMESTAMP_PADDING, image_rect.width - 2.0 * TIMESTAMP_INSET)
	height = text_height + 2.0 * TIMESTAMP_PADDING
	x = image_rect.right - TIMESTAMP_INSET - width
	y = image_rect.bottom - TIMESTAMP_INSET - height
	return Rect(x=x, y=y, width=width, height=height)


#============================================
def layout_cell(
	entry: ReportEntry,
	global_index: int,
	origin: tuple[float, float],
	spec: TemplateSpec,
	geometry: CardGeometry | None = None,
) -> PlacedCell:
	"""
	Compute every region of one card.

	Args:
		entry: Report entry.
		global_index: 1-based index across the whole report.
		origin: Top-left card corner in mm.
		spec: Template spec.
		geometry: Precomputed card geometry.

	Returns:
		PlacedCell.
	"""
	if geometry is None:
		geometry = compute_card_geometry(spec)
	card_x, card_y = origin
	card_rect = Rect(card_x, card_y, geometry.card_width, geometry.card_height)
	header_rect = Rect(card_x, card_y, geometry.card_width, CARD_HEADER_HEIGHT)
	image_rect = Rect(
		card_x,
		card_y + CARD_HEADER_HEIGHT,
		geometry.image_width,
		geometry.image_height,
	)

	observations_rect = None
	observation_lines: tuple[str, ...] = ()
	if spec.show_observations:
		obs_y = image_rect.bottom + spec.observation_gap
		obs_height = card_rect.bottom - obs_y - spec.observation_bottom_pad
		observations_rect = Rect(
			card_x + OBSERVATIONS_SIDE_INSET,
			obs_y,
			geometry.card_width - OBSERVATIONS_WIDTH_TRIM,
			max(0.0, obs_height),
		)
		observation_lines = layout_observation_lines(
			entry.observations,
			observations_rect,
			spec.observation_char_budget,
		)

	timestamp_rect = None
	timestamp = entry.visible_timestamp
	if timestamp is not None:
		timestamp_rect = compute_timestamp_rect(timestamp, image_rect)

	return PlacedCell(
		entry=entry,
		global_index=global_index,
		card_rect=card_rect,
		header_rect=header_rect,
		image_rect=image_rect,
		observations_rect=observations_rect,
		observation_lines=observation_lines,
		timestamp_rect=timestamp_rect,
	)


#============================================
def layout_page(page: Page, spec: TemplateSpec, include_header: bool) -> list[PlacedCell]:
	"""
	Lay out every card on one page.

	Args:
		page: Page record.
		spec: Template spec.
		include_header: Whether the full page header is drawn.

	Returns:
		Placed cells in slot order.
	"""
	geometry = compute_card_geometry(spec)
	cells: list[PlacedCell] = []
	for slot, entry in enumerate(page.entries):
		origin = compute_cell_origin(spec, slot, include_header, geometry)
		cells.append(
			layout_cell(entry, page.first_index + slot, origin, spec, geometry)
		)
	return cells


#============================================
def clip_text_to_width(text: str, width: float, font_name: str, font_size: float) -> str:
	"""
	Shorten single-line text so it fits a width, marking the cut with an ellipsis.

	Args:
		text: Text to fit.
		width: Available width in mm.
		font_name: ReportLab font name.
		font_size: Font size in points.

	Returns:
		Text that fits the width.
	"""
	max_points = mm_to_points(width) + 1e-6
	if reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size) <= max_points:
		return text
	clipped = text
	while clipped:
		clipped = clipped[:-1]
		candidate = clipped.rstrip() + ELLIPSIS
		if reportlab.pdfbase.pdfmetrics.stringWidth(candidate, font_name, font_size) <= max_points:
			return candidate
	return ""
