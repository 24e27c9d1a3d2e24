"""
Document assembly on a ReportLab canvas.

Layout math lives in layout.py and works in millimetres from the top-left
corner; this module converts to PDF points with a bottom-left origin.
"""

# Standard Library
import datetime
import io

# PIP3 modules
import PIL.Image
import pypdf
import pypdf.errors
import reportlab.lib.utils
import reportlab.pdfbase.pdfmetrics
import reportlab.pdfgen.canvas

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.errors
import inspection_report_pdf.layout
import inspection_report_pdf.models
import inspection_report_pdf.templates


EmbeddableImage = irp.models.EmbeddableImage
HeaderMetadata = irp.models.HeaderMetadata
Page = irp.models.Page
PlacedCell = irp.models.PlacedCell
Rect = irp.models.Rect
TemplateSpec = irp.templates.TemplateSpec
StyleConstants = irp.config.StyleConstants
ReportGenerationError = irp.errors.ReportGenerationError

mm_to_points = irp.config.mm_to_points
points_to_mm = irp.config.points_to_mm

DEFAULT_STYLE = irp.config.DEFAULT_STYLE
DEFAULT_FONT_REGULAR = irp.config.DEFAULT_FONT_REGULAR
DEFAULT_FONT_BOLD = irp.config.DEFAULT_FONT_BOLD
DEFAULT_FONT_ITALIC = irp.config.DEFAULT_FONT_ITALIC
DEFAULT_REPORT_TITLE = irp.config.DEFAULT_REPORT_TITLE
FULL_HEADER_FONT_SIZE = irp.config.FULL_HEADER_FONT_SIZE
FULL_HEADER_TITLE_SIZE = irp.config.FULL_HEADER_TITLE_SIZE
MINIMAL_TITLE_SIZE = irp.config.MINIMAL_TITLE_SIZE
FULL_HEADER_ROW1_Y = irp.config.FULL_HEADER_ROW1_Y
FULL_HEADER_ROW2_Y = irp.config.FULL_HEADER_ROW2_Y
FULL_HEADER_TITLE_Y = irp.config.FULL_HEADER_TITLE_Y
MINIMAL_TITLE_Y = irp.config.MINIMAL_TITLE_Y
HEADER_FIELD_GAP = irp.config.HEADER_FIELD_GAP
FOOTER_FONT_SIZE = irp.config.FOOTER_FONT_SIZE
FOOTER_BASELINE_OFFSET = irp.config.FOOTER_BASELINE_OFFSET
FOOTER_ATTRIBUTION = irp.config.FOOTER_ATTRIBUTION
CARD_HEADER_FONT_SIZE = irp.config.CARD_HEADER_FONT_SIZE
CARD_HEADER_TEXT_INSET = irp.config.CARD_HEADER_TEXT_INSET
CARD_HEADER_BASELINE = irp.config.CARD_HEADER_BASELINE
CARD_BORDER_WIDTH = irp.config.CARD_BORDER_WIDTH
PLACEHOLDER_FONT_SIZE = irp.config.PLACEHOLDER_FONT_SIZE
TIMESTAMP_FONT_SIZE = irp.config.TIMESTAMP_FONT_SIZE
TIMESTAMP_PADDING = irp.config.TIMESTAMP_PADDING
TIMESTAMP_BACKGROUND_ALPHA = irp.config.TIMESTAMP_BACKGROUND_ALPHA
OBSERVATIONS_TITLE = irp.config.OBSERVATIONS_TITLE
OBSERVATIONS_TITLE_SIZE = irp.config.OBSERVATIONS_TITLE_SIZE
OBSERVATIONS_TEXT_SIZE = irp.config.OBSERVATIONS_TEXT_SIZE
OBSERVATIONS_TEXT_INSET = irp.config.OBSERVATIONS_TEXT_INSET
OBSERVATIONS_TITLE_OFFSET = irp.config.OBSERVATIONS_TITLE_OFFSET
OBSERVATIONS_FIRST_LINE_OFFSET = irp.config.OBSERVATIONS_FIRST_LINE_OFFSET
OBSERVATIONS_LINE_HEIGHT = irp.config.OBSERVATIONS_LINE_HEIGHT
NO_IMAGE_TEXT = irp.config.NO_IMAGE_TEXT
IMAGE_ERROR_TEXT = irp.config.IMAGE_ERROR_TEXT


#============================================
def set_fill(pdf: reportlab.pdfgen.canvas.Canvas, color: tuple[int, int, int]) -> None:
	pdf.setFillColorRGB(color[0] / 255.0, color[1] / 255.0, color[2] / 255.0)


#============================================
def set_stroke(pdf: reportlab.pdfgen.canvas.Canvas, color: tuple[int, int, int]) -> None:
	pdf.setStrokeColorRGB(color[0] / 255.0, color[1] / 255.0, color[2] / 255.0)


#============================================
def draw_text(
	pdf: reportlab.pdfgen.canvas.Canvas,
	text: str,
	x: float,
	baseline_y: float,
	page_height: float,
	font_name: str,
	font_size: float,
	color: tuple[int, int, int],
) -> None:
	"""
	Draw one line of text at a top-left based millimetre position.

	Args:
		pdf: ReportLab canvas.
		text: Text to draw.
		x: Left edge in mm.
		baseline_y: Baseline in mm from the page top.
		page_height: Page height in mm.
		font_name: ReportLab font name.
		font_size: Font size in points.
		color: RGB color in 0-255.
	"""
	pdf.setFont(font_name, font_size)
	set_fill(pdf, color)
	pdf.drawString(mm_to_points(x), mm_to_points(page_height - baseline_y), text)


#============================================
def text_width(text: str, font_name: str, font_size: float) -> float:
	"""
	Width of a text run in mm.
	"""
	return points_to_mm(reportlab.pdfbase.pdfmetrics.stringWidth(text, font_name, font_size))


#============================================
def draw_rect(
	pdf: reportlab.pdfgen.canvas.Canvas,
	rect: Rect,
	page_height: float,
	stroke: bool,
	fill: bool,
) -> None:
	"""
	Draw a top-left based millimetre rect.

	Args:
		pdf: ReportLab canvas.
		rect: Rect in mm.
		page_height: Page height in mm.
		stroke: Whether to stroke the outline.
		fill: Whether to fill the rect.
	"""
	pdf.rect(
		mm_to_points(rect.x),
		mm_to_points(page_height - rect.bottom),
		mm_to_points(rect.width),
		mm_to_points(rect.height),
		stroke=1 if stroke else 0,
		fill=1 if fill else 0,
	)


#============================================
def draw_page_header(
	pdf: reportlab.pdfgen.canvas.Canvas,
	header: HeaderMetadata,
	spec: TemplateSpec,
	include_header: bool,
	style: StyleConstants,
	today: datetime.date | None = None,
) -> None:
	"""
	Draw the page header: the full metadata block or a centered title.

	Args:
		pdf: ReportLab canvas.
		header: Header metadata.
		spec: Template spec.
		include_header: Whether to draw the full metadata block.
		style: Color palette.
		today: Date used when the header has no date.
	"""
	page_width = spec.page_width
	page_height = spec.page_height
	margin = spec.header_footer_margin
	if not include_header:
		title = DEFAULT_REPORT_TITLE
		title_width = text_width(title, DEFAULT_FONT_BOLD, MINIMAL_TITLE_SIZE)
		draw_text(
			pdf, title, (page_width - title_width) / 2.0, MINIMAL_TITLE_Y,
			page_height, DEFAULT_FONT_BOLD, MINIMAL_TITLE_SIZE, style.black,
		)
		return

	company_text = f"Company: {header.display_company}"
	created_by_text = f"Created By: {header.display_created_by}"
	draw_text(
		pdf, company_text, margin, FULL_HEADER_ROW1_Y,
		page_height, DEFAULT_FONT_REGULAR, FULL_HEADER_FONT_SIZE, style.black,
	)
	company_width = text_width(company_text, DEFAULT_FONT_REGULAR, FULL_HEADER_FONT_SIZE)
	draw_text(
		pdf, created_by_text, margin + company_width + HEADER_FIELD_GAP, FULL_HEADER_ROW1_Y,
		page_height, DEFAULT_FONT_REGULAR, FULL_HEADER_FONT_SIZE, style.black,
	)

	report_for_text = f"Report For: {header.display_report_for}"
	date_text = f"Date: {header.display_date(today)}"
	draw_text(
		pdf, report_for_text, margin, FULL_HEADER_ROW2_Y,
		page_height, DEFAULT_FONT_REGULAR, FULL_HEADER_FONT_SIZE, style.black,
	)
	date_width = text_width(date_text, DEFAULT_FONT_REGULAR, FULL_HEADER_FONT_SIZE)
	draw_text(
		pdf, date_text, page_width - margin - date_width, FULL_HEADER_ROW2_Y,
		page_height, DEFAULT_FONT_REGULAR, FULL_HEADER_FONT_SIZE, style.black,
	)

	title = header.display_title
	title_width = text_width(title, DEFAULT_FONT_BOLD, FULL_HEADER_TITLE_SIZE)
	draw_text(
		pdf, title, (page_width - title_width) / 2.0, FULL_HEADER_TITLE_Y,
		page_height, DEFAULT_FONT_BOLD, FULL_HEADER_TITLE_SIZE, style.black,
	)


#============================================
def format_page_label(page_number: int, total_pages: int) -> str:
	return f"Page {page_number} of {total_pages}"


#============================================
def draw_page_footer(
	pdf: reportlab.pdfgen.canvas.Canvas,
	page_number: int,
	total_pages: int,
	spec: TemplateSpec,
	style: StyleConstants,
) -> None:
	"""
	Draw the attribution line and the page counter.

	Args:
		pdf: ReportLab canvas.
		page_number: 1-based page number.
		total_pages: Total page count.
		spec: Template spec.
		style: Color palette.
	"""
	margin = spec.header_footer_margin
	baseline_y = spec.page_height - FOOTER_BASELINE_OFFSET
	draw_text(
		pdf, FOOTER_ATTRIBUTION, margin, baseline_y,
		spec.page_height, DEFAULT_FONT_REGULAR, FOOTER_FONT_SIZE, style.dark_gray,
	)
	page_text = format_page_label(page_number, total_pages)
	page_text_width = text_width(page_text, DEFAULT_FONT_REGULAR, FOOTER_FONT_SIZE)
	draw_text(
		pdf, page_text, spec.page_width - margin - page_text_width, baseline_y,
		spec.page_height, DEFAULT_FONT_REGULAR, FOOTER_FONT_SIZE, style.dark_gray,
	)


#============================================
def draw_card_header(
	pdf: reportlab.pdfgen.canvas.Canvas,
	cell: PlacedCell,
	page_height: float,
	style: StyleConstants,
) -> None:
	"""
	Draw the header band with the location and the [N] label.

	Args:
		pdf: ReportLab canvas.
		cell: Placed cell.
		page_height: Page height in mm.
		style: Color palette.
	"""
	rect = cell.header_rect
	set_fill(pdf, style.white)
	draw_rect(pdf, rect, page_height, stroke=False, fill=True)
	pdf.setLineWidth(mm_to_points(CARD_BORDER_WIDTH))
	set_stroke(pdf, style.gray)
	draw_rect(pdf, rect, page_height, stroke=True, fill=False)

	label = cell.label
	label_width = text_width(label, DEFAULT_FONT_BOLD, CARD_HEADER_FONT_SIZE)
	label_x = rect.right - label_width - CARD_HEADER_TEXT_INSET
	baseline_y = rect.y + CARD_HEADER_BASELINE
	location_room = label_x - rect.x - 2.0 * CARD_HEADER_TEXT_INSET
	location = irp.layout.clip_text_to_width(
		cell.entry.display_location,
		location_room,
		DEFAULT_FONT_BOLD,
		CARD_HEADER_FONT_SIZE,
	)
	draw_text(
		pdf, location, rect.x + CARD_HEADER_TEXT_INSET, baseline_y,
		page_height, DEFAULT_FONT_BOLD, CARD_HEADER_FONT_SIZE, style.black,
	)
	draw_text(
		pdf, label, label_x, baseline_y,
		page_height, DEFAULT_FONT_BOLD, CARD_HEADER_FONT_SIZE, style.black,
	)


#============================================
def crop_to_aspect(image: PIL.Image.Image, aspect_ratio: float) -> PIL.Image.Image:
	"""
	Center-crop an image to a height/width ratio so it covers a region.

	Args:
		image: PIL image.
		aspect_ratio: Target height divided by width.

	Returns:
		Cropped image.
	"""
	width, height = image.size
	if width <= 0 or height <= 0 or aspect_ratio <= 0:
		return image
	current_ratio = height / float(width)
	if abs(current_ratio - aspect_ratio) < 1e-3:
		return image
	if current_ratio > aspect_ratio:
		new_height = max(1, int(round(width * aspect_ratio)))
		top = (height - new_height) // 2
		return image.crop((0, top, width, top + new_height))
	new_width = max(1, int(round(height / aspect_ratio)))
	left = (width - new_width) // 2
	return image.crop((left, 0, left + new_width, height))


#============================================
def draw_image_placeholder(
	pdf: reportlab.pdfgen.canvas.Canvas,
	rect: Rect,
	text: str,
	page_height: float,
	style: StyleConstants,
) -> None:
	"""
	Fill the image region with a neutral block and a centered label.

	Args:
		pdf: ReportLab canvas.
		rect: Image region.
		text: Placeholder label.
		page_height: Page height in mm.
		style: Color palette.
	"""
	set_fill(pdf, style.light_gray)
	draw_rect(pdf, rect, page_height, stroke=False, fill=True)
	label_width = text_width(text, DEFAULT_FONT_ITALIC, PLACEHOLDER_FONT_SIZE)
	draw_text(
		pdf, text, rect.x + (rect.width - label_width) / 2.0, rect.y + rect.height / 2.0,
		page_height, DEFAULT_FONT_ITALIC, PLACEHOLDER_FONT_SIZE, style.dark_gray,
	)


#============================================
def draw_cell_image(
	pdf: reportlab.pdfgen.canvas.Canvas,
	cell: PlacedCell,
	page_height: float,
	style: StyleConstants,
) -> str | None:
	"""
	Draw the photo cover-cropped into the image region, or a placeholder.

	Args:
		pdf: ReportLab canvas.
		cell: Placed cell.
		page_height: Page height in mm.
		style: Color palette.

	Returns:
		Placeholder text when a placeholder was drawn, otherwise None.
	"""
	rect = cell.image_rect
	photo = cell.entry.photo
	if photo is None:
		draw_image_placeholder(pdf, rect, NO_IMAGE_TEXT, page_height, style)
		return NO_IMAGE_TEXT
	if not isinstance(photo, EmbeddableImage):
		draw_image_placeholder(pdf, rect, IMAGE_ERROR_TEXT, page_height, style)
		return IMAGE_ERROR_TEXT
	try:
		image = PIL.Image.open(io.BytesIO(photo.data))
		image.load()
	except (OSError, ValueError, SyntaxError):
		draw_image_placeholder(pdf, rect, IMAGE_ERROR_TEXT, page_height, style)
		return IMAGE_ERROR_TEXT
	if image.mode != "RGB":
		image = image.convert("RGB")
	image = crop_to_aspect(image, rect.height / rect.width)
	image_reader = reportlab.lib.utils.ImageReader(image)
	pdf.drawImage(
		image_reader,
		mm_to_points(rect.x),
		mm_to_points(page_height - rect.bottom),
		width=mm_to_points(rect.width),
		height=mm_to_points(rect.height),
		mask=None,
		preserveAspectRatio=False,
		anchor="sw",
	)
	return None


#============================================
def draw_timestamp(
	pdf: reportlab.pdfgen.canvas.Canvas,
	cell: PlacedCell,
	page_height: float,
	style: StyleConstants,
) -> None:
	"""
	Draw the timestamp badge over the bottom-right corner of the photo.

	Args:
		pdf: ReportLab canvas.
		cell: Placed cell.
		page_height: Page height in mm.
		style: Color palette.
	"""
	rect = cell.timestamp_rect
	timestamp = cell.entry.visible_timestamp
	if rect is None or timestamp is None:
		return
	pdf.saveState()
	set_fill(pdf, style.black)
	pdf.setFillAlpha(TIMESTAMP_BACKGROUND_ALPHA)
	draw_rect(pdf, rect, page_height, stroke=False, fill=True)
	pdf.restoreState()

	descent = reportlab.pdfbase.pdfmetrics.getDescent(DEFAULT_FONT_BOLD) * TIMESTAMP_FONT_SIZE / 1000.0
	baseline_y = rect.bottom - TIMESTAMP_PADDING + points_to_mm(descent)
	text = irp.layout.clip_text_to_width(
		timestamp,
		rect.width - 2.0 * TIMESTAMP_PADDING,
		DEFAULT_FONT_BOLD,
		TIMESTAMP_FONT_SIZE,
	)
	draw_text(
		pdf, text, rect.x + TIMESTAMP_PADDING, baseline_y,
		page_height, DEFAULT_FONT_BOLD, TIMESTAMP_FONT_SIZE, style.timestamp_text,
	)


#============================================
def draw_observations(
	pdf: reportlab.pdfgen.canvas.Canvas,
	cell: PlacedCell,
	page_height: float,
	style: StyleConstants,
) -> None:
	"""
	Draw the tinted observations band and its wrapped lines.

	Args:
		pdf: ReportLab canvas.
		cell: Placed cell.
		page_height: Page height in mm.
		style: Color palette.
	"""
	rect = cell.observations_rect
	if rect is None:
		return
	set_fill(pdf, style.observations_fill)
	draw_rect(pdf, rect, page_height, stroke=False, fill=True)
	text_x = rect.x + OBSERVATIONS_TEXT_INSET
	draw_text(
		pdf, OBSERVATIONS_TITLE, text_x, rect.y + OBSERVATIONS_TITLE_OFFSET,
		page_height, DEFAULT_FONT_BOLD, OBSERVATIONS_TITLE_SIZE, style.black,
	)
	for line_index, line in enumerate(cell.observation_lines):
		baseline_y = rect.y + OBSERVATIONS_FIRST_LINE_OFFSET + line_index * OBSERVATIONS_LINE_HEIGHT
		draw_text(
			pdf, line, text_x, baseline_y,
			page_height, DEFAULT_FONT_REGULAR, OBSERVATIONS_TEXT_SIZE, style.black,
		)


#============================================
def draw_cell(
	pdf: reportlab.pdfgen.canvas.Canvas,
	cell: PlacedCell,
	page_height: float,
	style: StyleConstants,
) -> None:
	"""
	Draw one card. The outer border goes last so fills never cover it.

	Args:
		pdf: ReportLab canvas.
		cell: Placed cell.
		page_height: Page height in mm.
		style: Color palette.
	"""
	draw_card_header(pdf, cell, page_height, style)
	draw_cell_image(pdf, cell, page_height, style)
	draw_timestamp(pdf, cell, page_height, style)
	draw_observations(pdf, cell, page_height, style)
	pdf.setLineWidth(mm_to_points(CARD_BORDER_WIDTH))
	set_stroke(pdf, style.gray)
	draw_rect(pdf, cell.card_rect, page_height, stroke=True, fill=False)


#============================================
def assemble_document(
	pages: list[Page],
	header: HeaderMetadata,
	spec: TemplateSpec,
	include_header: bool,
	style: StyleConstants = DEFAULT_STYLE,
	today: datetime.date | None = None,
) -> bytes:
	"""
	Render paginated entries into a finished PDF.

	Args:
		pages: Pages from the paginator.
		header: Header metadata.
		spec: Template spec.
		include_header: Whether to draw the full metadata block.
		style: Color palette.
		today: Date used when the header has no date.

	Returns:
		PDF bytes, or b"" when there are no pages.
	"""
	if not pages:
		return b""
	total_pages = len(pages)
	for page in pages:
		if page.total_pages != total_pages:
			raise ReportGenerationError(
				f"Page {page.page_number} expects {page.total_pages} pages, got {total_pages}"
			)

	buffer = io.BytesIO()
	pdf = reportlab.pdfgen.canvas.Canvas(
		buffer,
		pagesize=(mm_to_points(spec.page_width), mm_to_points(spec.page_height)),
	)
	pdf.setTitle(header.display_title)
	pdf.setAuthor(header.display_created_by)
	pdf.setSubject(spec.title)
	pdf.setCreator("inspection_report_pdf")

	for page_index, page in enumerate(pages):
		if page_index > 0:
			pdf.showPage()
		draw_page_header(pdf, header, spec, include_header, style, today)
		for cell in irp.layout.layout_page(page, spec, include_header):
			draw_cell(pdf, cell, spec.page_height, style)
		draw_page_footer(pdf, page.page_number, page.total_pages, spec, style)

	pdf.save()
	data = buffer.getvalue()
	if not data:
		raise ReportGenerationError("PDF backend produced no output")
	verify_document(data, total_pages)
	return data


#============================================
def verify_document(data: bytes, expected_pages: int) -> int:
	"""
	Read a finished document back and check its page count.

	Args:
		data: PDF bytes.
		expected_pages: Page count the paginator produced.

	Returns:
		Page count found in the document.
	"""
	try:
		reader = pypdf.PdfReader(io.BytesIO(data))
		page_count = len(reader.pages)
	except pypdf.errors.PdfReadError as error:
		raise ReportGenerationError(f"PDF backend produced an unreadable document: {error}") from error
	if page_count != expected_pages:
		raise ReportGenerationError(
			f"PDF has {page_count} pages, expected {expected_pages}"
		)
	return page_count
