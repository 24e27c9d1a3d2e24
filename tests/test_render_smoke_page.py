import pathlib

import fitz
import PIL.Image

import conftest
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.layout
import inspection_report_pdf.models
import inspection_report_pdf.paginate
import inspection_report_pdf.pipeline
import inspection_report_pdf.templates


DPI = 100
INK_THRESHOLD = 240
MARGIN_INK_LIMIT = 0.002
TITLE_HALF_WIDTH = 20.0
TITLE_BAND_HEIGHT = 3.5
TITLE_INK_MINIMUM = 0.1


#============================================
def _render_pdf_first_page(path: pathlib.Path) -> PIL.Image.Image:
	"""
	Render the first page of a PDF to an image.

	Args:
		path: PDF path.

	Returns:
		PIL image.
	"""
	document = fitz.open(path)
	page = document[0]
	scale = DPI / 72.0
	matrix = fitz.Matrix(scale, scale)
	pixmap = page.get_pixmap(matrix=matrix, alpha=False)
	image = PIL.Image.frombytes("RGB", [pixmap.width, pixmap.height], pixmap.samples)
	document.close()
	return image


#============================================
def _count_ink_ratio(gray: PIL.Image.Image, threshold: int) -> float:
	"""
	Compute the ink ratio for a grayscale region.

	Args:
		gray: Grayscale image region.
		threshold: Pixel intensity threshold.

	Returns:
		Ink ratio.
	"""
	pixels = list(gray.getdata())
	if not pixels:
		return 0.0
	ink = sum(1 for value in pixels if value < threshold)
	return ink / len(pixels)


#============================================
def test_rendered_page_keeps_side_margins_clear(tmp_path: pathlib.Path) -> None:
	"""
	Smoke test full pages: the strips left and right of the card grid stay blank.
	"""
	photo = conftest.make_jpeg_bytes(1200, 900, (20, 20, 20))
	for template_id in irp.templates.list_template_ids():
		spec = irp.templates.get_template(template_id)
		entries = [
			irp.models.ReportEntry(
				location=f"Unit {index + 1}",
				observations="Water damage under the sink",
				photo=photo,
				timestamp="03/14/2025, 09:05",
			)
			for index in range(spec.entries_per_page)
		]
		output_pdf = tmp_path / f"{template_id}.pdf"
		result = irp.pipeline.generate_report(
			entries,
			template_id=template_id,
			output_path=output_pdf,
		)
		assert result.success, result.message

		image = _render_pdf_first_page(output_pdf)
		gray = image.convert("L")
		scale = irp.config.mm_to_points(1.0) * DPI / 72.0

		page = irp.paginate.paginate(entries, spec)[0]
		cells = irp.layout.layout_page(page, spec, True)
		grid_left = min(cell.card_rect.x for cell in cells)
		grid_right = max(cell.card_rect.right for cell in cells)
		grid_top = min(cell.card_rect.y for cell in cells)
		grid_bottom = max(cell.card_rect.bottom for cell in cells)

		y0 = int(round(grid_top * scale))
		y1 = int(round(grid_bottom * scale))
		left_strip = gray.crop((0, y0, max(1, int(grid_left * scale) - 2), y1))
		right_strip = gray.crop((int(grid_right * scale) + 2, y0, gray.width, y1))
		for name, strip in (("left", left_strip), ("right", right_strip)):
			ratio = _count_ink_ratio(strip, INK_THRESHOLD)
			assert ratio <= MARGIN_INK_LIMIT, f"{template_id} {name} margin ink ratio {ratio:.4f}"

		grid_region = gray.crop((int(grid_left * scale), y0, int(grid_right * scale), y1))
		assert _count_ink_ratio(grid_region, INK_THRESHOLD) > 0.05


#============================================
def test_full_header_title_is_visible(tmp_path: pathlib.Path) -> None:
	"""
	The report title band keeps its ink on every template once cards are drawn.
	"""
	photo = conftest.make_jpeg_bytes(1200, 900, (20, 20, 20))
	header = irp.models.HeaderMetadata(company="Acme Inspections", type_of_report="Annual Inspection")
	for template_id in irp.templates.list_template_ids():
		spec = irp.templates.get_template(template_id)
		entries = [
			irp.models.ReportEntry(location=f"Unit {index + 1}", photo=photo)
			for index in range(spec.entries_per_page)
		]
		output_pdf = tmp_path / f"{template_id}.pdf"
		result = irp.pipeline.generate_report(
			entries,
			header=header,
			template_id=template_id,
			include_header=True,
			output_path=output_pdf,
		)
		assert result.success, result.message

		gray = _render_pdf_first_page(output_pdf).convert("L")
		scale = irp.config.mm_to_points(1.0) * DPI / 72.0
		center_x = spec.page_width / 2.0
		band_bottom = irp.config.FULL_HEADER_TITLE_Y
		band = gray.crop((
			int(round((center_x - TITLE_HALF_WIDTH) * scale)),
			int(round((band_bottom - TITLE_BAND_HEIGHT) * scale)),
			int(round((center_x + TITLE_HALF_WIDTH) * scale)),
			int(round(band_bottom * scale)),
		))
		ratio = _count_ink_ratio(band, INK_THRESHOLD)
		assert ratio >= TITLE_INK_MINIMUM, f"{template_id} title band ink ratio {ratio:.4f}"

		page = irp.paginate.paginate(entries, spec)[0]
		cells = irp.layout.layout_page(page, spec, True)
		assert min(cell.card_rect.y for cell in cells) >= irp.config.FULL_HEADER_BOTTOM
