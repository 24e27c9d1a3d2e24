import pytest

import inspection_report_pdf as irp
import inspection_report_pdf.models
import inspection_report_pdf.paginate
import inspection_report_pdf.templates


#============================================
def _entries(count: int) -> list[irp.models.ReportEntry]:
	return [
		irp.models.ReportEntry(location=f"Room {index + 1}", observations=f"Note {index + 1}")
		for index in range(count)
	]


#============================================
def test_total_pages_is_ceiling() -> None:
	for spec in irp.templates.TEMPLATES.values():
		per_page = spec.entries_per_page
		for count in range(0, 3 * per_page + 2):
			expected = -(-count // per_page)
			assert irp.paginate.compute_total_pages(count, per_page) == expected


#============================================
def test_total_pages_rejects_empty_capacity() -> None:
	with pytest.raises(ValueError):
		irp.paginate.compute_total_pages(3, 0)


#============================================
def test_four_entries_fill_one_page() -> None:
	spec = irp.templates.get_template("A4Portrait2x2")
	pages = irp.paginate.paginate(_entries(4), spec)
	assert len(pages) == 1
	assert pages[0].page_number == 1
	assert pages[0].total_pages == 1
	assert pages[0].global_indices() == [1, 2, 3, 4]


#============================================
def test_fifth_entry_starts_second_page() -> None:
	spec = irp.templates.get_template("A4Portrait2x2")
	entries = _entries(5)
	pages = irp.paginate.paginate(entries, spec)
	assert len(pages) == 2
	assert pages[1].entries == (entries[4],)
	assert pages[1].first_index == 5
	assert pages[1].global_indices() == [5]
	assert all(page.total_pages == 2 for page in pages)


#============================================
def test_no_entries_no_pages() -> None:
	spec = irp.templates.get_template("A4Landscape3x2")
	assert irp.paginate.paginate([], spec) == []


#============================================
def test_pages_preserve_order_and_cover_every_entry() -> None:
	"""
	Concatenating page entries gives back the input list for every template.
	"""
	entries = _entries(53)
	for spec in irp.templates.TEMPLATES.values():
		pages = irp.paginate.paginate(entries, spec)
		flattened = [entry for page in pages for entry in page.entries]
		assert flattened == entries
		indices = [index for page in pages for index in page.global_indices()]
		assert indices == list(range(1, 54))
		for page in pages[:-1]:
			assert len(page.entries) == spec.entries_per_page
		assert 1 <= len(pages[-1].entries) <= spec.entries_per_page
