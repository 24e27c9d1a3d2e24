"""
Split report entries into fixed-size pages.
"""

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.models
import inspection_report_pdf.templates


Page = irp.models.Page
ReportEntry = irp.models.ReportEntry
TemplateSpec = irp.templates.TemplateSpec


#============================================
def compute_total_pages(entry_count: int, entries_per_page: int) -> int:
	"""
	Compute how many pages a list of entries needs.

	Args:
		entry_count: Number of entries.
		entries_per_page: Page capacity.

	Returns:
		Page count, zero for an empty list.
	"""
	if entries_per_page <= 0:
		raise ValueError("entries_per_page must be positive")
	if entry_count <= 0:
		return 0
	return (entry_count + entries_per_page - 1) // entries_per_page


#============================================
def paginate(entries: list[ReportEntry], spec: TemplateSpec) -> list[Page]:
	"""
	Chunk entries into pages for a template.

	Global indices come from list order, so the printed [N] label does not
	depend on the page capacity.

	Args:
		entries: Report entries in display order.
		spec: Template spec.

	Returns:
		List of Page records.
	"""
	per_page = spec.entries_per_page
	total_pages = compute_total_pages(len(entries), per_page)
	pages: list[Page] = []
	for page_index in range(total_pages):
		start = page_index * per_page
		chunk = tuple(entries[start:start + per_page])
		pages.append(
			Page(
				page_number=page_index + 1,
				total_pages=total_pages,
				entries=chunk,
				first_index=start + 1,
			)
		)
	return pages
