"""
Report generation pipeline: the function-call contract used by the host app.
"""

# Standard Library
import datetime
import logging
import os
import pathlib
import tempfile
import typing

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.images
import inspection_report_pdf.models
import inspection_report_pdf.paginate
import inspection_report_pdf.progress
import inspection_report_pdf.render
import inspection_report_pdf.templates


GenerationResult = irp.config.GenerationResult
HeaderMetadata = irp.models.HeaderMetadata
ReportEntry = irp.models.ReportEntry
ProgressListener = irp.progress.ProgressListener
ProgressReporter = irp.progress.ProgressReporter
ProgressStage = irp.progress.ProgressStage

IMAGE_TARGET_WIDTH = irp.config.IMAGE_TARGET_WIDTH
IMAGE_JPEG_QUALITY = irp.config.IMAGE_JPEG_QUALITY
TIMESTAMP_FORMAT = irp.config.TIMESTAMP_FORMAT
OUTPUT_NAME_FORMAT = irp.config.OUTPUT_NAME_FORMAT

logger = logging.getLogger(__name__)


#============================================
def format_capture_timestamp(moment: datetime.datetime) -> str:
	"""
	Format a photo capture time the way it is printed on the photo.

	Args:
		moment: Capture time.

	Returns:
		Text like "03/14/2025, 09:05".
	"""
	return moment.strftime(TIMESTAMP_FORMAT)


#============================================
def build_output_name(now: datetime.datetime | None = None) -> str:
	"""
	Build a timestamped output file name.
	"""
	if now is None:
		now = datetime.datetime.now()
	return now.strftime(OUTPUT_NAME_FORMAT)


#============================================
def write_document_atomic(data: bytes, output_path: pathlib.Path) -> pathlib.Path:
	"""
	Write a document so readers never see a partial file.

	The bytes go to a temporary file in the destination folder, which is
	then renamed over the target. The temporary file is removed on failure.

	Args:
		data: Document bytes.
		output_path: Final path.

	Returns:
		The final path.
	"""
	output_path = pathlib.Path(output_path)
	output_path.parent.mkdir(parents=True, exist_ok=True)
	handle, temp_name = tempfile.mkstemp(
		prefix=f".{output_path.name}.",
		suffix=".tmp",
		dir=str(output_path.parent),
	)
	temp_path = pathlib.Path(temp_name)
	try:
		with os.fdopen(handle, "wb") as temp_file:
			temp_file.write(data)
			temp_file.flush()
			os.fsync(temp_file.fileno())
		os.replace(temp_path, output_path)
	except BaseException:
		temp_path.unlink(missing_ok=True)
		raise
	return output_path


#============================================
def coerce_entries(entries: typing.Iterable[ReportEntry | dict]) -> list[ReportEntry]:
	"""
	Accept entries as ReportEntry records or plain mappings.

	Args:
		entries: Entry records or dicts.

	Returns:
		List of ReportEntry.
	"""
	result: list[ReportEntry] = []
	for item in entries:
		if isinstance(item, ReportEntry):
			result.append(item)
		elif isinstance(item, dict):
			result.append(ReportEntry.from_dict(item))
		else:
			raise ValueError(f"unsupported entry type {type(item).__name__}")
	return result


#============================================
def generate_report(
	entries: typing.Iterable[ReportEntry | dict],
	header: HeaderMetadata | None = None,
	template_id: str | None = None,
	include_header: bool | None = None,
	output_path: str | pathlib.Path | None = None,
	listeners: typing.Iterable[ProgressListener] = (),
	handoff: typing.Callable[[GenerationResult], None] | None = None,
	target_width: int = IMAGE_TARGET_WIDTH,
	quality: int = IMAGE_JPEG_QUALITY,
	today: datetime.date | None = None,
) -> GenerationResult:
	"""
	Build a report PDF from entries and report the outcome.

	Args:
		entries: Report entries in display order.
		header: Header metadata.
		template_id: Template identifier; unknown ids use the default template.
		include_header: Full header block or minimal title; defaults to
			header.include_header.
		output_path: Optional destination file, written atomically.
		listeners: Progress listeners.
		handoff: Optional callable that receives the finished result, for
			sharing or export by the caller.
		target_width: Photo width in pixels after normalization.
		quality: JPEG quality factor.
		today: Date used when the header has no date.

	Returns:
		GenerationResult with success flag, message and document bytes.
	"""
	reporter = ProgressReporter(listeners)
	result = GenerationResult(success=False, message="")
	try:
		reporter.report(ProgressStage.INIT, "Starting PDF generation...")
		if header is None:
			header = HeaderMetadata()
		if include_header is None:
			include_header = header.include_header
		entry_list = coerce_entries(entries)
		result.entries = len(entry_list)

		spec, warning = irp.templates.resolve_template(template_id)
		result.template_id = spec.template_id
		if warning is not None:
			result.warnings.append(warning)

		if not entry_list:
			result.message = "No entries to render."
			reporter.report(ProgressStage.COMPLETE, result.message)
			return result

		photo_count = sum(1 for entry in entry_list if entry.has_photo)
		if photo_count > 0:
			reporter.report(
				ProgressStage.COMPRESSING,
				"Processing images...",
				progress=0,
				current=0,
				total=photo_count,
			)
		normalized, failed = irp.images.normalize_entries(
			entry_list,
			reporter,
			target_width=target_width,
			quality=quality,
		)
		if failed:
			result.warnings.append(f"{failed} of {photo_count} photos could not be processed")
		if photo_count > 0:
			reporter.report(
				ProgressStage.COMPRESSING,
				"Image processing complete.",
				progress=100,
				current=photo_count,
				total=photo_count,
			)

		reporter.report(ProgressStage.GENERATING, "Generating PDF content...")
		pages = irp.paginate.paginate(normalized, spec)
		document = irp.render.assemble_document(
			pages,
			header,
			spec,
			include_header,
			today=today,
		)
		result.pages = len(pages)

		reporter.report(ProgressStage.CREATING, "Creating PDF file...")
		if output_path is not None:
			written = write_document_atomic(document, pathlib.Path(output_path))
			result.output_path = str(written)
		result.document = document

		reporter.report(ProgressStage.SHARING, "Preparing to share PDF...")
		result.success = True
		result.message = f"Generated {result.pages} page(s) for {result.entries} entries."
		if handoff is not None:
			handoff(result)

		reporter.report(ProgressStage.COMPLETE, "PDF generated successfully!")
		return result
	except Exception as error:
		logger.exception("Report generation failed")
		result.success = False
		result.document = None
		result.message = f"Error: {error}"
		if reporter.stage != ProgressStage.COMPLETE:
			try:
				reporter.report(ProgressStage.COMPLETE, result.message)
			except Exception:
				logger.exception("Progress listener failed while reporting an error")
		return result
