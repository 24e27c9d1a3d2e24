"""
CLI entry point for building an inspection report PDF from a JSON job file.
"""

# Standard Library
import argparse
import json
import pathlib
import sys
import time

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.models
import inspection_report_pdf.pipeline
import inspection_report_pdf.progress
import inspection_report_pdf.templates


GenerationResult = irp.config.GenerationResult
HeaderMetadata = irp.models.HeaderMetadata
ReportEntry = irp.models.ReportEntry
TemplateSpec = irp.templates.TemplateSpec

IMAGE_TARGET_WIDTH = irp.config.IMAGE_TARGET_WIDTH
IMAGE_JPEG_QUALITY = irp.config.IMAGE_JPEG_QUALITY


#============================================
def load_job(job_path: pathlib.Path) -> dict:
	"""
	Load a report job file.

	Args:
		job_path: JSON job path.

	Returns:
		Job mapping with header, entries, template and include_header.
	"""
	text = job_path.read_text(encoding="utf-8")
	job = json.loads(text)
	if not isinstance(job, dict):
		raise ValueError("Job file must contain a JSON object")
	entries = job.get("entries", [])
	if not isinstance(entries, list):
		raise ValueError("Job 'entries' must be a list")
	return job


#============================================
def build_entries(job: dict, base_dir: pathlib.Path) -> list[ReportEntry]:
	"""
	Build report entries from a job, resolving photo paths.

	Args:
		job: Job mapping.
		base_dir: Folder relative photo paths are resolved against.

	Returns:
		List of ReportEntry.
	"""
	return [ReportEntry.from_dict(item, base_dir=base_dir) for item in job.get("entries", [])]


#============================================
def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	"""
	Parse command line arguments.

	Returns:
		Parsed argparse namespace.
	"""
	parser = argparse.ArgumentParser(description="Build a photo inspection report PDF.")
	parser.add_argument("job", nargs="?", help="Report job JSON file.")

	output_group = parser.add_argument_group("Output")
	output_group.add_argument("-o", "--output", dest="output_path", default=None, help="Output PDF path.")
	output_group.add_argument("-m", "--manifest", dest="manifest_path", default=None, help="Output manifest JSON path.")

	layout_group = parser.add_argument_group("Layout")
	layout_group.add_argument("-t", "--template", dest="template_id", default=None, help="Template id, overrides the job file.")
	layout_group.add_argument("-H", "--header", dest="include_header", action="store_true", default=None, help="Draw the full header block.")
	layout_group.add_argument("-n", "--no-header", dest="include_header", action="store_false", default=None, help="Draw only the centered title.")
	layout_group.add_argument("-l", "--list-templates", dest="list_templates", action="store_true", help="List templates and exit.")

	image_group = parser.add_argument_group("Images")
	image_group.add_argument("-w", "--image-width", dest="image_width", type=int, default=IMAGE_TARGET_WIDTH, help="Photo width in pixels.")
	image_group.add_argument("-q", "--quality", dest="quality", type=int, default=IMAGE_JPEG_QUALITY, help="JPEG quality factor.")

	args = parser.parse_args(argv)
	if not args.list_templates and not args.job:
		parser.error("a job file is required unless --list-templates is given")
	return args


#============================================
def print_templates() -> None:
	for template_id in irp.templates.list_template_ids():
		spec = irp.templates.get_template(template_id)
		observations = "observations" if spec.show_observations else "photos only"
		print(
			f"{template_id:16s} {spec.columns}x{spec.rows} {spec.orientation:9s} "
			f"{spec.photo_orientation} photos, {observations}"
		)


#============================================
def write_manifest(
	manifest_path: pathlib.Path,
	job_path: pathlib.Path,
	header: HeaderMetadata,
	result: GenerationResult,
	spec: TemplateSpec,
	include_header: bool,
) -> None:
	"""
	Write a manifest JSON file.

	Args:
		manifest_path: Output path.
		job_path: Input job path.
		header: Header metadata.
		result: Generation result.
		spec: Template spec used.
		include_header: Whether the full header was drawn.
	"""
	data = {
		"job": str(job_path),
		"output": result.output_path,
		"template": spec.template_id,
		"include_header": include_header,
		"entries": result.entries,
		"pages": result.pages,
		"entries_per_page": spec.entries_per_page,
		"warnings": result.warnings,
		"header": {
			"company": header.display_company,
			"created_by": header.display_created_by,
			"report_for": header.display_report_for,
			"type_of_report": header.display_title,
			"date": header.display_date(),
			"contact": header.contact,
		},
		"layout": {
			"columns": spec.columns,
			"rows": spec.rows,
			"page_width": spec.page_width,
			"page_height": spec.page_height,
			"orientation": spec.orientation,
			"image_aspect_ratio": spec.image_aspect_ratio,
			"cell_gap_x": spec.cell_gap_x,
			"cell_gap_y": spec.cell_gap_y,
			"header_footer_margin": spec.header_footer_margin,
			"show_observations": spec.show_observations,
			"observation_char_budget": spec.observation_char_budget,
		},
	}
	with manifest_path.open("w", encoding="utf-8") as handle:
		json.dump(data, handle, indent=2, sort_keys=True)


#============================================
def run_job(args: argparse.Namespace) -> GenerationResult:
	"""
	Run one report job.

	Args:
		args: Parsed argparse namespace.

	Returns:
		GenerationResult.
	"""
	job_path = pathlib.Path(args.job)
	job = load_job(job_path)
	header = HeaderMetadata.from_dict(job.get("header", {}))
	entries = build_entries(job, job_path.parent)
	template_id = args.template_id or job.get("template")
	include_header = args.include_header
	if include_header is None:
		include_header = bool(job.get("include_header", header.include_header))

	output_path = args.output_path
	if output_path is None:
		output_path = str(job_path.parent / irp.pipeline.build_output_name())

	print("Inspection report PDF")
	print(f"Job: {job_path}")
	print(f"Output PDF: {output_path}")
	print(f"Template: {template_id}")
	print(f"Include header: {include_header}")
	print(f"Entries: {len(entries)}")

	start_time = time.perf_counter()
	result = irp.pipeline.generate_report(
		entries,
		header=header,
		template_id=template_id,
		include_header=include_header,
		output_path=output_path,
		listeners=[irp.progress.ConsoleProgressListener()],
		target_width=args.image_width,
		quality=args.quality,
	)
	total_time = time.perf_counter() - start_time

	for warning in result.warnings:
		print(f"Warning: {warning}")
	print(result.message)
	if not result.success:
		return result

	print(f"Pages written: {result.pages}")
	manifest_path = args.manifest_path
	if manifest_path is None:
		manifest_path = f"{result.output_path}.json"
	spec = irp.templates.get_template(result.template_id)
	write_manifest(
		pathlib.Path(manifest_path),
		job_path,
		header,
		result,
		spec,
		include_header,
	)
	print(f"Manifest written: {manifest_path}")
	print(f"Timing: total={total_time:.2f}s")
	return result


#============================================
def main(argv: list[str] | None = None) -> int:
	"""
	Main entry point.
	"""
	args = parse_args(argv)
	if args.list_templates:
		print_templates()
		return 0
	result = run_job(args)
	return 0 if result.success else 1


if __name__ == "__main__":
	sys.exit(main())
