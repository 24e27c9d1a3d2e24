import datetime
import io
import os
import pathlib

import pypdf

import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.models
import inspection_report_pdf.pipeline
import inspection_report_pdf.progress


ReportEntry = irp.models.ReportEntry
HeaderMetadata = irp.models.HeaderMetadata
ProgressStage = irp.progress.ProgressStage


#============================================
def _stage_orders(listener: irp.progress.RecordingProgressListener) -> list[int]:
	return [stage.order for stage in listener.stages]


#============================================
def test_generate_report_writes_pdf(tmp_path: pathlib.Path, photo_path: pathlib.Path) -> None:
	"""
	A full run writes the file atomically and walks every stage in order.
	"""
	entries = [
		ReportEntry(location="Kitchen", observations="Grout cracked", photo=photo_path, timestamp="03/14/2025, 09:05"),
		ReportEntry(location="Bath", observations="Slow drain"),
		{"location": "Hall", "observations": "Scuffs", "photo": None},
	]
	listener = irp.progress.RecordingProgressListener()
	output_path = tmp_path / "out" / "report.pdf"
	result = irp.pipeline.generate_report(
		entries,
		header=HeaderMetadata(company="Acme Inspections"),
		template_id="A4Landscape3x2",
		output_path=output_path,
		listeners=[listener],
		today=datetime.date(2025, 3, 14),
	)

	assert result.success, result.message
	assert result.pages == 1
	assert result.entries == 3
	assert result.template_id == "A4Landscape3x2"
	assert result.warnings == []
	assert result.output_path == str(output_path)
	assert output_path.read_bytes() == result.document
	assert sorted(os.listdir(output_path.parent)) == ["report.pdf"]

	reader = pypdf.PdfReader(io.BytesIO(result.document))
	text = reader.pages[0].extract_text()
	assert "Kitchen" in text
	assert "[3]" in text
	assert "Company: Acme Inspections" in text

	orders = _stage_orders(listener)
	assert orders == sorted(orders)
	assert listener.stages[0] == ProgressStage.INIT
	assert listener.stages[-1] == ProgressStage.COMPLETE
	for stage in (ProgressStage.COMPRESSING, ProgressStage.GENERATING, ProgressStage.CREATING, ProgressStage.SHARING):
		assert stage in listener.stages
	assert listener.latest.message == "PDF generated successfully!"


#============================================
def test_generate_report_without_output_path() -> None:
	result = irp.pipeline.generate_report([ReportEntry(location="Porch")])
	assert result.success
	assert result.output_path is None
	assert result.document.startswith(b"%PDF")
	assert result.template_id == "A4Portrait2x2"


#============================================
def test_zero_entries_is_a_failure(tmp_path: pathlib.Path) -> None:
	listener = irp.progress.RecordingProgressListener()
	output_path = tmp_path / "empty.pdf"
	result = irp.pipeline.generate_report([], output_path=output_path, listeners=[listener])
	assert not result.success
	assert result.message == "No entries to render."
	assert result.document is None
	assert not output_path.exists()
	assert listener.stages == [ProgressStage.INIT, ProgressStage.COMPLETE]


#============================================
def test_unknown_template_warns_and_uses_default() -> None:
	result = irp.pipeline.generate_report([ReportEntry()], template_id="Letter3x3")
	assert result.success
	assert result.template_id == "A4Portrait2x2"
	assert len(result.warnings) == 1
	assert "Letter3x3" in result.warnings[0]


#============================================
def test_bad_photo_does_not_abort(tmp_path: pathlib.Path, corrupt_photo_path: pathlib.Path) -> None:
	result = irp.pipeline.generate_report([
		ReportEntry(location="Deck", photo=corrupt_photo_path, timestamp="03/14/2025, 09:05"),
		ReportEntry(location="Yard", photo=tmp_path / "missing.jpg"),
	])
	assert result.success
	assert result.warnings == ["2 of 2 photos could not be processed"]
	text = pypdf.PdfReader(io.BytesIO(result.document)).pages[0].extract_text()
	assert "No Image" in text
	assert "03/14/2025, 09:05" not in text


#============================================
def test_handoff_failure_is_reported(tmp_path: pathlib.Path) -> None:
	"""
	Errors from the caller's handoff become a failure result, not an exception.
	"""
	def handoff(result: irp.config.GenerationResult) -> None:
		raise RuntimeError("share sheet unavailable")

	listener = irp.progress.RecordingProgressListener()
	result = irp.pipeline.generate_report(
		[ReportEntry(location="Lobby")],
		listeners=[listener],
		handoff=handoff,
	)
	assert not result.success
	assert result.message == "Error: share sheet unavailable"
	assert result.document is None
	assert listener.latest.stage == ProgressStage.COMPLETE
	assert listener.latest.message == "Error: share sheet unavailable"


#============================================
def test_failed_write_leaves_no_files(tmp_path: pathlib.Path, monkeypatch) -> None:
	def failing_replace(source, target) -> None:
		raise OSError("disk full")

	monkeypatch.setattr(irp.pipeline.os, "replace", failing_replace)
	output_path = tmp_path / "report.pdf"
	result = irp.pipeline.generate_report([ReportEntry(location="Lobby")], output_path=output_path)
	assert not result.success
	assert "disk full" in result.message
	assert os.listdir(tmp_path) == []


#============================================
def test_invalid_entry_is_a_failure() -> None:
	result = irp.pipeline.generate_report([ReportEntry(), 42])
	assert not result.success
	assert result.message.startswith("Error: ")


#============================================
def test_build_output_name() -> None:
	moment = datetime.datetime(2025, 3, 14, 9, 5, 7)
	assert irp.pipeline.build_output_name(moment) == "PDF_20250314_090507.pdf"


#============================================
def test_format_capture_timestamp() -> None:
	moment = datetime.datetime(2025, 3, 14, 9, 5, 7)
	assert irp.pipeline.format_capture_timestamp(moment) == "03/14/2025, 09:05"


#============================================
def test_failing_listener_returns_failure_result() -> None:
	"""
	A listener that raises never makes generate_report raise.
	"""
	class BrokenListener:
		def on_progress(self, event: irp.progress.ProgressEvent) -> None:
			raise RuntimeError("ui gone")

	result = irp.pipeline.generate_report([ReportEntry()], listeners=[BrokenListener()])
	assert not result.success
	assert result.message == "Error: ui gone"
	assert result.document is None


#============================================
def test_listener_failing_on_completion_returns_failure_result(tmp_path: pathlib.Path) -> None:
	class CompleteBrokenListener:
		def on_progress(self, event: irp.progress.ProgressEvent) -> None:
			if event.stage == ProgressStage.COMPLETE:
				raise RuntimeError("ui gone")

	result = irp.pipeline.generate_report(
		[ReportEntry(location="Lobby")],
		output_path=tmp_path / "report.pdf",
		listeners=[CompleteBrokenListener()],
	)
	assert not result.success
	assert result.message == "Error: ui gone"
