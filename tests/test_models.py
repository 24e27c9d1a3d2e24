import datetime
import pathlib

import pytest

import inspection_report_pdf as irp
import inspection_report_pdf.models


ReportEntry = irp.models.ReportEntry
HeaderMetadata = irp.models.HeaderMetadata


#============================================
def test_entry_fallbacks() -> None:
	entry = ReportEntry(location=None, observations=None, photo="")
	assert entry.location == ""
	assert entry.display_location == "No Location"
	assert entry.photo is None
	assert not entry.has_photo


#============================================
def test_entry_rejects_wrong_types() -> None:
	with pytest.raises(ValueError):
		ReportEntry(location=12)
	with pytest.raises(ValueError):
		ReportEntry(photo=3.5)
	with pytest.raises(ValueError):
		ReportEntry(timestamp=datetime.datetime(2025, 3, 14))


#============================================
def test_timestamp_hidden_without_photo() -> None:
	assert ReportEntry(timestamp="03/14/2025, 09:05").visible_timestamp is None
	entry = ReportEntry(photo=b"jpeg", timestamp="03/14/2025, 09:05")
	assert entry.visible_timestamp == "03/14/2025, 09:05"
	assert ReportEntry(photo=b"jpeg", timestamp="").visible_timestamp is None


#============================================
def test_entry_from_dict_resolves_relative_photo(tmp_path: pathlib.Path) -> None:
	entry = ReportEntry.from_dict(
		{"location": "Roof", "observations": "Ponding water", "photo": "photos/roof.jpg"},
		base_dir=tmp_path,
	)
	assert entry.photo == tmp_path / "photos" / "roof.jpg"
	data_uri = ReportEntry.from_dict({"photo": "data:image/jpeg;base64,AAAA"}, base_dir=tmp_path)
	assert data_uri.photo == "data:image/jpeg;base64,AAAA"
	assert ReportEntry.from_dict({"photo": None}).photo is None


#============================================
def test_header_fallbacks() -> None:
	header = HeaderMetadata()
	assert header.display_company == "Company Name"
	assert header.display_created_by == "Inspector"
	assert header.display_report_for == "Client"
	assert header.display_title == "Inspection Report"
	assert header.display_date(datetime.date(2025, 3, 14)) == "03/14/2025"
	assert HeaderMetadata(date="2025-01-02").display_date() == "2025-01-02"


#============================================
def test_header_from_camel_case_mapping() -> None:
	header = HeaderMetadata.from_dict({
		"company": "Acme Inspections",
		"createdBy": "J. Rivera",
		"reportFor": "Harbor Lofts",
		"typeOfReport": "Move-out Inspection",
		"includeHeader": False,
	})
	assert header.created_by == "J. Rivera"
	assert header.report_for == "Harbor Lofts"
	assert header.display_title == "Move-out Inspection"
	assert header.include_header is False


#============================================
def test_rect_relations() -> None:
	outer = irp.models.Rect(0.0, 0.0, 10.0, 10.0)
	inner = irp.models.Rect(2.0, 2.0, 3.0, 3.0)
	touching = irp.models.Rect(10.0, 0.0, 5.0, 5.0)
	assert outer.contains(inner)
	assert not inner.contains(outer)
	assert outer.intersects(inner)
	assert not outer.intersects(touching)
