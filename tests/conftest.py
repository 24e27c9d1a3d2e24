"""
Pytest configuration for local imports and shared report fixtures.
"""

# Standard Library
import io
import os
import pathlib
import sys

# PIP3 modules
import PIL.Image
import pytest

#============================================


def _ensure_repo_on_path() -> None:
	"""
	Ensure the repository root is on sys.path.
	"""
	repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
	if repo_root not in sys.path:
		sys.path.insert(0, repo_root)


_ensure_repo_on_path()


#============================================
def make_jpeg_bytes(width: int, height: int, color: tuple[int, int, int] = (40, 120, 200)) -> bytes:
	"""
	Build an in-memory JPEG photo.

	Args:
		width: Pixel width.
		height: Pixel height.
		color: Fill color.

	Returns:
		JPEG bytes.
	"""
	image = PIL.Image.new("RGB", (width, height), color)
	buffer = io.BytesIO()
	image.save(buffer, format="JPEG", quality=90)
	return buffer.getvalue()


#============================================
@pytest.fixture
def jpeg_bytes() -> bytes:
	return make_jpeg_bytes(1200, 900)


#============================================
@pytest.fixture
def photo_path(tmp_path: pathlib.Path) -> pathlib.Path:
	"""
	Write a sample photo to disk.
	"""
	path = tmp_path / "photo.jpg"
	path.write_bytes(make_jpeg_bytes(1600, 1200, (200, 80, 40)))
	return path


#============================================
@pytest.fixture
def corrupt_photo_path(tmp_path: pathlib.Path) -> pathlib.Path:
	path = tmp_path / "broken.jpg"
	path.write_bytes(b"\xff\xd8\xff\xe0 this is not a real jpeg")
	return path
