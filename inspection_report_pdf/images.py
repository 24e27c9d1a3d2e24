"""
Photo normalization: resize, recompress and wrap photos for embedding.
"""

# Standard Library
import base64
import dataclasses
import io
import logging
import pathlib

# PIP3 modules
import PIL.Image
import PIL.ImageOps

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.models
import inspection_report_pdf.progress


EmbeddableImage = irp.models.EmbeddableImage
ReportEntry = irp.models.ReportEntry
ProgressReporter = irp.progress.ProgressReporter
ProgressStage = irp.progress.ProgressStage

IMAGE_TARGET_WIDTH = irp.config.IMAGE_TARGET_WIDTH
IMAGE_JPEG_QUALITY = irp.config.IMAGE_JPEG_QUALITY

logger = logging.getLogger(__name__)


#============================================
def read_photo_bytes(photo_ref: "irp.models.ImageRef") -> bytes:
	"""
	Read the raw bytes behind a photo reference.

	Args:
		photo_ref: Path, data URI, raw bytes or EmbeddableImage.

	Returns:
		Encoded image bytes.
	"""
	if isinstance(photo_ref, EmbeddableImage):
		return photo_ref.data
	if isinstance(photo_ref, bytes):
		return photo_ref
	if isinstance(photo_ref, str) and photo_ref.startswith("data:"):
		header, _sep, payload = photo_ref.partition(",")
		if not header.endswith(";base64") or not payload:
			raise ValueError("data URI is not base64 encoded")
		return base64.b64decode(payload, validate=True)
	path = pathlib.Path(photo_ref)
	return path.read_bytes()


#============================================
def open_photo(data: bytes) -> PIL.Image.Image:
	"""
	Decode image bytes into an upright RGB Pillow image.

	Args:
		data: Encoded image bytes.

	Returns:
		PIL image.
	"""
	image = PIL.Image.open(io.BytesIO(data))
	image.load()
	image = PIL.ImageOps.exif_transpose(image)
	if image.mode != "RGB":
		image = image.convert("RGB")
	return image


#============================================
def resize_to_width(image: PIL.Image.Image, target_width: int) -> PIL.Image.Image:
	"""
	Resize an image to a fixed width, keeping its aspect ratio.

	Args:
		image: PIL image.
		target_width: Output width in pixels.

	Returns:
		Resized image, or the same image when it is already at the target width.
	"""
	width, height = image.size
	if width == target_width:
		return image
	target_height = max(1, int(round(height * target_width / float(width))))
	return image.resize((target_width, target_height), PIL.Image.Resampling.LANCZOS)


#============================================
def encode_jpeg(image: PIL.Image.Image, quality: int) -> bytes:
	buffer = io.BytesIO()
	image.save(buffer, format="JPEG", quality=quality, optimize=True)
	return buffer.getvalue()


#============================================
def normalize_photo(
	photo_ref: "irp.models.ImageRef | None",
	target_width: int = IMAGE_TARGET_WIDTH,
	quality: int = IMAGE_JPEG_QUALITY,
) -> EmbeddableImage | None:
	"""
	Convert a photo reference into a fixed-width JPEG ready for embedding.

	Failures of any kind yield None so a bad photo never stops a report.

	Args:
		photo_ref: Photo reference or None.
		target_width: Output width in pixels.
		quality: JPEG quality factor.

	Returns:
		EmbeddableImage or None.
	"""
	if photo_ref is None:
		return None
	if isinstance(photo_ref, EmbeddableImage) and photo_ref.width == target_width:
		return photo_ref
	try:
		data = read_photo_bytes(photo_ref)
		image = open_photo(data)
		image = resize_to_width(image, target_width)
		jpeg_bytes = encode_jpeg(image, quality)
	except (OSError, ValueError, EOFError, SyntaxError, PIL.Image.DecompressionBombError) as error:
		logger.warning("Could not normalize photo %s: %s", describe_photo_ref(photo_ref), error)
		return None
	width, height = image.size
	return EmbeddableImage(data=jpeg_bytes, width=width, height=height)


#============================================
def describe_photo_ref(photo_ref: "irp.models.ImageRef") -> str:
	"""
	Short description of a photo reference for log messages.
	"""
	if isinstance(photo_ref, EmbeddableImage):
		return f"<embedded {photo_ref.width}x{photo_ref.height}>"
	if isinstance(photo_ref, bytes):
		return f"<{len(photo_ref)} bytes>"
	if isinstance(photo_ref, str) and photo_ref.startswith("data:"):
		return "<data uri>"
	return str(photo_ref)


#============================================
def normalize_entries(
	entries: list[ReportEntry],
	reporter: ProgressReporter | None = None,
	target_width: int = IMAGE_TARGET_WIDTH,
	quality: int = IMAGE_JPEG_QUALITY,
) -> tuple[list[ReportEntry], int]:
	"""
	Normalize every entry photo in list order.

	Input entries are never modified; entries with photos are replaced by
	new entries holding the embeddable image, or no photo when it failed.

	Args:
		entries: Report entries.
		reporter: Optional progress reporter.
		target_width: Output width in pixels.
		quality: JPEG quality factor.

	Returns:
		Tuple of (normalized entries, failed photo count).
	"""
	total = sum(1 for entry in entries if entry.has_photo)
	if total == 0:
		if reporter is not None:
			reporter.report(
				ProgressStage.COMPRESSING,
				"No images to process.",
				progress=100,
				current=0,
				total=0,
			)
		return (list(entries), 0)

	normalized: list[ReportEntry] = []
	current = 0
	failed = 0
	for entry in entries:
		if not entry.has_photo:
			normalized.append(entry)
			continue
		image = normalize_photo(entry.photo, target_width=target_width, quality=quality)
		if image is None:
			failed += 1
		normalized.append(dataclasses.replace(entry, photo=image))
		current += 1
		if reporter is not None:
			reporter.report(
				ProgressStage.COMPRESSING,
				f"Processing image {current} of {total}",
				progress=int(round(current * 100.0 / total)),
				current=current,
				total=total,
			)
	return (normalized, failed)
