"""
Exception types raised by the report engine.
"""


class ReportError(Exception):
	"""
	Base class for report engine errors.
	"""


class TemplateError(ReportError):
	"""
	Raised when the template table breaks a layout invariant.
	"""


class ProgressOrderError(ReportError):
	"""
	Raised when a progress stage would move backward.
	"""


class ReportGenerationError(ReportError):
	"""
	Raised when the PDF backend fails to produce a document.
	"""
