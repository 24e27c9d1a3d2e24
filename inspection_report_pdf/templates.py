"""
Grid template registry.

Every supported layout is one row of constants. The placement formula in
layout.py is shared, so the numbers here are the only thing that differ
between templates.
"""

# Standard Library
import dataclasses
import logging

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.errors


TemplateError = irp.errors.TemplateError

A4_SHORT_SIDE = irp.config.A4_SHORT_SIDE
A4_LONG_SIDE = irp.config.A4_LONG_SIDE
FULL_HEADER_HEIGHT = irp.config.FULL_HEADER_HEIGHT
MINIMAL_HEADER_HEIGHT = irp.config.MINIMAL_HEADER_HEIGHT
FOOTER_CLEARANCE = irp.config.FOOTER_CLEARANCE
FULL_HEADER_BOTTOM = irp.config.FULL_HEADER_BOTTOM
MINIMAL_HEADER_BOTTOM = irp.config.MINIMAL_HEADER_BOTTOM

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_ID = "A4Portrait2x2"
GRID_FIT_EPSILON = 0.001


@dataclasses.dataclass(frozen=True)
class TemplateSpec:
	template_id: str
	title: str
	columns: int
	rows: int
	entries_per_page: int
	page_width: float
	page_height: float
	orientation: str
	photo_orientation: str
	image_aspect_ratio: float
	content_margin: float
	grid_reserve: float
	card_width_factor: float
	cell_gap_x: float
	cell_gap_y: float
	vertical_overhead: float
	header_footer_margin: float
	content_spacing_full: float
	content_spacing_minimal: float
	observation_gap: float
	observation_bottom_pad: float
	observation_char_budget: int
	show_observations: bool

	@property
	def page_size(self) -> tuple[float, float]:
		return (self.page_width, self.page_height)

	@property
	def card_width(self) -> float:
		"""
		Card width in mm; the photo spans the full card width.
		"""
		available_width = self.page_width - 2.0 * self.content_margin - self.grid_reserve
		return (available_width / self.columns) * self.card_width_factor

	@property
	def image_height(self) -> float:
		return self.card_width * self.image_aspect_ratio

	@property
	def card_height(self) -> float:
		return self.image_height + self.vertical_overhead

	def grid_top(self, include_header: bool) -> float:
		"""
		Top of the first card row in mm.

		Args:
			include_header: Whether the full page header is drawn.

		Returns:
			Header block height plus the template spacing.
		"""
		if include_header:
			return FULL_HEADER_HEIGHT + self.content_spacing_full
		return MINIMAL_HEADER_HEIGHT + self.content_spacing_minimal


TEMPLATES: dict[str, TemplateSpec] = {
	"A4Portrait2x2": TemplateSpec(
		template_id="A4Portrait2x2",
		title="A4 Portrait (2x2)",
		columns=2,
		rows=2,
		entries_per_page=4,
		page_width=A4_SHORT_SIDE,
		page_height=A4_LONG_SIDE,
		orientation="portrait",
		photo_orientation="tall",
		image_aspect_ratio=1.33,
		content_margin=15.0,
		grid_reserve=20.0,
		card_width_factor=0.83,
		cell_gap_x=20.0,
		cell_gap_y=5.0,
		vertical_overhead=25.0,
		header_footer_margin=23.0,
		content_spacing_full=30.0,
		content_spacing_minimal=20.0,
		observation_gap=1.0,
		observation_bottom_pad=1.0,
		observation_char_budget=400,
		show_observations=True,
	),
	"A4Portrait2x3": TemplateSpec(
		template_id="A4Portrait2x3",
		title="A4 Portrait (2x3)",
		columns=2,
		rows=3,
		entries_per_page=6,
		page_width=A4_SHORT_SIDE,
		page_height=A4_LONG_SIDE,
		orientation="portrait",
		photo_orientation="wide",
		image_aspect_ratio=0.75,
		content_margin=15.0,
		grid_reserve=10.0,
		card_width_factor=0.82,
		cell_gap_x=13.0,
		cell_gap_y=5.0,
		vertical_overhead=25.0,
		header_footer_margin=23.0,
		content_spacing_full=30.0,
		content_spacing_minimal=20.0,
		observation_gap=2.0,
		observation_bottom_pad=1.0,
		observation_char_budget=300,
		show_observations=True,
	),
	"A4Landscape3x2": TemplateSpec(
		template_id="A4Landscape3x2",
		title="A4 Landscape (3x2)",
		columns=3,
		rows=2,
		entries_per_page=6,
		page_width=A4_LONG_SIDE,
		page_height=A4_SHORT_SIDE,
		orientation="landscape",
		photo_orientation="wide",
		image_aspect_ratio=0.75,
		content_margin=15.0,
		grid_reserve=20.0,
		card_width_factor=0.85,
		cell_gap_x=15.0,
		cell_gap_y=5.0,
		vertical_overhead=25.0,
		header_footer_margin=23.0,
		content_spacing_full=25.0,
		content_spacing_minimal=12.0,
		observation_gap=2.0,
		observation_bottom_pad=0.0,
		observation_char_budget=300,
		show_observations=True,
	),
	"A4Landscape4x2": TemplateSpec(
		template_id="A4Landscape4x2",
		title="A4 Landscape (4x2)",
		columns=4,
		rows=2,
		entries_per_page=8,
		page_width=A4_LONG_SIDE,
		page_height=A4_SHORT_SIDE,
		orientation="landscape",
		photo_orientation="wide",
		image_aspect_ratio=0.75,
		content_margin=15.0,
		grid_reserve=21.0,
		card_width_factor=0.97,
		cell_gap_x=7.0,
		cell_gap_y=5.0,
		vertical_overhead=30.0,
		header_footer_margin=19.0,
		content_spacing_full=25.0,
		content_spacing_minimal=12.0,
		observation_gap=2.0,
		observation_bottom_pad=0.0,
		observation_char_budget=150,
		show_observations=True,
	),
	"A4Landscape5x2": TemplateSpec(
		template_id="A4Landscape5x2",
		title="A4 Landscape (5x2)",
		columns=5,
		rows=2,
		entries_per_page=10,
		page_width=A4_LONG_SIDE,
		page_height=A4_SHORT_SIDE,
		orientation="landscape",
		photo_orientation="tall",
		image_aspect_ratio=1.33,
		content_margin=15.0,
		grid_reserve=32.0,
		card_width_factor=0.90,
		cell_gap_x=8.0,
		cell_gap_y=2.0,
		vertical_overhead=24.0,
		header_footer_margin=23.0,
		content_spacing_full=25.0,
		content_spacing_minimal=10.0,
		observation_gap=2.0,
		observation_bottom_pad=0.0,
		observation_char_budget=100,
		show_observations=True,
	),
	"A4Portrait4x6": TemplateSpec(
		template_id="A4Portrait4x6",
		title="A4 Portrait (4x6)",
		columns=4,
		rows=6,
		entries_per_page=24,
		page_width=A4_SHORT_SIDE,
		page_height=A4_LONG_SIDE,
		orientation="portrait",
		photo_orientation="wide",
		image_aspect_ratio=0.72,
		content_margin=15.0,
		grid_reserve=6.3,
		card_width_factor=0.98,
		cell_gap_x=2.1,
		cell_gap_y=2.1,
		vertical_overhead=8.0,
		header_footer_margin=10.0,
		content_spacing_full=25.0,
		content_spacing_minimal=16.0,
		observation_gap=0.0,
		observation_bottom_pad=0.0,
		observation_char_budget=0,
		show_observations=False,
	),
}

# identifiers used by earlier releases of the app
TEMPLATE_ALIASES: dict[str, str] = {
	"A4Landscape5x3": "A4Landscape5x2",
}


#============================================
def list_template_ids() -> list[str]:
	"""
	List the supported template identifiers in menu order.

	Returns:
		Template ids.
	"""
	return list(TEMPLATES.keys())


#============================================
def resolve_template(template_id: str | None) -> tuple[TemplateSpec, str | None]:
	"""
	Look up a template, falling back to the default for unknown ids.

	Args:
		template_id: Template identifier.

	Returns:
		Tuple of (TemplateSpec, warning message or None).
	"""
	key = (template_id or "").strip()
	key = TEMPLATE_ALIASES.get(key, key)
	spec = TEMPLATES.get(key)
	if spec is not None:
		return (spec, None)
	warning = f"Unknown template '{template_id}', using {DEFAULT_TEMPLATE_ID}"
	logger.warning(warning)
	return (TEMPLATES[DEFAULT_TEMPLATE_ID], warning)


#============================================
def get_template(template_id: str | None) -> TemplateSpec:
	"""
	Look up a template by id; unknown ids return the default template.
	"""
	spec, _warning = resolve_template(template_id)
	return spec


#============================================
def compute_grid_extent(spec: TemplateSpec, include_header: bool) -> tuple[float, float, float]:
	"""
	Compute the width, top and bottom of a full grid of cards.

	Args:
		spec: Template spec.
		include_header: Whether the full page header is drawn.

	Returns:
		Tuple of (grid_width, grid_top, grid_bottom) in mm.
	"""
	grid_width = spec.columns * spec.card_width + (spec.columns - 1) * spec.cell_gap_x
	grid_top = spec.grid_top(include_header)
	grid_bottom = grid_top + spec.rows * spec.card_height + (spec.rows - 1) * spec.cell_gap_y
	return (grid_width, grid_top, grid_bottom)


#============================================
def validate_template(spec: TemplateSpec) -> list[str]:
	"""
	Check one template for internal consistency.

	Args:
		spec: Template spec.

	Returns:
		List of problem descriptions, empty when the template is valid.
	"""
	problems: list[str] = []
	name = spec.template_id
	if spec.columns <= 0 or spec.rows <= 0:
		problems.append(f"{name}: grid must have at least one column and row")
	if spec.columns * spec.rows != spec.entries_per_page:
		problems.append(
			f"{name}: columns*rows {spec.columns * spec.rows} != entries_per_page {spec.entries_per_page}"
		)
	if spec.orientation == "portrait":
		expected_size = (A4_SHORT_SIDE, A4_LONG_SIDE)
	elif spec.orientation == "landscape":
		expected_size = (A4_LONG_SIDE, A4_SHORT_SIDE)
	else:
		expected_size = None
		problems.append(f"{name}: unknown orientation {spec.orientation}")
	if expected_size is not None and spec.page_size != expected_size:
		problems.append(f"{name}: page size {spec.page_size} does not match A4 {spec.orientation}")
	if spec.image_aspect_ratio <= 0.0:
		problems.append(f"{name}: image aspect ratio must be positive")
	elif spec.photo_orientation == "tall" and spec.image_aspect_ratio <= 1.0:
		problems.append(f"{name}: tall photos need an aspect ratio above 1.0")
	elif spec.photo_orientation == "wide" and spec.image_aspect_ratio >= 1.0:
		problems.append(f"{name}: wide photos need an aspect ratio below 1.0")
	elif spec.photo_orientation not in ("tall", "wide"):
		problems.append(f"{name}: unknown photo orientation {spec.photo_orientation}")
	if spec.show_observations and spec.observation_char_budget <= 0:
		problems.append(f"{name}: observations shown without a character budget")
	if not spec.show_observations and spec.observation_char_budget != 0:
		problems.append(f"{name}: character budget set but observations are hidden")
	if problems:
		return problems

	available_width = spec.page_width - 2.0 * spec.content_margin
	page_bottom = spec.page_height - FOOTER_CLEARANCE
	for include_header in (True, False):
		grid_width, grid_top, grid_bottom = compute_grid_extent(spec, include_header)
		mode = "full" if include_header else "minimal"
		header_bottom = FULL_HEADER_BOTTOM if include_header else MINIMAL_HEADER_BOTTOM
		if grid_width > available_width + GRID_FIT_EPSILON:
			problems.append(f"{name}: grid width {grid_width:.2f} exceeds {available_width:.2f}")
		if grid_top < header_bottom - GRID_FIT_EPSILON:
			problems.append(
				f"{name}: grid top {grid_top:.2f} overlaps the page header ending at {header_bottom:.2f} ({mode} header)"
			)
		if grid_bottom > page_bottom + GRID_FIT_EPSILON:
			problems.append(
				f"{name}: grid bottom {grid_bottom:.2f} runs into the footer ({mode} header)"
			)
	return problems


#============================================
def validate_templates(templates: dict[str, TemplateSpec] | None = None) -> None:
	"""
	Validate a template table, raising TemplateError on any problem.

	Args:
		templates: Table to check, defaults to the built-in table.
	"""
	if templates is None:
		templates = TEMPLATES
	problems: list[str] = []
	for key, spec in templates.items():
		if key != spec.template_id:
			problems.append(f"{key}: table key does not match template_id {spec.template_id}")
		problems.extend(validate_template(spec))
	if problems:
		raise TemplateError("Invalid template table:\n" + "\n".join(problems))


validate_templates()
