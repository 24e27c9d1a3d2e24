"""
Progress notifications for report generation.

Stages always move forward: init, compressing, generating, creating,
sharing, complete. Listeners receive events in delivery order.
"""

# Standard Library
import dataclasses
import enum
import typing

# local repo modules
import inspection_report_pdf as irp
import inspection_report_pdf.config
import inspection_report_pdf.errors


ProgressOrderError = irp.errors.ProgressOrderError
PROGRESS_BAR_WIDTH = irp.config.PROGRESS_BAR_WIDTH


class ProgressStage(enum.Enum):
	INIT = "init"
	COMPRESSING = "compressing"
	GENERATING = "generating"
	CREATING = "creating"
	SHARING = "sharing"
	COMPLETE = "complete"

	@property
	def order(self) -> int:
		return STAGE_ORDER.index(self)


STAGE_ORDER = list(ProgressStage)


@dataclasses.dataclass(frozen=True)
class ProgressEvent:
	stage: ProgressStage
	message: str
	progress: int | None = None
	current: int | None = None
	total: int | None = None


class ProgressListener(typing.Protocol):
	def on_progress(self, event: ProgressEvent) -> None:
		...


class ProgressReporter:
	"""
	Deliver ordered progress events to a set of listeners.
	"""

	def __init__(self, listeners: typing.Iterable[ProgressListener] = ()) -> None:
		self.listeners: list[ProgressListener] = list(listeners)
		self.history: list[ProgressEvent] = []

	def add_listener(self, listener: ProgressListener) -> None:
		self.listeners.append(listener)

	@property
	def stage(self) -> ProgressStage | None:
		if not self.history:
			return None
		return self.history[-1].stage

	def report(
		self,
		stage: ProgressStage,
		message: str,
		progress: int | None = None,
		current: int | None = None,
		total: int | None = None,
	) -> ProgressEvent:
		"""
		Validate and deliver one progress event.

		Args:
			stage: Progress stage.
			message: Human readable status line.
			progress: Optional percentage 0-100.
			current: Optional current item count.
			total: Optional total item count.

		Returns:
			The delivered ProgressEvent.
		"""
		stage = ProgressStage(stage)
		previous = self.history[-1] if self.history else None
		if previous is not None:
			if stage.order < previous.stage.order:
				raise ProgressOrderError(
					f"Stage {stage.value} cannot follow {previous.stage.value}"
				)
			if stage == previous.stage and stage != ProgressStage.COMPRESSING:
				raise ProgressOrderError(f"Stage {stage.value} reported twice")
			if (
				stage == previous.stage
				and current is not None
				and previous.current is not None
				and current < previous.current
			):
				raise ProgressOrderError(
					f"Progress moved backward from {previous.current} to {current}"
				)
		if progress is not None:
			progress = max(0, min(100, int(progress)))
		event = ProgressEvent(
			stage=stage,
			message=message,
			progress=progress,
			current=current,
			total=total,
		)
		self.history.append(event)
		for listener in self.listeners:
			listener.on_progress(event)
		return event


class RecordingProgressListener:
	"""
	Keep every event so a caller can poll the latest state.
	"""

	def __init__(self) -> None:
		self.events: list[ProgressEvent] = []

	def on_progress(self, event: ProgressEvent) -> None:
		self.events.append(event)

	@property
	def stages(self) -> list[ProgressStage]:
		return [event.stage for event in self.events]

	@property
	def latest(self) -> ProgressEvent | None:
		if not self.events:
			return None
		return self.events[-1]


class ConsoleProgressListener:
	"""
	Print stage messages and a simple bar for image processing.
	"""

	def on_progress(self, event: ProgressEvent) -> None:
		if event.stage == ProgressStage.COMPRESSING and event.total:
			print_progress("Images", event.current or 0, event.total)
			if event.current == event.total:
				print()
			return
		print(f"[{event.stage.value}] {event.message}")


#============================================
def print_progress(prefix: str, current: int, total: int) -> None:
	"""
	Print a simple progress bar.

	Args:
		prefix: Label text.
		current: Current count.
		total: Total count.
	"""
	if total <= 0:
		return
	percent = int(round((current / total) * 100.0))
	filled = int(round(PROGRESS_BAR_WIDTH * percent / 100.0))
	bar = "#" * filled + "-" * (PROGRESS_BAR_WIDTH - filled)
	print(f"{prefix} [{bar}] {current}/{total} ({percent}%)", end="\r")
