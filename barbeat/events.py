import dataclasses
import typing

import barbeat.timing


@dataclasses.dataclass(frozen=True)
class NoteEvent:

	"""
	A single note produced by parsing.

	``velocity_deviation`` is the width of a velocity range: the player picks
	a velocity between ``velocity`` and ``velocity + velocity_deviation``.
	``duration`` is in beats.
	"""

	start: barbeat.timing.BarBeat
	pitch: int
	name: str
	velocity: int
	velocity_deviation: int
	probability: float
	duration: float

	def moved_to_bar (self, bar: int) -> "NoteEvent":

		"""
		Return a copy of this event at the same beat of another bar.
		"""

		return dataclasses.replace(self, start=barbeat.timing.BarBeat(bar=bar, beat=self.start.beat))

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		"""
		Return the event as plain data, e.g. for JSON output.
		"""

		return {
			"pitch": self.pitch,
			"name": self.name,
			"velocity": self.velocity,
			"velocity_deviation": self.velocity_deviation,
			"probability": self.probability,
			"duration": self.duration,
			"start": self.start.to_dict(),
		}


@dataclasses.dataclass(frozen=True)
class ParseResult:

	"""
	The outcome of a parse: note events in the order they were produced and
	warnings in the order they were raised.
	"""

	events: typing.Tuple[NoteEvent, ...] = ()
	warnings: typing.Tuple[str, ...] = ()

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		return {
			"events": [event.to_dict() for event in self.events],
			"warnings": list(self.warnings),
		}
