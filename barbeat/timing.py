"""Bar|beat positions and time-signature arithmetic.

Bars and beats are both one-based: ``1|1`` is the very start, ``2|1.5`` is
halfway through the first beat of the second bar. A *beat* is one unit of the
time signature's denominator, so in 6/8 a bar holds six eighth-note beats.

Positions can be converted to zero-based musical beats, to quarter notes and
to MIDI ticks at 480 PPQN.
"""

import dataclasses
import re
import typing

import barbeat.constants.pulses


# Decimal ("2.5"), fraction ("4/3") or mixed number ("2+1/3").
BEAT_VALUE_PATTERN = re.compile(r"^(?:(\d+(?:\.\d+)?)|(\d+)/(\d+)|(\d+)\+(\d+)/(\d+))$")

# Bars and beats of a bar:beat duration, e.g. "1:2" or "0:1.5".
BAR_BEAT_DURATION_PATTERN = re.compile(r"^(\d+):(\d+(?:\.\d+)?|\d+/\d+|\d+\+\d+/\d+)$")

TIME_SIGNATURE_PATTERN = re.compile(r"^\s*(\d+)\s*/\s*(\d+)\s*$")

# Sums of fractional steps this close to a whole beat are that beat.
WHOLE_BEAT_TOLERANCE = 1e-9


@dataclasses.dataclass(frozen=True)
class BarBeat:

	"""
	An absolute position: one-based bar and one-based, fractional beat.
	"""

	bar: int
	beat: float

	def __str__ (self) -> str:

		return f"{self.bar}|{format_number(self.beat)}"

	def to_dict (self) -> typing.Dict[str, typing.Any]:

		"""Return ``{"bar": ..., "beat": ...}``."""

		return {"bar": self.bar, "beat": self.beat}


@dataclasses.dataclass(frozen=True)
class TimeSignature:

	"""
	A time signature such as 4/4 or 6/8.

	The numerator is the number of beats in a bar; the denominator is the note
	value of one beat and must be a power of two.
	"""

	numerator: int = 4
	denominator: int = 4

	def __post_init__ (self) -> None:

		if self.numerator < 1:
			raise ValueError(f"Time signature numerator must be at least 1, got {self.numerator}")

		if self.denominator < 1 or self.denominator & (self.denominator - 1):
			raise ValueError(f"Time signature denominator must be a power of two, got {self.denominator}")

	@property
	def beats_per_bar (self) -> int:

		"""Beats (of the denominator's note value) in one bar."""

		return self.numerator

	@property
	def quarter_notes_per_bar (self) -> float:

		"""Length of one bar in quarter notes."""

		return beats_to_quarter_notes(self.numerator, self)

	def __str__ (self) -> str:

		return f"{self.numerator}/{self.denominator}"


COMMON_TIME = TimeSignature(4, 4)


def parse_time_signature (text: str) -> TimeSignature:

	"""Parse a time signature written as ``"numerator/denominator"``.

	Raises:
		ValueError: If the text is not of that form or the values are invalid.

	Example:
		```python
		parse_time_signature("6/8")  # → TimeSignature(numerator=6, denominator=8)
		```
	"""

	match = TIME_SIGNATURE_PATTERN.match(text)

	if match is None:
		raise ValueError(f"Invalid time signature {text!r}. Expected e.g. '4/4' or '6/8'.")

	return TimeSignature(int(match.group(1)), int(match.group(2)))


def parse_beat_value (text: str) -> float:

	"""
	Parse a beat value written as a decimal, a fraction or a mixed number.

	``"2.5"`` → 2.5, ``"4/3"`` → 1.333..., ``"2+1/3"`` → 2.333...

	Raises ``ValueError`` for anything else, including a zero denominator.
	"""

	match = BEAT_VALUE_PATTERN.match(text)

	if match is None:
		raise ValueError(f"Invalid beat value {text!r}")

	decimal, numerator, denominator, whole, mixed_numerator, mixed_denominator = match.groups()

	if decimal is not None:
		return float(decimal)

	if numerator is not None:
		if int(denominator) == 0:
			raise ValueError(f"Invalid beat value {text!r}: division by zero")
		return int(numerator) / int(denominator)

	if int(mixed_denominator) == 0:
		raise ValueError(f"Invalid beat value {text!r}: division by zero")

	return int(whole) + int(mixed_numerator) / int(mixed_denominator)


def parse_bar_beat_duration (text: str, time_signature: TimeSignature = COMMON_TIME) -> float:

	"""
	Convert a ``bars:beats`` duration such as ``"1:2"`` to beats.

	In 4/4, ``"1:2"`` is one bar plus two beats = 6.0 beats.
	"""

	match = BAR_BEAT_DURATION_PATTERN.match(text)

	if match is None:
		raise ValueError(f"Invalid bar:beat duration {text!r}. Expected e.g. '1:2' or '0:1.5'.")

	return bar_beat_duration_to_beats(int(match.group(1)), parse_beat_value(match.group(2)), time_signature)


def bar_beat_duration_to_beats (bars: int, beats: float, time_signature: TimeSignature = COMMON_TIME) -> float:

	"""
	Total beats of a duration of ``bars`` whole bars plus ``beats`` beats.
	"""

	return bars * time_signature.beats_per_bar + beats


def bar_beat_to_beats (bar: int, beat: float, time_signature: TimeSignature = COMMON_TIME) -> float:

	"""Convert a one-based bar|beat position to zero-based beats from the start.

	Example:
		```python
		bar_beat_to_beats(2, 1.5)  # → 4.5 in 4/4
		```
	"""

	if bar < 1:
		raise ValueError(f"Bar number must be 1 or greater, got {bar}")

	if beat < 1:
		raise ValueError(f"Beat must be 1 or greater, got {beat}")

	return (bar - 1) * time_signature.beats_per_bar + (beat - 1)


def beats_to_bar_beat (beats: float, time_signature: TimeSignature = COMMON_TIME) -> BarBeat:

	"""
	Convert zero-based beats from the start to a bar|beat position.
	"""

	if beats < 0:
		raise ValueError(f"Beats cannot be negative, got {beats}")

	# Snap to 1/1000 of a beat so float noise doesn't spill into the next bar.
	beats = round(beats * 1000) / 1000
	bar = int(beats // time_signature.beats_per_bar) + 1
	beat = beats - (bar - 1) * time_signature.beats_per_bar + 1

	return BarBeat(bar=bar, beat=beat)


def offset_bar_beat (start: BarBeat, beats: float, time_signature: TimeSignature = COMMON_TIME) -> BarBeat:

	"""Move a position forward by ``beats``, carrying into later bars.

	Unlike `beats_to_bar_beat` the result keeps full precision, so triplet
	steps stay exact thirds. Only float noise right at a whole beat is snapped.

	Example:
		```python
		offset_bar_beat(BarBeat(1, 3), 3)  # → BarBeat(bar=2, beat=2.0) in 4/4
		```
	"""

	total = bar_beat_to_beats(start.bar, start.beat, time_signature) + beats
	nearest = round(total)

	if abs(total - nearest) < WHOLE_BEAT_TOLERANCE:
		total = float(nearest)

	bar = int(total // time_signature.beats_per_bar) + 1

	return BarBeat(bar=bar, beat=total - (bar - 1) * time_signature.beats_per_bar + 1)


def beats_to_quarter_notes (beats: float, time_signature: TimeSignature = COMMON_TIME) -> float:

	"""
	Convert beats of the time signature's note value to quarter notes.
	"""

	return beats * barbeat.constants.pulses.QUARTER_NOTES_PER_WHOLE_NOTE / time_signature.denominator


def quarter_notes_to_beats (quarter_notes: float, time_signature: TimeSignature = COMMON_TIME) -> float:

	"""
	Convert quarter notes to beats of the time signature's note value.
	"""

	return quarter_notes * time_signature.denominator / barbeat.constants.pulses.QUARTER_NOTES_PER_WHOLE_NOTE


def beats_to_ticks (beats: float, time_signature: TimeSignature = COMMON_TIME, ticks_per_quarter: int = barbeat.constants.pulses.TICKS_PER_QUARTER_NOTE) -> int:

	"""
	Convert beats to MIDI ticks, rounding to the nearest tick.
	"""

	return int(round(beats_to_quarter_notes(beats, time_signature) * ticks_per_quarter))


def format_number (value: float) -> str:

	"""
	Format a number without trailing zeros, to at most three decimals.

	``1.0`` → ``"1"``, ``2.5`` → ``"2.5"``, ``1/3`` → ``"0.333"``
	"""

	if float(value).is_integer():
		return str(int(value))

	formatted = f"{value:.3f}".rstrip("0").rstrip(".")

	return formatted
