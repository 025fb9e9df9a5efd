"""Split bar|beat notation into typed tokens.

Tokens are separated by whitespace and every token stands alone: ``C3 1|1``
is two tokens, while ``C31|1`` is a syntax error rather than a pitch glued
to a time position.

Token shapes:
- ``1|2.5`` / ``|3``: time position, with or without an explicit bar
- ``1|1,2,3.5``: several beats in one bar
- ``1|1x4@0.5``: a repeat pattern, 4 positions half a beat apart
- ``v100`` / ``v80-120``: velocity or velocity range
- ``t0.5`` / ``t1:2``: duration in beats, or in bars:beats
- ``p0.75``: probability
- ``C3``, ``F#-1``, ``Bb4``: pitch
- ``@3=``, ``@3=1``, ``@5=1-2``: bar copy from the previous bar, a bar or a range
- ``@3-6=``, ``@3-6=1``, ``@3-10=1-2``: the same, repeated over a range of bars
- ``@clear``: forget which bars can be copied from

A ``#`` at the start of a token begins a comment running to the end of the
line. Beat values may also be written as fractions (``1|4/3``) or mixed
numbers (``1|2+1/3``).
"""

import dataclasses
import re
import typing

import barbeat.constants.durations
import barbeat.constants.velocity
import barbeat.errors
import barbeat.pitch
import barbeat.timing


@dataclasses.dataclass(frozen=True)
class Token:

	"""
	Base for all tokens: the raw text and its offset in the source.
	"""

	raw: str
	offset: int


@dataclasses.dataclass(frozen=True)
class RepeatPattern:

	"""
	``<start>x<times>@<step>`` inside a time position: ``times`` positions
	starting at beat ``start``, ``step`` beats apart. Without ``@<step>`` the
	step is the duration register at the time the position is reached.
	"""

	raw: str
	start: float
	times: int
	step: typing.Optional[float] = None


BeatItem = typing.Union[float, RepeatPattern]


@dataclasses.dataclass(frozen=True)
class TimePositionToken(Token):

	"""
	A time position. ``beats`` holds one item per comma-separated entry, so
	``1|1,3`` has two and ``1|2.5`` has one.
	"""

	bar: typing.Optional[int]	# None for beat-only shorthand ("|2")
	beats: typing.Tuple[BeatItem, ...]

	@property
	def beat (self) -> float:

		"""The first beat the token names."""

		first = self.beats[0]

		return first.start if isinstance(first, RepeatPattern) else first


@dataclasses.dataclass(frozen=True)
class VelocityToken(Token):

	velocity: int
	deviation: int = 0


@dataclasses.dataclass(frozen=True)
class DurationToken(Token):

	"""
	Duration setter. ``t1:2`` keeps its bar count so it can be resolved against
	the time signature; a plain ``t1.5`` has ``bars == 0``.
	"""

	beats: float
	bars: int = 0

	def resolve (self, time_signature: barbeat.timing.TimeSignature) -> float:

		"""Return the duration in beats of the given time signature."""

		return barbeat.timing.bar_beat_duration_to_beats(self.bars, self.beats, time_signature)


@dataclasses.dataclass(frozen=True)
class ProbabilityToken(Token):

	probability: float


@dataclasses.dataclass(frozen=True)
class PitchToken(Token):

	note_name: str		# letter plus accidental, not yet validated
	octave: int


@dataclasses.dataclass(frozen=True)
class BarCopyToken(Token):

	"""
	Bar copy directive ``@N=``, ``@N=M`` or ``@N=M-P``, optionally with a
	destination range ``@N-Q=...``.

	``source_start`` is None when copying the previous bar; ``source_end`` is
	None unless a source range was given; ``destination_end`` is None unless a
	destination range was given.
	"""

	destination: int
	source_start: typing.Optional[int] = None
	source_end: typing.Optional[int] = None
	destination_end: typing.Optional[int] = None

	@property
	def is_previous (self) -> bool:

		return self.source_start is None

	@property
	def is_range (self) -> bool:

		return self.source_end is not None

	@property
	def is_destination_range (self) -> bool:

		return self.destination_end is not None


@dataclasses.dataclass(frozen=True)
class ClearCopiesToken(Token):

	"""``@clear``: earlier bars can no longer be copied from."""


# A '#' only starts a comment at the start of a chunk; inside "C#3" it's an accidental.
CHUNK_PATTERN = re.compile(r"#[^\n]*|\S+")

TIME_POSITION_PATTERN = re.compile(r"^(-?\d+)?\|(.*)$")
REPEAT_PATTERN = re.compile(r"^([^x@]+)x(\d+)(?:@(.+))?$")
VELOCITY_PATTERN = re.compile(r"^v(\d+)(?:-(\d+))?$")
DURATION_PATTERN = re.compile(r"^t(?:(\d+):)?(.+)$")
PROBABILITY_PATTERN = re.compile(r"^p(\d+(?:\.\d*)?|\.\d+)$")
BAR_COPY_PATTERN = re.compile(r"^@(\d+)(?:-(\d+))?=(?:(\d+)(?:-(\d+))?)?$")
CLEAR_COPIES = "@clear"


def tokenize (text: str) -> typing.List[Token]:

	"""Convert notation text into a list of tokens in source order.

	Parameters:
		text: The bar|beat notation.

	Returns:
		A list of `Token` subclasses (`TimePositionToken`, `VelocityToken`,
		`DurationToken`, `ProbabilityToken`, `PitchToken`, `BarCopyToken`,
		`ClearCopiesToken`).

	Raises:
		NotationSyntaxError: For unrecognised text or out-of-range setter values.

	Example:
		```python
		tokenize("v90 C3 1|1")
		# → [VelocityToken("v90", 0, 90, 0), PitchToken("C3", 4, "C", 3),
		#    TimePositionToken("1|1", 7, 1, (1.0,))]
		```
	"""

	tokens: typing.List[Token] = []

	for match in CHUNK_PATTERN.finditer(text):

		chunk = match.group()

		if chunk.startswith("#"):
			continue

		tokens.append(_lex_chunk(chunk, match.start(), text))

	return tokens


def _lex_chunk (chunk: str, offset: int, source: str) -> Token:

	"""
	Turn a single whitespace-delimited chunk into a token.
	"""

	def error (message: str) -> barbeat.errors.NotationSyntaxError:
		return barbeat.errors.NotationSyntaxError(message, source=source, offset=offset)

	if "|" in chunk:
		return _lex_time_position(chunk, offset, error)

	first = chunk[0]

	if first == "v":
		return _lex_velocity(chunk, offset, error)

	if first == "t":
		return _lex_duration(chunk, offset, error)

	if first == "p":
		return _lex_probability(chunk, offset, error)

	if first == "@":
		return _lex_bar_copy(chunk, offset, error)

	match = barbeat.pitch.PITCH_PATTERN.match(chunk)

	if match is not None:
		letter, accidental, octave = match.groups()
		return PitchToken(raw=chunk, offset=offset, note_name=letter + (accidental or ""), octave=int(octave))

	raise error(f"Unrecognized token {chunk!r}")


def _lex_time_position (chunk: str, offset: int, error: typing.Callable[[str], Exception]) -> TimePositionToken:

	match = TIME_POSITION_PATTERN.match(chunk)

	if match is None:
		raise error(f"Invalid time position {chunk!r}. Expected 'bar|beat' or '|beat'.")

	bar_text, beat_text = match.groups()

	bar: typing.Optional[int] = None

	if bar_text is not None:
		bar = int(bar_text)
		if bar < 1:
			raise error(f"Bar number must be 1 or greater in {chunk!r}")

	beats = tuple(_lex_beat_item(item, chunk, error) for item in beat_text.split(","))

	return TimePositionToken(raw=chunk, offset=offset, bar=bar, beats=beats)


def _lex_beat_item (item: str, chunk: str, error: typing.Callable[[str], Exception]) -> BeatItem:

	"""
	Parse one comma-separated entry of a time position: a beat or a repeat pattern.
	"""

	repeat = REPEAT_PATTERN.match(item)
	start_text = repeat.group(1) if repeat is not None else item

	try:
		start = barbeat.timing.parse_beat_value(start_text)
	except ValueError:
		raise error(f"Invalid beat in time position {chunk!r}") from None

	if start < 1:
		raise error(f"Beat must be 1 or greater in {chunk!r}")

	if repeat is None:
		return start

	times = int(repeat.group(2))

	if times < 1:
		raise error(f"Repeat count must be 1 or greater in {chunk!r}")

	step: typing.Optional[float] = None

	if repeat.group(3) is not None:

		try:
			step = barbeat.timing.parse_beat_value(repeat.group(3))
		except ValueError:
			raise error(f"Invalid repeat step in time position {chunk!r}") from None

		if step <= 0:
			raise error(f"Repeat step must be positive in {chunk!r}")

	return RepeatPattern(raw=item, start=start, times=times, step=step)


def _lex_velocity (chunk: str, offset: int, error: typing.Callable[[str], Exception]) -> VelocityToken:

	match = VELOCITY_PATTERN.match(chunk)

	if match is None:
		raise error(f"Invalid velocity {chunk!r}. Expected 'v<0-127>' or 'v<min>-<max>'.")

	low = int(match.group(1))
	high = int(match.group(2)) if match.group(2) is not None else low

	for value in (low, high):
		if not barbeat.constants.velocity.MIN_VELOCITY <= value <= barbeat.constants.velocity.MAX_VELOCITY:
			raise error(f"Velocity {value} out of range 0-127 in {chunk!r}")

	# "v120-80" means the same as "v80-120".
	low, high = min(low, high), max(low, high)

	return VelocityToken(raw=chunk, offset=offset, velocity=low, deviation=high - low)


def _lex_duration (chunk: str, offset: int, error: typing.Callable[[str], Exception]) -> DurationToken:

	match = DURATION_PATTERN.match(chunk)

	if match is None:
		raise error(f"Invalid duration {chunk!r}. Expected 't<beats>' or 't<bars>:<beats>'.")

	bars_text, beats_text = match.groups()

	try:
		beats = barbeat.timing.parse_beat_value(beats_text)
	except ValueError:
		raise error(f"Invalid duration {chunk!r}. Expected 't<beats>' or 't<bars>:<beats>'.") from None

	bars = int(bars_text) if bars_text is not None else 0

	if bars == 0 and beats <= 0:
		raise error(f"Duration must be positive in {chunk!r}")

	return DurationToken(raw=chunk, offset=offset, beats=beats, bars=bars)


def _lex_probability (chunk: str, offset: int, error: typing.Callable[[str], Exception]) -> ProbabilityToken:

	match = PROBABILITY_PATTERN.match(chunk)

	if match is None:
		raise error(f"Invalid probability {chunk!r}. Expected 'p<0.0-1.0>'.")

	probability = float(match.group(1))

	if not barbeat.constants.durations.MIN_PROBABILITY <= probability <= barbeat.constants.durations.MAX_PROBABILITY:
		raise error(f"Probability must be between 0.0 and 1.0 in {chunk!r}")

	return ProbabilityToken(raw=chunk, offset=offset, probability=probability)


def _lex_bar_copy (chunk: str, offset: int, error: typing.Callable[[str], Exception]) -> Token:

	if chunk == CLEAR_COPIES:
		return ClearCopiesToken(raw=chunk, offset=offset)

	match = BAR_COPY_PATTERN.match(chunk)

	if match is None:
		raise error(f"Invalid bar copy {chunk!r}. Expected '@N=', '@N=M', '@N=M-P' (N may be a range 'N-Q') or '@clear'.")

	destination = int(match.group(1))
	destination_end = int(match.group(2)) if match.group(2) is not None else None
	source_start = int(match.group(3)) if match.group(3) is not None else None
	source_end = int(match.group(4)) if match.group(4) is not None else None

	if destination < 1:
		raise error(f"Bar copy destination must be 1 or greater in {chunk!r}")

	if destination_end is not None and destination_end < destination:
		raise error(f"Bar copy destination range end must not be before its start in {chunk!r}")

	if source_start is not None and source_end is not None and source_end < source_start:
		raise error(f"Bar copy range end must not be before its start in {chunk!r}")

	return BarCopyToken(
		raw = chunk,
		offset = offset,
		destination = destination,
		source_start = source_start,
		source_end = source_end,
		destination_end = destination_end
	)
