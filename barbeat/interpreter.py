"""Turn bar|beat notation into note events.

Notes are not placed as they are read. Pitches are **buffered** and only
**emitted** when a time position arrives:

- ``C3 E3 G3 1|1`` buffers three pitches and emits a chord at bar 1, beat 1.
- ``C3 1|1 |2 |3`` re-emits the same buffered pitch on beats 1, 2 and 3.
  The first pitch after a time position replaces the whole buffer.
- ``v100 C3 1|1 v90 |2`` emits C3 at velocity 100, then again at 90: a setter
  (``v``, ``t``, ``p``) updates its register *and* every note still in the
  buffer.
- ``C3 1|1,3`` emits at beats 1 and 3; ``C3 1|1x4@0.5`` emits four times,
  half a beat apart. Without ``@<step>`` a repeat steps by the current duration.
- ``@2=`` copies everything already in bar 1 into bar 2 and ``@clear`` stops
  earlier bars being copied (see `barbeat.bar_copy`).

Problems that leave the result meaningful (a time position with nothing to
play, pitches never emitted, copying an empty bar, a setter nothing used, a
very long repeat) are collected as warnings. Anything structurally invalid raises a
`barbeat.errors.BarBeatError`.
"""

import dataclasses
import logging
import typing

import barbeat.bar_copy
import barbeat.config
import barbeat.diagnostics
import barbeat.errors
import barbeat.events
import barbeat.lexer
import barbeat.pitch
import barbeat.timing


logger = logging.getLogger(__name__)


# Repeat patterns with more positions than this are warned about.
EXCESSIVE_REPEAT_THRESHOLD = 100


TimeSignatureLike = typing.Union[
	barbeat.timing.TimeSignature,
	str,
	typing.Tuple[int, int],
	typing.Dict[str, int],
]


@dataclasses.dataclass
class ModifierRegisters:

	"""
	The persistent setter values applied to newly buffered pitches.
	"""

	velocity: int
	velocity_deviation: int
	duration: float
	probability: float

	@classmethod
	def from_config (cls, config: barbeat.config.ParserConfig) -> "ModifierRegisters":

		return cls(
			velocity = config.velocity,
			velocity_deviation = config.velocity_deviation,
			duration = config.duration,
			probability = config.probability
		)


@dataclasses.dataclass
class BufferedNote:

	"""
	A pitch waiting for a time position, with the register values it will be
	emitted with. The values keep following later setters while buffered.
	"""

	pitch: barbeat.pitch.PitchSpec
	velocity: int
	velocity_deviation: int
	duration: float
	probability: float

	def to_event (self, start: barbeat.timing.BarBeat) -> barbeat.events.NoteEvent:

		"""
		Freeze the note's current values into an event at ``start``.
		"""

		return barbeat.events.NoteEvent(
			start = start,
			pitch = self.pitch.midi_pitch,
			name = self.pitch.name,
			velocity = self.velocity,
			velocity_deviation = self.velocity_deviation,
			probability = self.probability,
			duration = self.duration
		)


class ParserState:

	"""
	Everything one parse needs: registers, pitch buffer, current bar, output.

	A fresh state is built for every call to `parse`, so parses never share
	mutable data.
	"""

	def __init__ (self, source: str, time_signature: barbeat.timing.TimeSignature, config: barbeat.config.ParserConfig = barbeat.config.DEFAULT_CONFIG) -> None:

		"""
		Initialize the state with the configured register defaults.
		"""

		self.source = source
		self.time_signature = time_signature

		self.registers = ModifierRegisters.from_config(config)
		self.buffer: typing.List[BufferedNote] = []
		self.current_bar: typing.Optional[int] = None

		# Set once the buffer has been emitted; the next pitch starts a new buffer.
		self.pending_clear = False

		self.log = barbeat.bar_copy.EventLog()
		self.diagnostics = barbeat.diagnostics.Diagnostics()

		# Register name -> raw setter text, for writes no pitch has picked up yet.
		self._unconsumed: typing.Dict[str, str] = {}


	def process (self, token: barbeat.lexer.Token) -> None:

		"""
		Apply one token to the state.
		"""

		if isinstance(token, barbeat.lexer.PitchToken):
			self.add_pitch(token)

		elif isinstance(token, barbeat.lexer.TimePositionToken):
			self.emit(token)

		elif isinstance(token, barbeat.lexer.VelocityToken):
			self.registers.velocity = token.velocity
			self.registers.velocity_deviation = token.deviation
			self._apply_setter("velocity", token.raw, _set_velocity(token.velocity, token.deviation))

		elif isinstance(token, barbeat.lexer.DurationToken):
			duration = token.resolve(self.time_signature)
			self.registers.duration = duration
			self._apply_setter("duration", token.raw, _set_field("duration", duration))

		elif isinstance(token, barbeat.lexer.ProbabilityToken):
			self.registers.probability = token.probability
			self._apply_setter("probability", token.raw, _set_field("probability", token.probability))

		elif isinstance(token, barbeat.lexer.BarCopyToken):
			self.copy(token)

		elif isinstance(token, barbeat.lexer.ClearCopiesToken):
			self.clear_copies(token)

		else:
			raise TypeError(f"Unexpected token type: {type(token).__name__}")


	def _apply_setter (self, register: str, raw: str, update: typing.Callable[[BufferedNote], None]) -> None:

		"""
		Propagate a register write into the buffer, tracking writes nothing uses.
		"""

		previous = self._unconsumed.pop(register, None)

		if previous is not None:
			self.diagnostics.warn(f"State change {previous} was never applied to a pitch")

		if self.buffer:
			for note in self.buffer:
				update(note)
		else:
			self._unconsumed[register] = raw


	def add_pitch (self, token: barbeat.lexer.PitchToken) -> None:

		"""
		Buffer a pitch with the current register values.
		"""

		pitch = barbeat.pitch.resolve_pitch(token.note_name, token.octave, source=self.source, offset=token.offset)

		if self.pending_clear:
			self.buffer.clear()
			self.pending_clear = False

		self.buffer.append(BufferedNote(
			pitch = pitch,
			velocity = self.registers.velocity,
			velocity_deviation = self.registers.velocity_deviation,
			duration = self.registers.duration,
			probability = self.registers.probability
		))

		self._unconsumed.clear()


	def emit (self, token: barbeat.lexer.TimePositionToken) -> None:

		"""
		Emit every buffered pitch at each position the token names.

		A beat list (``1|1,3``) or repeat pattern (``1|1x4@0.5``) emits the whole
		buffer once per position, in order. Repeats run on into later bars, but
		the current bar stays the token's bar.
		"""

		if token.bar is not None:
			self.current_bar = token.bar

		elif self.current_bar is None:
			raise barbeat.errors.BarContextError(
				f"Time position {token.raw!r} has no bar to refer to; give the first position an explicit bar such as '1{token.raw}'",
				source = self.source,
				offset = token.offset
			)

		if not self.buffer:
			self.diagnostics.warn(f"Time position {self.current_bar}{token.raw[token.raw.index('|'):]} has no pitches")
			return

		for start in self._positions(token.beats):
			for note in self.buffer:
				self.log.append(note.to_event(start))

		self.pending_clear = True


	def _positions (self, beats: typing.Sequence[barbeat.lexer.BeatItem]) -> typing.List[barbeat.timing.BarBeat]:

		bar = typing.cast(int, self.current_bar)
		positions: typing.List[barbeat.timing.BarBeat] = []

		for item in beats:

			if not isinstance(item, barbeat.lexer.RepeatPattern):
				positions.append(barbeat.timing.BarBeat(bar=bar, beat=item))
				continue

			if item.times > EXCESSIVE_REPEAT_THRESHOLD:
				self.diagnostics.warn(f"Repeat pattern {item.raw} generates {item.times} notes, which may be excessive")

			step = item.step if item.step is not None else self.registers.duration
			first = barbeat.timing.BarBeat(bar=bar, beat=item.start)

			for index in range(item.times):
				positions.append(barbeat.timing.offset_bar_beat(first, index * step, self.time_signature))

		return positions


	def copy (self, token: barbeat.lexer.BarCopyToken) -> None:

		"""
		Drop the buffer and copy emitted bars as the directive describes.
		"""

		self._warn_unemitted(f"before {token.raw}")

		self.buffer.clear()
		self.pending_clear = False

		barbeat.bar_copy.copy_bars(token, self.log, self.diagnostics)

		self.current_bar = token.destination


	def clear_copies (self, token: barbeat.lexer.ClearCopiesToken) -> None:

		"""
		Drop the buffer and stop earlier bars from being copied.
		"""

		self._warn_unemitted(f"before {token.raw}")

		self.buffer.clear()
		self.pending_clear = False

		self.log.clear_index()


	def finish (self) -> barbeat.events.ParseResult:

		"""
		Report anything left pending and return the result.
		"""

		self._warn_unemitted("at end of input")

		for raw in self._unconsumed.values():
			self.diagnostics.warn(f"State change {raw} was never applied to a pitch")

		self._unconsumed.clear()

		return barbeat.events.ParseResult(
			events = tuple(self.log.events),
			warnings = self.diagnostics.warnings
		)


	def _warn_unemitted (self, context: str) -> None:

		if self.buffer and not self.pending_clear:
			self.diagnostics.warn(f"{len(self.buffer)} pitch(es) buffered but never emitted {context}")


def _set_velocity (velocity: int, deviation: int) -> typing.Callable[[BufferedNote], None]:

	def update (note: BufferedNote) -> None:
		note.velocity = velocity
		note.velocity_deviation = deviation

	return update


def _set_field (name: str, value: float) -> typing.Callable[[BufferedNote], None]:

	def update (note: BufferedNote) -> None:
		setattr(note, name, value)

	return update


def coerce_time_signature (time_signature: typing.Optional[TimeSignatureLike]) -> barbeat.timing.TimeSignature:

	"""
	Accept a `TimeSignature`, ``"6/8"``, ``(6, 8)`` or ``{"numerator": 6, "denominator": 8}``.
	"""

	if time_signature is None:
		return barbeat.timing.COMMON_TIME

	if isinstance(time_signature, barbeat.timing.TimeSignature):
		return time_signature

	if isinstance(time_signature, str):
		return barbeat.timing.parse_time_signature(time_signature)

	if isinstance(time_signature, dict):
		return barbeat.timing.TimeSignature(time_signature["numerator"], time_signature["denominator"])

	numerator, denominator = time_signature

	return barbeat.timing.TimeSignature(numerator, denominator)


def parse (notation: str, time_signature: typing.Optional[TimeSignatureLike] = None, config: barbeat.config.ParserConfig = barbeat.config.DEFAULT_CONFIG) -> barbeat.events.ParseResult:

	"""Parse bar|beat notation into note events and warnings.

	Parameters:
		notation: The notation text.
		time_signature: Defaults to 4/4. Used to resolve ``t<bars>:<beats>``
			durations; positions themselves are not checked against bar length.
		config: Initial register values.

	Returns:
		A `ParseResult` with the events in the order they were produced and any
		warnings. Warnings never stop the parse.

	Raises:
		NotationSyntaxError: Malformed tokens or out-of-range setter values.
		PitchError: Invalid pitch spellings or pitches outside MIDI 0-127.
		BarContextError: A beat-only position (``|2``) before any bar is known.

	Example:
		```python
		result = parse("v100 C3 1|1 v90 |2")
		[(e.name, e.velocity, str(e.start)) for e in result.events]
		# → [("C3", 100, "1|1"), ("C3", 90, "1|2")]
		```
	"""

	state = ParserState(notation, coerce_time_signature(time_signature), config)

	for token in barbeat.lexer.tokenize(notation):
		state.process(token)

	result = state.finish()

	logger.debug(f"Parsed {len(result.events)} event(s) with {len(result.warnings)} warning(s)")

	return result
