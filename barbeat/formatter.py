"""Write note events back out as bar|beat notation.

`format_notation` is the inverse of `barbeat.interpreter.parse`: parsing its
output yields the same events (ordered by position), with no warnings, as
long as beats and values need no more than three decimals.

Events at the same position with the same velocity, duration and probability
share one chord; events at the same position that differ get a chord each,
repeating the position. Events built by hand whose name is missing or
does not match their MIDI pitch are written with a sharp spelling.
"""

import typing

import barbeat.config
import barbeat.errors
import barbeat.events
import barbeat.pitch
import barbeat.timing


# Positions closer than this are the same moment.
POSITION_TOLERANCE = 0.001

Attributes = typing.Tuple[int, int, float, float]


def _attributes (event: barbeat.events.NoteEvent) -> Attributes:

	return (event.velocity, event.velocity_deviation, event.duration, event.probability)


def _pitch_name (event: barbeat.events.NoteEvent) -> str:

	"""
	The event's own spelling when it names its pitch, otherwise a sharp spelling of the number.
	"""

	try:
		spelled = barbeat.pitch.parse_pitch_name(event.name)
	except barbeat.errors.PitchError:
		return barbeat.pitch.midi_pitch_to_name(event.pitch)

	if spelled.midi_pitch != event.pitch:
		return barbeat.pitch.midi_pitch_to_name(event.pitch)

	return event.name


def _group_by_position (events: typing.Sequence[barbeat.events.NoteEvent]) -> typing.List[typing.List[barbeat.events.NoteEvent]]:

	"""
	Sort events by position then pitch and split them into same-position groups.
	"""

	ordered = sorted(events, key=lambda event: (event.start.bar, event.start.beat, event.pitch))
	groups: typing.List[typing.List[barbeat.events.NoteEvent]] = []

	for event in ordered:

		if groups:
			head = groups[-1][0].start
			if head.bar == event.start.bar and abs(head.beat - event.start.beat) <= POSITION_TOLERANCE:
				groups[-1].append(event)
				continue

		groups.append([event])

	return groups


def _split_by_attributes (group: typing.List[barbeat.events.NoteEvent]) -> typing.List[typing.List[barbeat.events.NoteEvent]]:

	"""
	Split a same-position group into chords sharing velocity, duration and probability.
	"""

	chords: typing.Dict[Attributes, typing.List[barbeat.events.NoteEvent]] = {}

	for event in group:
		chords.setdefault(_attributes(event), []).append(event)

	return list(chords.values())


def format_notation (events: typing.Sequence[barbeat.events.NoteEvent], config: barbeat.config.ParserConfig = barbeat.config.DEFAULT_CONFIG) -> str:

	"""Format note events as bar|beat notation.

	Parameters:
		events: Events in any order.
		config: The register defaults the notation will be parsed with;
			setters are only written where a value differs from the running
			state.

	Returns:
		Space-separated notation, empty for no events.

	Example:
		```python
		format_notation(parse("v80 C3 E3 1|1 t0.5 D3 |3").events)
		# → "v80 C3 E3 1|1 t0.5 D3 1|3"
		```
	"""

	if not events:
		return ""

	velocity = config.velocity
	deviation = config.velocity_deviation
	duration = config.duration
	probability = config.probability

	elements: typing.List[str] = []

	for group in _group_by_position(events):

		start = group[0].start

		for chord in _split_by_attributes(group):

			first = chord[0]

			if first.velocity != velocity or first.velocity_deviation != deviation:
				if first.velocity_deviation > 0:
					elements.append(f"v{first.velocity}-{first.velocity + first.velocity_deviation}")
				else:
					elements.append(f"v{first.velocity}")
				velocity = first.velocity
				deviation = first.velocity_deviation

			if abs(first.duration - duration) > POSITION_TOLERANCE:
				elements.append(f"t{barbeat.timing.format_number(first.duration)}")
				duration = first.duration

			if abs(first.probability - probability) > POSITION_TOLERANCE:
				elements.append(f"p{barbeat.timing.format_number(first.probability)}")
				probability = first.probability

			elements.extend(_pitch_name(event) for event in chord)
			elements.append(str(start))

	return " ".join(elements)
