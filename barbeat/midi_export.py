"""Standard MIDI File export for parsed events.

This is a host-side convenience on top of the parser: it lays events out on a
single track at 480 ticks per quarter note. Probability and velocity
deviation are kept as written unless ``realize=True``, in which case each
event is rolled once with the given random generator.
"""

import logging
import random
import typing

import mido

import barbeat.constants.pulses
import barbeat.events
import barbeat.timing


logger = logging.getLogger(__name__)


DEFAULT_BPM = 120


def _realize (event: barbeat.events.NoteEvent, rng: random.Random) -> typing.Optional[int]:

	"""
	Roll an event's probability and velocity range. Returns None if it doesn't play.
	"""

	if event.probability < 1.0 and rng.random() >= event.probability:
		return None

	if event.velocity_deviation > 0:
		return event.velocity + rng.randint(0, event.velocity_deviation)

	return event.velocity


def events_to_midi_file (
	events: typing.Iterable[barbeat.events.NoteEvent],
	time_signature: barbeat.timing.TimeSignature = barbeat.timing.COMMON_TIME,
	bpm: float = DEFAULT_BPM,
	channel: int = 0,
	realize: bool = False,
	rng: typing.Optional[random.Random] = None
) -> mido.MidiFile:

	"""Lay events out as a type 1 MIDI file with one track.

	Parameters:
		events: Parsed note events, in any order.
		time_signature: Used to place bar|beat positions and scale durations.
		bpm: Tempo written to the file.
		channel: MIDI channel (0-15).
		realize: Apply each event's probability and velocity range.
		rng: Random generator for ``realize``; pass a seeded one for repeatable output.

	Returns:
		A `mido.MidiFile` with tempo and time signature meta messages followed
		by note on/off pairs.
	"""

	if not 0 <= channel <= 15:
		raise ValueError(f"MIDI channel must be 0-15, got {channel}")

	if bpm <= 0:
		raise ValueError(f"BPM must be positive, got {bpm}")

	if rng is None:
		rng = random.Random()

	mid = mido.MidiFile(type=1)
	mid.ticks_per_beat = barbeat.constants.pulses.TICKS_PER_QUARTER_NOTE
	track = mido.MidiTrack()
	mid.tracks.append(track)

	track.append(mido.MetaMessage('set_tempo', tempo=mido.bpm2tempo(bpm), time=0))
	track.append(mido.MetaMessage('time_signature', numerator=time_signature.numerator, denominator=time_signature.denominator, time=0))

	# (tick, note offs before note ons, message)
	timed: typing.List[typing.Tuple[int, int, mido.Message]] = []

	for event in events:

		velocity = _realize(event, rng) if realize else event.velocity

		if velocity is None:
			continue

		beats = barbeat.timing.bar_beat_to_beats(event.start.bar, event.start.beat, time_signature)
		start_tick = barbeat.timing.beats_to_ticks(beats, time_signature)
		end_tick = start_tick + max(1, barbeat.timing.beats_to_ticks(event.duration, time_signature))

		timed.append((start_tick, 1, mido.Message('note_on', channel=channel, note=event.pitch, velocity=velocity)))
		timed.append((end_tick, 0, mido.Message('note_off', channel=channel, note=event.pitch, velocity=0)))

	timed.sort(key=lambda item: (item[0], item[1]))

	last_tick = 0

	for tick, _, message in timed:
		track.append(message.copy(time=tick - last_tick))
		last_tick = tick

	return mid


def save_midi_file (events: typing.Iterable[barbeat.events.NoteEvent], filename: str, **kwargs: typing.Any) -> None:

	"""
	Write events to a MIDI file. Keyword arguments go to `events_to_midi_file`.
	"""

	mid = events_to_midi_file(events, **kwargs)

	logger.info(f"Saving MIDI file ({len(mid.tracks[0])} messages) to {filename}...")

	try:
		mid.save(filename)
	except OSError as e:
		logger.error(f"Failed to save MIDI file: {e}")
		raise

	logger.info(f"Saved {filename}")
