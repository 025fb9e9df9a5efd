"""Pitch names and MIDI note numbers.

Pitches are written as a letter, an optional accidental and a signed octave:
``C3``, ``F#-1``, ``Bb4``. The octave convention puts **C3 = 60**
(``midi = (octave + 2) * 12 + pitch_class``), so the playable range runs from
``C-2`` (0) up to ``G8`` (127).

Module-level constants:
- `NOTE_NAME_TO_PC`: Maps the 17 accepted spellings (e.g. `"C"`, `"F#"`, `"Bb"`) to pitch classes (0-11)
- `PC_TO_NOTE_NAME`: Maps pitch classes to sharp spellings

Spellings such as ``Cb``, ``B#``, ``Fb`` and ``E#`` are rejected rather than
coerced to their enharmonic equivalents.
"""

import dataclasses
import re
import typing

import barbeat.errors


NOTE_NAME_TO_PC: typing.Dict[str, int] = {
	"C": 0,
	"C#": 1,
	"Db": 1,
	"D": 2,
	"D#": 3,
	"Eb": 3,
	"E": 4,
	"F": 5,
	"F#": 6,
	"Gb": 6,
	"G": 7,
	"G#": 8,
	"Ab": 8,
	"A": 9,
	"A#": 10,
	"Bb": 10,
	"B": 11,
}

PC_TO_NOTE_NAME: typing.List[str] = [
	"C",
	"C#",
	"D",
	"D#",
	"E",
	"F",
	"F#",
	"G",
	"G#",
	"A",
	"A#",
	"B",
]

MIN_PITCH = 0
MAX_PITCH = 127

# Octave offset: octave -2 starts at MIDI 0.
OCTAVE_OFFSET = 2

PITCH_PATTERN = re.compile(r"^([A-G])(#|b)?(-?\d+)$")


@dataclasses.dataclass(frozen=True)
class PitchSpec:

	"""
	A resolved pitch: MIDI note number plus the name it was written as.
	"""

	midi_pitch: int
	name: str


def resolve_pitch (note_name: str, octave: int, source: typing.Optional[str] = None, offset: typing.Optional[int] = None) -> PitchSpec:

	"""Validate a pitch class spelling and octave and return the resolved pitch.

	Parameters:
		note_name: Letter plus optional accidental (e.g. ``"C"``, ``"F#"``, ``"Bb"``).
		octave: Signed octave number.
		source: Optional full notation text, used to locate errors.
		offset: Optional position of the pitch token in ``source``.

	Returns:
		A `PitchSpec` with the MIDI number and the written name.

	Raises:
		PitchError: If the spelling is not one of the accepted pitch classes,
			or the computed MIDI pitch falls outside 0-127.

	Example:
		```python
		resolve_pitch("C", 3)    # → PitchSpec(midi_pitch=60, name="C3")
		resolve_pitch("Bb", -1)  # → PitchSpec(midi_pitch=22, name="Bb-1")
		```
	"""

	name = f"{note_name}{octave}"

	if note_name not in NOTE_NAME_TO_PC:
		raise barbeat.errors.PitchError(
			f"Invalid pitch {name!r}: {note_name!r} is not a valid pitch class",
			source = source,
			offset = offset
		)

	midi_pitch = (octave + OCTAVE_OFFSET) * 12 + NOTE_NAME_TO_PC[note_name]

	if not MIN_PITCH <= midi_pitch <= MAX_PITCH:
		raise barbeat.errors.PitchError(
			f"Pitch {name!r} resolves to MIDI {midi_pitch}, outside {MIN_PITCH}-{MAX_PITCH}",
			source = source,
			offset = offset
		)

	return PitchSpec(midi_pitch=midi_pitch, name=name)


def parse_pitch_name (text: str) -> PitchSpec:

	"""
	Resolve a complete pitch name such as ``"C#3"``.
	"""

	match = PITCH_PATTERN.match(text)

	if match is None:
		raise barbeat.errors.PitchError(f"Invalid pitch {text!r}")

	letter, accidental, octave = match.groups()

	return resolve_pitch(letter + (accidental or ""), int(octave))


def midi_pitch_to_name (midi_pitch: int) -> str:

	"""
	Name a MIDI note number using sharp spellings, e.g. ``61`` → ``"C#3"``.
	"""

	if not MIN_PITCH <= midi_pitch <= MAX_PITCH:
		raise ValueError(f"MIDI pitch must be {MIN_PITCH}-{MAX_PITCH}, got {midi_pitch}")

	octave = midi_pitch // 12 - OCTAVE_OFFSET

	return f"{PC_TO_NOTE_NAME[midi_pitch % 12]}{octave}"
