"""Tick resolution constants.

Beat fractions in bar|beat notation are equivalent to a resolution of
**480 pulses per quarter note**, which is also the resolution of exported
MIDI files.
"""

TICKS_PER_QUARTER_NOTE = 480

# Quarter notes in a whole note; scales beats of other denominators.
QUARTER_NOTES_PER_WHOLE_NOTE = 4
