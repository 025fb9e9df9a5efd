"""MIDI velocity constants.

Velocity is the MIDI attack strength (0-127). A velocity range ``v80-120`` is
stored as a base velocity (80) plus a deviation (40) so the player can pick
the final value.
"""

# Register defaults
DEFAULT_VELOCITY = 100
DEFAULT_VELOCITY_DEVIATION = 0

# MIDI standard range
MIN_VELOCITY = 0
MAX_VELOCITY = 127
