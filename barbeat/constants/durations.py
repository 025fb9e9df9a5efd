"""Duration and probability register defaults.

Durations are in **beats** of the active time signature (1.0 = one beat).
"""

DEFAULT_DURATION = 1.0
DEFAULT_PROBABILITY = 1.0

MIN_PROBABILITY = 0.0
MAX_PROBABILITY = 1.0
