import pytest

import barbeat.events
import barbeat.interpreter


@pytest.fixture
def two_bars () -> barbeat.events.ParseResult:

	"""Bar 1 with C3 on every beat, bar 2 with E3 on beats 1 and 3."""

	return barbeat.interpreter.parse("C3 1|1 |2 |3 |4 E3 2|1 |3")


@pytest.fixture
def midi_events () -> barbeat.events.ParseResult:

	"""A short phrase mixing a chord, a velocity range and a probability."""

	return barbeat.interpreter.parse("v100 C3 E3 1|1 v80-100 p0.5 t0.5 G3 |3")
