import typing

import barbeat.bar_copy
import barbeat.diagnostics
import barbeat.events
import barbeat.interpreter
import barbeat.lexer
import barbeat.timing


def _in_bar (result: barbeat.events.ParseResult, bar: int) -> typing.List[barbeat.events.NoteEvent]:

	return [event for event in result.events if event.start.bar == bar]


# ---------------------------------------------------------------------------
# Copy forms
# ---------------------------------------------------------------------------

def test_copy_previous_bar ():

	"""@2= duplicates bar 1 into bar 2, keeping beats and attributes."""

	result = barbeat.interpreter.parse("C1 1|1 |2 |3 |4 @2=")

	bar_one = _in_bar(result, 1)
	bar_two = _in_bar(result, 2)

	assert len(bar_two) == 4
	assert bar_two == [event.moved_to_bar(2) for event in bar_one]
	assert [event.start.beat for event in bar_two] == [1.0, 2.0, 3.0, 4.0]
	assert result.warnings == ()


def test_copy_single_bar ():

	"""@N=M copies bar M into bar N."""

	result = barbeat.interpreter.parse("C3 1|1 E3 2|3 @4=2")

	assert [(event.name, event.start.bar, event.start.beat) for event in _in_bar(result, 4)] == [("E3", 4, 3.0)]


def test_copy_range ():

	"""@5=1-2 copies bar 1 to bar 5 and bar 2 to bar 6, preserving beats."""

	result = barbeat.interpreter.parse("C3 1|1 |3 E3 2|2 @5=1-2")

	copies = result.events[3:]

	assert [(event.name, event.start.bar, event.start.beat) for event in copies] == [
		("C3", 5, 1.0),
		("C3", 5, 3.0),
		("E3", 6, 2.0),
	]


def test_copy_preserves_every_field ():

	"""Copies differ from their source only in the bar."""

	result = barbeat.interpreter.parse("v70-90 t0.5 p0.25 Bb2 1|2.5 @2=")
	source, copy = result.events

	assert copy == source.moved_to_bar(2)
	assert copy.start == barbeat.timing.BarBeat(bar=2, beat=2.5)


def test_copies_are_appended_after_existing_events ():

	"""Copying into a populated bar layers the copies on top."""

	result = barbeat.interpreter.parse("C3 1|1 E3 2|3 @2=1")

	assert [(event.name, event.start.bar, event.start.beat) for event in result.events] == [
		("C3", 1, 1.0),
		("E3", 2, 3.0),
		("C3", 2, 1.0),
	]


def test_copies_can_be_copied ():

	"""A copied bar is a valid source for a later copy."""

	result = barbeat.interpreter.parse("C3 1|1 @2= @3=2")

	assert [event.start.bar for event in result.events] == [1, 2, 3]


def test_overlapping_range_copies_original_content ():

	"""Copies made by a range are not themselves re-copied by the same range."""

	result = barbeat.interpreter.parse("C3 1|1 D3 2|1 @2=1-2")

	assert [event.name for event in _in_bar(result, 3)] == ["D3"]
	assert [event.name for event in _in_bar(result, 2)] == ["D3", "C3"]


# ---------------------------------------------------------------------------
# State after a copy
# ---------------------------------------------------------------------------

def test_copy_sets_current_bar ():

	"""Shorthand positions after a copy refer to the destination bar."""

	result = barbeat.interpreter.parse("C3 1|1 @3=1 D3 |2")

	assert result.events[-1].start == barbeat.timing.BarBeat(bar=3, beat=2.0)


def test_range_copy_sets_first_destination_bar ():

	"""After a range copy the current bar is the first destination bar."""

	result = barbeat.interpreter.parse("C3 1|1 E3 2|1 @5=1-2 G3 |4")

	assert result.events[-1].start == barbeat.timing.BarBeat(bar=5, beat=4.0)


def test_copy_sets_current_bar_even_when_nothing_copied ():

	"""A copy from an empty bar still moves the current bar."""

	result = barbeat.interpreter.parse("C3 1|1 @4=3 D3 |1")

	assert result.events[-1].start == barbeat.timing.BarBeat(bar=4, beat=1.0)


def test_copy_from_bar_one_establishes_bar_context ():

	"""A copy as the first bar reference makes shorthand usable."""

	result = barbeat.interpreter.parse("@2=1 C3 |3")

	assert result.events[-1].start == barbeat.timing.BarBeat(bar=2, beat=3.0)


def test_copy_clears_buffer ():

	"""Pitches buffered before a copy are not emitted afterwards."""

	result = barbeat.interpreter.parse("C3 1|1 @2= |3")

	assert len(result.events) == 2
	assert "Time position 2|3 has no pitches" in result.warnings


def test_copy_keeps_registers ():

	"""Setters before a copy still apply to pitches after it."""

	result = barbeat.interpreter.parse("C3 1|1 v50 @2= D3 |2")

	assert result.events[-1].velocity == 50


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------

def test_copy_from_empty_bar_warns ():

	"""@3=2 with nothing in bar 2 warns and adds no events."""

	result = barbeat.interpreter.parse("C3 1|1 @3=2")

	assert len(result.events) == 1
	assert any("empty" in warning for warning in result.warnings)
	assert result.warnings == ("Bar 2 is empty, nothing to copy",)


def test_range_with_empty_bar_continues ():

	"""An empty bar inside a range is skipped with a warning."""

	result = barbeat.interpreter.parse("C3 1|1 E3 3|1 @5=1-3")

	assert [(event.name, event.start.bar) for event in result.events[2:]] == [("C3", 5), ("E3", 7)]
	assert result.warnings == ("Bar 2 is empty, nothing to copy",)


def test_previous_bar_at_bar_one_warns ():

	"""@1= has no previous bar."""

	result = barbeat.interpreter.parse("C3 1|1 @1=")

	assert len(result.events) == 1
	assert result.warnings == ("Cannot copy from previous bar when at bar 1",)


def test_copy_from_bar_zero_warns ():

	"""Bar 0 does not exist."""

	result = barbeat.interpreter.parse("C3 1|1 @3=0")

	assert len(result.events) == 1
	assert result.warnings == ("Cannot copy from bar 0 (no such bar)",)


def test_copy_range_from_bar_zero_warns ():

	"""A range starting at bar 0 is rejected as a whole."""

	result = barbeat.interpreter.parse("C3 1|1 @3=0-1")

	assert len(result.events) == 1
	assert result.warnings == ("Cannot copy from range 0-1 (no such bar 0)",)


def test_copy_to_itself_warns ():

	"""Copying a bar onto itself is skipped."""

	result = barbeat.interpreter.parse("C3 1|1 @1=1")

	assert len(result.events) == 1
	assert result.warnings == ("Cannot copy bar 1 to itself",)


def test_unemitted_pitches_before_copy_warn ():

	"""Pitches buffered but never placed are reported when a copy discards them."""

	result = barbeat.interpreter.parse("C3 1|1 D3 @2=")

	assert [event.name for event in result.events] == ["C3", "C3"]
	assert result.warnings == ("1 pitch(es) buffered but never emitted before @2=",)


# ---------------------------------------------------------------------------
# Resolver internals
# ---------------------------------------------------------------------------

def test_event_log_indexes_by_bar ():

	"""EventLog returns the events of one bar, in order, as a new list."""

	log = barbeat.bar_copy.EventLog()
	first = barbeat.interpreter.parse("C3 1|1").events[0]
	second = first.moved_to_bar(2)

	log.append(first)
	log.append(second)

	in_bar_two = log.in_bar(2)
	in_bar_two.clear()

	assert log.events == [first, second]
	assert log.in_bar(2) == [second]
	assert log.in_bar(9) == []


def test_copy_bars_returns_count ():

	"""copy_bars reports how many events it appended."""

	log = barbeat.bar_copy.EventLog()
	diagnostics = barbeat.diagnostics.Diagnostics()

	for event in barbeat.interpreter.parse("C3 E3 1|1 |3").events:
		log.append(event)

	directive = barbeat.lexer.tokenize("@2=")[0]

	assert barbeat.bar_copy.copy_bars(directive, log, diagnostics) == 4
	assert len(log.in_bar(2)) == 4
	assert len(diagnostics) == 0


def test_copy_plan ():

	"""(source, destination) pairs for each directive form."""

	diagnostics = barbeat.diagnostics.Diagnostics()
	previous, single, ranged, filled, tiled = barbeat.lexer.tokenize("@4= @4=2 @7=2-4 @3-5=1 @3-7=1-2")

	assert barbeat.bar_copy.copy_plan(previous, diagnostics) == [(3, 4)]
	assert barbeat.bar_copy.copy_plan(single, diagnostics) == [(2, 4)]
	assert barbeat.bar_copy.copy_plan(ranged, diagnostics) == [(2, 7), (3, 8), (4, 9)]
	assert barbeat.bar_copy.copy_plan(filled, diagnostics) == [(1, 3), (1, 4), (1, 5)]
	assert barbeat.bar_copy.copy_plan(tiled, diagnostics) == [(1, 3), (2, 4), (1, 5), (2, 6), (1, 7)]
	assert len(diagnostics) == 0


# ---------------------------------------------------------------------------
# Destination ranges
# ---------------------------------------------------------------------------

def test_destination_range_from_previous_bar ():

	"""@2-4= copies bar 1 into bars 2, 3 and 4."""

	result = barbeat.interpreter.parse("C3 1|1 |3 @2-4=")

	assert [(event.start.bar, event.start.beat) for event in result.events[2:]] == [
		(2, 1.0), (2, 3.0),
		(3, 1.0), (3, 3.0),
		(4, 1.0), (4, 3.0),
	]
	assert result.warnings == ()


def test_destination_range_from_single_bar ():

	"""@3-5=1 copies bar 1 into bars 3 to 5."""

	result = barbeat.interpreter.parse("C3 1|1 E3 2|1 @3-5=1")

	assert [(event.name, event.start.bar) for event in result.events[2:]] == [("C3", 3), ("C3", 4), ("C3", 5)]


def test_destination_range_tiles_source_range ():

	"""@3-10=1-2 repeats the two-bar phrase four times."""

	result = barbeat.interpreter.parse("C3 1|1 E3 2|1 @3-10=1-2")

	assert [(event.name, event.start.bar) for event in result.events[2:]] == [
		("C3", 3), ("E3", 4),
		("C3", 5), ("E3", 6),
		("C3", 7), ("E3", 8),
		("C3", 9), ("E3", 10),
	]
	assert result.warnings == ()


def test_destination_range_stops_part_way_through_a_cycle ():

	"""@3-9=1-2 ends on the first bar of the phrase."""

	result = barbeat.interpreter.parse("C3 1|1 E3 2|1 @3-9=1-2")

	assert [event.name for event in result.events[2:]] == ["C3", "E3", "C3", "E3", "C3", "E3", "C3"]


def test_destination_range_shorter_than_source ():

	"""@6-7=1-5 only uses the first two source bars."""

	result = barbeat.interpreter.parse("C3 1|1 D3 2|1 E3 3|1 @6-7=1-5")

	assert [(event.name, event.start.bar) for event in result.events[3:]] == [("C3", 6), ("D3", 7)]


def test_destination_range_skips_self_copies ():

	"""Overlapping source and destination bars are skipped with a warning."""

	result = barbeat.interpreter.parse("C3 1|1 E3 2|1 @1-3=2")

	assert [(event.name, event.start.bar) for event in result.events[2:]] == [("E3", 1), ("E3", 3)]
	assert result.warnings == ("Skipping copy of bar 2 to itself",)


def test_destination_range_tiling_uses_original_content ():

	"""@3-4=3-4 is all self copies; @2-3=1-2 reads bar 2 before it is overlaid."""

	skipped = barbeat.interpreter.parse("C3 3|1 E3 4|1 @3-4=3-4")

	assert len(skipped.events) == 2
	assert skipped.warnings == ("Skipping copy of bar 3 to itself", "Skipping copy of bar 4 to itself")

	overlaid = barbeat.interpreter.parse("C3 1|1 E3 2|1 @2-3=1-2")

	assert [(event.name, event.start.bar) for event in overlaid.events[2:]] == [("C3", 2), ("E3", 3)]


def test_destination_range_from_previous_at_bar_one_warns ():

	"""@1-4= has no bar before the destination."""

	result = barbeat.interpreter.parse("C3 1|1 @1-4=")

	assert len(result.events) == 1
	assert result.warnings == ("Cannot copy from previous bar when destination starts at bar 1",)


def test_destination_range_empty_source_warns_once ():

	"""An empty source bar is reported once, not once per destination."""

	result = barbeat.interpreter.parse("C3 1|1 @4-8=2")

	assert len(result.events) == 1
	assert result.warnings == ("Bar 2 is empty, nothing to copy",)


def test_destination_range_sets_first_destination_bar ():

	"""Shorthand after a destination range refers to its first bar."""

	result = barbeat.interpreter.parse("C3 1|1 @3-6=1 D3 |2")

	assert result.events[-1].start == barbeat.timing.BarBeat(bar=3, beat=2.0)


# ---------------------------------------------------------------------------
# @clear
# ---------------------------------------------------------------------------

def test_clear_forgets_earlier_bars ():

	"""After @clear, bars emitted before it are empty to later copies."""

	result = barbeat.interpreter.parse("C3 1|1 @clear E3 2|1 @3=1")

	assert [(event.name, event.start.bar) for event in result.events] == [("C3", 1), ("E3", 2)]
	assert result.warnings == ("Bar 1 is empty, nothing to copy",)


def test_clear_keeps_later_bars_copyable ():

	"""Bars emitted after @clear can be copied as usual."""

	result = barbeat.interpreter.parse("C3 1|1 @2= @clear E3 4|1 @5=4")

	assert [(event.name, event.start.bar) for event in result.events] == [("C3", 1), ("C3", 2), ("E3", 4), ("E3", 5)]
	assert result.warnings == ()


def test_clear_drops_the_buffer ():

	"""@clear discards buffered pitches and reports any never emitted."""

	emitted = barbeat.interpreter.parse("C3 1|1 @clear |2")

	assert len(emitted.events) == 1
	assert emitted.warnings == ("Time position 1|2 has no pitches",)

	unemitted = barbeat.interpreter.parse("C3 1|1 D3 @clear")

	assert unemitted.warnings == ("1 pitch(es) buffered but never emitted before @clear",)


def test_clear_keeps_current_bar ():

	"""Shorthand after @clear still refers to the bar before it."""

	result = barbeat.interpreter.parse("C3 3|1 @clear D3 |2")

	assert result.events[-1].start == barbeat.timing.BarBeat(bar=3, beat=2.0)


def test_event_log_clear_index_keeps_events ():

	"""clear_index empties the per-bar index but not the event list."""

	log = barbeat.bar_copy.EventLog()
	event = barbeat.interpreter.parse("C3 1|1").events[0]

	log.append(event)
	log.clear_index()

	assert log.events == [event]
	assert log.in_bar(1) == []

	log.append(event.moved_to_bar(2))

	assert log.in_bar(2) == [event.moved_to_bar(2)]
