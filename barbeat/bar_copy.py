"""Bar copy: duplicate already emitted bars into later (or earlier) bars.

Single-destination forms:

- ``@N=`` copies bar N-1 into bar N
- ``@N=M`` copies bar M into bar N
- ``@N=M-P`` copies bars M..P into bars N..N+(P-M)

Destination-range forms fill every bar N..Q:

- ``@N-Q=`` copies bar N-1 into each of them
- ``@N-Q=M`` copies bar M into each of them
- ``@N-Q=M-P`` tiles bars M..P across them, cycling back to M and stopping
  at Q even part-way through a cycle

Copies keep each event's beat and every other field and are appended after
everything emitted so far. Events already in a destination bar are left in
place, so copying into a populated bar layers the two.

``@clear`` empties the per-bar index: bars emitted before it can no longer be
copied from, though their events stay in the result.
"""

import logging
import typing

import barbeat.diagnostics
import barbeat.events
import barbeat.lexer


logger = logging.getLogger(__name__)


# (source bar, destination bar)
CopyPair = typing.Tuple[int, int]


class EventLog:

	"""
	Append-only list of emitted events with a per-bar index.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty log.
		"""

		self.events: typing.List[barbeat.events.NoteEvent] = []
		self._by_bar: typing.Dict[int, typing.List[barbeat.events.NoteEvent]] = {}


	def append (self, event: barbeat.events.NoteEvent) -> None:

		"""
		Add an event at the end of the log.
		"""

		self.events.append(event)
		self._by_bar.setdefault(event.start.bar, []).append(event)


	def in_bar (self, bar: int) -> typing.List[barbeat.events.NoteEvent]:

		"""
		Return the indexed events of a bar in the order they were logged.
		"""

		return list(self._by_bar.get(bar, []))


	def clear_index (self) -> None:

		"""
		Forget the per-bar index. Logged events are kept; only later appends are indexed.
		"""

		self._by_bar.clear()


def copy_plan (directive: barbeat.lexer.BarCopyToken, diagnostics: barbeat.diagnostics.Diagnostics) -> typing.Optional[typing.List[CopyPair]]:

	"""
	Work out which bar is copied into which.

	Returns ``(source, destination)`` pairs in destination order, or None
	(after a warning) when the source does not exist. Pairs that copy a bar to
	itself are still included; `copy_bars` skips them.
	"""

	first = directive.destination
	last = directive.destination_end if directive.is_destination_range else first
	destinations = range(first, typing.cast(int, last) + 1)

	if directive.is_previous:

		if first == 1:
			if directive.is_destination_range:
				diagnostics.warn("Cannot copy from previous bar when destination starts at bar 1")
			else:
				diagnostics.warn("Cannot copy from previous bar when at bar 1")
			return None

		return [(first - 1, destination) for destination in destinations]

	start = typing.cast(int, directive.source_start)
	end = typing.cast(int, directive.source_end if directive.is_range else start)

	if start < 1:
		if directive.is_range:
			diagnostics.warn(f"Cannot copy from range {start}-{end} (no such bar {start})")
		else:
			diagnostics.warn(f"Cannot copy from bar {start} (no such bar)")
		return None

	if not directive.is_destination_range:
		return [(source, first + source - start) for source in range(start, end + 1)]

	count = end - start + 1

	return [(start + (destination - first) % count, destination) for destination in destinations]


def copy_bars (directive: barbeat.lexer.BarCopyToken, log: EventLog, diagnostics: barbeat.diagnostics.Diagnostics) -> int:

	"""Apply a bar copy directive to the event log.

	Parameters:
		directive: The ``@N=...`` token.
		log: Events emitted so far; copies are appended to it.
		diagnostics: Receives warnings for invalid, self-referencing or empty sources.

	Returns:
		The number of events copied.

	Example:
		```python
		# After "C3 1|1 |3", "@2=" appends C3 at 2|1 and 2|3.
		copy_bars(BarCopyToken("@2=", 0, destination=2), log, diagnostics)  # → 2
		```
	"""

	plan = copy_plan(directive, diagnostics)

	if plan is None:
		return 0

	# Snapshot every source first so overlapping ranges never re-copy fresh copies.
	snapshot = {source: log.in_bar(source) for source, _ in plan}
	reported_empty: typing.Set[int] = set()
	copied = 0

	for source, destination in plan:

		if source == destination:
			if directive.is_destination_range:
				diagnostics.warn(f"Skipping copy of bar {source} to itself")
			else:
				diagnostics.warn(f"Cannot copy bar {source} to itself")
			continue

		if not snapshot[source]:
			if source not in reported_empty:
				diagnostics.warn(f"Bar {source} is empty, nothing to copy")
				reported_empty.add(source)
			continue

		for event in snapshot[source]:
			log.append(event.moved_to_bar(destination))
			copied += 1

	logger.debug(f"{directive.raw} copied {copied} event(s)")

	return copied
