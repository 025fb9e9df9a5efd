import typing


class BarBeatError(Exception):

	"""
	Base class for hard bar|beat errors. A hard error aborts the parse.

	When the offending text is known, ``offset`` is its zero-based position in
	the source and ``line`` / ``column`` are one-based.
	"""

	def __init__ (self, message: str, source: typing.Optional[str] = None, offset: typing.Optional[int] = None) -> None:

		self.reason = message
		self.offset = offset
		self.line: typing.Optional[int] = None
		self.column: typing.Optional[int] = None

		if source is not None and offset is not None:
			self.line = source.count("\n", 0, offset) + 1
			self.column = offset - (source.rfind("\n", 0, offset) + 1) + 1
			message = f"{message} at position {offset} (line {self.line}, column {self.column})"

		super().__init__(message)


class NotationSyntaxError(BarBeatError):
	"""Malformed token, or a setter value outside its allowed range."""


class PitchError(BarBeatError):
	"""Invalid pitch spelling, or a pitch outside MIDI 0-127."""


class BarContextError(BarBeatError):
	"""Beat-only shorthand used before any bar has been established."""
