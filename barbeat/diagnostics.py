import logging
import typing


logger = logging.getLogger(__name__)


class Diagnostics:

	"""
	Collects non-fatal warnings during a single parse, in the order they occur.
	"""

	def __init__ (self) -> None:

		"""
		Initialize an empty warning list.
		"""

		self._warnings: typing.List[str] = []


	def warn (self, message: str) -> None:

		"""
		Record a warning. Parsing continues.
		"""

		logger.debug(f"bar|beat warning: {message}")
		self._warnings.append(message)


	@property
	def warnings (self) -> typing.Tuple[str, ...]:

		"""The warnings recorded so far, oldest first."""

		return tuple(self._warnings)


	def __len__ (self) -> int:

		return len(self._warnings)
