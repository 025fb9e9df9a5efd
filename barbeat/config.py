"""Parser defaults and YAML configuration.

A configuration file may contain any of these sections::

    parser:
      velocity: 100
      velocity_deviation: 0
      duration: 1.0
      probability: 1.0

    time_signature: "4/4"

    midi:
      bpm: 120
      channel: 0

Only the ``parser`` section affects parsing; the others are read by the
command-line host.
"""

import dataclasses
import logging
import os
import typing

import yaml

import barbeat.constants.durations
import barbeat.constants.velocity


logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class ParserConfig:

	"""
	Initial register values for a parse. Shared read-only between parses.
	"""

	velocity: int = barbeat.constants.velocity.DEFAULT_VELOCITY
	velocity_deviation: int = barbeat.constants.velocity.DEFAULT_VELOCITY_DEVIATION
	duration: float = barbeat.constants.durations.DEFAULT_DURATION
	probability: float = barbeat.constants.durations.DEFAULT_PROBABILITY

	def __post_init__ (self) -> None:

		if not barbeat.constants.velocity.MIN_VELOCITY <= self.velocity <= barbeat.constants.velocity.MAX_VELOCITY:
			raise ValueError(f"Default velocity must be 0-127, got {self.velocity}")

		if self.velocity_deviation < 0 or self.velocity + self.velocity_deviation > barbeat.constants.velocity.MAX_VELOCITY:
			raise ValueError(f"Default velocity range {self.velocity}+{self.velocity_deviation} exceeds 0-127")

		if self.duration <= 0:
			raise ValueError(f"Default duration must be positive, got {self.duration}")

		if not barbeat.constants.durations.MIN_PROBABILITY <= self.probability <= barbeat.constants.durations.MAX_PROBABILITY:
			raise ValueError(f"Default probability must be 0.0-1.0, got {self.probability}")

	@classmethod
	def from_dict (cls, data: typing.Optional[typing.Dict[str, typing.Any]]) -> "ParserConfig":

		"""
		Build a config from a mapping, e.g. the ``parser`` section of a YAML file.

		Raises ``ValueError`` for unknown keys or invalid values.
		"""

		if not data:
			return cls()

		known = {field.name for field in dataclasses.fields(cls)}
		unknown = sorted(set(data) - known)

		if unknown:
			raise ValueError(f"Unknown parser config keys: {unknown}. Expected some of {sorted(known)}.")

		return cls(**data)


DEFAULT_CONFIG = ParserConfig()


def load_config (config_path: str = 'barbeat.yaml') -> typing.Dict[str, typing.Any]:

	"""
	Load configuration from a YAML file. A missing file gives an empty config.

	Raises ``ValueError`` when the file is not valid YAML or not a mapping.
	"""

	if not os.path.exists(config_path):
		logger.warning(f"Config file {config_path} not found. Using defaults.")
		return {}

	with open(config_path, 'r') as f:
		try:
			data = yaml.safe_load(f)
		except yaml.YAMLError as e:
			raise ValueError(f"Config file {config_path} is not valid YAML: {e}") from e

	if data is None:
		return {}

	if not isinstance(data, dict):
		raise ValueError(f"Config file {config_path} must contain a mapping, got {type(data).__name__}")

	logger.info(f"Loaded config from {config_path}")

	return data
