"""Command-line host for the bar|beat parser.

Usage::

    python -m barbeat "v90 C3 E3 G3 1|1 |3"
    python -m barbeat -f song.txt --time-signature 6/8 --midi song.mid
    echo "C3 1|1 @2=" | python -m barbeat --format

Prints the parse result as JSON (or, with ``--format``, as canonical
notation). Warnings are logged; hard errors exit with status 1.
"""

import argparse
import json
import logging
import random
import sys
import typing

import barbeat.config
import barbeat.errors
import barbeat.formatter
import barbeat.interpreter
import barbeat.midi_export
import barbeat.timing


# Configure logging
logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


def _read_notation (args: argparse.Namespace) -> str:

	"""
	Take notation from the argument, a file, or stdin, in that order.
	"""

	if args.notation is not None:
		return typing.cast(str, args.notation)

	if args.file is not None:
		with open(args.file, 'r') as f:
			return f.read()

	return sys.stdin.read()


def build_parser () -> argparse.ArgumentParser:

	"""Create the argument parser."""

	parser = argparse.ArgumentParser(prog="barbeat", description="Parse bar|beat notation into note events")
	parser.add_argument("notation", nargs="?", help="Notation text (default: read --file or stdin)")
	parser.add_argument("-f", "--file", help="Read notation from this file")
	parser.add_argument("--config", help="YAML config file with parser / time_signature / midi sections")
	parser.add_argument("--time-signature", help="Time signature, e.g. 4/4 or 6/8 (default: 4/4)")
	parser.add_argument("--format", action="store_true", help="Print canonical notation instead of JSON")
	parser.add_argument("--midi", help="Also write the events to this MIDI file")
	parser.add_argument("--bpm", type=float, help=f"Tempo for --midi (default: {barbeat.midi_export.DEFAULT_BPM})")
	parser.add_argument("--channel", type=int, help="MIDI channel 0-15 for --midi (default: 0)")
	parser.add_argument("--realize", action="store_true", help="Apply probability and velocity ranges when writing --midi")
	parser.add_argument("--seed", type=int, help="Random seed for --realize")

	return parser


def main (argv: typing.Optional[typing.List[str]] = None) -> int:

	"""
	Parse notation and print the result. Returns the process exit status.
	"""

	args = build_parser().parse_args(argv)

	try:
		config = barbeat.config.load_config(args.config) if args.config else {}
		parser_config = barbeat.config.ParserConfig.from_dict(config.get('parser'))
		time_signature = barbeat.timing.parse_time_signature(args.time_signature or config.get('time_signature', "4/4"))
	except ValueError as e:
		logger.error(f"Invalid configuration: {e}")
		return 1

	try:
		notation = _read_notation(args)
	except OSError as e:
		logger.error(f"Cannot read notation: {e}")
		return 1

	try:
		result = barbeat.interpreter.parse(notation, time_signature, parser_config)
	except barbeat.errors.BarBeatError as e:
		logger.error(str(e))
		return 1

	for warning in result.warnings:
		logger.warning(warning)

	if args.format:
		print(barbeat.formatter.format_notation(result.events, parser_config))
	else:
		print(json.dumps(result.to_dict(), indent=2))

	if args.midi:
		midi_config = config.get('midi') or {}

		try:
			barbeat.midi_export.save_midi_file(
				result.events,
				args.midi,
				time_signature = time_signature,
				bpm = args.bpm if args.bpm is not None else midi_config.get('bpm', barbeat.midi_export.DEFAULT_BPM),
				channel = args.channel if args.channel is not None else midi_config.get('channel', 0),
				realize = args.realize,
				rng = random.Random(args.seed)
			)
		except ValueError as e:
			logger.error(f"Cannot write MIDI file: {e}")
			return 1
		except OSError:
			return 1

	return 0


if __name__ == "__main__":
	sys.exit(main())
