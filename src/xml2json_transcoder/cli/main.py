"""Main CLI entry point for the xml2json command-line tool.

Reads one XML document from a file or standard input, converts it and
writes the JSON document to a file or standard output.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, BinaryIO, Dict, List, Optional

from xml2json_transcoder import __version__
from xml2json_transcoder.api import Converter
from xml2json_transcoder.shared.config import ConverterConfig
from xml2json_transcoder.shared.errors import ConversionError
from xml2json_transcoder.shared.logging import get_logger
from xml2json_transcoder.shared.types import JSType

STDIO_PATH = "-"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INTERRUPTED = 130  # Standard exit code for SIGINT


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self, converter_config: Optional[ConverterConfig] = None):
        self.converter_config = converter_config or ConverterConfig()
        self.verbose = False
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file holds the fields of ``ConverterConfig``, for example
        ``{"attribute_prefix": "-", "type_kinds": ["int", "bool"]}``.

        Raises:
            ValueError: If the file is not valid JSON or holds unknown keys
            OSError: If the file cannot be read
        """
        with config_path.open(encoding="utf-8") as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid configuration file {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Configuration file {config_path} must hold a JSON object")
        return cls(ConverterConfig.from_dict(data))

    def apply_arguments(self, args: argparse.Namespace) -> None:
        """Override file settings with the options given on the command line."""
        changes: Dict[str, Any] = {}
        if args.attr_prefix is not None:
            changes["attribute_prefix"] = args.attr_prefix
        if args.content_prefix is not None:
            changes["content_prefix"] = args.content_prefix
        if args.exclude_attr:
            changes["excluded_attributes"] = (
                self.converter_config.excluded_attributes | frozenset(args.exclude_attr)
            )
        if args.force_arrays:
            changes["force_all_arrays"] = True
        if args.array_key:
            changes["force_array_keys"] = (
                self.converter_config.force_array_keys | frozenset(args.array_key)
            )
        if args.scalar_singletons:
            changes["scalar_singletons"] = True
        if args.types is not None:
            changes["type_kinds"] = parse_type_kinds(args.types)

        if changes:
            self.converter_config = self.converter_config.evolve(**changes)
        self.verbose = args.verbose
        self.quiet = args.quiet


def parse_type_kinds(value: str) -> frozenset:
    """Parse a comma separated kind list such as ``"int,float,bool,null"``."""
    names = [name for name in value.split(",") if name.strip()]
    return frozenset(JSType.from_name(name) for name in names)


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="xml2json",
        description="Convert an XML document into an equivalent JSON document"
    )

    parser.add_argument("--version", action="version", version=__version__)

    parser.add_argument(
        "input",
        nargs="?",
        default=STDIO_PATH,
        help="XML file to convert (default: standard input)"
    )
    parser.add_argument(
        "--output", "-o",
        default=STDIO_PATH,
        help="JSON output file (default: standard output)"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="JSON configuration file"
    )
    parser.add_argument(
        "--attr-prefix",
        help="Prefix added to attribute keys, e.g. '-'"
    )
    parser.add_argument(
        "--content-prefix",
        help="Prefix of the key holding mixed content text, e.g. '#'"
    )
    parser.add_argument(
        "--exclude-attr",
        action="append",
        metavar="NAME",
        help="Drop attributes with this namespace or local name (repeatable)"
    )
    parser.add_argument(
        "--force-arrays",
        action="store_true",
        help="Always write child groups as arrays"
    )
    parser.add_argument(
        "--array-key",
        action="append",
        metavar="KEY",
        help="Always write this key as an array (repeatable)"
    )
    parser.add_argument(
        "--scalar-singletons",
        action="store_true",
        help="Write single element groups as bare values unless forced"
    )
    parser.add_argument(
        "--types",
        metavar="KINDS",
        help="Comma separated kinds written unquoted: null,bool,int,float"
    )

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    verbosity.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def _read_input(path: str) -> BinaryIO:
    if path == STDIO_PATH:
        return sys.stdin.buffer
    return Path(path).open("rb")


def _write_output(path: str, data: bytes) -> None:
    if path == STDIO_PATH:
        sys.stdout.buffer.write(data)
        sys.stdout.buffer.write(b"\n")
        sys.stdout.flush()
        return
    Path(path).write_bytes(data)


def cmd_convert(config: CLIConfig, input_path: str, output_path: str) -> int:
    """Convert one document and write the result."""
    logger = get_logger(__name__, config.converter_config.correlation_id, "cli")
    converter = Converter(config.converter_config)

    try:
        source = _read_input(input_path)
    except OSError as e:
        print(f"Error: cannot open {input_path}: {e}", file=sys.stderr)
        return EXIT_FAILURE

    try:
        output = converter.convert(source)
    except ConversionError as e:
        logger.debug("Conversion failed", extra={"input": input_path, "stage": e.stage})
        print(f"Error: {input_path}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    finally:
        if source is not sys.stdin.buffer:
            source.close()

    try:
        _write_output(output_path, output)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return EXIT_FAILURE

    if output_path != STDIO_PATH and not config.quiet:
        print(f"Results written to {output_path}", file=sys.stderr)
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    try:
        config = CLIConfig.from_file(args.config) if args.config else CLIConfig()
        config.apply_arguments(args)
    except (OSError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE

    # Set up logging verbosity
    if config.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif config.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        return cmd_convert(config, args.input, args.output)
    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return EXIT_INTERRUPTED


if __name__ == "__main__":
    sys.exit(main())
