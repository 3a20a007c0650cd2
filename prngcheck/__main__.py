"""Command line entry point for the generator test battery."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .app import BatteryApp
from .errors import InvalidConfigurationError, MissingFileError

EXIT_SUCCESS = 0
EXIT_UNEXPECTED_ERROR = 1
EXIT_MISSING_FILE = 2
EXIT_INVALID_CONFIG = 3
EXIT_TEST_FAILURE = 4


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Run the frequency, interval, chi-square, autocorrelation and runs "
        "tests against the modulo and uniform generators. Both options are optional; "
        "without them the defaults reproduce the fixed battery.",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Optional INI file overriding the built-in battery parameters.",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Print the seed, p-values and timing after the report.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    app = BatteryApp()
    try:
        result = app.run(config_path=args.config, verbose=args.verbose)
    except MissingFileError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_MISSING_FILE
    except InvalidConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_INVALID_CONFIG
    except Exception as exc:  # pragma: no cover - defensive guard
        print(f"Unexpected error: {exc}", file=sys.stderr)
        return EXIT_UNEXPECTED_ERROR
    if not result.succeeded:
        for failure in result.failures:
            print(
                f"Test execution failed: {failure.title} [{failure.label}]: {failure.message}",
                file=sys.stderr,
            )
        return EXIT_TEST_FAILURE
    return EXIT_SUCCESS


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    sys.exit(main())
