"""CLI entry point for the host validation harness."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from host_validation.definition_loader import (
    DEFAULT_DEFINITION_PATH,
    build_registry,
    load_harness_definition,
)
from host_validation.probes.loading import available_probe_kinds
from host_validation.registry import ConfigurationError
from host_validation.reporter import (
    exit_code,
    format_output,
    log_report_summary,
    render_report,
)
from host_validation.scheduler import CheckScheduler

EXIT_CONFIGURATION_ERROR = 2


async def run(
    definition_path: Path,
    output_format: str = "text",
    max_concurrency: int | None = None,
    list_only: bool = False,
) -> int:
    """Run the checks in the definition and return exit code."""
    log = logging.getLogger("host_validation")

    log.info("Loading check definition: %s", definition_path)
    try:
        definition = await load_harness_definition(definition_path)
        registry = build_registry(definition)
    except ConfigurationError as exc:
        log.error("Configuration error: %s", exc)
        return EXIT_CONFIGURATION_ERROR

    if list_only:
        for check in registry:
            print(f"{check.name} ({check.timeout:g}s)")
        return 0

    scheduler = CheckScheduler(
        max_concurrency=max_concurrency or definition.max_concurrency
    )
    report = await scheduler.run_checks(registry)

    log_report_summary(log, report)

    if output_format == "json":
        print(json.dumps(format_output(report), indent=2))
    else:
        for line in render_report(report):
            print(line)

    return exit_code(report)


def positive_int(value: str) -> int:
    """Argparse type for a strictly positive integer."""
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be a positive integer: {value}")
    return number


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Validate the live state of this host against a baseline"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_DEFINITION_PATH,
        help="Path to the YAML check definition (default: bundled baseline)",
    )
    parser.add_argument(
        "--format",
        choices=("text", "json"),
        default="text",
        help="Report format written to stdout",
    )
    parser.add_argument(
        "--max-concurrency",
        type=positive_int,
        default=None,
        help="Maximum number of checks in flight (overrides the definition)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List the registered checks without running them",
    )
    parser.add_argument(
        "--list-probes",
        action="store_true",
        help="List the probe kinds available to check definitions and exit",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=("DEBUG", "INFO", "WARNING", "ERROR"),
        help="Log level for messages written to stderr",
    )

    args = parser.parse_args()

    if args.list_probes:
        for kind in available_probe_kinds():
            print(kind)
        sys.exit(0)

    logging.basicConfig(
        level=args.log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_status = asyncio.run(
        run(
            definition_path=args.config,
            output_format=args.format,
            max_concurrency=args.max_concurrency,
            list_only=args.list,
        )
    )
    sys.exit(exit_status)


if __name__ == "__main__":  # pragma: no cover
    main()
