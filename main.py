"""Documentation Checker - Entry Point

Usage:
  python main.py check <paths...> [--severity-threshold error|advisory]
                       [--format text|json] [--classification FILE] [--workers N]

Exit status is 0 when no violation reaches the threshold, 1 when one does and
2 on usage errors.
"""

import argparse
import logging
import sys
from typing import List, Optional

from config import Config
from doc_analyzer import ClassificationError, DocChecker, StaticClassification
from rules.services.rule_config_service import get_rule_config

EXIT_OK = 0
EXIT_VIOLATIONS = 1
EXIT_USAGE = 2

logger = logging.getLogger(__name__)


def configure_logging(level: str = Config.LOG_LEVEL):
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stderr)]
    )


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if number < 1:
        raise argparse.ArgumentTypeError("must be at least 1")
    return number


def build_parser() -> argparse.ArgumentParser:
    output = Config.get_output_config()
    parser = argparse.ArgumentParser(
        prog="doccheck",
        description="Check Ruby API documentation comments in C and Ruby sources.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    subparsers = parser.add_subparsers(title="commands", metavar="<command>", dest="command")
    subparsers.required = True

    check = subparsers.add_parser("check", help="Check the documentation comments of files and directories.")
    check.add_argument("paths", nargs="+", help="Source files or directories (searched recursively).")
    check.add_argument(
        "--severity-threshold", choices=["error", "advisory"],
        default=output['severity_threshold'] if output['severity_threshold'] in ("error", "advisory") else "error",
        help="Lowest severity that makes the run fail (default: %(default)s).",
    )
    check.add_argument(
        "--format", choices=["text", "json"], dest="output_format",
        default=output['format'] if output['format'] in ("text", "json") else "text",
        help="Report format (default: %(default)s).",
    )
    check.add_argument(
        "--classification", metavar="FILE",
        help="YAML mapping of methods to whether they return a new instance (Array#map: true).",
    )
    check.add_argument(
        "--workers", type=_positive_int, default=None,
        help=f"Worker threads (default: {Config.MAX_WORKERS}).",
    )
    return parser


def run_check(args: argparse.Namespace) -> int:
    lookup = None
    if args.classification:
        try:
            lookup = StaticClassification.from_yaml(args.classification)
        except ClassificationError as e:
            logger.error(str(e))
            return EXIT_USAGE

    options = Config.get_checker_config()
    if args.workers:
        options['max_workers'] = args.workers
    checker = DocChecker(new_instance_lookup=lookup, config_service=get_rule_config(Config.RULES_CONFIG), **options)

    report = checker.check_paths(args.paths)
    if args.output_format == "json":
        print(report.to_json())
    else:
        print(report.to_text())

    logger.info(f"Checked {report.files_checked} files, {len(report)} violations")
    return EXIT_VIOLATIONS if report.exit_code(args.severity_threshold) else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as e:
        return EXIT_USAGE if e.code else EXIT_OK
    configure_logging()

    if args.command == "check":
        return run_check(args)
    parser.print_usage(sys.stderr)
    return EXIT_USAGE


if __name__ == "__main__":
    sys.exit(main())
