#!/usr/bin/env python3
"""
Template Accessibility Linter CLI

Command-line interface for checking HTML/template files for accessibility
defects.

Usage:
    python -m template_a11y.cli Templates/Page/Default.html [options]
    template-a11y Templates/**/*.html [options]

Exit codes:
    0  every file passed
    1  at least one file has blocking diagnostics
    2  usage or I/O error
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List

from . import __version__
from .analyzers import RULE_GROUPS
from .config import AnalysisOptions, FileHints
from .diagnostics import AnalysisReport, Severity
from .engine import TemplateAccessibilityAnalyzer

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2


def setup_logging(verbose: bool = False) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(levelname)s: %(message)s'
    )


def parse_args(args: list = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog='template-a11y',
        description='Check HTML and template files for accessibility defects',
        epilog='Example: template-a11y Resources/Private/Templates/Page.html --rules form-label,link-text'
    )

    parser.add_argument(
        'inputs',
        nargs='*',
        type=str,
        help='Template files to check'
    )

    parser.add_argument(
        '-f', '--format',
        choices=['text', 'json'],
        default='text',
        help='Output format (default: text)'
    )

    parser.add_argument(
        '-o', '--output',
        type=str,
        default=None,
        help='Output file for the report (default: stdout)'
    )

    parser.add_argument(
        '--rules',
        type=str,
        default=None,
        help='Comma-separated group ids and/or rule ids to enable (default: all)'
    )

    parser.add_argument(
        '--severity',
        action='append',
        default=[],
        metavar='RULE=LEVEL',
        help='Override the severity of a rule or group (error, warning, weak_warning, info)'
    )

    parser.add_argument(
        '--universal',
        action='store_true',
        help='A universal rule set is active alongside the legacy rules'
    )

    parser.add_argument(
        '--suppress-legacy-duplicates',
        action='store_true',
        help='With --universal, skip legacy rules the universal set supersedes'
    )

    fragment = parser.add_mutually_exclusive_group()
    fragment.add_argument(
        '--fragment',
        dest='fragment',
        action='store_const',
        const=True,
        help='Treat every input as a layout/partial fragment'
    )
    fragment.add_argument(
        '--page',
        dest='fragment',
        action='store_const',
        const=False,
        help='Treat every input as a full page'
    )

    parser.add_argument(
        '--strict',
        action='store_true',
        help='Strict mode: warnings also fail a file'
    )

    parser.add_argument(
        '--list-rules',
        action='store_true',
        help='List analyzer groups and their rule ids, then exit'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Enable verbose output'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    return parser.parse_args(args)


def parse_severity_overrides(values: List[str]) -> Dict[str, Severity]:
    """
    Parse RULE=LEVEL pairs.

    Raises:
        ValueError: If a pair is malformed or names an unknown level
    """
    overrides = {}
    for value in values:
        rule_id, sep, level = value.partition('=')
        if not sep or not rule_id.strip():
            raise ValueError(f"Expected RULE=LEVEL, got: {value}")
        overrides[rule_id.strip()] = Severity.parse(level)
    return overrides


def build_options(parsed: argparse.Namespace) -> AnalysisOptions:
    """Translate command-line flags into validated analysis options."""
    enabled = None
    if parsed.rules:
        enabled = {r.strip() for r in parsed.rules.split(',') if r.strip()}

    options = AnalysisOptions(
        enabled_rules=enabled,
        universal_enabled=parsed.universal,
        suppress_legacy_duplicates=parsed.suppress_legacy_duplicates,
        severity_overrides=parse_severity_overrides(parsed.severity),
        file_hints=FileHints(is_fragment=parsed.fragment),
        strict_mode=parsed.strict,
    )
    options.validate()
    return options


def format_rule_list() -> str:
    lines = []
    for group in RULE_GROUPS:
        lines.append(f"{group.group_id}  ({group.display_name})")
        for rule_id in group.rule_ids:
            lines.append(f"    {rule_id}")
    return "\n".join(lines)


def format_reports(reports: List[AnalysisReport], output_format: str) -> str:
    if output_format == 'json':
        return json.dumps([report.to_dict() for report in reports], indent=2)
    return "\n\n".join(report.to_text() for report in reports)


def main(args: list = None) -> int:
    """
    Main entry point for CLI.

    Args:
        args: Command-line arguments (default: sys.argv)

    Returns:
        Exit code (0 all passed, 1 blocking diagnostics, 2 usage or I/O error)
    """
    parsed = parse_args(args)
    setup_logging(parsed.verbose)

    logger = logging.getLogger(__name__)

    if parsed.list_rules:
        print(format_rule_list())
        return EXIT_OK

    if not parsed.inputs:
        logger.error("No input files given")
        return EXIT_USAGE

    try:
        options = build_options(parsed)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_USAGE

    analyzer = TemplateAccessibilityAnalyzer(options)
    reports = []
    for name in parsed.inputs:
        input_path = Path(name)
        logger.debug(f"Checking: {input_path}")
        try:
            reports.append(analyzer.analyze_path(input_path))
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Cannot read {input_path}: {e}")
            return EXIT_USAGE

    output = format_reports(reports, parsed.format)
    if parsed.output:
        with open(parsed.output, 'w', encoding='utf-8') as f:
            f.write(output)
        print(f"Report written to: {parsed.output}")
    else:
        print(output)

    failed = [report.file_path for report in reports if not report.passed]
    if failed:
        logger.info(f"{len(failed)} of {len(reports)} files failed")
        return EXIT_FAILED
    return EXIT_OK


if __name__ == '__main__':
    sys.exit(main())
