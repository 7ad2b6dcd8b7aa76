"""
solscope Command-Line Interface.

Usage:
    solscope lint Token.sol                  # AST read from Token.sol.json
    solscope lint Token.sol --ast out.json
    solscope lint a.sol b.sol --json
    solscope lint --list-rules
    solscope positions Token.sol 120 348     # offsets -> line:column
"""

import argparse
import json
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from solscope import __version__
from solscope.analysis.linter import Linter, default_ast_path
from solscope.analysis.ast_nodes import load_ast
from solscope.analysis.positions import SourcePositionIndex
from solscope.analysis.rules import (
    ALL_RULES,
    LintCategory,
    LintConfiguration,
    LintLevel,
    LintViolation,
)
from solscope.utils.errors import ConfigurationError, SolScopeError

logger = logging.getLogger("solscope.cli")

DEFAULT_CONFIG_NAME = "solscope.toml"


# =============================================================================
# ANSI Color Codes for Terminal Output
# =============================================================================


class Colors:
    """ANSI escape codes for colored terminal output."""

    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    CYAN = "\033[96m"
    GRAY = "\033[90m"

    BOLD = "\033[1m"
    RESET = "\033[0m"

    @classmethod
    def disable(cls) -> None:
        """Disable all colors (for non-TTY output)."""
        cls.RED = ""
        cls.GREEN = ""
        cls.YELLOW = ""
        cls.BLUE = ""
        cls.CYAN = ""
        cls.GRAY = ""
        cls.BOLD = ""
        cls.RESET = ""


def _init_colors() -> None:
    """Initialize colors based on terminal capabilities."""
    # Disable colors if not a TTY or if NO_COLOR is set
    if not sys.stdout.isatty() or os.environ.get("NO_COLOR"):
        Colors.disable()


_init_colors()


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="solscope",
        description="solscope - report Solidity identifiers used before their definition",
    )

    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "--log-level",
        default="warning",
        choices=["debug", "info", "warning", "error"],
        help="Logging verbosity (default: warning)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Lint command
    lint_parser = subparsers.add_parser(
        "lint",
        aliases=["l"],
        help="Check Solidity files for use-before-define",
    )
    lint_parser.add_argument(
        "inputs",
        type=Path,
        nargs="*",  # Empty to allow --list-rules without input
        help="Solidity source files (.sol)",
    )
    lint_parser.add_argument(
        "--ast",
        type=Path,
        metavar="FILE",
        help="JSON AST of the single input (default: <input>.json)",
    )
    lint_parser.add_argument(
        "--config",
        type=Path,
        metavar="FILE",
        help=f"Configuration file (default: ./{DEFAULT_CONFIG_NAME} when present)",
    )
    lint_parser.add_argument(
        "--warn-all",
        action="store_true",
        help="Report every rule as a warning",
    )
    lint_parser.add_argument(
        "--deny",
        type=str,
        metavar="CATEGORY",
        help="Treat every rule in CATEGORY as an error (correctness)",
    )
    lint_parser.add_argument(
        "--allow",
        type=str,
        metavar="RULE",
        action="append",
        help="Disable a specific rule (e.g., 'use-before-define' or 'E0101')",
    )
    lint_parser.add_argument(
        "--json",
        action="store_true",
        help="Output lint results as JSON",
    )
    lint_parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )
    lint_parser.add_argument(
        "--list-rules",
        action="store_true",
        help="List all available lint rules",
    )

    # Positions command
    positions_parser = subparsers.add_parser(
        "positions",
        help="Translate character offsets of a file into line:column",
    )
    positions_parser.add_argument(
        "input",
        type=Path,
        help="Source file",
    )
    positions_parser.add_argument(
        "offsets",
        type=int,
        nargs="+",
        help="0-based character offsets",
    )

    return parser


# =============================================================================
# Lint Command
# =============================================================================


def _build_configuration(args: argparse.Namespace) -> LintConfiguration:
    """Assemble the configuration from the config file and command-line flags."""
    config_path: Optional[Path] = args.config
    if config_path is None and Path(DEFAULT_CONFIG_NAME).is_file():
        config_path = Path(DEFAULT_CONFIG_NAME)

    if config_path is not None:
        logger.info("loading configuration from %s", config_path)
        config = LintConfiguration.from_toml(config_path)
    else:
        config = LintConfiguration()

    if args.warn_all:
        config.warn_all()

    if args.deny:
        try:
            category = LintCategory(args.deny.lower())
        except ValueError:
            valid = ", ".join(c.value for c in LintCategory)
            raise ConfigurationError(
                f"Unknown category '{args.deny}' (valid categories: {valid})"
            ) from None
        config.set_level_by_category(category, LintLevel.DENY)

    for rule_id in args.allow or []:
        config.allow(rule_id)

    return config


def cmd_lint(args: argparse.Namespace) -> int:
    """Handle the lint command."""
    if args.no_color:
        Colors.disable()

    if args.list_rules:
        _print_lint_rules()
        return 0

    if not args.inputs:
        print("Error: Input file is required (or use --list-rules)", file=sys.stderr)
        return 1

    if args.ast is not None and len(args.inputs) > 1:
        print("Error: --ast can only be used with a single input", file=sys.stderr)
        return 1

    try:
        config = _build_configuration(args)
    except ConfigurationError as e:
        print(f"{Colors.RED}Error:{Colors.RESET} {e}", file=sys.stderr)
        return 1

    linter = Linter(config)
    results: list[tuple[Path, list[LintViolation]]] = []
    failed = False

    for input_path in args.inputs:
        ast_path = args.ast if args.ast is not None else default_ast_path(input_path)
        try:
            source = input_path.read_text(encoding="utf-8")
            violations = linter.lint(source, load_ast(ast_path), str(input_path))
        except OSError as e:
            print(f"{Colors.RED}Error:{Colors.RESET} {input_path}: {e.strerror}", file=sys.stderr)
            failed = True
            continue
        except SolScopeError as e:
            # A structural problem aborts this file only
            print(f"{Colors.RED}Error:{Colors.RESET} {input_path}: {e}", file=sys.stderr)
            failed = True
            continue

        results.append((input_path, violations))
        if not args.json:
            _print_lint_report(input_path, violations, source)

    if args.json:
        _print_lint_json(results)

    # Count errors (deny level)
    error_count = sum(
        1 for _, violations in results for v in violations if v.level == LintLevel.DENY
    )
    return 1 if failed or error_count > 0 else 0


def _print_lint_report(
    input_path: Path,
    violations: list[LintViolation],
    source: Optional[str] = None,
) -> None:
    """
    Print a Rust-style formatted lint report with source context.

    Example output:
        error[E0101]: 'y' is used before its definition (used at offset 31, declared at offset 45)
          --> Token.sol:3:13
           |
         3 |     uint x = y;
           |              ^ used here
           |
           = help: move the declaration of 'y' above its first use
           = note: declared at Token.sol:4:4
    """
    if not violations:
        print(f"{Colors.GREEN}[ok]{Colors.RESET} {input_path}: No lint issues found")
        return

    source_lines = source.splitlines() if source else []

    errors = [v for v in violations if v.level == LintLevel.DENY]
    warnings = [v for v in violations if v.level == LintLevel.WARN]

    for violation in violations:
        level_color = Colors.RED if violation.level == LintLevel.DENY else Colors.YELLOW
        level_str = "error" if violation.level == LintLevel.DENY else "warning"

        print(
            f"{level_color}{Colors.BOLD}{level_str}[{violation.rule.code}]{Colors.RESET}: "
            f"{Colors.BOLD}{violation.message}{Colors.RESET}"
        )

        loc = violation.location
        if loc:
            print(f"  {Colors.BLUE}-->{Colors.RESET} {input_path}:{loc.line}:{loc.column}")

            if source_lines and 1 <= loc.line <= len(source_lines):
                print(f"   {Colors.BLUE}|{Colors.RESET}")

                source_line = source_lines[loc.line - 1]
                line_num_str = f"{loc.line:3}"
                print(f"{Colors.BLUE}{line_num_str} |{Colors.RESET} {source_line}")

                underline_length = _span_length(violation)
                padding = " " * loc.column
                underline = "^" * underline_length
                print(
                    f"   {Colors.BLUE}|{Colors.RESET} {padding}{level_color}{underline}{Colors.RESET} used here"
                )

                print(f"   {Colors.BLUE}|{Colors.RESET}")
        else:
            print(f"  {Colors.BLUE}-->{Colors.RESET} {input_path}:<unknown>")
            print(f"   {Colors.BLUE}|{Colors.RESET}")

        if violation.suggestion:
            print(
                f"   {Colors.BLUE}={Colors.RESET} {Colors.GREEN}help:{Colors.RESET} {violation.suggestion}"
            )

        for related_loc in violation.related_locations:
            print(
                f"   {Colors.BLUE}={Colors.RESET} {Colors.BOLD}note:{Colors.RESET} declared at {input_path}:{related_loc.line}:{related_loc.column}"
            )

        print()

    print(f"Found {len(errors)} error(s) and {len(warnings)} warning(s)")


def _span_length(violation: LintViolation) -> int:
    """Length of the underline: the reported node, clipped to its first line."""
    loc = violation.location
    end = violation.end_location
    if loc and end and end.line == loc.line:
        return max(1, end.column - loc.column + 1)
    return 1


def _violation_to_json(violation: LintViolation) -> dict:
    loc = violation.location
    end = violation.end_location
    return {
        "rule": {
            "code": violation.rule.code,
            "name": violation.rule.name,
            "category": violation.rule.category.value,
        },
        "level": violation.level.value,
        "location": {
            "line": loc.line if loc else None,
            "column": loc.column if loc else None,
            "offset": loc.offset if loc else None,
        },
        "end_location": {
            "line": end.line if end else None,
            "column": end.column if end else None,
        },
        "related": [
            {"line": r.line, "column": r.column, "offset": r.offset}
            for r in violation.related_locations
        ],
        "message": violation.message,
        "suggestion": violation.suggestion,
    }


def _print_lint_json(results: list[tuple[Path, list[LintViolation]]]) -> None:
    """Print lint results as JSON."""
    by_rule: dict[str, int] = {}
    for _, violations in results:
        for v in violations:
            by_rule[v.rule.name] = by_rule.get(v.rule.name, 0) + 1

    output = {
        "files": [
            {
                "file": str(path),
                "violations": [_violation_to_json(v) for v in violations],
            }
            for path, violations in results
        ],
        "summary": {
            "total": sum(len(violations) for _, violations in results),
            "by_rule": by_rule,
        },
    }

    print(json.dumps(output, indent=2))


def _print_lint_rules() -> None:
    """Print all available lint rules."""
    print(f"\n{Colors.BOLD}Available Lint Rules{Colors.RESET}")
    print("=" * 60)

    by_category: dict[LintCategory, list] = {}
    for rule in ALL_RULES.values():
        by_category.setdefault(rule.category, []).append(rule)

    for category in LintCategory:
        if category not in by_category:
            continue

        print(f"\n{Colors.CYAN}{category.value.upper()}{Colors.RESET}")
        for rule in sorted(by_category[category], key=lambda r: r.code):
            level_str = (
                f"{Colors.YELLOW}warn{Colors.RESET}"
                if rule.level == LintLevel.WARN
                else f"{Colors.RED}deny{Colors.RESET}"
            )
            print(f"  {rule.code} {rule.name:30s} [{level_str}]")
            msg = rule.message.replace("{}", "<name>", 1).split(" (")[0]
            print(f"    {Colors.GRAY}{msg}{Colors.RESET}")

    print()


# =============================================================================
# Positions Command
# =============================================================================


def cmd_positions(args: argparse.Namespace) -> int:
    """Handle the positions command."""
    try:
        source = args.input.read_text(encoding="utf-8")
    except OSError as e:
        print(f"Error: {args.input}: {e.strerror}", file=sys.stderr)
        return 1

    index = SourcePositionIndex(source, str(args.input))
    status = 0
    for offset in args.offsets:
        try:
            line, column = index.position(offset)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            status = 1
            continue
        print(f"{offset}\t{line}:{column}")
    return status


# =============================================================================
# Entry Point
# =============================================================================


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    command_handlers = {
        "lint": cmd_lint,
        "l": cmd_lint,
        "positions": cmd_positions,
    }

    handler = command_handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
