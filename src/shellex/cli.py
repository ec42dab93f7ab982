"""Command-line interface for shellex."""

from __future__ import annotations

import argparse
import json
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from shellex.tokens import Token

FORMATS = ("text", "json")


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path | None  # None reads stdin
    output_file: Path | None
    output_format: str
    positions: bool
    check: bool
    warn_unclosed: bool
    detect: bool
    debug: bool

    @property
    def display_name(self) -> str:
        return str(self.input_file) if self.input_file is not None else "<stdin>"


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="shellex",
        description="Tokenize shell scripts for syntax highlighting",
    )
    p.add_argument("input", nargs="?", default="-", help="Input script (default: stdin)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-f",
        "--format",
        choices=FORMATS,
        default=None,
        help="Token output format (default: text)",
    )
    p.add_argument(
        "--positions", action="store_true", help="Include line:column of each token"
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="Config file (default: auto-discover shellex.toml)",
    )
    p.add_argument(
        "--check",
        action="store_true",
        help="Report characters no rule matched; exit 1 if there are any",
    )
    p.add_argument(
        "--detect", action="store_true", help="Print the detected lexer tag and exit"
    )
    p.add_argument(
        "--debug", action="store_true", help="Dump tokens and final state stack to stderr"
    )
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / "shellex.toml"

    if not path.is_file():
        return {}

    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = None if args.input == "-" else Path(args.input)
    input_dir = input_file.parent if input_file is not None else Path(".")
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    # Output: config < CLI
    output_format = "text"
    positions = False
    cfg_output = config.get("output")
    if isinstance(cfg_output, dict):
        cfg_format = cfg_output.get("format")
        if cfg_format is not None:
            if cfg_format not in FORMATS:
                raise argparse.ArgumentTypeError(
                    f"invalid output format in config: {cfg_format!r} "
                    f"(expected one of {', '.join(FORMATS)})"
                )
            output_format = cfg_format
        if isinstance(cfg_output.get("positions"), bool):
            positions = cfg_output["positions"]
    if args.format is not None:
        output_format = args.format
    positions = positions or args.positions

    warn_unclosed = True
    cfg_check = config.get("check")
    if isinstance(cfg_check, dict) and "warn_unclosed" in cfg_check:
        cfg_warn = cfg_check["warn_unclosed"]
        if not isinstance(cfg_warn, bool):
            raise argparse.ArgumentTypeError(
                f"invalid warn_unclosed in config: {cfg_warn!r} (expected true or false)"
            )
        warn_unclosed = cfg_warn

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        output_format=output_format,
        positions=positions,
        check=args.check,
        warn_unclosed=warn_unclosed,
        detect=args.detect,
        debug=args.debug,
    )


def read_source(options: CliOptions) -> str:
    if options.input_file is None:
        return sys.stdin.read()
    return options.input_file.read_text(encoding="utf-8")


def format_tokens(tokens: list[Token], output_format: str, positions: bool = False) -> str:
    """Render a token list as text lines or a JSON array."""
    if output_format == "json":
        rows: list[list[Any]] = []
        for tok in tokens:
            row: list[Any] = [tok.kind.value, tok.text]
            if positions:
                row.extend((tok.span.start.line, tok.span.start.column))
            rows.append(row)
        return json.dumps(rows) + "\n"

    lines: list[str] = []
    for tok in tokens:
        prefix = f"{tok.span.start.line}:{tok.span.start.column}\t" if positions else ""
        lines.append(f"{prefix}{tok.kind.value}\t{tok.text!r}\n")
    return "".join(lines)


def lex_source(source: str, options: CliOptions) -> str:
    """Tokenize source and format the stream per options."""
    from shellex.debug import dump_tokens
    from shellex.lexer import Lexer

    lexer = Lexer(source)
    tokens = lexer.tokenize()

    if options.debug:
        dump_tokens(tokens, lexer.state_stack)

    return format_tokens(tokens, options.output_format, options.positions)


def check_source(source: str, options: CliOptions) -> int:
    """Print lexing problems to stderr. Returns 1 if any is an error, else 0."""
    from shellex.lexer import find_problems

    problems = find_problems(source, warn_unclosed=options.warn_unclosed)
    for problem in problems:
        print(problem.format(options.display_name), file=sys.stderr)
    return 1 if any(p.severity == "error" for p in problems) else 0


def detect_source(source: str, options: CliOptions) -> int:
    """Print the detected lexer tag (or 'unknown'). Returns 0 if detected."""
    from shellex.detect import guess

    filename = str(options.input_file) if options.input_file is not None else None
    info = guess(filename=filename, source=source)
    print(info.tag if info is not None else "unknown")
    return 0 if info is not None else 1


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        options = resolve_options(args)
    except (argparse.ArgumentTypeError, tomllib.TOMLDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    try:
        source = read_source(options)
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: cannot read {options.display_name}: {exc}", file=sys.stderr)
        return 2

    if options.detect:
        return detect_source(source, options)

    if options.check:
        return check_source(source, options)

    output = lex_source(source, options)
    if options.output_file:
        try:
            options.output_file.write_text(output, encoding="utf-8")
        except OSError as exc:
            print(f"error: cannot write {options.output_file}: {exc}", file=sys.stderr)
            return 2
    else:
        sys.stdout.write(output)

    return 0
