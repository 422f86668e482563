"""CLI entrypoint for annote.

Examples::

    annote --path lib --match "*.js" --write-to documentation
    annote --path src -d 1          # only document code at the root of src
    annote --no-markdown            # no markdown in comments
    annote --md --no-highlight      # markdown but no syntax highlighting
    annote serve --port 8000
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .config import ConfigError, load_config
from .errors import AnnotationError
from .logging import configure_logging
from .orchestrator import Annotator


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Provide lots of details.",
    }
    kwargs["default"] = argparse.SUPPRESS if suppress_default else None
    parser.add_argument("-v", "--verbose", **kwargs)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="annote",
        description="Generate documentation in the form of annotated source code.",
    )
    parser.add_argument("-c", "--config", help="Path to a .annote.yml config file.")
    parser.add_argument("-p", "--path", help="Generate docs for files found at this path.")
    parser.add_argument(
        "-m",
        "--match",
        action="append",
        help="Annotate files matching this name pattern (e.g. *.js). Repeatable.",
    )
    parser.add_argument(
        "-d", "--maxdepth", type=int, help="Recurse only this deep to find source code."
    )
    parser.add_argument("-w", "--write-to", dest="write_to", help="Write the documentation here.")
    parser.add_argument(
        "--markdown",
        "--md",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Treat annotations as markdown (default: on).",
    )
    parser.add_argument(
        "--highlight",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Use syntax highlighting in source code (default: on).",
    )
    parser.add_argument("--style", dest="highlight_style", help="Pygments style for highlighted code.")
    parser.add_argument("-l", "--layout", help="HTML template for the layout of documentation pages.")
    parser.add_argument("-b", "--block", help="HTML template for each annotated block.")
    parser.add_argument("-j", "--jobs", type=int, help="Number of files to annotate in parallel.")
    parser.add_argument(
        "--fail-fast",
        dest="fail_fast",
        action="store_true",
        default=None,
        help="Stop the whole run on the first failing file.",
    )
    parser.add_argument(
        "--exclude",
        dest="exclude_paths",
        action="append",
        help="Skip paths matching this glob. Repeatable.",
    )
    parser.add_argument("--log-file", dest="log_file", help="Also write logs to this file.")
    _add_verbose_option(parser)

    subparsers = parser.add_subparsers(dest="command")
    serve_parser = subparsers.add_parser("serve", help="Run annote as an HTTP service.")
    _add_verbose_option(serve_parser, suppress_default=True)
    serve_parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to listen on.")

    return parser


_OVERRIDE_KEYS = (
    "path",
    "match",
    "maxdepth",
    "write_to",
    "markdown",
    "highlight",
    "highlight_style",
    "layout",
    "block",
    "jobs",
    "fail_fast",
    "exclude_paths",
    "log_file",
    "verbose",
)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for annote."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.config) if args.config else None)
        config = config.merged(**{key: getattr(args, key, None) for key in _OVERRIDE_KEYS})
    except ConfigError as exc:
        parser.exit(2, f"annote: {exc}\n")

    configure_logging(verbose=config.verbose, log_file=config.log_file)

    if args.command == "serve":
        from .service import run_service

        run_service(host=args.host, port=args.port, config=config)
        return

    try:
        annotator = Annotator(config)
        report = annotator.run()
    except (ConfigError, FileNotFoundError, NotADirectoryError) as exc:
        parser.exit(2, f"annote: {exc}\n")
    except AnnotationError as exc:
        parser.exit(1, f"annote: {exc}\nRun with --verbose for more details.\n")

    for outcome in report.failed:
        print(f"FAILED {outcome.source}: {outcome.error}", file=sys.stderr)
    print(
        f"Annotated {len(report.succeeded)} file(s) into {_relativize(config.write_to)}"
        + (f", {len(report.failed)} failed" if report.failed else "")
    )
    if not report.ok:
        parser.exit(1)


def _relativize(path: Path) -> str:
    try:
        return str(Path(path).resolve().relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    main(sys.argv[1:])
