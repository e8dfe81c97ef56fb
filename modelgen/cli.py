"""CLI entrypoints for modelgen commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .analyzer import AnalysisError
from .build import BuildError
from .config import ConfigError
from .logging import configure_logging
from .orchestrator import Orchestrator

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 78


def _add_verbose_option(
    parser: argparse.ArgumentParser, *, suppress_default: bool = False
) -> None:
    kwargs: dict[str, object] = {
        "action": "store_true",
        "help": "Increase log verbosity for troubleshooting.",
    }
    if suppress_default:
        kwargs["default"] = argparse.SUPPRESS
    else:
        kwargs["default"] = False
    parser.add_argument(
        "-v",
        "--verbose",
        **kwargs,
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="modelgen",
        description="Generate a model provider for serializable classes in a project.",
    )
    _add_verbose_option(parser)
    subparsers = parser.add_subparsers(dest="command", required=True)

    generate_parser = subparsers.add_parser("generate", help="Generate project artifacts.")
    _add_verbose_option(generate_parser, suppress_default=True)
    targets = generate_parser.add_subparsers(dest="target", required=True)

    models_parser = targets.add_parser(
        "models",
        help="Scan the project and write model_provider.py.",
    )
    _add_verbose_option(models_parser, suppress_default=True)
    models_parser.add_argument(
        "output",
        nargs="?",
        default=None,
        help="Directory for model_provider.py (defaults to the project root).",
    )
    models_parser.add_argument(
        "--project",
        default=".",
        help="Path to the project root (defaults to current directory).",
    )
    models_parser.add_argument(
        "--skip-build",
        action="store_true",
        help="Do not run the configured build step before scanning.",
    )
    models_parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Also write detailed logs to this file.",
    )

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint for modelgen commands."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=getattr(args, "log_file", None))

    orchestrator = Orchestrator()

    if args.command == "generate" and args.target == "models":
        try:
            result = orchestrator.run_generate(
                args.project,
                args.output,
                run_build=not args.skip_build,
            )
        except ConfigError as exc:
            print(f"Failed to load project configuration: {exc}", file=sys.stderr)
            return EXIT_CONFIG
        except (AnalysisError, BuildError, OSError, ValueError) as exc:
            print(f"modelgen generate models failed: {exc}", file=sys.stderr)
            print("Run with --verbose for more details.", file=sys.stderr)
            return EXIT_FAILURE
        names = ", ".join(result.model_names) or "(none)"
        print(f"Model provider generated at {_relativize(result.path)}: {names}")
        return EXIT_SUCCESS

    parser.exit(EXIT_FAILURE, "Unknown command\n")  # pragma: no cover - argparse enforces choices
    return EXIT_FAILURE  # pragma: no cover


def _relativize(path: Path) -> str:
    try:
        return str(path.relative_to(Path.cwd()))
    except ValueError:
        return str(path)


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
