"""Command-line interface for stamp.

Usage::

    stamp register ~/templates
    stamp list
    stamp use axum_server ./my-server
    stamp from ./templates/axum_server ./my-server --skip-conflicts
    stamp remove axum_server
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from . import __version__
from .config import StampConfig
from .conflicts import strategy_from_flags
from .errors import StampError
from .pipeline import instantiate
from .prompts import ask_questions
from .registry import Registry
from .utils import (
    console,
    print_error,
    print_error_chain,
    print_file_list,
    print_success,
    print_warning,
)


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------


def _key_value(text: str) -> tuple[str, str]:
    key, sep, value = text.partition("=")
    if not sep or not key.strip():
        raise argparse.ArgumentTypeError(f"expected KEY=VALUE, got {text!r}")
    return key.strip(), value


def _add_render_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("destination", type=Path, help="Path to the destination folder")
    conflicts = parser.add_mutually_exclusive_group()
    conflicts.add_argument(
        "--overwrite-conflicts",
        action="store_true",
        help="Replace destination files that already exist",
    )
    conflicts.add_argument(
        "--skip-conflicts",
        action="store_true",
        help="Leave destination files that already exist untouched",
    )
    parser.add_argument(
        "--set",
        dest="preset",
        action="append",
        type=_key_value,
        default=[],
        metavar="KEY=VALUE",
        help="Answer a question without prompting (repeatable)",
    )
    parser.add_argument(
        "--defaults",
        action="store_true",
        help="Do not prompt; answer every remaining question with its default",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="stamp",
        description="A cli tool for templates",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  stamp register ~/templates\n"
            "  stamp use axum_server ./my-server\n"
            "  stamp from ./axum_server ./my-server --set project=demo --defaults\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config-dir",
        type=Path,
        default=None,
        help="Directory holding the template registry (default: ~/.config/stamp)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    use = sub.add_parser("use", help="Render a template in the registry to a destination directory")
    use.add_argument("name", help="The template name in the registry")
    _add_render_arguments(use)

    from_ = sub.add_parser("from", help="Render a template from a source directory to a destination directory")
    from_.add_argument("source", type=Path, help="Path to the source folder")
    _add_render_arguments(from_)

    register = sub.add_parser("register", help="Register templates")
    register.add_argument("path", type=Path, help="Path to register templates from")

    remove = sub.add_parser("remove", help="Remove a template from the registry")
    remove.add_argument("name", help="The template name in the registry")

    sub.add_parser("list", help="List registered templates")
    return parser


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


def _render(template_root: Path, args: argparse.Namespace) -> None:
    strategy = strategy_from_flags(args.overwrite_conflicts, args.skip_conflicts)
    preset = dict(args.preset)

    result = instantiate(
        template_root,
        args.destination,
        lambda manifest: ask_questions(manifest, preset, use_defaults=args.defaults),
        strategy=strategy,
        use_defaults=args.defaults,
    )

    print_file_list(result.written, result.destination)
    if result.planned and not result.written:
        print_warning("Nothing written: every destination file already exists.")
    print_success(f"Template rendered successfully to {result.destination}")


def _cmd_use(args: argparse.Namespace, config: StampConfig) -> None:
    _render(Registry(config).resolve(args.name), args)


def _cmd_from(args: argparse.Namespace, config: StampConfig) -> None:
    _render(args.source, args)


def _cmd_register(args: argparse.Namespace, config: StampConfig) -> None:
    registry = Registry(config)
    names = registry.register(args.path)
    registry.save()
    for name in names:
        console.print(f"[dim]│[/]  {escape(name)}", highlight=False)
    print_success("Templates registered successfully.")


def _cmd_remove(args: argparse.Namespace, config: StampConfig) -> None:
    registry = Registry(config)
    registry.remove(args.name)
    registry.save()
    print_success(f"Template '{args.name}' removed.")


def _cmd_list(args: argparse.Namespace, config: StampConfig) -> None:
    entries = Registry(config).entries()
    if not entries:
        print_warning("No templates registered.")
        return

    table = Table(title="Registered templates", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="bold", no_wrap=True)
    table.add_column("Description")
    table.add_column("Path", style="dim")
    for name, entry in entries.items():
        table.add_row(escape(name), escape(entry.description or ""), escape(entry.path))
    console.print(table)


_COMMANDS = {
    "use": _cmd_use,
    "from": _cmd_from,
    "register": _cmd_register,
    "remove": _cmd_remove,
    "list": _cmd_list,
}


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def run(argv: list[str] | None = None) -> int:
    """Parse *argv*, run the command and return the process exit code."""
    args = build_parser().parse_args(argv)
    config = StampConfig.from_env(args.config_dir)

    try:
        _COMMANDS[args.command](args, config)
    except StampError as exc:
        print_error_chain(exc)
        return 1
    except KeyboardInterrupt:
        print_error("Aborted.")
        return 130
    return 0


def main() -> None:
    """CLI entry point for ``stamp`` and ``python -m stamp``."""
    sys.exit(run())


if __name__ == "__main__":
    main()
