"""Unified CLI entry point for interview-prep."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from importlib import metadata
from typing import Callable, Iterable, Mapping, Optional, Sequence

from .interview import _main as interview_main

CommandHandler = Callable[[Sequence[str]], int]

PROG = "interview-prep"


@dataclass(frozen=True)
class CommandSpec:
    """Represents an interview-prep subcommand."""

    name: str
    summary: str
    handler: Optional[CommandHandler] = None
    is_interactive: bool = False


def _interview_command(name: str) -> CommandHandler:
    def _handler(argv: Sequence[str]) -> int:
        return interview_main.run([name, *argv], prog=PROG)

    return _handler


_COMMAND_SPECS: Sequence[CommandSpec] = (
    CommandSpec(
        name="start",
        summary="Run an interview session on a topic.",
        handler=_interview_command("start"),
        is_interactive=True,
    ),
    CommandSpec(
        name="practice",
        summary="Practice one concept with hints.",
        handler=_interview_command("practice"),
        is_interactive=True,
    ),
    CommandSpec(
        name="analyze",
        summary="Break a topic down into concepts and a learning path.",
        handler=_interview_command("analyze"),
    ),
    CommandSpec(
        name="resources",
        summary="Suggest learning resources for weak areas.",
        handler=_interview_command("resources"),
    ),
    CommandSpec(
        name="menu",
        summary="Numbered menu sharing one performance tracker.",
        handler=_interview_command("menu"),
        is_interactive=True,
    ),
    CommandSpec(
        name="init-config",
        summary="Write the interview.toml configuration template.",
        handler=_interview_command("init-config"),
    ),
)

COMMANDS: Mapping[str, CommandSpec] = {
    spec.name: spec for spec in _COMMAND_SPECS
}


def _sorted_specs() -> Iterable[CommandSpec]:
    return _COMMAND_SPECS


def _command_name_width() -> int:
    return max(len(spec.name) for spec in _sorted_specs()) if COMMANDS else 0


def format_command_table() -> str:
    """Return a formatted command table for help output."""

    width = _command_name_width()
    lines = ["Available commands:"]
    for spec in _sorted_specs():
        name = spec.name.ljust(width)
        suffix = " (interactive)" if spec.is_interactive else ""
        lines.append(f"  {name}  {spec.summary}{suffix}")
    return "\n".join(lines)


def format_usage() -> str:
    """Build the top-level usage banner with command listings."""

    parts = [
        f"Usage: {PROG} <command> [args...]",
        f"Run `{PROG} list` for commands or `{PROG} help <name>` for details.",
        "",
        format_command_table(),
    ]
    return "\n".join(parts)


def _print(
    text: str, *, stream: Optional[Callable[[str], None]] = None
) -> None:
    target = stream if stream is not None else sys.stdout.write
    if text:
        target(text + "\n")


def _handle_version() -> int:
    try:
        version = metadata.version(PROG)
    except metadata.PackageNotFoundError:
        version = "unknown"
    _print(version)
    return 0


def _handle_help(argv: Sequence[str]) -> int:
    if not argv:
        _print(format_usage())
        return 0

    command = argv[0]
    spec = COMMANDS.get(command)
    if not spec:
        _print(f"Unknown command '{command}'.", stream=sys.stderr.write)
        _print(format_command_table(), stream=sys.stderr.write)
        return 2

    _print(f"{spec.name}: {spec.summary}")
    _print(f"Run `{PROG} {spec.name} --help` for command options.")
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = list(argv if argv is not None else sys.argv[1:])

    if not args:
        _print(format_usage())
        return 2

    head, *tail = args

    if head in ("-h", "--help"):
        _print(format_usage())
        return 0

    if head in ("-V", "--version", "version"):
        return _handle_version()

    if head == "list":
        _print(format_command_table())
        return 0

    if head == "help":
        return _handle_help(tail)

    spec = COMMANDS.get(head)
    if spec and spec.handler:
        try:
            return spec.handler(tail)
        except SystemExit as exc:
            return _normalize_system_exit(exc)

    _print(f"Unknown command '{head}'.", stream=sys.stderr.write)
    _print(format_command_table(), stream=sys.stderr.write)
    return 2


def _normalize_system_exit(exc: SystemExit) -> int:
    code = exc.code
    if code is None:
        return 0
    if isinstance(code, int):
        return code
    if isinstance(code, str):
        _print(code, stream=sys.stderr.write)
        return 1
    return 1


if __name__ == "__main__":  # pragma: no cover - manual invocation guard
    raise SystemExit(main())
