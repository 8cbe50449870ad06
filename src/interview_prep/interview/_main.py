import argparse
import json
import logging
from pathlib import Path
from typing import Callable, Optional, Sequence

from rich.console import Console
from rich.panel import Panel

from ..core import (
    AppConfig,
    ConfigError,
    configure_logger,
    load_config,
    write_template,
)
from ..core.config import CONFIG_FILENAME, default_home
from .extractor import normalize_kind
from .gateway import (
    GenerationFailure,
    Generator,
    OpenAIGenerator,
    analyze_topic,
    generate_practice_questions,
    generate_questions,
    recommend_resources,
    summarize_feedback,
)
from .report import render_report
from .session import InputProvider, run_interview_session
from .tracker import MasteryTracker

logger = logging.getLogger(__name__)

MENU_CHOICES = (
    "Start New Interview Session",
    "Analyze a Topic",
    "View Learning Resources",
    "Check Previous Performance",
    "Practice Specific Concepts",
    "Exit",
)


def _build_generator(cfg: AppConfig) -> Generator:
    return OpenAIGenerator.from_config(cfg.ai)


def _input_provider(console: Console) -> InputProvider:
    def _provider() -> str:
        return console.input("[cyan]> [/]")

    return _provider


def _load(args: argparse.Namespace) -> AppConfig:
    explicit = getattr(args, "config", None)
    cfg = load_config(Path(explicit) if explicit else None)
    verbose = bool(getattr(args, "verbose", False)) or cfg.logging.verbose
    _, log_path = configure_logger(
        "interview_prep",
        log_dir=cfg.log_dir,
        level=cfg.logging.level,
        verbose=verbose,
        filename="interview.log",
    )
    logger.debug(
        "Configuration loaded",
        extra={"source": cfg.source, "log_path": log_path},
    )
    return cfg


def _new_tracker(cfg: AppConfig) -> MasteryTracker:
    return MasteryTracker(
        weak_threshold=cfg.tracking.weak_threshold,
        recommend_weak_below=cfg.tracking.recommend_weak_below,
        recommend_practice_below=cfg.tracking.recommend_practice_below,
    )


def _report_failure(console: Console, exc: Exception) -> int:
    console.print(f"[bold red]Generation failed:[/] {exc}")
    return 1


def _interview(
    *,
    cfg: AppConfig,
    console: Console,
    generator: Generator,
    tracker: MasteryTracker,
    provider: InputProvider,
    topic: str,
    count: int,
    kind: str,
    hints: bool,
) -> int:
    if count <= 0:
        console.print("[red]Invalid number of questions.[/]")
        return 2
    resolved = normalize_kind(kind)
    console.print("[yellow]Generating questions...[/]")
    try:
        questions = generate_questions(generator, topic, count, resolved)
    except GenerationFailure as exc:
        return _report_failure(console, exc)
    result = run_interview_session(
        questions,
        topic=topic,
        tracker=tracker,
        generator=generator,
        console=console,
        input_provider=provider,
        allow_hints=hints,
        theory_pass_score=cfg.tracking.theory_pass_score,
    )
    if result.exit_action == "empty":
        return 1
    if result.exit_action == "failed":
        return 1
    return 0


def _show_report(
    console: Console,
    tracker: MasteryTracker,
    *,
    as_json: bool,
) -> None:
    report = tracker.build_report()
    if as_json:
        console.print_json(json.dumps(report.to_dict()))
    else:
        render_report(console, report)


def _cmd_start(args: argparse.Namespace, console: Console) -> int:
    cfg = _load(args)
    generator = _build_generator(cfg)
    tracker = _new_tracker(cfg)
    code = _interview(
        cfg=cfg,
        console=console,
        generator=generator,
        tracker=tracker,
        provider=_input_provider(console),
        topic=args.topic,
        count=int(args.count),
        kind=args.kind,
        hints=bool(args.hints),
    )
    if code == 2:
        return code
    if args.report or args.json:
        _show_report(console, tracker, as_json=bool(args.json))
    if args.feedback and tracker.total_questions:
        try:
            feedback = summarize_feedback(
                generator, tracker.build_report().to_dict(), args.topic
            )
        except GenerationFailure as exc:
            return _report_failure(console, exc)
        console.print(Panel(feedback, title="Feedback", border_style="cyan"))
    return code


def _cmd_practice(args: argparse.Namespace, console: Console) -> int:
    cfg = _load(args)
    generator = _build_generator(cfg)
    tracker = _new_tracker(cfg)
    return _practice(
        cfg=cfg,
        console=console,
        generator=generator,
        tracker=tracker,
        provider=_input_provider(console),
        topic=args.topic,
        concept=args.concept,
        count=int(args.count),
        show_report=bool(args.report),
    )


def _practice(
    *,
    cfg: AppConfig,
    console: Console,
    generator: Generator,
    tracker: MasteryTracker,
    provider: InputProvider,
    topic: str,
    concept: str,
    count: int,
    show_report: bool = False,
) -> int:
    if count <= 0:
        console.print("[red]Invalid number of questions.[/]")
        return 2
    console.print("[yellow]Generating focused practice questions...[/]")
    try:
        questions = generate_practice_questions(
            generator, topic, concept, count
        )
    except GenerationFailure as exc:
        return _report_failure(console, exc)
    result = run_interview_session(
        questions,
        topic=topic,
        tracker=tracker,
        generator=generator,
        console=console,
        input_provider=provider,
        allow_hints=True,
        theory_pass_score=cfg.tracking.theory_pass_score,
    )
    if show_report:
        _show_report(console, tracker, as_json=False)
    return 0 if result.exit_action in {"completed", "quit"} else 1


def _cmd_analyze(args: argparse.Namespace, console: Console) -> int:
    cfg = _load(args)
    generator = _build_generator(cfg)
    console.print("[yellow]Analyzing topic...[/]")
    try:
        analysis = analyze_topic(generator, args.topic)
    except GenerationFailure as exc:
        return _report_failure(console, exc)
    console.print(Panel(analysis, title="Topic Analysis", border_style="cyan"))
    return 0


def _cmd_resources(args: argparse.Namespace, console: Console) -> int:
    cfg = _load(args)
    generator = _build_generator(cfg)
    console.print("[yellow]Fetching resources...[/]")
    try:
        resources = recommend_resources(generator, args.topic, args.focus)
    except GenerationFailure as exc:
        return _report_failure(console, exc)
    console.print(
        Panel(resources, title="Learning Resources", border_style="cyan")
    )
    return 0


def _cmd_init_config(args: argparse.Namespace, console: Console) -> int:
    target = (
        Path(args.path).expanduser()
        if args.path
        else default_home() / "config" / CONFIG_FILENAME
    )
    try:
        path = write_template(target, overwrite=bool(args.force))
    except ConfigError as exc:
        console.print(f"[red]{exc}[/]")
        return 2
    console.print(f"Created template {path}")
    return 0


def _cmd_menu(
    args: argparse.Namespace,
    console: Console,
    provider: Optional[InputProvider] = None,
) -> int:
    """Run the numbered main menu; all sessions share one tracker."""

    cfg = _load(args)
    generator = _build_generator(cfg)
    tracker = _new_tracker(cfg)
    ask = provider or _input_provider(console)

    def prompt(label: str) -> str:
        console.print(f"[cyan]{label}[/]")
        return ask().strip()

    while True:
        console.print("\n[bold cyan]=== Interview Preparation System ===[/]")
        for number, choice in enumerate(MENU_CHOICES, start=1):
            console.print(f"  {number}. {choice}")
        try:
            raw = prompt("Select an option:")
        except (EOFError, KeyboardInterrupt, StopIteration):
            return 0
        if not raw.isdigit() or not 1 <= int(raw) <= len(MENU_CHOICES):
            console.print("[red]Unrecognized option. Try again.[/]")
            continue
        selected = MENU_CHOICES[int(raw) - 1]
        try:
            if selected == "Exit":
                console.print(
                    "[green]Thank you for using the Interview Preparation "
                    "System![/]"
                )
                return 0
            if selected == "Start New Interview Session":
                topic = prompt("Enter interview topic:")
                count = _parse_count(prompt("Enter number of questions:"))
                kind = prompt("Question type (mcq/theory):")
                _interview(
                    cfg=cfg,
                    console=console,
                    generator=generator,
                    tracker=tracker,
                    provider=ask,
                    topic=topic,
                    count=count,
                    kind=kind,
                    hints=False,
                )
            elif selected == "Analyze a Topic":
                topic = prompt("Enter the topic you want to analyze:")
                console.print(
                    Panel(
                        analyze_topic(generator, topic),
                        title="Topic Analysis",
                        border_style="cyan",
                    )
                )
            elif selected == "View Learning Resources":
                topic = prompt("Enter the topic for resources:")
                focus = prompt(
                    "Enter specific areas to focus on (comma-separated):"
                )
                if not focus:
                    focus = ", ".join(tracker.weak_areas)
                console.print(
                    Panel(
                        recommend_resources(generator, topic, focus),
                        title="Learning Resources",
                        border_style="cyan",
                    )
                )
            elif selected == "Check Previous Performance":
                _show_report(console, tracker, as_json=False)
            elif selected == "Practice Specific Concepts":
                topic = prompt("Enter the topic:")
                concept = prompt("Enter the specific concept:")
                count = _parse_count(prompt("Number of practice questions:"))
                _practice(
                    cfg=cfg,
                    console=console,
                    generator=generator,
                    tracker=tracker,
                    provider=ask,
                    topic=topic,
                    concept=concept,
                    count=count,
                )
        except GenerationFailure as exc:
            _report_failure(console, exc)
        except (EOFError, KeyboardInterrupt, StopIteration):
            return 0


def _parse_count(raw: str) -> int:
    try:
        return int(raw)
    except ValueError:
        return 0


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--config", help="Path to an interview.toml file")
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Echo debug logs to stderr",
    )


def build_arg_parser(prog: str = "interview-prep") -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog=prog,
        description="Rehearse technical interviews with generated questions",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    sub = p.add_subparsers(dest="command", required=True)

    sp_start = sub.add_parser("start", help="Start an interview session")
    sp_start.add_argument("--topic", required=True)
    sp_start.add_argument("--count", type=int, default=5)
    sp_start.add_argument(
        "--kind",
        type=str.lower,
        choices=["mcq", "theory"],
        default="mcq",
    )
    sp_start.add_argument(
        "--hints", action="store_true", help="Allow 'hint' during answers"
    )
    sp_start.add_argument(
        "--report", action="store_true", help="Print the performance report"
    )
    sp_start.add_argument(
        "--json", action="store_true", help="Print the report as JSON"
    )
    sp_start.add_argument(
        "--feedback",
        action="store_true",
        help="Ask the model to summarize the report",
    )
    _add_common(sp_start)

    sp_practice = sub.add_parser(
        "practice", help="Practice one concept with hints"
    )
    sp_practice.add_argument("--topic", required=True)
    sp_practice.add_argument("--concept", required=True)
    sp_practice.add_argument("--count", type=int, default=3)
    sp_practice.add_argument("--report", action="store_true")
    _add_common(sp_practice)

    sp_analyze = sub.add_parser("analyze", help="Analyze a topic")
    sp_analyze.add_argument("--topic", required=True)
    _add_common(sp_analyze)

    sp_resources = sub.add_parser(
        "resources", help="Suggest learning resources"
    )
    sp_resources.add_argument("--topic", required=True)
    sp_resources.add_argument(
        "--focus",
        default="",
        help="Comma-separated areas to focus on",
    )
    _add_common(sp_resources)

    sp_menu = sub.add_parser("menu", help="Interactive numbered menu")
    _add_common(sp_menu)

    sp_init = sub.add_parser(
        "init-config", help="Write the interview.toml template"
    )
    sp_init.add_argument("--path")
    sp_init.add_argument("--force", action="store_true")
    return p


_HANDLERS: dict = {
    "start": _cmd_start,
    "practice": _cmd_practice,
    "analyze": _cmd_analyze,
    "resources": _cmd_resources,
    "menu": _cmd_menu,
    "init-config": _cmd_init_config,
}


def run(
    argv: Optional[Sequence[str]] = None,
    *,
    console: Optional[Console] = None,
    prog: str = "interview-prep",
) -> int:
    parser = build_arg_parser(prog)
    args = parser.parse_args(argv)
    out = console or Console()
    handler: Callable[[argparse.Namespace, Console], int] = _HANDLERS[
        args.command
    ]
    try:
        return handler(args, out)
    except ConfigError as exc:
        out.print(f"[red]Configuration error:[/] {exc}")
        return 2
    except GenerationFailure as exc:
        return _report_failure(out, exc)
    except RuntimeError as exc:
        # load_client reports a missing API key this way.
        out.print(f"[red]Error:[/] {exc}")
        return 2


def main(argv: Optional[Sequence[str]] = None) -> None:
    raise SystemExit(run(list(argv) if argv is not None else None))
