import json
from pathlib import Path

import pytest
from rich.console import Console

from fixtures import ScriptedGenerator
from interview_prep import cli
from interview_prep.core import ai as core_ai
from interview_prep.interview import _main
from interview_prep.interview.gateway import GenerationFailure


@pytest.fixture(autouse=True)
def reset_metadata(monkeypatch):
    """Ensure metadata.version is controllable during tests."""

    def fake_version(name: str) -> str:
        assert name == "interview-prep"
        return "0.0-test"

    monkeypatch.setattr(cli.metadata, "version", fake_version)
    yield


@pytest.fixture
def console() -> Console:
    return Console(record=True, width=120, force_terminal=True)


@pytest.fixture
def wire(monkeypatch, isolated_home):
    """Swap the model and the keyboard for scripted stand-ins."""

    def _wire(generator, answers=()):
        iterator = iter(answers)
        monkeypatch.setattr(_main, "_build_generator", lambda cfg: generator)
        monkeypatch.setattr(
            _main,
            "_input_provider",
            lambda console: lambda: next(iterator),
        )
        return generator

    return _wire


def test_version_command_handles_missing_package(monkeypatch, capsys):
    monkeypatch.setattr(
        cli.metadata,
        "version",
        lambda name: (_ for _ in ()).throw(cli.metadata.PackageNotFoundError()),
    )
    code = cli.main(["version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "unknown"


def test_version_flag(capsys):
    code = cli.main(["--version"])
    captured = capsys.readouterr()
    assert code == 0
    assert captured.out.strip() == "0.0-test"


def test_no_args_prints_usage_and_returns_error(capsys):
    code = cli.main([])
    captured = capsys.readouterr()
    assert code == 2
    assert "Usage: interview-prep" in captured.out
    assert "Available commands:" in captured.out


def test_list_outputs_command_table(capsys):
    code = cli.main(["list"])
    captured = capsys.readouterr()
    assert code == 0
    for name in ("start", "practice", "analyze", "resources", "menu"):
        assert name in captured.out
    assert "(interactive)" in captured.out


def test_help_known_command(capsys):
    code = cli.main(["help", "start"])
    captured = capsys.readouterr()
    assert code == 0
    assert "Run `interview-prep start --help`" in captured.out


def test_help_unknown_command(capsys):
    code = cli.main(["help", "does-not-exist"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command" in captured.err


def test_unknown_command_errors(capsys):
    code = cli.main(["bogus"])
    captured = capsys.readouterr()
    assert code == 2
    assert "Unknown command" in captured.err
    assert "Available commands:" in captured.err


def test_dispatch_passes_arguments_through(monkeypatch):
    captured = {}

    def fake_run(argv, *, prog):
        captured["argv"] = list(argv)
        captured["prog"] = prog
        return 7

    monkeypatch.setattr(cli.interview_main, "run", fake_run)

    code = cli.main(["analyze", "--topic", "Go"])

    assert code == 7
    assert captured == {
        "argv": ["analyze", "--topic", "Go"],
        "prog": "interview-prep",
    }


def test_dispatch_normalizes_argparse_exit(capsys):
    code = cli.main(["start"])
    captured = capsys.readouterr()
    assert code == 2
    assert "--topic" in captured.err


def test_start_runs_session_and_prints_json(
    wire, console, isolated_home, mcq_response
):
    generator = wire(
        ScriptedGenerator(mcq_response, "Correct!", "Incorrect."),
        answers=["B", "A"],
    )

    code = _main.run(
        ["start", "--topic", "JS", "--count", "2", "--json"],
        console=console,
    )

    assert code == 0
    assert "Generate 2 multiple-choice questions about JS." in (
        generator.prompts[0]
    )
    text = console.export_text()
    assert '"topicWise"' in text
    assert '"percentage": "50.00"' in text
    log_path = isolated_home / "logs" / "interview.log"
    lines = log_path.read_text(encoding="utf-8").strip().splitlines()
    assert any(
        json.loads(line)["message"] == "Interview session finished"
        for line in lines
    )


def test_start_with_report_and_feedback(wire, console, theory_response):
    wire(
        ScriptedGenerator(
            theory_response, "Score: 9/10", "Score: 2/10", "Keep going."
        ),
        answers=["calls itself", "no idea"],
    )

    code = _main.run(
        [
            "start",
            "--topic",
            "CS",
            "--count",
            "2",
            "--kind",
            "THEORY",
            "--report",
            "--feedback",
        ],
        console=console,
    )

    text = console.export_text()
    assert code == 0
    assert "Performance Report" in text
    assert "Keep going." in text


def test_start_generation_failure_exits_one(wire, console):
    wire(ScriptedGenerator(GenerationFailure("service unavailable")))

    code = _main.run(["start", "--topic", "JS"], console=console)

    assert code == 1
    assert "Generation failed" in console.export_text()


def test_start_without_questions_exits_one(wire, console):
    wire(ScriptedGenerator("Sorry, I cannot help with that."))

    code = _main.run(["start", "--topic", "JS"], console=console)

    assert code == 1
    assert "No questions were generated." in console.export_text()


def test_start_rejects_non_positive_count(wire, console):
    generator = wire(ScriptedGenerator())

    code = _main.run(
        ["start", "--topic", "JS", "--count", "0"], console=console
    )

    assert code == 2
    assert generator.prompts == []


def test_practice_allows_hints(wire, console, mcq_response):
    single = mcq_response.split("\n\nQuestion: What keyword")[0]
    generator = wire(
        ScriptedGenerator(single, "Look at the end.", "Correct!"),
        answers=["hint", "B"],
    )

    code = _main.run(
        [
            "practice",
            "--topic",
            "JS",
            "--concept",
            "array",
            "--count",
            "1",
            "--report",
        ],
        console=console,
    )

    assert code == 0
    assert "'array'" in generator.prompts[0]
    assert "Look at the end." in console.export_text()


def test_analyze_and_resources(wire, console):
    generator = wire(ScriptedGenerator("KEY CONCEPTS: ...", "Read the docs"))

    assert _main.run(["analyze", "--topic", "Go"], console=console) == 0
    assert (
        _main.run(
            ["resources", "--topic", "Go", "--focus", "goroutines"],
            console=console,
        )
        == 0
    )

    text = console.export_text()
    assert "Topic Analysis" in text
    assert "Read the docs" in text
    assert "goroutines" in generator.prompts[1]


def test_menu_shares_tracker_between_sessions(wire, console, mcq_response):
    wire(
        ScriptedGenerator(mcq_response, "Correct!", "Correct!"),
        answers=["4", "9", "1", "JS", "2", "mcq", "B", "C", "4", "6"],
    )

    code = _main.run(["menu"], console=console)

    text = console.export_text()
    assert code == 0
    assert "No answers recorded yet." in text
    assert "Unrecognized option" in text
    assert "100.00" in text
    assert "Thank you for using the Interview Preparation System!" in text


def test_menu_ends_on_end_of_input(wire, console):
    wire(ScriptedGenerator(), answers=[])

    assert _main.run(["menu"], console=console) == 0


def test_init_config_writes_template(console, isolated_home):
    target = isolated_home / "config" / "interview.toml"

    assert _main.run(["init-config"], console=console) == 0
    assert target.exists()
    assert _main.run(["init-config"], console=console) == 2
    assert "already exists" in console.export_text()
    assert _main.run(["init-config", "--force"], console=console) == 0


def test_bad_config_exits_two(console, isolated_home, tmp_path: Path):
    bad = tmp_path / "bad.toml"
    bad.write_text("[ai]\nunknown = 1\n", encoding="utf-8")

    code = _main.run(
        ["analyze", "--topic", "Go", "--config", str(bad)], console=console
    )

    assert code == 2
    assert "Configuration error" in console.export_text()


def test_missing_api_key_exits_two(monkeypatch, console, isolated_home):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.setattr(core_ai, "load_dotenv", lambda: False)

    code = _main.run(["analyze", "--topic", "Go"], console=console)

    assert code == 2
    assert "OPENAI_API_KEY" in console.export_text()


def test_main_raises_system_exit(wire):
    wire(ScriptedGenerator("analysis"))

    with pytest.raises(SystemExit) as exc:
        _main.main(["analyze", "--topic", "Go"])

    assert exc.value.code == 0
