from __future__ import annotations

import stat
from pathlib import Path

import pytest

from interview_prep.core import config as cfg_mod
from interview_prep.core.config import ConfigError, load_config


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_without_file(tmp_path: Path) -> None:
    cfg = load_config(env={"INTERVIEW_PREP_HOME": str(tmp_path)})

    assert cfg.source is None
    assert cfg.home == tmp_path
    assert cfg.log_dir == tmp_path / "logs"
    assert cfg.ai.model == "gpt-4"
    assert cfg.ai.api_base is None
    assert cfg.tracking.weak_threshold == 0.7
    assert cfg.tracking.recommend_weak_below == 0.6
    assert cfg.tracking.recommend_practice_below == 0.8
    assert cfg.logging.level == "INFO"


def test_home_file_is_picked_up(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "config" / "interview.toml",
        '[ai]\nmodel = "gpt-4o-mini"\n',
    )

    cfg = load_config(env={"INTERVIEW_PREP_HOME": str(tmp_path)})

    assert cfg.source == source
    assert cfg.ai.model == "gpt-4o-mini"
    assert cfg.ai.temperature == 0.7


def test_env_config_path_and_model_override(tmp_path: Path) -> None:
    source = _write(
        tmp_path / "custom.toml",
        "[tracking]\nweak_threshold = 0.5\n",
    )
    env = {
        "INTERVIEW_PREP_HOME": str(tmp_path / "home"),
        "INTERVIEW_PREP_CONFIG": str(source),
        "INTERVIEW_PREP_MODEL": "local-model",
    }

    cfg = load_config(env=env)

    assert cfg.tracking.weak_threshold == 0.5
    assert cfg.ai.model == "local-model"


def test_explicit_missing_file_is_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.toml", env={})


def test_unknown_key_is_rejected(tmp_path: Path) -> None:
    source = _write(tmp_path / "c.toml", "[ai]\nmodle = 'x'\n")

    with pytest.raises(ConfigError, match="ai.modle"):
        load_config(source, env={})


def test_invalid_toml_is_rejected(tmp_path: Path) -> None:
    source = _write(tmp_path / "c.toml", "[ai\n")

    with pytest.raises(ConfigError, match="parse"):
        load_config(source, env={})


@pytest.mark.parametrize(
    ("body", "message"),
    [
        ("[ai]\ntemperature = 3.0\n", "ai.temperature"),
        ("[ai]\nmax_tokens = 0\n", "ai.max_tokens"),
        ("[ai]\nmax_tokens = true\n", "ai.max_tokens"),
        ("[ai]\nmodel = ''\n", "ai.model"),
        ("[tracking]\nweak_threshold = 'high'\n", "tracking.weak_threshold"),
        ("[tracking]\ntheory_pass_score = 11\n", "tracking.theory_pass"),
        ("[logging]\nverbose = 'yes'\n", "logging.verbose"),
        ("ai = 3\n", "Expected table for 'ai'"),
    ],
)
def test_invalid_values(tmp_path: Path, body: str, message: str) -> None:
    source = _write(tmp_path / "c.toml", body)

    with pytest.raises(ConfigError, match=message):
        load_config(source, env={})


def test_template_matches_defaults(tmp_path: Path) -> None:
    target = cfg_mod.write_template(tmp_path / "config" / "interview.toml")

    cfg = load_config(target, env={"INTERVIEW_PREP_HOME": str(tmp_path)})
    defaults = load_config(env={"INTERVIEW_PREP_HOME": str(tmp_path / "x")})

    assert cfg.ai == defaults.ai
    assert cfg.tracking == defaults.tracking
    assert cfg.logging == defaults.logging
    assert stat.S_IMODE(target.stat().st_mode) == 0o600


def test_write_template_refuses_overwrite(tmp_path: Path) -> None:
    target = _write(tmp_path / "interview.toml", "# mine\n")

    with pytest.raises(ConfigError, match="already exists"):
        cfg_mod.write_template(target)

    cfg_mod.write_template(target, overwrite=True)
    assert target.read_text(encoding="utf-8") == cfg_mod.read_template()


def test_merge_defaults_nested_path() -> None:
    base = {"outer": {"inner": 1}}

    cfg_mod.merge_defaults(base, {"outer": {"inner": 2}})

    assert base == {"outer": {"inner": 2}}
    with pytest.raises(ConfigError, match="outer.other"):
        cfg_mod.merge_defaults(base, {"outer": {"other": 1}})
