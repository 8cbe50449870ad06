"""TOML configuration for the interview-prep commands.

The config file groups related concerns into tables (``[ai]``,
``[tracking]``, ``[logging]``). Every key has a default, so a missing file
is not an error; unknown keys and wrongly typed values are.
"""

from __future__ import annotations

import copy
import os
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping, MutableMapping, Optional

try:  # Python >= 3.11 ships ``tomllib`` in the stdlib.
    import tomllib
except ModuleNotFoundError as exc:  # pragma: no cover - interpreter guard
    raise RuntimeError("Python 3.11+ is required for tomllib.") from exc

__all__ = [
    "CONFIG_PATH_ENV",
    "HOME_ENV",
    "MODEL_ENV",
    "AIConfig",
    "AppConfig",
    "ConfigError",
    "LoggingConfig",
    "TrackingConfig",
    "default_home",
    "load_config",
    "load_toml",
    "merge_defaults",
    "read_template",
    "resolve_config_path",
    "write_template",
]

CONFIG_PATH_ENV = "INTERVIEW_PREP_CONFIG"
HOME_ENV = "INTERVIEW_PREP_HOME"
MODEL_ENV = "INTERVIEW_PREP_MODEL"
CONFIG_FILENAME = "interview.toml"

_DEFAULTS: Dict[str, Any] = {
    "ai": {
        "model": "gpt-4",
        "temperature": 0.7,
        "max_tokens": 1500,
        "request_timeout_seconds": 60,
        "api_base": "",
    },
    "tracking": {
        "weak_threshold": 0.7,
        "recommend_weak_below": 0.6,
        "recommend_practice_below": 0.8,
        "theory_pass_score": 7.0,
    },
    "logging": {
        "level": "INFO",
        "verbose": False,
    },
}


class ConfigError(RuntimeError):
    """Raised when configuration parsing or validation fails."""


@dataclass(frozen=True)
class AIConfig:
    model: str
    temperature: float
    max_tokens: int
    request_timeout_seconds: int
    api_base: Optional[str]


@dataclass(frozen=True)
class TrackingConfig:
    weak_threshold: float
    recommend_weak_below: float
    recommend_practice_below: float
    theory_pass_score: float


@dataclass(frozen=True)
class LoggingConfig:
    level: str
    verbose: bool


@dataclass(frozen=True)
class AppConfig:
    ai: AIConfig
    tracking: TrackingConfig
    logging: LoggingConfig
    home: Path
    source: Optional[Path] = None

    @property
    def log_dir(self) -> Path:
        return self.home / "logs"


def load_toml(path: Path) -> Mapping[str, Any]:
    """Load a TOML document from ``path``.

    Errors are surfaced as :class:`ConfigError` instances so callers only
    need to handle one exception type.
    """

    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Failed to parse config TOML: {exc}") from exc


def merge_defaults(
    base: MutableMapping[str, Any],
    override: Mapping[str, Any],
    *,
    path: str = "",
) -> None:
    """Recursively merge ``override`` into ``base`` enforcing known keys."""

    for key, value in override.items():
        dotted = f"{path}{key}" if path else key
        if key not in base:
            raise ConfigError(f"Unknown configuration key '{dotted}'.")
        base_value = base[key]
        if isinstance(base_value, MutableMapping):
            if not isinstance(value, Mapping):
                raise ConfigError(
                    "Expected table for '{0}', found {1}.".format(
                        dotted,
                        type(value).__name__,
                    )
                )
            merge_defaults(base_value, value, path=f"{dotted}.")
            continue
        base[key] = value


def default_home(env: Mapping[str, str] | None = None) -> Path:
    """Return the data home used for config and logs."""

    env_map = env if env is not None else os.environ
    override = env_map.get(HOME_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".interview-prep"


def resolve_config_path(
    explicit: Optional[Path] = None,
    *,
    env: Mapping[str, str] | None = None,
) -> Optional[Path]:
    """Pick the config file to load, or ``None`` to use defaults.

    An explicit path or ``INTERVIEW_PREP_CONFIG`` must exist; the file under
    the data home is optional.
    """

    env_map = env if env is not None else os.environ
    if explicit is not None:
        return Path(explicit).expanduser()
    from_env = env_map.get(CONFIG_PATH_ENV)
    if from_env:
        return Path(from_env).expanduser()
    candidate = default_home(env_map) / "config" / CONFIG_FILENAME
    return candidate if candidate.exists() else None


def load_config(
    path: Optional[Path] = None,
    *,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load, merge and validate the interview-prep configuration."""

    env_map = env if env is not None else os.environ
    data = copy.deepcopy(_DEFAULTS)
    source = resolve_config_path(path, env=env_map)
    if source is not None:
        merge_defaults(data, load_toml(source))
    model_override = env_map.get(MODEL_ENV)
    if model_override:
        data["ai"]["model"] = model_override
    return _build_config(data, home=default_home(env_map), source=source)


def _build_config(
    data: Mapping[str, Any], *, home: Path, source: Optional[Path]
) -> AppConfig:
    ai = data["ai"]
    tracking = data["tracking"]
    logging_section = data["logging"]
    api_base = ai["api_base"]
    if not isinstance(api_base, str):
        raise ConfigError("'ai.api_base' must be a string.")
    return AppConfig(
        ai=AIConfig(
            model=_require_string(ai["model"], field="ai.model"),
            temperature=_require_float_range(
                ai["temperature"],
                field="ai.temperature",
                min_value=0.0,
                max_value=2.0,
            ),
            max_tokens=_require_positive_int(
                ai["max_tokens"], field="ai.max_tokens"
            ),
            request_timeout_seconds=_require_positive_int(
                ai["request_timeout_seconds"],
                field="ai.request_timeout_seconds",
            ),
            api_base=api_base.strip() or None,
        ),
        tracking=TrackingConfig(
            weak_threshold=_require_float_range(
                tracking["weak_threshold"],
                field="tracking.weak_threshold",
                min_value=0.0,
                max_value=1.0,
            ),
            recommend_weak_below=_require_float_range(
                tracking["recommend_weak_below"],
                field="tracking.recommend_weak_below",
                min_value=0.0,
                max_value=1.0,
            ),
            recommend_practice_below=_require_float_range(
                tracking["recommend_practice_below"],
                field="tracking.recommend_practice_below",
                min_value=0.0,
                max_value=1.0,
            ),
            theory_pass_score=_require_float_range(
                tracking["theory_pass_score"],
                field="tracking.theory_pass_score",
                min_value=0.0,
                max_value=10.0,
            ),
        ),
        logging=LoggingConfig(
            level=_require_string(
                logging_section["level"], field="logging.level"
            ),
            verbose=_require_bool(
                logging_section["verbose"], field="logging.verbose"
            ),
        ),
        home=home,
        source=source,
    )


def _require_positive_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"'{field}' must be a positive integer.")
    return value


def _require_bool(value: Any, *, field: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"'{field}' must be a boolean.")
    return value


def _require_float_range(
    value: Any, *, field: str, min_value: float, max_value: float
) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"'{field}' must be a number.")
    number = float(value)
    if not (min_value <= number <= max_value):
        raise ConfigError(
            f"'{field}' must be between {min_value} and {max_value}."
        )
    return number


def _require_string(value: Any, *, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"'{field}' must be a non-empty string.")
    return value.strip()


def read_template() -> str:
    """Return the packaged ``interview.toml`` template."""

    resource = resources.files("interview_prep").joinpath(CONFIG_FILENAME)
    return resource.read_text(encoding="utf-8")


def write_template(
    path: Path,
    *,
    overwrite: bool = False,
    mode: int = 0o600,
) -> Path:
    """Write the packaged template to ``path`` honouring ``overwrite``."""

    path.parent.mkdir(parents=True, exist_ok=True)
    if path.exists() and not overwrite:
        raise ConfigError(f"Config already exists: {path}")
    with path.open("w", encoding="utf-8") as handle:
        handle.write(read_template())
    try:
        path.chmod(mode)
    except PermissionError:  # pragma: no cover - depends on filesystem
        pass
    return path
