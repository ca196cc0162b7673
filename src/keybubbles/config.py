"""Settings persistence (TOML) and config schema."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path

import tomli_w

from keybubbles.keys import DEFAULT_QUIT_HOTKEYS, parse_hotkey
from keybubbles.model import COLOR_POLICIES

logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ---------------------------------------------------------------------------
# Config schema
# ---------------------------------------------------------------------------


@dataclass
class RenderConfig:
    fps: int = 60


@dataclass
class BubbleConfig:
    max_size: float = 10.0
    # Radius added per frame; <= 0 makes bubbles that never finish.
    speed: float = 0.5
    color_policy: str = "random"  # "random" or "per_key"


@dataclass
class InputConfig:
    quit_hotkeys: list[str] = field(default_factory=lambda: list(DEFAULT_QUIT_HOTKEYS))


@dataclass
class AudioConfig:
    enabled: bool = False
    duration_ms: int = 150
    volume: float = 0.3
    sample_rate: int = 44100
    device: str = ""


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: str = ""  # empty = ~/.keybubbles/keybubbles.log


@dataclass
class AppConfig:
    render: RenderConfig = field(default_factory=RenderConfig)
    bubble: BubbleConfig = field(default_factory=BubbleConfig)
    input: InputConfig = field(default_factory=InputConfig)
    audio: AudioConfig = field(default_factory=AudioConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def get_config_dir() -> Path:
    """Return the per-user settings directory (~/.keybubbles)."""
    return Path.home() / ".keybubbles"


def get_config_path() -> Path:
    """Return the path to the config file (~/.keybubbles/config.toml)."""
    return get_config_dir() / "config.toml"


def get_log_path(config: AppConfig) -> Path:
    if config.logging.file:
        return Path(config.logging.file).expanduser()
    return get_config_dir() / "keybubbles.log"


def _merge_into_dataclass(cls: type, data: dict) -> object:
    """Create a dataclass instance from *data*, ignoring unknown keys."""
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known})


def _deep_merge(defaults: dict, overrides: dict) -> dict:
    """Recursively merge *overrides* into *defaults* (non-destructive)."""
    merged = defaults.copy()
    for key, value in overrides.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _section(data: dict, name: str) -> dict:
    value = data.get(name, {})
    if not isinstance(value, dict):
        raise ValueError(f"[{name}] must be a table, got {value!r}")
    return value


def _dict_to_config(data: dict) -> AppConfig:
    """Build an AppConfig from a plain dict (e.g. parsed TOML).

    Raises:
        ValueError: If a section is present but is not a table.
    """
    return AppConfig(
        render=_merge_into_dataclass(RenderConfig, _section(data, "render")),  # type: ignore[arg-type]
        bubble=_merge_into_dataclass(BubbleConfig, _section(data, "bubble")),  # type: ignore[arg-type]
        input=_merge_into_dataclass(InputConfig, _section(data, "input")),  # type: ignore[arg-type]
        audio=_merge_into_dataclass(AudioConfig, _section(data, "audio")),  # type: ignore[arg-type]
        logging=_merge_into_dataclass(LoggingConfig, _section(data, "logging")),  # type: ignore[arg-type]
    )


def _config_to_dict(config: AppConfig) -> dict:
    """Convert an AppConfig to a plain dict suitable for TOML serialization."""
    return asdict(config)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(path: Path | None = None) -> AppConfig:
    """Load config from file, merge with defaults.

    Creates a default config file if one does not exist.
    """
    path = path or get_config_path()

    if not path.exists():
        config = AppConfig()
        save_config(config, path)
        return config

    with open(path, "rb") as f:
        file_data = tomllib.load(f)

    default_data = _config_to_dict(AppConfig())
    merged = _deep_merge(default_data, file_data)
    return _dict_to_config(merged)


def save_config(config: AppConfig, path: Path | None = None) -> None:
    """Save *config* to the TOML config file.

    Creates the parent directory if it does not exist.
    """
    path = path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def _is_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def validate_config(config: AppConfig) -> None:
    """Raise ``ValueError`` if *config* cannot drive the engine."""
    if not _is_int(config.render.fps) or config.render.fps <= 0:
        raise ValueError(f"render.fps must be a positive integer, got {config.render.fps!r}")
    for name in ("max_size", "speed"):
        value = getattr(config.bubble, name)
        if not _is_number(value):
            raise ValueError(f"bubble.{name} must be a number, got {value!r}")
    if config.bubble.color_policy not in COLOR_POLICIES:
        raise ValueError(
            f"bubble.color_policy must be one of {COLOR_POLICIES}, "
            f"got {config.bubble.color_policy!r}"
        )

    hotkeys = config.input.quit_hotkeys
    if not isinstance(hotkeys, list) or not all(isinstance(h, str) for h in hotkeys):
        raise ValueError(f"input.quit_hotkeys must be a list of strings, got {hotkeys!r}")
    if not hotkeys:
        raise ValueError("input.quit_hotkeys must name at least one hotkey")
    for hotkey in hotkeys:
        parse_hotkey(hotkey)

    if not isinstance(config.audio.enabled, bool):
        raise ValueError(f"audio.enabled must be true or false, got {config.audio.enabled!r}")
    if not _is_int(config.audio.duration_ms) or config.audio.duration_ms <= 0:
        raise ValueError(
            f"audio.duration_ms must be a positive integer, got {config.audio.duration_ms!r}"
        )
    if not _is_int(config.audio.sample_rate) or config.audio.sample_rate <= 0:
        raise ValueError(
            f"audio.sample_rate must be a positive integer, got {config.audio.sample_rate!r}"
        )
    if not _is_number(config.audio.volume):
        raise ValueError(f"audio.volume must be a number, got {config.audio.volume!r}")
    if not isinstance(config.audio.device, str):
        raise ValueError(f"audio.device must be a string, got {config.audio.device!r}")

    level = config.logging.level
    if not isinstance(level, str) or level.upper() not in _LOG_LEVELS:
        raise ValueError(f"logging.level must be one of {_LOG_LEVELS}, got {level!r}")
    if not isinstance(config.logging.file, str):
        raise ValueError(f"logging.file must be a string, got {config.logging.file!r}")
