"""hookscan configuration and logging."""

import logging
import os
from dataclasses import dataclass, field
from functools import cached_property
from pathlib import Path
from typing import TextIO

import structlog

from hookscan.core.catalog import CATALOG, CATEGORIES, PatternRule, with_weights

USER_CONFIG = Path.home() / ".hookscan" / "config"
PROJECT_CONFIG_NAME = ".hookscan"
ENV_CONFIG = "HOOKSCAN_CONFIG"

DEFAULT_SYNTAX_TIMEOUT = 2.0
DEFAULT_MAX_SYNTAX_BYTES = 512 * 1024
DEFAULT_MAX_WORKERS = 8


@dataclass
class Config:
    """Parsed configuration."""

    syntax: bool = True  # False = heuristic only
    syntax_timeout: float | None = None  # seconds per snippet
    max_syntax_bytes: int | None = None
    max_workers: int | None = None
    weights: dict[str, int] = field(default_factory=dict)
    """Catalog weight overrides, category -> points."""

    verbose: bool = False
    log: Path | None = None  # None = no logging
    log_full: bool = False  # log scanned text (requires log path)

    @cached_property
    def catalog(self) -> tuple[PatternRule, ...]:
        """The pattern catalog with this config's weight overrides applied."""
        return with_weights(self.weights) if self.weights else CATALOG

    @property
    def timeout(self) -> float:
        return self.syntax_timeout if self.syntax_timeout is not None else DEFAULT_SYNTAX_TIMEOUT

    @property
    def syntax_byte_limit(self) -> int:
        return self.max_syntax_bytes if self.max_syntax_bytes is not None else DEFAULT_MAX_SYNTAX_BYTES

    @property
    def workers(self) -> int:
        return self.max_workers if self.max_workers is not None else DEFAULT_MAX_WORKERS


# === Config Loading ===


def _find_project_config(cwd: Path) -> Path | None:
    """Walk up from cwd to find .hookscan file."""
    current = cwd.resolve()
    while True:
        candidate = current / PROJECT_CONFIG_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:  # reached root
            return None
        current = parent


def _merge_configs(base: Config, overlay: Config) -> Config:
    """Merge overlay config into base. Weights accumulate, settings override."""
    return Config(
        syntax=overlay.syntax and base.syntax,
        syntax_timeout=overlay.syntax_timeout
        if overlay.syntax_timeout is not None
        else base.syntax_timeout,
        max_syntax_bytes=overlay.max_syntax_bytes
        if overlay.max_syntax_bytes is not None
        else base.max_syntax_bytes,
        max_workers=overlay.max_workers
        if overlay.max_workers is not None
        else base.max_workers,
        weights={**base.weights, **overlay.weights},
        verbose=overlay.verbose or base.verbose,
        log=overlay.log if overlay.log is not None else base.log,
        log_full=overlay.log_full or base.log_full,
    )


def load_config(cwd: Path) -> Config:
    """Load config from ~/.hookscan/config, .hookscan, and $HOOKSCAN_CONFIG. Last wins."""
    config = Config()

    # 1. User config (lowest priority)
    if USER_CONFIG.is_file():
        config = _merge_configs(config, parse_config(USER_CONFIG.read_text()))

    # 2. Project config (walk up from cwd)
    project_path = _find_project_config(cwd)
    if project_path is not None:
        config = _merge_configs(config, parse_config(project_path.read_text()))

    # 3. Env override (highest priority)
    env_path = os.environ.get(ENV_CONFIG)
    if env_path:
        env_config_path = Path(env_path).expanduser()
        if env_config_path.is_file():
            config = _merge_configs(config, parse_config(env_config_path.read_text()))

    return config


def parse_config(text: str) -> Config:
    """Parse config text into Config object. Raises ValueError on syntax errors."""
    settings: dict[str, bool | int | float | Path] = {}
    weights: dict[str, int] = {}

    for lineno, raw_line in enumerate(text.splitlines(), 1):
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue

        parts = line.split(None, 1)
        directive = parts[0].lower()
        rest = parts[1].strip() if len(parts) > 1 else ""

        try:
            if directive == "set":
                _apply_setting(settings, rest)

            elif directive == "weight":
                _apply_weight(weights, rest)

            else:
                raise ValueError(f"unknown directive '{directive}'")

        except ValueError as e:
            raise ValueError(f"line {lineno}: {e}") from None

    return Config(
        syntax=not settings.get("no_syntax", False),
        syntax_timeout=settings.get("syntax_timeout"),
        max_syntax_bytes=settings.get("max_syntax_bytes"),
        max_workers=settings.get("max_workers"),
        weights=weights,
        verbose=settings.get("verbose", False),
        log=settings.get("log"),
        log_full=settings.get("log_full", False),
    )


def _apply_weight(weights: dict[str, int], rest: str) -> None:
    """Parse a 'weight <category> <points>' directive."""
    parts = rest.split()
    if len(parts) != 2:
        raise ValueError("'weight' requires a category and a number")
    category, value = parts
    if category not in CATEGORIES:
        raise ValueError(f"unknown category '{category}'")
    try:
        points = int(value)
    except ValueError:
        raise ValueError(f"'weight' requires a number, got '{value}'") from None
    if points < 0:
        raise ValueError(f"'weight' must not be negative, got '{value}'")
    weights[category] = points


def _apply_setting(settings: dict[str, bool | int | float | Path], rest: str) -> None:
    """Parse and apply a 'set' directive. Raises ValueError on invalid setting."""
    if not rest:
        raise ValueError("'set' requires a setting name")

    parts = rest.split(None, 1)
    key = parts[0].lower()
    value = parts[1] if len(parts) > 1 else None
    key_normalized = key.replace("-", "_")

    # Boolean settings (no value required)
    if key_normalized in ("no_syntax", "verbose", "log_full"):
        if value is not None:
            raise ValueError(f"'{key}' takes no value")
        settings[key_normalized] = True

    # Positive integer settings
    elif key_normalized in ("max_syntax_bytes", "max_workers"):
        if value is None:
            raise ValueError(f"'{key}' requires a number")
        try:
            number = int(value)
        except ValueError:
            raise ValueError(f"'{key}' requires a number, got '{value}'") from None
        if number < 1:
            raise ValueError(f"'{key}' must be at least 1, got '{value}'")
        settings[key_normalized] = number

    # Seconds
    elif key_normalized == "syntax_timeout":
        if value is None:
            raise ValueError("'syntax-timeout' requires a number of seconds")
        try:
            seconds = float(value)
        except ValueError:
            raise ValueError(
                f"'syntax-timeout' requires a number of seconds, got '{value}'"
            ) from None
        if seconds <= 0:
            raise ValueError(f"'syntax-timeout' must be positive, got '{value}'")
        settings[key_normalized] = seconds

    # Path settings
    elif key_normalized == "log":
        if value is None:
            raise ValueError("'log' requires a path")
        settings[key_normalized] = Path(value).expanduser()

    else:
        raise ValueError(f"unknown setting '{key}'")


# === Logging ===

_logger: structlog.BoundLogger | None = None
_log_full = False
_log_file: TextIO | None = None


def configure_logging(config: Config) -> None:
    """Configure logging based on config settings. Call once at startup."""
    global _logger, _log_full, _log_file
    reset_logging()
    if config.log is None:
        return

    # Ensure log directory exists
    config.log.parent.mkdir(parents=True, exist_ok=True)

    level = logging.DEBUG if config.verbose else logging.INFO
    _log_file = open(config.log, "a", encoding="utf-8")
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", key="ts"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=_log_file),
        cache_logger_on_first_use=False,
    )
    _logger = structlog.get_logger()
    _log_full = config.log_full


def log_event(level: str, event: str, **kwargs) -> None:
    """Log an event. No-op if logging not configured; write errors are ignored."""
    if _logger is None:
        return
    try:
        getattr(_logger, level)(event, **kwargs)
    except OSError:
        pass  # Logging must never fail a scan


def log_scan(
    score: int,
    level: str,
    strategies: list[str],
    filename: str | None = None,
    text: str | None = None,
) -> None:
    """Log one scan outcome. The scanned text is included only with log-full."""
    entry: dict[str, object] = {"score": score, "risk": level, "strategies": strategies}
    if filename is not None:
        entry["filename"] = filename
    if _log_full and text is not None:
        entry["text"] = text
    log_event("info", "scanned", **entry)


def reset_logging() -> None:
    """Drop the configured logger and close its file (used between CLI runs and in tests)."""
    global _logger, _log_full, _log_file
    _logger = None
    _log_full = False
    if _log_file is not None:
        _log_file.close()
        _log_file = None

