"""Configuration loader — reads optional YAML config and merges with defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

import yaml

CONFIG_PATH = Path("~/.config/deckwatch/config.yaml")
TRANSCRIPTS_DIR_ENV = "DECKWATCH_TRANSCRIPTS_DIR"

DEFAULTS = {
    "transcripts_dir": "~/.claude/projects",
    "tail_bytes": 256 * 1024,
    "head_bytes": 32 * 1024,
    "stale_after_seconds": 3600,
    "pane_lines": 20,
    "permission_marker": "Do you want to proceed?",
    "strategy": "allow_list",
    "port": 8788,
    "log_level": "WARNING",
}


@dataclass
class DeckwatchConfig:
    transcripts_dir: Path
    tail_bytes: int
    head_bytes: int
    stale_after_seconds: float
    pane_lines: int
    permission_marker: str
    strategy: str
    port: int
    log_level: str


def default_config() -> DeckwatchConfig:
    """Defaults only, ignoring any config file and environment overrides."""
    return _build(dict(DEFAULTS))


def load_config(config_path: Path | None = None) -> DeckwatchConfig:
    """Load config from ~/.config/deckwatch/config.yaml, merged with defaults.

    Expand ~ in paths. DECKWATCH_TRANSCRIPTS_DIR overrides transcripts_dir.
    If no config file exists, return defaults (don't error).
    """
    if config_path is None:
        config_path = CONFIG_PATH

    config_path = config_path.expanduser()

    merged = dict(DEFAULTS)

    if config_path.is_file():
        with open(config_path) as f:
            user_config = yaml.safe_load(f)
        if isinstance(user_config, dict):
            for key in DEFAULTS:
                if key in user_config:
                    merged[key] = user_config[key]

    env_dir = os.environ.get(TRANSCRIPTS_DIR_ENV)
    if env_dir:
        merged["transcripts_dir"] = env_dir

    return _build(merged)


def _build(merged: dict) -> DeckwatchConfig:
    config = DeckwatchConfig(
        transcripts_dir=Path(merged["transcripts_dir"]).expanduser(),
        tail_bytes=int(merged["tail_bytes"]),
        head_bytes=int(merged["head_bytes"]),
        stale_after_seconds=float(merged["stale_after_seconds"]),
        pane_lines=int(merged["pane_lines"]),
        permission_marker=str(merged["permission_marker"]),
        strategy=str(merged["strategy"]),
        port=int(merged["port"]),
        log_level=str(merged["log_level"]).upper(),
    )

    for key in ("tail_bytes", "head_bytes", "stale_after_seconds", "pane_lines"):
        if getattr(config, key) <= 0:
            raise ValueError(f"{key} must be positive, got {getattr(config, key)!r}")
    if not config.permission_marker:
        raise ValueError("permission_marker must not be empty")

    return config
