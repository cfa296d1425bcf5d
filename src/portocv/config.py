"""Application configuration loaded from config.yaml."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from portocv.clients.key_pool import KeyPool, clean_key, split_keys


def _check_range(name: str, value: float, low: float, high: float | None = None) -> None:
    if value < low or (high is not None and value > high):
        bound = f"between {low} and {high}" if high is not None else f">= {low}"
        raise ValueError(f"{name} must be {bound}, got {value}")


@dataclass(frozen=True)
class LLMConfig:
    pro_model: str = "gemini-3-pro-preview"
    flash_model: str = "gemini-3-flash-preview"
    max_retries: int = 2
    initial_delay: float = 1.0
    timeout: int = 120
    portfolio_temperature: float = 0.95

    def __post_init__(self):
        _check_range("max_retries", self.max_retries, 0, 10)
        if self.initial_delay <= 0:
            raise ValueError(f"initial_delay must be > 0, got {self.initial_delay}")
        _check_range("timeout", self.timeout, 1)
        _check_range("portfolio_temperature", self.portfolio_temperature, 0, 2)


@dataclass(frozen=True)
class KeysConfig:
    env_var: str = "API_KEY"
    fallback_env_var: str = "GEMINI_API_KEY"
    backups_env_var: str = "API_KEY_BACKUPS"

    def build_pool(self, override: str | None = None) -> KeyPool:
        """Build the key pool from the environment plus an optional override."""
        default = clean_key(os.environ.get(self.env_var)) or clean_key(
            os.environ.get(self.fallback_env_var)
        )
        backups = split_keys(os.environ.get(self.backups_env_var))
        return KeyPool.from_sources(default=default, backups=backups, override=override)


@dataclass(frozen=True)
class HistoryConfig:
    path: str = "~/.portocv/history.json"
    max_entries: int = 8

    def __post_init__(self):
        _check_range("max_entries", self.max_entries, 1, 50)

    @property
    def resolved_path(self) -> Path:
        return Path(self.path).expanduser()


@dataclass(frozen=True)
class SessionConfig:
    timeout_minutes: int = 10

    def __post_init__(self):
        _check_range("timeout_minutes", self.timeout_minutes, 1, 1440)


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    keys: KeysConfig = field(default_factory=KeysConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    session: SessionConfig = field(default_factory=SessionConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidates = [
            Path.cwd() / "config.yaml",
            Path(__file__).resolve().parent.parent.parent / "config.yaml",
        ]
        for c in candidates:
            if c.exists():
                path = c
                break

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text()) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        keys=KeysConfig(**raw.get("keys", {})),
        history=HistoryConfig(**raw.get("history", {})),
        session=SessionConfig(**raw.get("session", {})),
    )
