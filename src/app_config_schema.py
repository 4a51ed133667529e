"""Dataclass schema objects used by runtime configuration loading."""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_CONFIG_FILE = "config.toml"


class AppConfigurationError(Exception):
    """Raised when application configuration fails."""


@dataclass(frozen=True)
class TimerSettings:
    """Timer durations and cycle behaviour from `[timer]` (minutes)."""
    work_minutes: int = 25
    short_break_minutes: int = 5
    long_break_minutes: int = 15
    sessions_until_long_break: int = 4
    auto_start: bool = False
    mode: str = "classic"
    default_tag: str = ""


@dataclass(frozen=True)
class UIServerSettings:
    """Websocket UI server settings from `[ui_server]`."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass(frozen=True)
class SessionStoreSettings:
    """Session recorder settings from `[sessions]`; empty file keeps sessions in memory."""
    store_file: str = ""


@dataclass(frozen=True)
class AppConfig:
    """Complete typed runtime configuration loaded from `config.toml`."""
    timer: TimerSettings
    ui_server: UIServerSettings
    sessions: SessionStoreSettings
    source_file: str
