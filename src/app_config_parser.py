"""Typed parser for config.toml sections into immutable app settings."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping

from app_config_schema import (
    AppConfig,
    AppConfigurationError,
    SessionStoreSettings,
    TimerSettings,
    UIServerSettings,
)

_ALLOWED_TIMER_MODES = {"classic", "flowtime"}


def parse_app_config(
    raw: Mapping[str, Any],
    *,
    base_dir: Path,
    source_file: str,
) -> AppConfig:
    """Parse raw TOML mappings into strongly typed application settings."""
    timer = _parse_timer_settings(_section(raw, "timer"))
    ui_server = _parse_ui_server_settings(_section(raw, "ui_server"))
    sessions = _parse_session_store_settings(_section(raw, "sessions"), base_dir=base_dir)

    return AppConfig(
        timer=timer,
        ui_server=ui_server,
        sessions=sessions,
        source_file=source_file,
    )


def _parse_timer_settings(section: Mapping[str, Any]) -> TimerSettings:
    return TimerSettings(
        work_minutes=_as_int(section.get("work_minutes", 25), "timer.work_minutes"),
        short_break_minutes=_as_int(
            section.get("short_break_minutes", 5),
            "timer.short_break_minutes",
        ),
        long_break_minutes=_as_int(
            section.get("long_break_minutes", 15),
            "timer.long_break_minutes",
        ),
        sessions_until_long_break=_as_int(
            section.get("sessions_until_long_break", 4),
            "timer.sessions_until_long_break",
        ),
        auto_start=_as_bool(section.get("auto_start", False), "timer.auto_start"),
        mode=_as_choice(
            section.get("mode", "classic"),
            "timer.mode",
            _ALLOWED_TIMER_MODES,
        ),
        default_tag=_as_str(section.get("default_tag", ""), "timer.default_tag"),
    )


def _parse_ui_server_settings(section: Mapping[str, Any]) -> UIServerSettings:
    return UIServerSettings(
        enabled=_as_bool(section.get("enabled", True), "ui_server.enabled"),
        host=_as_str(section.get("host", "127.0.0.1"), "ui_server.host"),
        port=_as_int(section.get("port", 8765), "ui_server.port"),
    )


def _parse_session_store_settings(
    section: Mapping[str, Any],
    *,
    base_dir: Path,
) -> SessionStoreSettings:
    store_file = _as_str(section.get("store_file", ""), "sessions.store_file")
    return SessionStoreSettings(
        store_file=_resolve_path(base_dir, store_file) if store_file else "",
    )


def _section(root: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    raw = root.get(name, {})
    if raw is None:
        return {}
    if not isinstance(raw, Mapping):
        raise AppConfigurationError(f"[{name}] must be a table.")
    return raw


def _as_str(value: Any, field: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    raise AppConfigurationError(f"{field} must be a string.")


def _as_bool(value: Any, field: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "1", "yes", "on"):
            return True
        if lowered in ("false", "0", "no", "off"):
            return False
    raise AppConfigurationError(f"{field} must be a boolean.")


def _as_int(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise AppConfigurationError(f"{field} must be an integer.")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError as error:
            raise AppConfigurationError(f"{field} must be an integer.") from error
    raise AppConfigurationError(f"{field} must be an integer.")


def _as_choice(value: Any, field: str, allowed: set[str]) -> str:
    name = _as_str(value, field).lower()
    if name not in allowed:
        joined = ", ".join(sorted(allowed))
        raise AppConfigurationError(f"{field} must be one of: {joined}.")
    return name


def _resolve_path(base_dir: Path, raw: str) -> str:
    if not raw:
        return ""
    path = Path(raw).expanduser()
    if not path.is_absolute():
        path = (base_dir / path).resolve()
    return str(path)
