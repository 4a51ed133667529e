"""Configuration model for the websocket UI server."""

from __future__ import annotations

from dataclasses import dataclass


class ServerConfigurationError(Exception):
    """Raised when UI server configuration is invalid."""


WEBSOCKET_PATH = "/ws"
HEALTHZ_PATH = "/healthz"
STATE_PATH = "/state"
MAX_MESSAGE_BYTES = 64 * 1024


@dataclass(frozen=True)
class UIServerConfig:
    """Validated UI server configuration derived from app settings."""
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765

    def __post_init__(self) -> None:
        if not self.host.strip():
            raise ServerConfigurationError("ui_server.host cannot be empty")

        if not 1 <= self.port <= 65535:
            raise ServerConfigurationError(
                f"ui_server.port must be in [1, 65535], got: {self.port}"
            )

    @property
    def websocket_path(self) -> str:
        return WEBSOCKET_PATH

    @classmethod
    def from_settings(cls, settings) -> "UIServerConfig":
        return cls(
            enabled=bool(settings.enabled),
            host=settings.host,
            port=settings.port,
        )
