"""Popup configuration: reads settings from environment variables.

All settings have sensible defaults for an interactive desktop session.
Tests and embedding processes usually build a ``PopupSettings`` directly
with shorter intervals instead of going through the environment.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path

# Pre-built UI bundle shipped inside the package
DEFAULT_STATIC_DIR = Path(__file__).parent / "static"


@dataclass(frozen=True)
class PopupSettings:
    """Immutable popup configuration read from environment at startup."""

    # Network: loopback only, the port is always OS-assigned
    host: str = "127.0.0.1"

    # UI bundle root served by the static asset routes
    static_dir: Path = field(default_factory=lambda: DEFAULT_STATIC_DIR)

    # Disconnect channel timing (seconds)
    heartbeat_interval: float = 5.0
    disconnect_poll_interval: float = 0.25

    # Delay between acknowledging a submission and completing the session,
    # so the browser's own request is not cut off by the shutdown.
    submit_grace_delay: float = 0.1

    # Upper bound on waiting for uvicorn to drain connections on shutdown
    shutdown_timeout: float = 3.0

    # App-mode window geometry
    window_width: int = 500
    window_height: int = 600

    # How long a spawned browser command may take to fail before it is
    # considered started.
    launch_settle_time: float = 0.5

    # Logging
    log_level: str = "INFO"


def load_settings() -> PopupSettings:
    """Build settings from ``POPUP_UI_*`` environment variables."""
    static_dir = os.getenv("POPUP_UI_STATIC_DIR")

    return PopupSettings(
        host=os.getenv("POPUP_UI_HOST", "127.0.0.1"),
        static_dir=Path(static_dir) if static_dir else DEFAULT_STATIC_DIR,
        heartbeat_interval=float(os.getenv("POPUP_UI_HEARTBEAT_INTERVAL", "5.0")),
        disconnect_poll_interval=float(
            os.getenv("POPUP_UI_DISCONNECT_POLL_INTERVAL", "0.25")
        ),
        submit_grace_delay=float(os.getenv("POPUP_UI_SUBMIT_GRACE_DELAY", "0.1")),
        shutdown_timeout=float(os.getenv("POPUP_UI_SHUTDOWN_TIMEOUT", "3.0")),
        window_width=int(os.getenv("POPUP_UI_WINDOW_WIDTH", "500")),
        window_height=int(os.getenv("POPUP_UI_WINDOW_HEIGHT", "600")),
        launch_settle_time=float(os.getenv("POPUP_UI_LAUNCH_SETTLE_TIME", "0.5")),
        log_level=os.getenv("POPUP_UI_LOG_LEVEL", "INFO").upper(),
    )
