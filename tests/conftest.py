import pytest

from popup_ui.config import PopupSettings


@pytest.fixture
def settings():
    """Bundled UI with short timings so sessions finish quickly."""
    return PopupSettings(
        heartbeat_interval=0.2,
        disconnect_poll_interval=0.05,
        submit_grace_delay=0.05,
        shutdown_timeout=1.0,
        log_level="DEBUG",
    )


@pytest.fixture
def pick_config():
    """The two-option radio form used by most session scenarios."""
    return {
        "title": "Pick",
        "field": {"type": "radio", "name": "selection", "options": ["A", "B"]},
    }
