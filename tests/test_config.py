from pathlib import Path

from popup_ui.config import DEFAULT_STATIC_DIR, PopupSettings, load_settings

ENV_VARS = (
    "POPUP_UI_HOST",
    "POPUP_UI_STATIC_DIR",
    "POPUP_UI_HEARTBEAT_INTERVAL",
    "POPUP_UI_DISCONNECT_POLL_INTERVAL",
    "POPUP_UI_SUBMIT_GRACE_DELAY",
    "POPUP_UI_SHUTDOWN_TIMEOUT",
    "POPUP_UI_WINDOW_WIDTH",
    "POPUP_UI_WINDOW_HEIGHT",
    "POPUP_UI_LAUNCH_SETTLE_TIME",
    "POPUP_UI_LOG_LEVEL",
)


def clear_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults_match_environment_free_load(monkeypatch):
    clear_env(monkeypatch)
    assert load_settings() == PopupSettings()


def test_default_values():
    settings = PopupSettings()
    assert settings.host == "127.0.0.1"
    assert settings.static_dir == DEFAULT_STATIC_DIR
    assert settings.heartbeat_interval == 5.0
    assert settings.disconnect_poll_interval == 0.25
    assert (settings.window_width, settings.window_height) == (500, 600)


def test_environment_overrides(monkeypatch, tmp_path):
    clear_env(monkeypatch)
    monkeypatch.setenv("POPUP_UI_STATIC_DIR", str(tmp_path))
    monkeypatch.setenv("POPUP_UI_HEARTBEAT_INTERVAL", "1.5")
    monkeypatch.setenv("POPUP_UI_WINDOW_WIDTH", "720")
    monkeypatch.setenv("POPUP_UI_LOG_LEVEL", "debug")

    settings = load_settings()

    assert settings.static_dir == Path(tmp_path)
    assert settings.heartbeat_interval == 1.5
    assert settings.window_width == 720
    assert settings.log_level == "DEBUG"
    assert settings.submit_grace_delay == 0.1
