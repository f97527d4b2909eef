"""Test doubles and helpers for running real popup sessions on loopback.

Sessions in the tests bind a real uvicorn listener; only the browser is
faked.  ``FakeLauncher`` stands in for ``BrowserLauncher`` and lets a test
wait until the session is serving before it starts talking HTTP.
"""

import asyncio

import httpx

from popup_ui.session import FormSession

SESSION_TIMEOUT = 5.0


class FakeLauncher:
    """Records the URL it was asked to open and reports a fixed outcome."""

    def __init__(self, result: bool = True, error: Exception | None = None):
        self.result = result
        self.error = error
        self.urls: list[str] = []
        self.opened = asyncio.Event()

    async def open(self, url: str) -> bool:
        self.urls.append(url)
        self.opened.set()
        if self.error is not None:
            raise self.error
        return self.result


async def start_session(config, settings, launcher: FakeLauncher | None = None):
    """Run a session in the background; return it once it is serving."""
    launcher = launcher or FakeLauncher()
    session = FormSession(config, settings=settings, launcher=launcher)
    task = asyncio.create_task(session.run())
    await asyncio.wait_for(launcher.opened.wait(), timeout=SESSION_TIMEOUT)
    return session, task


def client_for(url: str) -> httpx.AsyncClient:
    """HTTP client for a loopback session; ignores proxy env vars."""
    return httpx.AsyncClient(base_url=url, trust_env=False, timeout=SESSION_TIMEOUT)


async def wait_until(predicate, timeout: float = SESSION_TIMEOUT) -> None:
    """Poll ``predicate`` until it returns True."""
    async def poll():
        while not predicate():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout=timeout)
