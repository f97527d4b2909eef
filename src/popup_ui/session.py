"""Session orchestrator: one form, one listener, one answer.

``serve_form_and_await_response`` is the entry point used by the tool
layer.  Each call builds a ``FormSession`` that:

  1. binds a loopback socket on an OS-assigned port
  2. serves the per-session FastAPI app from uvicorn on the caller's loop
  3. opens the form in a browser window
  4. waits for the resolution gate (submission, window closed, or the
     browser could not be opened)
  5. shuts the listener down before returning

The session never installs signal handlers.  An embedding process that is
shutting down calls ``FormSession.close()`` (or cancels the awaiting task);
the listener is closed and the pending result is abandoned rather than
resolved.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import socket
from dataclasses import dataclass, field
from typing import Any, Generator

import uvicorn

from popup_ui.browser import BrowserLauncher
from popup_ui.config import PopupSettings, load_settings
from popup_ui.errors import BindError, InfrastructureError
from popup_ui.gate import ResolutionGate
from popup_ui.models import FormConfig, FormResponse

logger = logging.getLogger(__name__)

STARTUP_POLL_INTERVAL = 0.01


def bind_listener(host: str) -> socket.socket:
    """Bind a TCP socket on ``host`` with an OS-assigned port.

    Raises ``BindError`` if no port can be acquired.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind((host, 0))
    except OSError as exc:
        sock.close()
        raise BindError(f"Could not bind a listener on {host}: {exc}") from exc
    return sock


class _EphemeralServer(uvicorn.Server):
    """uvicorn server that leaves process signals to the host process."""

    def install_signal_handlers(self) -> None:
        # uvicorn < 0.29
        pass

    @contextlib.contextmanager
    def capture_signals(self) -> Generator[None, None, None]:
        yield


@dataclass
class StreamHandle:
    """One open disconnect-channel stream."""

    stop: asyncio.Event = field(default_factory=asyncio.Event)
    # Set when a newer stream took over; the old one then ends silently
    superseded: bool = False


class FormSession:
    """Owns the listener and the resolution gate for one interaction."""

    def __init__(
        self,
        config: FormConfig | dict[str, Any],
        *,
        settings: PopupSettings | None = None,
        launcher: BrowserLauncher | None = None,
    ) -> None:
        if not isinstance(config, FormConfig):
            config = FormConfig.model_validate(config)
        self.config = config
        self.settings = settings or load_settings()
        self.launcher = launcher or BrowserLauncher(self.settings)

        self.url: str | None = None
        self.ready = asyncio.Event()
        self.gate: ResolutionGate[FormResponse] | None = None

        self._stream: StreamHandle | None = None
        self._socket: socket.socket | None = None
        self._server: _EphemeralServer | None = None
        self._launch_task: asyncio.Task | None = None
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def run(self) -> FormResponse:
        """Serve the form and return the single terminal response.

        Raises ``BindError`` / ``InfrastructureError`` when the listener
        cannot be bound or dies first, and ``asyncio.CancelledError`` when
        the session is force-closed.
        """
        if self._started:
            raise RuntimeError("A FormSession can only be run once")
        self._started = True

        # Lazy import: the routes depend on this module
        from popup_ui.app import create_app

        self.gate = ResolutionGate()
        self.gate.on_fire(self._stop_streams)

        self._socket = bind_listener(self.settings.host)
        port = self._socket.getsockname()[1]
        self.url = f"http://{self.settings.host}:{port}"

        self._server = _EphemeralServer(
            uvicorn.Config(
                create_app(self),
                log_config=None,
                log_level="warning",
                access_log=False,
                lifespan="off",
                timeout_graceful_shutdown=self.settings.shutdown_timeout,
            )
        )
        serve_task = asyncio.create_task(self._server.serve(sockets=[self._socket]))
        serve_task.add_done_callback(self._on_server_exit)

        try:
            while not self._server.started and not self.gate.resolved:
                await asyncio.sleep(STARTUP_POLL_INTERVAL)
            if not self.gate.resolved:
                logger.info("Serving form at %s", self.url)
                self.ready.set()
                self._launch_task = asyncio.create_task(self._launch(self.url))
            return await self.gate.wait()
        finally:
            await self._shutdown(serve_task)

    def close(self) -> None:
        """Force-close the listener without resolving the pending result."""
        logger.info("Force-closing form session at %s", self.url)
        if self.gate is not None:
            self.gate.cancel()
        self._stop_streams()
        if self._server is not None:
            self._server.should_exit = True
            self._server.force_exit = True

    async def _shutdown(self, serve_task: asyncio.Task) -> None:
        if self.gate is not None:
            # No trigger may fire once the caller stopped waiting
            self.gate.cancel()
        self._stop_streams()

        if self._launch_task is not None and not self._launch_task.done():
            self._launch_task.cancel()
            await asyncio.gather(self._launch_task, return_exceptions=True)

        if self._server is not None:
            self._server.should_exit = True
        await asyncio.gather(serve_task, return_exceptions=True)

        if self._socket is not None:
            self._socket.close()
        logger.debug("Listener at %s closed", self.url)

    def _on_server_exit(self, task: asyncio.Task) -> None:
        if self.gate is None or self.gate.resolved:
            return
        exc = None if task.cancelled() else task.exception()
        logger.error("Listener at %s stopped before the session resolved: %r", self.url, exc)
        error = InfrastructureError("Listener stopped before the session resolved")
        error.__cause__ = exc
        self.gate.reject(error)

    async def _launch(self, url: str) -> None:
        try:
            opened = await self.launcher.open(url)
        except Exception:
            logger.exception("Browser launcher failed for %s", url)
            opened = False
        if not opened:
            logger.warning("No browser window could be opened, resolving with skip")
            self.gate.resolve(FormResponse.skip())

    # ------------------------------------------------------------------
    # Disconnect channel bookkeeping
    # ------------------------------------------------------------------

    def attach_stream(self) -> StreamHandle:
        """Register a new disconnect-channel stream, superseding any open one."""
        if self._stream is not None:
            logger.warning("Connection stream replaced by a newer one")
            self._stream.superseded = True
            self._stream.stop.set()
        handle = StreamHandle()
        if self.gate is None or self.gate.resolved:
            handle.stop.set()
        self._stream = handle
        return handle

    def detach_stream(self, handle: StreamHandle) -> None:
        if self._stream is handle:
            self._stream = None

    def _stop_streams(self) -> None:
        if self._stream is not None:
            self._stream.stop.set()


async def serve_form_and_await_response(
    config: FormConfig | dict[str, Any],
    *,
    settings: PopupSettings | None = None,
    launcher: BrowserLauncher | None = None,
) -> FormResponse:
    """Show ``config`` in a browser popup and wait for exactly one response."""
    session = FormSession(config, settings=settings, launcher=launcher)
    return await session.run()
