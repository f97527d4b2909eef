"""Browser launcher: open the form as a dialog-like app-mode window.

The launcher walks an ordered, per-platform table of Chromium-family
"app mode" invocations (``--app=<url>``: no address bar, no tabs) and stops
at the first one that starts.  Every invocation gets a fresh profile
directory, otherwise an already-running browser swallows the window size
and position flags.  When no app-mode browser works, the platform's default
URL opener is tried via ``webbrowser``.

Process spawning, command output capture and the default opener are all
injectable, so the fallback order can be tested without starting anything:

    launcher = BrowserLauncher(settings, spawn=fake_spawn, platform="linux")
    ok = await launcher.open("http://127.0.0.1:5000")

The launcher holds no state between calls.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import subprocess
import sys
import shutil
import tempfile
import webbrowser
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional, Sequence

from popup_ui.config import PopupSettings

logger = logging.getLogger(__name__)

# Injectable primitives
SpawnFn = Callable[[Sequence[str]], Awaitable[bool]]
RunFn = Callable[[Sequence[str]], Awaitable[Optional[str]]]
OpenDefaultFn = Callable[[str], Awaitable[bool]]

PROBE_TIMEOUT = 5.0


def platform_family(platform: str) -> str:
    """Collapse ``sys.platform`` values into win32 / darwin / posix."""
    if platform.startswith("win") or platform == "cygwin":
        return "win32"
    if platform == "darwin":
        return "darwin"
    return "posix"


# ------------------------------------------------------------------
# Window geometry
# ------------------------------------------------------------------

@dataclass(frozen=True)
class WindowGeometry:
    """Size and optional top-left position of the app window."""

    width: int
    height: int
    x: Optional[int] = None
    y: Optional[int] = None

    def flags(self) -> list[str]:
        """Chromium command-line flags for this geometry."""
        flags = [f"--window-size={self.width},{self.height}"]
        if self.x is not None and self.y is not None:
            flags.append(f"--window-position={self.x},{self.y}")
        return flags


def compute_geometry(
    width: int, height: int, screen: Optional[tuple[int, int]],
) -> WindowGeometry:
    """Center a ``width`` × ``height`` window on ``screen`` when it is known."""
    if screen is None:
        return WindowGeometry(width, height)
    screen_width, screen_height = screen
    x = max(0, round((screen_width - width) / 2))
    y = max(0, round((screen_height - height) / 2))
    return WindowGeometry(width, height, x, y)


# ------------------------------------------------------------------
# Screen size probing (best effort)
# ------------------------------------------------------------------

def _parse_powershell_bounds(output: str) -> Optional[tuple[int, int]]:
    try:
        parsed = json.loads(output.strip())
    except ValueError:
        return None
    if not isinstance(parsed, dict):
        return None
    width, height = parsed.get("Width"), parsed.get("Height")
    if isinstance(width, int) and isinstance(height, int):
        return width, height
    return None


def _regex_parser(pattern: str) -> Callable[[str], Optional[tuple[int, int]]]:
    compiled = re.compile(pattern)

    def parse(output: str) -> Optional[tuple[int, int]]:
        match = compiled.search(output)
        if match is None:
            return None
        return int(match.group(1)), int(match.group(2))

    return parse


SCREEN_PROBES: dict[str, tuple[list[str], Callable[[str], Optional[tuple[int, int]]]]] = {
    "win32": (
        [
            "powershell", "-NoProfile", "-Command",
            "Add-Type -AssemblyName System.Windows.Forms; "
            "[System.Windows.Forms.Screen]::PrimaryScreen.Bounds "
            "| Select-Object Width,Height | ConvertTo-Json",
        ],
        _parse_powershell_bounds,
    ),
    "darwin": (
        ["system_profiler", "SPDisplaysDataType"],
        _regex_parser(r"Resolution:\s*(\d+)\s*x\s*(\d+)"),
    ),
    "posix": (
        ["xdpyinfo"],
        _regex_parser(r"dimensions:\s*(\d+)x(\d+)"),
    ),
}


async def run_command(argv: Sequence[str]) -> Optional[str]:
    """Run ``argv`` and return its stdout, or None on any failure."""
    try:
        proc = await asyncio.create_subprocess_exec(
            *argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
        )
    except OSError:
        return None
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=PROBE_TIMEOUT)
    except asyncio.TimeoutError:
        proc.kill()
        return None
    if proc.returncode != 0:
        return None
    return stdout.decode("utf-8", errors="replace")


async def probe_screen_size(family: str, run: RunFn) -> Optional[tuple[int, int]]:
    """Return the primary screen size, or None if it cannot be determined."""
    argv, parse = SCREEN_PROBES[family]
    output = await run(argv)
    if not output:
        return None
    return parse(output)


# ------------------------------------------------------------------
# Launch strategies
# ------------------------------------------------------------------

@dataclass(frozen=True)
class LaunchStrategy:
    """One app-mode browser invocation for one platform family."""

    name: str
    family: str
    build_argv: Callable[[str, WindowGeometry, str], list[str]]


def _windows_start(executable: str) -> Callable[[str, WindowGeometry, str], list[str]]:
    def build(url: str, geometry: WindowGeometry, profile_dir: str) -> list[str]:
        return [
            "cmd", "/c", "start", "", executable,
            f"--app={url}", *geometry.flags(), f"--user-data-dir={profile_dir}",
        ]
    return build


def _macos_open(application: str) -> Callable[[str, WindowGeometry, str], list[str]]:
    def build(url: str, geometry: WindowGeometry, profile_dir: str) -> list[str]:
        return [
            "open", "-n", "-a", application, "--args",
            f"--app={url}", *geometry.flags(), f"--user-data-dir={profile_dir}",
            "--new-window",
        ]
    return build


def _posix_exec(executable: str) -> Callable[[str, WindowGeometry, str], list[str]]:
    def build(url: str, geometry: WindowGeometry, profile_dir: str) -> list[str]:
        return [
            executable,
            f"--app={url}", *geometry.flags(), f"--user-data-dir={profile_dir}",
            "--new-window",
        ]
    return build


# Evaluated in order; Edge comes first on Windows because it is pre-installed.
STRATEGIES: tuple[LaunchStrategy, ...] = (
    LaunchStrategy("msedge", "win32", _windows_start("msedge")),
    LaunchStrategy("chrome", "win32", _windows_start("chrome")),
    LaunchStrategy("Google Chrome", "darwin", _macos_open("Google Chrome")),
    LaunchStrategy("Microsoft Edge", "darwin", _macos_open("Microsoft Edge")),
    LaunchStrategy("google-chrome", "posix", _posix_exec("google-chrome")),
    LaunchStrategy("chromium-browser", "posix", _posix_exec("chromium-browser")),
    LaunchStrategy("chromium", "posix", _posix_exec("chromium")),
    LaunchStrategy("microsoft-edge", "posix", _posix_exec("microsoft-edge")),
)


# ------------------------------------------------------------------
# Default primitives
# ------------------------------------------------------------------

def make_process_spawner(settle_time: float) -> SpawnFn:
    """Build a spawn primitive that waits ``settle_time`` for early failure.

    A command counts as started when it is still running after the settle
    time, or exited with status 0 (launcher stubs such as ``open`` and
    ``start`` hand off and return).
    """

    async def spawn(argv: Sequence[str]) -> bool:
        try:
            proc = await asyncio.create_subprocess_exec(
                *argv,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                start_new_session=True,
            )
        except OSError as exc:
            logger.debug("Could not start %s: %s", argv[0], exc)
            return False
        try:
            returncode = await asyncio.wait_for(proc.wait(), timeout=settle_time)
        except asyncio.TimeoutError:
            return True
        if returncode != 0:
            logger.debug("%s exited with status %d", argv[0], returncode)
        return returncode == 0

    return spawn


async def open_default_browser(url: str) -> bool:
    """Open ``url`` with the platform's default handler."""
    try:
        return await asyncio.to_thread(webbrowser.open, url)
    except webbrowser.Error as exc:
        logger.debug("webbrowser.open failed: %s", exc)
        return False


def _make_profile_dir() -> str:
    return tempfile.mkdtemp(prefix="popup-ui-")


def _remove_profile_dir(path: str) -> None:
    shutil.rmtree(path, ignore_errors=True)


# ------------------------------------------------------------------
# Launcher
# ------------------------------------------------------------------

class BrowserLauncher:
    """Opens a URL in an app-mode window, falling back to the default browser."""

    def __init__(
        self,
        settings: PopupSettings | None = None,
        *,
        spawn: SpawnFn | None = None,
        run: RunFn | None = None,
        open_default: OpenDefaultFn | None = None,
        platform: str | None = None,
        strategies: Sequence[LaunchStrategy] = STRATEGIES,
        make_profile_dir: Callable[[], str] = _make_profile_dir,
        remove_profile_dir: Callable[[str], None] = _remove_profile_dir,
    ) -> None:
        self._settings = settings or PopupSettings()
        self._spawn = spawn or make_process_spawner(self._settings.launch_settle_time)
        self._run = run or run_command
        self._open_default = open_default or open_default_browser
        self._family = platform_family(platform or sys.platform)
        self._strategies = strategies
        self._make_profile_dir = make_profile_dir
        self._remove_profile_dir = remove_profile_dir

    def strategies(self) -> list[LaunchStrategy]:
        """The ordered strategies applicable to this launcher's platform."""
        return [s for s in self._strategies if s.family == self._family]

    async def open(self, url: str) -> bool:
        """Try every app-mode strategy in order, then the default browser.

        Returns False only when the default browser failed as well.
        """
        screen = await probe_screen_size(self._family, self._run)
        geometry = compute_geometry(
            self._settings.window_width, self._settings.window_height, screen,
        )
        # Created on first use; removed again unless a browser is using it
        profile_dir = None

        for strategy in self.strategies():
            if profile_dir is None:
                profile_dir = self._make_profile_dir()
            argv = strategy.build_argv(url, geometry, profile_dir)
            try:
                started = await self._spawn(argv)
            except OSError as exc:
                logger.debug("Strategy %s raised: %s", strategy.name, exc)
                started = False
            if started:
                logger.info("Opened %s in app mode via %s", url, strategy.name)
                return True
            logger.debug("Strategy %s failed", strategy.name)

        if profile_dir is not None:
            self._remove_profile_dir(profile_dir)

        logger.info("No app-mode browser available, using the default browser")
        if await self._open_default(url):
            return True

        logger.warning("Could not open a browser for %s", url)
        return False
