"""Poll daemon: refreshes the weather cache and periodically notifies.

Two clocks share one loop. Every refresh interval the enabled categories
are fetched; whenever a full notify interval has elapsed since the last
notification, the cached current conditions and alerts are handed to the
notification sink.

Usage:
    weathd --daemonize                        # poll with saved settings
    weathd -d --refresh-interval 5m --notify-interval 1h
    weathd --terminate                        # stop running daemon
    weathd --status
"""

import contextlib
import json
import logging
import os
import signal
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path

from weathd.config.defaults import LOG_FILE, PID_FILE, STATE_FILE
from weathd.config.duration import format_duration
from weathd.config.schema import ApiRequestConfig, DaemonConfig
from weathd.ingest.weather_client import ProviderError, WeatherClient
from weathd.models.common import Category
from weathd.models.weather import DataContractViolation, parse_alerts, parse_current
from weathd.reporting.formatters import CURRENT_SUMMARY, format_alert, format_current
from weathd.reporting.notifier import ConsoleNotifier, DesktopNotifier, NotificationError

logger = logging.getLogger(__name__)

STOP_TIMEOUT = 60  # seconds to wait for graceful shutdown before SIGKILL


class DaemonAlreadyRunning(Exception):
    """Another daemon holds the PID file of this working directory."""

    def __init__(self, pid: int, verified: bool = True):
        state = "already running" if verified else "may be running, can't verify"
        super().__init__(f"Daemon {state} (pid {pid})")
        self.pid = pid


class PollDaemon:
    """Runs the refresh/notify loop with PID-file single-instance enforcement."""

    def __init__(
        self,
        client: WeatherClient,
        api_config: ApiRequestConfig,
        daemon_config: DaemonConfig,
        notifier: DesktopNotifier | ConsoleNotifier,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
        log_to_file: bool = False,
    ):
        self.client = client
        self.api_config = api_config
        self.config = daemon_config
        self.notifier = notifier
        self._clock = clock
        self._sleep = sleep
        self._log_to_file = log_to_file
        self._log_handler: logging.Handler | None = None

        self.pid_file = Path(daemon_config.working_directory) / PID_FILE
        self.state_file = Path(daemon_config.working_directory) / STATE_FILE
        self._refresh_seconds = daemon_config.refresh_interval.total_seconds()
        self._notify_seconds = daemon_config.notify_interval.total_seconds()

        self._running = False
        self._last_notify = 0.0
        self._started_at: str | None = None
        self._iterations = 0
        self._fetch_failures = 0
        self._notifications = 0
        self._notify_failures = 0

    def start(self) -> None:
        """Start the daemon loop. Blocks until stopped by a signal."""
        self._check_not_already_running()
        self._write_pid()
        self._attach_log_file()
        self._setup_signals()
        self._running = True
        self._started_at = datetime.now(UTC).isoformat()

        logger.info(
            "Daemon started: refresh=%s notify=%s pid=%d location=%s",
            format_duration(self.config.refresh_interval),
            format_duration(self.config.notify_interval),
            os.getpid(),
            self.api_config.location,
        )
        if self._notify_seconds < self._refresh_seconds:
            logger.warning(
                "Notify interval %s is shorter than refresh interval %s; "
                "notifications will follow the refresh rate",
                format_duration(self.config.notify_interval),
                format_duration(self.config.refresh_interval),
            )

        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("Daemon interrupted by keyboard")
        except DataContractViolation as e:
            logger.critical("Provider data no longer matches expected shape: %s", e)
            raise
        finally:
            self._cleanup()

    def stop(self) -> None:
        self._running = False

    def _loop(self) -> None:
        self._last_notify = self._clock()
        while self._running:
            iteration_start = self._clock()
            self.run_iteration()
            self._save_state()
            self._pace(iteration_start)

    def _pace(self, iteration_start: float) -> None:
        """Sleep until the next refresh deadline; overruns are not replayed."""
        deadline = iteration_start + self._refresh_seconds
        # Sleep in short slices so a stop signal is honoured promptly
        while self._running:
            remaining = deadline - self._clock()
            if remaining <= 0:
                break
            self._sleep(min(1.0, remaining))

    def run_iteration(self) -> None:
        """Fetch all enabled categories, then notify if the notify clock is due."""
        self._iterations += 1
        report = self.client.fetch_all(self.api_config)

        for error in report.errors():
            self._fetch_failures += 1
            if isinstance(error, ProviderError):
                logger.warning(
                    "Get %s failed with provider error %s: %s",
                    error.category, error.code, error.message,
                )
            else:
                logger.warning("Get %s failed: %s", error.category, error)

        now = self._clock()
        if now - self._last_notify >= self._notify_seconds:
            self._last_notify = now
            self.notify()

    def notify(self) -> None:
        """Hand the cached current conditions and alerts to the sink.

        Empty cache slots are skipped. Forecasts are never notified.
        """
        current = self.client.cached_current()
        if current is not None:
            conditions = parse_current(current.payload)
            self._display(CURRENT_SUMMARY, format_current(conditions))

        alerts = self.client.cached_alerts()
        if alerts is not None:
            for alert in parse_alerts(alerts.payload):
                self._display(*format_alert(alert))

    def _display(self, summary: str, body: str) -> None:
        try:
            self.notifier.display(summary, body)
            self._notifications += 1
        except NotificationError as e:
            self._notify_failures += 1
            logger.warning("Failed to send notification %r: %s", summary, e)

    def _attach_log_file(self) -> None:
        if not self._log_to_file:
            return
        handler = logging.FileHandler(self.pid_file.parent / LOG_FILE)
        handler.setLevel(logging.INFO)
        handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logging.getLogger().addHandler(handler)
        self._log_handler = handler

    def _detach_log_file(self) -> None:
        if self._log_handler is None:
            return
        logging.getLogger().removeHandler(self._log_handler)
        self._log_handler.close()
        self._log_handler = None

    def _setup_signals(self) -> None:
        """Handle SIGTERM and SIGINT for graceful shutdown."""
        def _stop(signum: int, frame: object) -> None:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            self._running = False

        signal.signal(signal.SIGTERM, _stop)
        signal.signal(signal.SIGINT, _stop)

    def _check_not_already_running(self) -> None:
        """Only one poll loop may run per working directory."""
        pid = _read_pid(self.pid_file)
        if pid is None:
            self.pid_file.unlink(missing_ok=True)
            return
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            logger.info("Removing stale PID file for pid %d", pid)
            self.pid_file.unlink(missing_ok=True)
            return
        except PermissionError:
            raise DaemonAlreadyRunning(pid, verified=False) from None
        raise DaemonAlreadyRunning(pid)

    def _write_pid(self) -> None:
        self.pid_file.parent.mkdir(parents=True, exist_ok=True)
        self.pid_file.write_text(str(os.getpid()))

    def _save_state(self) -> None:
        """Persist daemon stats for status reporting."""
        last_fetched = {}
        for category in Category:
            entry = self.client.cached(category)
            last_fetched[category.value] = entry.fetched_at_iso if entry else None

        state = {
            "pid": os.getpid(),
            "started_at": self._started_at,
            "refresh_interval": format_duration(self.config.refresh_interval),
            "notify_interval": format_duration(self.config.notify_interval),
            "iterations": self._iterations,
            "fetch_failures": self._fetch_failures,
            "notifications": self._notifications,
            "notify_failures": self._notify_failures,
            "last_fetched": last_fetched,
            "last_update": datetime.now(UTC).isoformat(),
        }
        self.state_file.parent.mkdir(parents=True, exist_ok=True)
        self.state_file.write_text(json.dumps(state, indent=2))

    def _cleanup(self) -> None:
        """Remove PID file on exit."""
        self._running = False
        self.pid_file.unlink(missing_ok=True)
        self._save_state()
        logger.info(
            "Daemon stopped: %d iterations, %d fetch failures, %d notifications",
            self._iterations, self._fetch_failures, self._notifications,
        )
        self._detach_log_file()


def _read_pid(pid_file: Path) -> int | None:
    try:
        return int(pid_file.read_text().strip())
    except FileNotFoundError:
        return None
    except ValueError:
        logger.warning("Corrupt PID file %s", pid_file)
        return None


def _pid_alive(pid: int) -> bool:
    """True if a process with this pid exists, including one we can't signal."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    except PermissionError:
        return True
    return True


def _wait_for_exit(
    pid: int, timeout: float, clock: Callable[[], float], sleep: Callable[[float], None]
) -> bool:
    deadline = clock() + timeout
    while _pid_alive(pid):
        remaining = deadline - clock()
        if remaining <= 0:
            return False
        sleep(min(1.0, remaining))
    return True


def stop_daemon(
    working_directory: str | Path,
    timeout: float = STOP_TIMEOUT,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> int:
    """SIGTERM the daemon recorded in the PID file, then SIGKILL after timeout.

    Stale and corrupt PID files are removed. Returns a process exit code.
    """
    pid_file = Path(working_directory) / PID_FILE
    pid = _read_pid(pid_file)
    if pid is None:
        if not pid_file.exists():
            print("No daemon running (no PID file found)")
            return 1
        print(f"Removing corrupt PID file {pid_file}")
        pid_file.unlink(missing_ok=True)
        return 1

    if not _pid_alive(pid):
        print(f"Daemon not running (stale pid {pid}), cleaning up")
        pid_file.unlink(missing_ok=True)
        return 0

    print(f"Stopping daemon (pid {pid})...")
    try:
        os.kill(pid, signal.SIGTERM)
    except PermissionError:
        print(f"Not permitted to signal pid {pid}")
        return 1

    if _wait_for_exit(pid, timeout, clock, sleep):
        print("Daemon stopped")
    else:
        print(f"Daemon still alive after {timeout}s, sending SIGKILL")
        with contextlib.suppress(ProcessLookupError):
            os.kill(pid, signal.SIGKILL)
    pid_file.unlink(missing_ok=True)
    return 0


def daemon_status(working_directory: str | Path) -> int:
    """Print daemon status from state file."""
    working_directory = Path(working_directory)
    state_file = working_directory / STATE_FILE
    pid_file = working_directory / PID_FILE

    if not state_file.exists():
        print("No daemon state found")
        pid = _read_pid(pid_file)
        if pid is not None:
            print(f"  (but PID file exists: {pid})")
        return 1

    try:
        state = json.loads(state_file.read_text())
    except json.JSONDecodeError:
        print(f"Corrupt state file {state_file}")
        return 1
    pid = state.get("pid", "?")

    running = isinstance(pid, int) and _pid_alive(pid)
    # The state file outlives the process; only a live PID file means running
    running = running and pid_file.exists()

    print(f"Daemon {'running' if running else 'stopped'}")
    print(f"  PID: {pid}")
    print(f"  Refresh interval: {state.get('refresh_interval', '?')}")
    print(f"  Notify interval: {state.get('notify_interval', '?')}")
    print(f"  Started: {state.get('started_at', '?')}")
    print(f"  Iterations: {state.get('iterations', 0)}")
    print(f"  Fetch failures: {state.get('fetch_failures', 0)}")
    print(f"  Notifications: {state.get('notifications', 0)}")
    for category, fetched in (state.get("last_fetched") or {}).items():
        print(f"  Last {category}: {fetched or 'never'}")
    print(f"  Last update: {state.get('last_update', '?')}")
    return 0
