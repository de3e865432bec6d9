"""Notification sinks: desktop popups via notify-send, or plain stdout."""

import subprocess

from weathd.reporting.formatters import banner

APP_NAME = "weathd"


class NotificationError(Exception):
    """Raised when a notification could not be displayed."""


class DesktopNotifier:
    """Shows notifications through the freedesktop `notify-send` tool."""

    def __init__(self, command: str = "notify-send", timeout: float = 10.0):
        self.command = command
        self.timeout = timeout

    def display(self, summary: str, body: str) -> None:
        args = [self.command, f"--app-name={APP_NAME}", summary, body]
        try:
            subprocess.run(args, check=True, capture_output=True, timeout=self.timeout)
        except FileNotFoundError as e:
            raise NotificationError(f"{self.command} not found") from e
        except subprocess.CalledProcessError as e:
            stderr = e.stderr.decode(errors="replace").strip() if e.stderr else ""
            raise NotificationError(
                f"{self.command} exited {e.returncode}: {stderr}"
            ) from e
        except (subprocess.TimeoutExpired, OSError) as e:
            raise NotificationError(str(e)) from e


class ConsoleNotifier:
    """Prints notifications to stdout."""

    def display(self, summary: str, body: str) -> None:
        print(banner(summary))
        if body:
            print(body)
        print()
