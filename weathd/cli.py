"""CLI entry point for the weather notification daemon."""

import argparse
import logging
from pathlib import Path

from pydantic import ValidationError

from weathd.config.defaults import default_working_directory
from weathd.config.duration import resolve_duration
from weathd.config.loader import (
    load_api_config,
    load_api_key,
    load_daemon_config,
    save_config,
)
from weathd.config.schema import ApiRequestConfig, DaemonConfig, RequestTypes
from weathd.daemon import DaemonAlreadyRunning, PollDaemon, daemon_status, stop_daemon
from weathd.ingest.weather_client import FetchReport, WeatherClient
from weathd.models.location import City
from weathd.models.weather import parse_alerts, parse_current, parse_forecast
from weathd.reporting.formatters import (
    CURRENT_SUMMARY,
    banner,
    format_current,
    format_forecast,
)
from weathd.reporting.notifier import ConsoleNotifier, DesktopNotifier


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="weathd",
        description="Poll weatherapi.com and show weather notifications",
    )
    parser.add_argument(
        "-d", "--daemonize", action="store_true",
        help="Keep polling and send desktop notifications",
    )
    parser.add_argument("-a", "--api-key", help="weatherapi.com API key")
    parser.add_argument(
        "--working-directory", type=Path,
        help="Config, PID and log directory (default ~/.weathd)",
    )
    parser.add_argument(
        "-t", "--terminate", action="store_true",
        help="Stop a running daemon",
    )
    parser.add_argument(
        "-s", "--save-to-config", action="store_true",
        help="Persist the effective settings to the working directory",
    )
    parser.add_argument(
        "--status", action="store_true", help="Show daemon status and exit"
    )

    # Request selection; unset flags keep the persisted value
    parser.add_argument(
        "--current-weather", action=argparse.BooleanOptionalAction, default=None
    )
    parser.add_argument(
        "--forecast", action=argparse.BooleanOptionalAction, default=None
    )
    parser.add_argument(
        "--alerts", action=argparse.BooleanOptionalAction, default=None
    )
    parser.add_argument("--city", help="Query by city name")
    parser.add_argument("--days", type=int, help="Forecast days (1-14)")
    parser.add_argument(
        "--hourly", action=argparse.BooleanOptionalAction, default=None,
        help="Request hourly detail",
    )

    parser.add_argument(
        "--refresh-interval", help="Time between fetches, e.g. 10m0s"
    )
    parser.add_argument(
        "--notify-interval", help="Time between notifications, e.g. 6h"
    )
    parser.add_argument(
        "--console", action="store_true",
        help="Print daemon notifications to stdout instead of the desktop",
    )
    parser.add_argument("--log-level", default="INFO")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    working_directory = args.working_directory or default_working_directory()

    if args.status:
        return daemon_status(working_directory)

    if args.terminate:
        stop_daemon(working_directory)
        if not args.daemonize:
            return 0

    api_key = args.api_key or load_api_key(working_directory)
    if not api_key:
        print(
            "No API key found. Pass one with -a/--api-key "
            "(add -s to save it to the working directory)"
        )
        return 1

    try:
        api_config = _merge_api_config(load_api_config(working_directory), args)
        daemon_config = _merge_daemon_config(
            load_daemon_config(working_directory), args, working_directory
        )
    except ValidationError as e:
        print(f"Invalid settings: {e}")
        return 1

    if args.save_to_config:
        save_config(working_directory, api_key, api_config, daemon_config)

    client = WeatherClient(api_key)
    report = client.fetch_all(api_config)
    _print_report(client, report, api_config)

    if not args.daemonize:
        return 0

    notifier = ConsoleNotifier() if args.console else DesktopNotifier()
    daemon = PollDaemon(
        client, api_config, daemon_config, notifier, log_to_file=True
    )
    try:
        daemon.start()
    except DaemonAlreadyRunning as e:
        print(f"{e}. Stop it first: weathd --terminate")
        return 1
    return 0


def _merge_api_config(config: ApiRequestConfig, args: argparse.Namespace) -> ApiRequestConfig:
    requests = config.requests
    request_flags = {
        "current": args.current_weather,
        "forecast": args.forecast,
        "alerts": args.alerts,
    }
    overrides = {k: v for k, v in request_flags.items() if v is not None}
    if overrides:
        requests = RequestTypes(**{**requests.model_dump(), **overrides})

    data = {**config.model_dump(), "requests": requests.model_dump()}
    if args.city:
        data["location"] = City(name=args.city).model_dump()
    if args.days is not None:
        data["forecast_days"] = args.days
    if args.hourly is not None:
        data["include_hourly"] = args.hourly
    return ApiRequestConfig.model_validate(data)


def _merge_daemon_config(
    config: DaemonConfig, args: argparse.Namespace, working_directory: Path
) -> DaemonConfig:
    return DaemonConfig.model_validate({
        "working_directory": working_directory,
        "refresh_interval": resolve_duration(
            args.refresh_interval, config.refresh_interval
        ),
        "notify_interval": resolve_duration(
            args.notify_interval, config.notify_interval
        ),
    })


def _print_report(
    client: WeatherClient, report: FetchReport, config: ApiRequestConfig
) -> None:
    """One-shot textual output of whatever is now cached."""
    for error in report.errors():
        print(f"Get {error.category} failed with: {error}")

    current = client.cached_current()
    if current is not None:
        print(banner(CURRENT_SUMMARY))
        print(format_current(parse_current(current.payload)))
        print()

    alerts = client.cached_alerts()
    if alerts is not None:
        records = parse_alerts(alerts.payload)
        print(banner("Alerts"))
        if not records:
            print("No active alerts")
        for alert in records:
            print(alert.headline)
        print()

    forecast = client.cached_forecast()
    if forecast is not None:
        print(banner("Forecast"))
        print(format_forecast(parse_forecast(forecast.payload), config.forecast_days))
        print()
