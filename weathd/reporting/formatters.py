"""Text renderers for cached weather payloads."""

from weathd.models.weather import CurrentConditions, ForecastDay, WeatherAlert

CURRENT_SUMMARY = "Current Weather"


def _num(value: float | None) -> str:
    if value is None:
        return "n/a"
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_current(c: CurrentConditions) -> str:
    """Multi-line body used for both notifications and console output."""
    lines = [
        f"Current Temperature (Imperial): {_num(c.temp_f)}°F, "
        f"Feels like: {_num(c.feelslike_f)}°F",
        f"Current Temperature (Metric): {_num(c.temp_c)}°C, "
        f"Feels like: {_num(c.feelslike_c)}°C",
        f"Wind Speed (Imperial): {_num(c.wind_mph)} mph, from {c.wind_dir}",
        f"Wind Speed (Metric): {_num(c.wind_kph)} kph, from {c.wind_dir}",
    ]
    if c.windchill_f is not None or c.windchill_c is not None:
        lines.append(f"Wind Chill (Imperial): {_num(c.windchill_f)}°F")
        lines.append(f"Wind Chill (Metric): {_num(c.windchill_c)}°C")
    lines += [
        f"Humidity: {_num(c.humidity)}%",
        f"Pressure (Imperial): {_num(c.pressure_in)}in",
        f"Pressure (Metric): {_num(c.pressure_mb)}mb",
        f"Condition: {c.condition.text}",
    ]
    return "\n".join(lines)


def format_alert(alert: WeatherAlert) -> tuple[str, str]:
    """Return (summary, body) for one alert record."""
    return alert.headline, alert.instruction or ""


def format_forecast_day(index: int, day: ForecastDay) -> str:
    d = day.day
    return "\n".join([
        f"Weather in {index + 1} day(s) ({day.date})",
        f"Temperature Average: {_num(d.avgtemp_f)}°F, {_num(d.avgtemp_c)}°C",
        f"Temperature High: {_num(d.maxtemp_f)}°F, {_num(d.maxtemp_c)}°C",
        f"Temperature Low: {_num(d.mintemp_f)}°F, {_num(d.mintemp_c)}°C",
        f"Max Wind Speed: {_num(d.maxwind_mph)} mph, {_num(d.maxwind_kph)} kph",
        f"Average Humidity: {_num(d.avghumidity)}%",
        f"Chance of Rain: {_num(d.daily_chance_of_rain)}%",
        f"Chance of Snow: {_num(d.daily_chance_of_snow)}%",
        f"Total Precipitation: {_num(d.totalprecip_in)} in, "
        f"{_num(d.totalprecip_mm)} mm",
        f"Condition: {d.condition.text}",
    ])


def format_forecast(days: list[ForecastDay], limit: int | None = None) -> str:
    """Render up to `limit` forecast days, separated by blank lines."""
    if limit is not None:
        days = days[:limit]
    return "\n\n".join(format_forecast_day(i, d) for i, d in enumerate(days))


def banner(title: str, width: int = 32) -> str:
    return f"{title:=^{width}}"
