"""
RunScore CLI entrypoint.

This CLI is intended for quick local demos and debugging without a frontend.
It delegates all recommendation logic to `runscore.recommender.engine`.
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from runscore.config.settings import get_settings
from runscore.core.cache import FileCache
from runscore.core.env import resolve_project_path
from runscore.core.errors import RunScoreError
from runscore.core.logging import configure_logging
from runscore.core.time import local_hour, parse_datetime
from runscore.domain.models import TimeOfDay, WeatherContext, time_of_day_for_hour
from runscore.ingestion.weather_client import WeatherClient
from runscore.recommender.engine import create_engine
from runscore.scoring.explain import category_label, one_line_summary


def _weather_client() -> WeatherClient:
    settings = get_settings()
    cache = FileCache(
        resolve_project_path(settings.cache.dir),
        enabled=settings.cache.enabled,
        default_ttl_seconds=settings.cache.default_ttl_seconds,
    )
    return WeatherClient(settings, cache)


def _print_weather(weather: WeatherContext) -> None:
    print(
        f"{weather.icon} {weather.temperature_c:.1f}°C {weather.description}  "
        f"wind={weather.wind_speed_kmh:.0f} km/h humidity={weather.humidity_pct:.0f}%"
    )
    print(f"Advice: {weather.advisory_text}")


def _cmd_weather(args: argparse.Namespace) -> int:
    weather = _weather_client().current_weather(lat=float(args.lat), lon=float(args.lon))
    if args.json:
        print(json.dumps(weather.model_dump(mode="json"), ensure_ascii=False, indent=2))
        return 0
    _print_weather(weather)
    return 0


def _cmd_recommend(args: argparse.Namespace) -> int:
    """Handle the `recommend` subcommand."""
    settings = get_settings()
    count = int(args.count) if args.count is not None else settings.scoring.default_count

    if args.lat is not None and args.lon is not None:
        weather = _weather_client().current_weather(lat=float(args.lat), lon=float(args.lon))
    elif args.temperature is not None:
        weather = WeatherContext(
            temperature_c=float(args.temperature),
            description=args.description or "",
            wind_speed_kmh=float(args.wind),
            humidity_pct=float(args.humidity),
        )
    else:
        raise SystemExit("recommend: pass either --lat/--lon or --temperature")

    tz_name = settings.app.timezone
    if args.time_of_day:
        bucket: TimeOfDay | str = args.time_of_day
    elif args.hour is not None:
        bucket = time_of_day_for_hour(int(args.hour))
    else:
        # `--at` lets demos replay a moment; naive timestamps are read in the app timezone.
        at = parse_datetime(args.at, tz_name) if args.at else None
        bucket = time_of_day_for_hour(local_hour(tz_name, at))

    engine = create_engine(args.user, settings=settings)
    results = engine.generate_recommendations(weather, bucket, count)

    if args.json:
        payload = [r.model_dump(mode="json") for r in results]
        print(json.dumps(payload, ensure_ascii=False, indent=2))
        return 0

    _print_weather(weather)
    if not results:
        print("No routes to recommend right now.")
        return 0
    print("Top routes:")
    for i, rec in enumerate(results, start=1):
        route = rec.route
        label = category_label(rec.recommendation_type).label
        print(
            f"{i:>2}. [{label}] {route.name}  {route.distance_km:.1f} km, ~{route.estimated_duration_min} min, "
            f"{route.difficulty_level.name.lower()}  match={round(rec.confidence_score * 100)}%"
        )
        print(f"    {rec.reason or 'Overall recommendation'}")
        if args.verbose:
            print(f"    {one_line_summary(rec.breakdown)}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the RunScore CLI."""
    parser = argparse.ArgumentParser(prog="runscore")
    sub = parser.add_subparsers(dest="command", required=True)

    w = sub.add_parser("weather", help="Show current conditions and running advice for a location.")
    w.add_argument("--lat", required=True, type=float)
    w.add_argument("--lon", required=True, type=float)
    w.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    w.set_defaults(func=_cmd_weather)

    rec = sub.add_parser("recommend", help="Recommend running routes for the current conditions.")
    rec.add_argument("--user", default="guest", help="User id (guest ids have no preference history)")
    rec.add_argument("--count", type=int, default=None)
    rec.add_argument("--lat", type=float, default=None, help="Fetch live weather for this location")
    rec.add_argument("--lon", type=float, default=None)
    rec.add_argument("--temperature", type=float, default=None, help="°C; use instead of --lat/--lon")
    rec.add_argument("--humidity", type=float, default=50.0)
    rec.add_argument("--wind", type=float, default=0.0, help="km/h")
    rec.add_argument("--description", type=str, default=None)
    rec.add_argument("--time-of-day", dest="time_of_day", choices=[t.value for t in TimeOfDay], default=None)
    rec.add_argument("--hour", type=int, default=None, help="Local hour 0..23 (default: now)")
    rec.add_argument("--at", type=str, default=None, help="ISO datetime to bucket instead of now")
    rec.add_argument("--json", action="store_true", help="Output machine-readable JSON")
    rec.add_argument("-v", "--verbose", action="store_true", help="Show per-component scores")
    rec.set_defaults(func=_cmd_recommend)
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint callable used by `python -m runscore.cli`."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    func: Any = getattr(args, "func")
    try:
        return int(func(args))
    except (RunScoreError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
