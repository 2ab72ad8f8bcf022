"""CLI entrypoint for summarizing, fetching, and watching emergency reports."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Any, List

from pydantic import ValidationError

from .client import EmergencyApiClient, unwrap_reports_payload
from .config import RollupConfig
from .scheduler import RefreshOptions, start_refresh_loop
from .settings import load_config_from_env, load_environment
from .view import build_summary_view, summary_payload


def _print_payload(payload: dict) -> None:
    print(json.dumps(payload, indent=2, ensure_ascii=False))


def _resolve_config(args: argparse.Namespace) -> RollupConfig:
    load_environment()
    return load_config_from_env(
        target_province=args.province,
        api_url=args.api_url,
        timeout_seconds=args.timeout,
        refresh_interval_minutes=getattr(args, "interval", None),
    )


def load_reports_file(path: Path) -> Any:
    payload = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(payload, dict):
        result = unwrap_reports_payload(payload)
        return result.data if result.success else None
    return payload


def _fetch_and_summarize(config: RollupConfig) -> tuple[dict, bool]:
    result = EmergencyApiClient.from_config(config).fetch()
    # A failed fetch is surfaced as "no data" rather than an error.
    view = build_summary_view(result.data if result.success else None, config=config)
    payload = summary_payload(view)
    if not result.success:
        payload["error"] = result.error
    return payload, result.success


def cmd_summarize(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    path = Path(args.input)
    try:
        data = load_reports_file(path)
    except (OSError, ValueError) as exc:
        print(f"Failed to read reports from {path}: {exc}")
        return 1
    _print_payload(summary_payload(build_summary_view(data, config=config)))
    return 0


def cmd_fetch(args: argparse.Namespace) -> int:
    config = _resolve_config(args)
    payload, ok = _fetch_and_summarize(config)
    _print_payload(payload)
    return 0 if ok else 1


def cmd_watch(args: argparse.Namespace) -> int:
    config = _resolve_config(args)

    def refresh() -> None:
        payload, _ = _fetch_and_summarize(config)
        print(
            json.dumps(
                {
                    "state": payload["state"],
                    "counts": payload["counts"],
                    "top_municipalities": [
                        {"name": m["name"], "total_people": m["total_people"], "severity": m["severity"]}
                        for m in payload["municipalities"][: args.top]
                    ],
                    "error": payload.get("error"),
                },
                ensure_ascii=False,
            ),
            flush=True,
        )

    stats = start_refresh_loop(
        refresh=refresh,
        options=RefreshOptions(
            interval_minutes=config.refresh_interval_minutes,
            max_runs=args.max_runs,
            max_consecutive_failures=args.max_failures,
        ),
    )
    return 1 if stats.runs and stats.failures == stats.runs else 0


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--province", help="Target province (default: cebu or EMERGENCY_TARGET_PROVINCE)")
    parser.add_argument("--api-url", help="Emergency reports API endpoint")
    parser.add_argument("--timeout", type=int, help="HTTP timeout in seconds")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Municipality/barangay rollup of emergency reports")
    parser.add_argument("--log-level", default="WARNING", help="Logging level for stderr output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    summarize_parser = subparsers.add_parser("summarize", help="Summarize reports from a local JSON file")
    summarize_parser.add_argument("--input", required=True, help="Path to a JSON list or API envelope")
    _add_common_arguments(summarize_parser)
    summarize_parser.set_defaults(func=cmd_summarize)

    fetch_parser = subparsers.add_parser("fetch", help="Fetch reports from the API and summarize them")
    _add_common_arguments(fetch_parser)
    fetch_parser.set_defaults(func=cmd_fetch)

    watch_parser = subparsers.add_parser("watch", help="Re-fetch and summarize on an interval")
    _add_common_arguments(watch_parser)
    watch_parser.add_argument("--interval", type=int, help="Refresh interval in minutes")
    watch_parser.add_argument("--max-runs", type=int, help="Stop after N refreshes")
    watch_parser.add_argument("--max-failures", type=int, help="Stop after N consecutive failed refreshes")
    watch_parser.add_argument("--top", type=int, default=5, help="Municipalities to print per refresh")
    watch_parser.set_defaults(func=cmd_watch)

    return parser


def main(argv: List[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except ValidationError as exc:
        print("Configuration errors:")
        for err in exc.errors():
            loc = ".".join(str(x) for x in err.get("loc", []))
            msg = err.get("msg", "invalid value")
            print(f"- {loc}: {msg}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
