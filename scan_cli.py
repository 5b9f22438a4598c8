#!/usr/bin/env python
"""Command line client for the Privacy Advisor scan service."""
import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from privacy_advisor.api import (
    ApiException,
    NotFoundError,
    RateLimitExhaustedError,
    ScanApiClient,
)
from privacy_advisor.persistence import ScanHistory
from privacy_advisor.polling import JobState, PollingController, ScanJob
from privacy_advisor.scoring import ReportView, SeverityFilter, build_report_view, export_report
from privacy_advisor.utils import ClientSettings, get_config_path


def setup_logging(level: str = "INFO"):
    """Setup logging configuration."""
    Path("logs").mkdir(exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('logs/scan_client.log'),
            logging.StreamHandler(sys.stderr)
        ]
    )


def load_settings(config: str = None) -> ClientSettings:
    """Settings from an explicit YAML file, ./config/client.yaml, or the environment."""
    if config:
        return ClientSettings.from_yaml(config)
    default_path = get_config_path("client.yaml")
    if default_path.exists():
        return ClientSettings.from_yaml(str(default_path))
    return ClientSettings()


def print_progress(job: ScanJob) -> None:
    print(f"[{job.state.value:>7}] {job.progress:3d}%", flush=True)


def print_report(view: ReportView) -> None:
    score = "n/a" if view.score is None else f"{view.score:g}"
    print(f"\n{view.domain}: {view.label or view.score_label} ({score}, grade {view.grade or '-'})")
    print(f"Data sharing: {view.data_sharing.value}  "
          f"(trackers {view.stats.tracker_count}, third-party {view.stats.thirdparty_count}, "
          f"cookies {view.stats.cookie_count})")
    print(f"TLS/HTTPS: {view.tls.display}")

    print("\nScore breakdown:")
    for row in view.breakdown:
        sign = "+" if row.points > 0 else ""
        print(f"  {row.category:<14} {row.finding:<40} {sign}{row.points}")

    for group in view.categories:
        marker = "-" if group.expanded else "+"
        print(f"\n{marker} {group.name} ({len(group)}: {group.high} high, {group.medium} medium, {group.low} low)")
        if group.expanded:
            for item in group.items:
                print(f"    [{item.severity}] {item.title}")

    print(f"\nShare: {view.share_url}")


async def run_scan(api: ScanApiClient, settings: ClientSettings, url: str, force: bool) -> int:
    logger = logging.getLogger("scan_cli")
    queued = await api.start_url_scan(url, force=force or None)
    print(f"Scan {queued.scan_id} queued (report slug {queued.slug})")

    controller = PollingController(api.get_scan_status, queued.scan_id, target=url)
    try:
        job = await controller.run(print_progress)
    except NotFoundError as e:
        print(f"Scan not found: {e.message}. Start a new scan.", file=sys.stderr)
        return 2
    except RateLimitExhaustedError as e:
        print(f"{e.message}", file=sys.stderr)
        return 3

    if job is None or job.state is JobState.ERROR:
        print("Scan failed. Please try again.", file=sys.stderr)
        return 1

    slug = job.slug or queued.slug
    logger.info(f"Scan {queued.scan_id} finished, fetching report {slug}")
    return await show_report(api, settings, slug)


async def show_report(
    api: ScanApiClient,
    settings: ClientSettings,
    slug: str,
    as_json: bool = False,
    severity: str = SeverityFilter.ALL.value
) -> int:
    report = await api.get_report(slug)
    view = build_report_view(report, app_origin=settings.app_origin)
    if as_json:
        print(json.dumps(export_report(report, SeverityFilter.parse(severity)), indent=2))
    else:
        print_report(view)

    ScanHistory(settings.history_path).add({
        "slug": view.slug,
        "domain": view.domain,
        "score": view.score,
        "label": view.label,
    })
    return 0


async def show_recent(api: ScanApiClient) -> int:
    recent = await api.get_recent_reports()
    for item in recent.items:
        print(f"{item.slug:<24} {item.domain:<32} {item.score:>5g} {item.label:<10} {item.evidence_count} findings")
    return 0


def show_history(settings: ClientSettings) -> int:
    for entry in ScanHistory(settings.history_path).read():
        score = "n/a" if entry.score is None else f"{entry.score:g}"
        print(f"{entry.scanned_at}  {entry.domain:<32} {score:>5} {entry.slug}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Privacy Advisor scan client")
    parser.add_argument("--config", help="YAML settings file")
    sub = parser.add_subparsers(dest="command", required=True)

    scan = sub.add_parser("scan", help="Scan a URL and print the report")
    scan.add_argument("url")
    scan.add_argument("--force", action="store_true", help="Bypass deduplication")

    report = sub.add_parser("report", help="Print an existing report")
    report.add_argument("slug")
    report.add_argument("--json", action="store_true", help="Print the evidence as JSON")
    report.add_argument(
        "--severity",
        choices=[f.value for f in SeverityFilter],
        default=SeverityFilter.ALL.value,
        help="Evidence included in the JSON export"
    )

    sub.add_parser("recent", help="List recent public reports")
    sub.add_parser("history", help="List reports opened on this machine")
    return parser


async def main(argv=None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    settings = load_settings(args.config)
    setup_logging(settings.log_level)
    logger = logging.getLogger("scan_cli")

    if args.command == "history":
        return show_history(settings)

    try:
        async with ScanApiClient.from_settings(settings) as api:
            logger.info(f"Using API {api.version.value} at {settings.api_origin}")
            if args.command == "scan":
                return await run_scan(api, settings, args.url, args.force)
            if args.command == "report":
                return await show_report(api, settings, args.slug, args.json, args.severity)
            return await show_recent(api)
    except NotFoundError as e:
        print(f"Not found: {e.message}", file=sys.stderr)
        return 2
    except ValidationError as e:
        print(f"Invalid input: {e.errors()[0]['msg']}", file=sys.stderr)
        return 1
    except ApiException as e:
        logger.error(f"Request failed: {e}", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cli():
    sys.exit(asyncio.run(main()))


if __name__ == "__main__":
    cli()
