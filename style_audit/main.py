"""Main entry point for the style audit CLI."""

import argparse
import asyncio
import json
import sys
from pathlib import Path

import structlog

from .capture import StyleTreeCapture, load_snapshot, save_snapshot
from .config import get_settings
from .engine.errors import SnapshotError
from .engine.models import IssueSeverity, StyleTree
from .engine.session import AuditResult, StyleAuditEngine
from .utils.logging import configure_logging

logger = structlog.get_logger()

SEVERITY_MARKERS = {
    IssueSeverity.CRITICAL: "🔴",
    IssueSeverity.WARNING: "🟡",
    IssueSeverity.INFO: "🔵",
}


async def load_tree(snapshot: str | None, url: str | None, browser: str = "chromium") -> StyleTree:
    """Load a snapshot file, or capture a live page."""
    if snapshot:
        return load_snapshot(snapshot)
    capture = StyleTreeCapture()
    return await capture.capture_url(url, browser_type=browser)


def print_summary(result: AuditResult) -> None:
    """Print a human readable summary of an audit."""
    summary = result.summary
    print("\n" + "=" * 50)
    print("STYLE AUDIT SUMMARY")
    print("=" * 50)
    if result.url:
        print(f"URL: {result.url}")
    print(f"Elements analyzed: {summary['elements_analyzed']}")
    print(f"Unique text styles: {summary['unique_styles']}")
    print(f"Total issues: {summary['total_issues']}")
    for severity, issues in result.by_severity().items():
        print(f"  {SEVERITY_MARKERS[severity]} {severity.value}: {len(issues)}")
    print(f"Automatable fixes: {summary['automatable']}")
    if result.failed_rule_packs:
        print(f"Failed rule packs: {', '.join(result.failed_rule_packs)}")
    print("=" * 50 + "\n")

    for issue in result.by_severity()[IssueSeverity.CRITICAL]:
        target = issue.affected_elements[0].selector if issue.affected_elements else "-"
        print(f"{SEVERITY_MARKERS[issue.severity]} [{issue.rule_type.value}] {target}: {issue.description}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Audit a rendered page's typography, contrast and layout"
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        "--snapshot", "-s",
        help="Path to a style tree snapshot (JSON)"
    )
    source.add_argument(
        "--url", "-u",
        help="URL of a page to capture and audit"
    )
    parser.add_argument(
        "--browser",
        default="chromium",
        choices=["chromium", "firefox", "webkit"],
        help="Browser used with --url (default: chromium)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Write the full JSON report to this file"
    )
    parser.add_argument(
        "--save-snapshot",
        help="Also write the captured style tree to this file"
    )
    parser.add_argument(
        "--no-aaa",
        action="store_true",
        help="Only report WCAG AA contrast failures"
    )
    parser.add_argument(
        "--fail-on-critical",
        action="store_true",
        help="Exit with status 1 when critical issues are found"
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Render logs as JSON"
    )
    parser.add_argument(
        "--log-level",
        help="Log level (default: from settings)"
    )
    return parser


def cli(argv: list[str] | None = None) -> int:
    """Command-line interface.

    Returns:
        Process exit code
    """
    args = build_parser().parse_args(argv)

    settings = get_settings()
    if args.no_aaa:
        settings = settings.model_copy(update={"check_aaa": False})

    configure_logging(
        level=args.log_level or settings.log_level,
        json_format=args.json_logs or settings.json_logs,
    )

    try:
        tree = asyncio.run(load_tree(args.snapshot, args.url, args.browser))
    except SnapshotError as e:
        logger.error("Could not load style tree", error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 2

    if args.save_snapshot:
        save_snapshot(tree, args.save_snapshot)

    result = StyleAuditEngine(settings).run_audit(tree)

    if args.output:
        output_path = Path(args.output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w") as f:
            json.dump(result.to_dict(), f, indent=2, default=str)
        logger.info("Report saved", path=str(output_path))

    print_summary(result)

    if args.fail_on_critical and result.has_critical_issues:
        return 1
    return 0


def main() -> None:
    sys.exit(cli())


if __name__ == "__main__":
    main()
