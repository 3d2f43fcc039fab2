"""Command-line interface for the SEO audit engine."""

import argparse
import asyncio
import json
import sys
from typing import Optional

from seoscan.config import Config, settings
from seoscan.crawler import WebCrawler
from seoscan.exceptions import SeoScanError
from seoscan.html_analyzer import HTMLAnalyzer
from seoscan.logging_config import get_logger, setup_logging
from seoscan.models import Audit, AuditStatus, HTMLAnalysisResult, to_dict
from seoscan.report import render_text
from seoscan.service import AuditService

logger = get_logger(__name__)


def _write_output(output: str, output_file: Optional[str]) -> None:
    if output_file:
        with open(output_file, "w") as f:
            f.write(output)
        print(f"Results written to {output_file}")
    else:
        print(output)


def print_audit(audit: Audit) -> None:
    """Print an audit's status and scores."""
    print(f"\n{'=' * 60}")
    print(f"Audit {audit.id}: {audit.display_name} ({audit.website_url})")
    print(f"{'=' * 60}")
    print(f"  Status: {AuditStatus(audit.status).value}")
    print(f"  Tier:   {audit.tier.value}")

    if audit.status == AuditStatus.FAILED and audit.error:
        print(f"  Error:  {audit.error}")

    if audit.status == AuditStatus.COMPLETED:
        s = audit.scores
        print(f"\n  Overall Score: {s.overall}/100")
        print(f"    Technical {s.technical} | Performance {s.performance} | Content {s.content}")
        print(f"    Mobile {s.mobile} | Security {s.security}")
        c = audit.issues_count
        print(f"\n  Issues: {c.critical} critical, {c.warnings} warnings, {c.opportunities} opportunities")
        if audit.html_analysis is None:
            print("  (HTML analysis unavailable; content score derived from provider scores)")

    print(f"{'=' * 60}\n")


def print_html_analysis(result: HTMLAnalysisResult) -> None:
    print(f"\n{'=' * 60}")
    print(f"HTML Analysis for: {result.url}")
    print(f"{'=' * 60}")
    print(f"  Status {result.status_code} | {result.content_length} bytes | {result.load_time}ms")
    print(f"  Words: {result.word_count} | Text/HTML ratio: {result.text_to_html_ratio}%")

    meta = result.meta_tags
    print(f"\n  Title ({meta.title_length} chars): {meta.title or '(missing)'}")
    print(f"  Description ({meta.description_length} chars): {meta.description or '(missing)'}")
    print(f"  H1: {len(result.headings.h1)} | Headings: {len(result.headings.structure)}")
    print(f"  Images: {result.images.total} ({result.images.without_alt} missing alt)")
    print(f"  Links: {result.links.internal_count} internal, {result.links.external_count} external")
    print(f"  Schema types: {', '.join(result.schema.schema_types) or '(none)'}")

    issues = result.facet_issues()
    if issues:
        print(f"\n  Issues ({len(issues)}):")
        for facet, issue in issues:
            print(f"    [{issue.severity.value}] {facet}: {issue.message}")

    print(f"{'=' * 60}\n")


async def _submit(service: AuditService, args) -> None:
    audit = await service.submit_audit(
        args.url, tier=args.tier, display_name=args.name, user_id=args.user
    )
    print(audit.id)


async def _run(service: AuditService, args) -> None:
    audit = await service.run_audit(args.audit_id)
    print_audit(audit)


async def _audit(service: AuditService, args) -> None:
    audit = await service.submit_audit(
        args.url, tier=args.tier, display_name=args.name, user_id=args.user
    )
    print(f"Submitted audit {audit.id}, running...")
    audit = await service.run_audit(audit.id)
    report = await service.get_report(audit.id)

    if args.output == "json":
        _write_output(json.dumps(to_dict(report), indent=2), args.output_file)
    else:
        print_audit(audit)
        print(render_text(report))


async def _report(service: AuditService, args) -> None:
    report = await service.get_report(args.audit_id)
    if args.output == "json":
        output = json.dumps(to_dict(report), indent=2)
    else:
        output = render_text(report)
    _write_output(output, args.output_file)


async def _list(service: AuditService, args) -> None:
    audits = await service.list_audits(args.user)
    if not audits:
        print("No audits found")
        return
    for audit in audits:
        print(
            f"{audit.id}  {AuditStatus(audit.status).value:<10}  "
            f"{audit.created_at:%Y-%m-%d %H:%M}  {audit.website_url}"
        )


async def _delete(service: AuditService, args) -> None:
    await service.delete_audit(args.audit_id)
    print(f"Deleted audit {args.audit_id}")


SERVICE_COMMANDS = {
    "submit": _submit,
    "run": _run,
    "audit": _audit,
    "report": _report,
    "list": _list,
    "delete": _delete,
}


async def _dispatch(args) -> None:
    config = Config.from_env()
    if args.store:
        config.store_backend = args.store
    service = AuditService(config=config)
    try:
        await SERVICE_COMMANDS[args.command](service, args)
    finally:
        service.close()


def service_command(args):
    """Run a storage-backed audit command."""
    try:
        asyncio.run(_dispatch(args))
    except SeoScanError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e.message}")
        sys.exit(1)


def analyze_command(args):
    """Run the HTML facets on a URL without storing an audit."""
    try:
        config = Config.from_env()
        analyzer = HTMLAnalyzer(
            crawler=WebCrawler(user_agent=config.user_agent, timeout=config.fetch_timeout)
        )
        result = asyncio.run(analyzer.analyze_url(args.url))
    except SeoScanError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"Error: {e.message}")
        sys.exit(1)

    if args.output == "json":
        _write_output(json.dumps(to_dict(result), indent=2), args.output_file)
    else:
        print_html_analysis(result)


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--output-file",
        "-f",
        help="Write output to file instead of stdout",
    )


def _add_submit_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("url", help="Website URL (http:// or https://)")
    parser.add_argument(
        "--tier",
        choices=["basic", "professional", "agency"],
        default="basic",
        help="Audit tier (default: basic)",
    )
    parser.add_argument("--name", help="Display name (default: the URL's hostname)")
    parser.add_argument("--user", help="Owning user id (default: anonymous)")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="seoscan",
        description="SEOScan - one-time SEO audits combining HTML analysis and PageSpeed Insights",
    )

    # Global flags (before subcommands)
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.LOG_LEVEL.upper() if settings.LOG_LEVEL else "INFO",
        help="Set logging verbosity (default: INFO)",
    )
    parser.add_argument(
        "--log-file",
        help="Write logs to file in addition to console",
    )
    parser.add_argument(
        "--store",
        choices=["sqlite", "memory"],
        help="Audit store backend (default: STORE_BACKEND or sqlite)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    submit_parser = subparsers.add_parser("submit", help="Create a pending audit and print its id.")
    _add_submit_arguments(submit_parser)
    submit_parser.set_defaults(func=service_command)

    run_parser = subparsers.add_parser("run", help="Run a pending or failed audit.")
    run_parser.add_argument("audit_id", help="Audit id (aud_...)")
    run_parser.set_defaults(func=service_command)

    audit_parser = subparsers.add_parser("audit", help="Submit and run an audit, then print its report.")
    _add_submit_arguments(audit_parser)
    _add_output_arguments(audit_parser)
    audit_parser.set_defaults(func=service_command)

    report_parser = subparsers.add_parser("report", help="Show the report of a completed audit.")
    report_parser.add_argument("audit_id", help="Audit id (aud_...)")
    _add_output_arguments(report_parser)
    report_parser.set_defaults(func=service_command)

    list_parser = subparsers.add_parser("list", help="List audits, newest first.")
    list_parser.add_argument("--user", help="Only audits owned by this user")
    list_parser.set_defaults(func=service_command)

    delete_parser = subparsers.add_parser("delete", help="Delete an audit.")
    delete_parser.add_argument("audit_id", help="Audit id (aud_...)")
    delete_parser.set_defaults(func=service_command)

    analyze_parser = subparsers.add_parser(
        "analyze", help="Run the HTML analysis on a URL without creating an audit."
    )
    analyze_parser.add_argument("url", help="URL to analyze")
    _add_output_arguments(analyze_parser)
    analyze_parser.set_defaults(func=analyze_command)

    return parser


def main(argv: Optional[list[str]] = None):
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level,
        log_file=getattr(args, 'log_file', None),
    )

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
