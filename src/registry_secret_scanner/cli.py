"""Command-line interface."""

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from .config import DEFAULT_OUTPUT_DIR, DEFAULT_REPORT_PATH, load_settings
from .core.registry_client import RegistryClient
from .core.types import RegistryConfig
from .exceptions import ConfigError, ScanAbortedError, ScannerError
from .scan.orchestrator import ScanOrchestrator
from .scan.report import write_report

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2
EXIT_INTERRUPTED = 130


def create_common_parser() -> argparse.ArgumentParser:
    """Options shared by every sub-command."""
    defaults = RegistryConfig()
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    common.add_argument(
        "--registry-url", default=defaults.registry_url, help="Registry API base URL"
    )
    common.add_argument("--auth-url", default=defaults.auth_url, help="Token endpoint URL")
    common.add_argument("--service", default=defaults.service, help="Token service name")
    common.add_argument("--hub-url", default=defaults.hub_url, help="Docker Hub API base URL")
    common.add_argument(
        "--timeout", type=int, default=defaults.timeout, help="Total request timeout in seconds"
    )
    return common


def create_main_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    common = create_common_parser()
    parser = argparse.ArgumentParser(
        prog="registry-secret-scanner",
        description="Scan public container image layers for embedded secrets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan an official image
  registry-secret-scanner scan nginx 1.25

  # Use custom rules and keep the working files elsewhere
  registry-secret-scanner scan myorg/app latest --patterns rules.json -o /tmp/layers

  # Scan through a mirror with a shorter timeout
  registry-secret-scanner scan nginx --registry-url https://mirror.example.com --timeout 60

  # Find a repository and its tags
  registry-secret-scanner search postgres
  registry-secret-scanner tags postgres
""",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    scan = subparsers.add_parser(
        "scan", parents=[common], help="Download an image and scan its layers"
    )
    scan.add_argument("repository", help="Repository name (e.g. nginx, myorg/app)")
    scan.add_argument("tag", nargs="?", default="latest", help="Image tag")
    scan.add_argument("--patterns", help="JSON file of pattern name -> regex")
    scan.add_argument("--ignore", help="JSON file with an 'extensions' list to skip")
    scan.add_argument(
        "-o", "--output-dir", default=DEFAULT_OUTPUT_DIR, help="Working directory for layers"
    )
    scan.add_argument("--report", default=DEFAULT_REPORT_PATH, help="Report file to write")

    search = subparsers.add_parser(
        "search", parents=[common], help="Search Docker Hub repositories"
    )
    search.add_argument("term", help="Search term")
    search.add_argument("--limit", type=int, default=100, help="Maximum results (at most 100)")

    tags = subparsers.add_parser(
        "tags", parents=[common], help="List tags of a Docker Hub repository"
    )
    tags.add_argument("repository", help="Repository name")

    return parser


def registry_config_from_args(args: argparse.Namespace) -> RegistryConfig:
    return RegistryConfig(
        registry_url=args.registry_url,
        auth_url=args.auth_url,
        service=args.service,
        hub_url=args.hub_url,
        timeout=args.timeout,
    )


def print_progress(percent: float, written: int, total: int) -> None:
    """Render download progress on one terminal line."""
    sys.stderr.write(f"\rDownloading... {percent:.2f}% complete")
    if total > 0 and written >= total:
        sys.stderr.write("\n")
    sys.stderr.flush()


async def run_scan(args: argparse.Namespace) -> int:
    try:
        settings = load_settings(args.patterns, args.ignore, args.output_dir)
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return EXIT_CONFIG

    async with RegistryClient(registry_config_from_args(args)) as client:
        orchestrator = ScanOrchestrator(client, settings, progress_callback=print_progress)
        try:
            report = await orchestrator.scan(args.repository, args.tag)
        except ScanAbortedError as e:
            logger.error(f"Scan aborted: {e}")
            if e.partial_report is not None:
                logger.error(
                    f"{len(e.partial_report.matches)} files had matches before the failure"
                )
            return EXIT_FAILURE
        except ScannerError as e:
            logger.error(f"Scan failed: {e}")
            return EXIT_FAILURE

    if report.env_content is not None:
        print("Found .env file:")
        print(report.env_content)
    for path, by_pattern in report.matches.items():
        print(f"Matches found in file: {path}")
        for name, found in by_pattern.items():
            print(f"  Pattern: {name}")
            for match in found:
                print(f"    {match}")

    try:
        await write_report(report, args.report)
    except OSError as e:
        logger.error(f"Error writing report: {e}")
        return EXIT_FAILURE
    return EXIT_OK


async def run_search(args: argparse.Namespace) -> int:
    async with RegistryClient(registry_config_from_args(args)) as client:
        try:
            results = await client.search_repositories(args.term, args.limit)
        except ScannerError as e:
            logger.error(f"Error fetching search results: {e}")
            return EXIT_FAILURE

    print(f"Found {len(results)} results for '{args.term}':")
    for index, result in enumerate(results, 1):
        official = " [official]" if result.is_official else ""
        print(f"{index:3d}. {result.name}{official} ({result.star_count} stars)")
        if result.description:
            print(f"     {result.description}")
    return EXIT_OK


async def run_tags(args: argparse.Namespace) -> int:
    async with RegistryClient(registry_config_from_args(args)) as client:
        try:
            tags = await client.list_tags(args.repository)
        except ScannerError as e:
            logger.error(f"Error fetching tags: {e}")
            return EXIT_FAILURE

    print(f"Available tags for repository '{args.repository}':")
    for index, tag in enumerate(tags, 1):
        print(f"{index:3d}. {tag}")
    return EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_main_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return EXIT_FAILURE

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    command_handlers = {
        "scan": run_scan,
        "search": run_search,
        "tags": run_tags,
    }

    try:
        return asyncio.run(command_handlers[args.command](args))
    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user", file=sys.stderr)
        return EXIT_INTERRUPTED


__all__ = ["main", "create_main_parser"]
