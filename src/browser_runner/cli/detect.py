#!/usr/bin/env python3
"""
browser-detect - List locally running dev servers
"""

import argparse
import asyncio
import json
import sys
from typing import List, Optional

from browser_runner.application.services.detector_service import DetectorService
from browser_runner.infrastructure.config import get_settings
from browser_runner.infrastructure.http.probe_client import HttpProbeClient
from browser_runner.infrastructure.logging import configure_logging


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments"""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="browser-detect",
        description="Probe common development ports on localhost for running web servers",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        action="append",
        default=[],
        dest="ports",
        help="Extra port to probe (repeatable)"
    )
    parser.add_argument(
        "--only",
        action="store_true",
        help="Probe only the ports given with --port, skipping the baseline list"
    )
    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=settings.probe_timeout,
        help=f"Per-probe timeout in seconds (default: {settings.probe_timeout})"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the detected URLs as a JSON array"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})"
    )
    return parser.parse_args(argv)


async def detect(ports: List[int], only: bool, timeout: float) -> List[str]:
    baseline = [] if only else get_settings().dev_server_ports
    async with HttpProbeClient(timeout=timeout) as client:
        detector = DetectorService(client, baseline, probe_timeout=timeout)
        return await detector.detect(ports)


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function"""
    args = parse_args(argv)
    configure_logging(args.log_level)

    servers = asyncio.run(detect(args.ports, args.only, args.timeout))

    if args.json:
        print(json.dumps(servers))
    else:
        for url in servers:
            print(url)
    if not servers:
        print("No dev servers detected; pass the app URL explicitly.", file=sys.stderr)
    return 0


def entry_point():
    """CLI entry point"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    entry_point()
