#!/usr/bin/env python3
"""
browser-run - Execute ad hoc Playwright automation scripts

Executes automation code from:
- File path: browser-run script.py
- Inline code: browser-run 'await page.goto("http://localhost:3000")'
- Stdin: cat script.py | browser-run
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from browser_runner import __version__
from browser_runner.application.services.executor_service import ExecutorService
from browser_runner.infrastructure.config import get_settings
from browser_runner.infrastructure.isolation.module_runner import InProcessModuleRunner
from browser_runner.infrastructure.logging import configure_logging
from browser_runner.infrastructure.persistence.temp_workspace import TempWorkspace
from browser_runner.infrastructure.toolkit.playwright_toolkit import PlaywrightToolkit


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments"""
    settings = get_settings()
    parser = argparse.ArgumentParser(
        prog="browser-run",
        description="Execute Playwright automation code from a file, inline arguments or stdin",
    )

    parser.add_argument(
        "--work-dir",
        type=Path,
        default=settings.work_dir,
        help="Directory for temporary execution units (default: current directory)"
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})"
    )
    parser.add_argument(
        "--log-format",
        choices=["text", "json"],
        default=settings.log_format,
        help=f"Logging format (default: {settings.log_format})"
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "source",
        nargs=argparse.REMAINDER,
        help="Script path or inline code; read from stdin when omitted"
    )

    return parser.parse_args(argv)


def build_executor(work_dir: Path) -> ExecutorService:
    settings = get_settings()
    return ExecutorService(
        toolkit=PlaywrightToolkit(browser=settings.install_browser),
        workspace=TempWorkspace(work_dir, prefix=settings.temp_prefix, suffix=settings.temp_suffix),
        module_runner=InProcessModuleRunner(),
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI function"""
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_format)

    executor = build_executor(args.work_dir)
    return executor.run(args.source, sys.stdin)


def entry_point():
    """CLI entry point"""
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)


if __name__ == "__main__":
    entry_point()
