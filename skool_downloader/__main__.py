#!/usr/bin/env python3
"""
Command line entry point for Skool Downloader.

Usage examples:
  python -m skool_downloader --url https://www.skool.com/my-group/classroom
  python -m skool_downloader --cookie "auth_token=..." --output ./archive
  python -m skool_downloader render-module next_data.json 3f2c9a... --plan
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from skool_downloader.config import Settings
from skool_downloader.downloader import ExportError, run
from skool_downloader.page_source import LoginError, SessionTimeout
from skool_downloader.pipeline import render_module
from skool_downloader.progress_manager import console, print_banner, setup_logging


def _run_render_module(argv: List[str]) -> int:
    parser = argparse.ArgumentParser(
        prog="skool_downloader render-module",
        description="Render one module's description from a saved __NEXT_DATA__ JSON file.",
    )
    parser.add_argument("payload", help="Path to a saved __NEXT_DATA__ JSON file of a course page.")
    parser.add_argument("module_id", help="Id of the module to render.")
    parser.add_argument(
        "--plan",
        action="store_true",
        help="Also print the candidate download URLs of every video as JSON.",
    )
    args = parser.parse_args(argv)

    payload_path = Path(args.payload).expanduser()
    if not payload_path.exists():
        print(f"✖ File not found: {payload_path}")
        return 1

    result = render_module(args.module_id, payload_path.read_text(encoding="utf-8"))
    print(result.description_html)
    if args.plan:
        print(json.dumps(result.plan, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="skool_downloader",
        description="Archive a Skool classroom (descriptions and videos) as static HTML.",
    )
    parser.add_argument("--url", dest="skool_url", help="Classroom URL (env: SKOOL_URL).")
    parser.add_argument("--email", help="Login email (env: SKOOL_EMAIL).")
    parser.add_argument("--password", help="Login password (env: SKOOL_PASSWORD).")
    parser.add_argument("--cookie", dest="cookie_data", help="Cookie header of a logged-in session (env: COOKIE_DATA).")
    parser.add_argument("--output", dest="output_dir", help="Download directory (env: OUTPUT_DIR, default: downloads).")
    parser.add_argument("--wait", dest="wait_seconds", type=float, help="Seconds to wait after each navigation.")
    parser.add_argument("--timeout", dest="session_timeout", type=float, help="Overall session timeout in seconds.")
    parser.add_argument("--yt-dlp", dest="yt_dlp_path", help="Path to the yt-dlp executable.")
    parser.add_argument(
        "--headless",
        dest="headless",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Run Chrome headless (default: on).",
    )
    parser.add_argument("--debug", action="store_true", default=None, help="Show debug logs.")
    return parser


def settings_from_args(args: argparse.Namespace, base: Optional[Settings] = None) -> Settings:
    """Overlay command line values on top of the .env / environment settings."""
    settings = base or Settings.from_env()
    for name, value in vars(args).items():
        if value is not None and hasattr(settings, name):
            setattr(settings, name, value)
    return settings


def main(argv: Optional[List[str]] = None) -> None:
    argv = argv or sys.argv
    if len(argv) > 1 and argv[1] in {"render-module", "render_module"}:
        setup_logging()
        sys.exit(_run_render_module(argv[2:]))

    args = build_parser().parse_args(argv[1:])
    settings = settings_from_args(args)
    setup_logging(settings.debug)
    settings.validate()

    print_banner()
    try:
        run(settings)
    except (LoginError, ExportError, SessionTimeout) as exc:
        console.print(f"✖ {exc}", style="red", markup=False)
        sys.exit(1)
    except KeyboardInterrupt:
        console.print("[yellow]Interrupted[/yellow]")
        sys.exit(130)
    console.print("\n✅ All done!")


if __name__ == "__main__":
    main(sys.argv)
