"""
Main entry point for the MCP visual tester.

Spawns the MCP server, runs the fixed visual test sequence against it over
stdio and exits 0 on success, 1 on any failure or timeout.
"""

import argparse
import asyncio
import shlex
import sys

from config import Config, config
from utils import setup_logging
from visual_test import run_visual_test


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Visual test for an MCP app-control server over stdio")
    parser.add_argument("--server-command", help=f"Server executable (default: {config.SERVER_COMMAND})")
    parser.add_argument("--server-args", help=f"Server arguments, shell quoted (default: {shlex.join(config.SERVER_ARGS)})")
    parser.add_argument("--ipc-path", help=f"Value for {config.IPC_ENV_VAR} (default: {config.IPC_PATH})")
    parser.add_argument("--window-label", help=f"Target window label (default: {config.WINDOW_LABEL})")
    parser.add_argument("--dom-output", help=f"DOM snapshot file (default: {config.DOM_OUTPUT})")
    parser.add_argument("--screenshot-output", help=f"Screenshot file (default: {config.SCREENSHOT_OUTPUT})")
    parser.add_argument("--request-timeout", type=float, help=f"Seconds per request (default: {config.REQUEST_TIMEOUT})")
    parser.add_argument("--run-timeout", type=float, help=f"Seconds for the whole run (default: {config.RUN_TIMEOUT})")
    parser.add_argument("--report", help="Write the run report as JSON to this file")
    parser.add_argument("--log-file", help=f"Log file (default: {config.LOG_FILE})")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> Config:
    """Apply command line overrides on top of the environment configuration."""
    settings = Config()
    overrides = {
        "SERVER_COMMAND": args.server_command,
        "SERVER_ARGS": shlex.split(args.server_args) if args.server_args is not None else None,
        "IPC_PATH": args.ipc_path,
        "WINDOW_LABEL": args.window_label,
        "DOM_OUTPUT": args.dom_output,
        "SCREENSHOT_OUTPUT": args.screenshot_output,
        "REQUEST_TIMEOUT": args.request_timeout,
        "RUN_TIMEOUT": args.run_timeout,
        "LOG_FILE": args.log_file,
        "LOG_LEVEL": "DEBUG" if args.debug else None,
    }
    for key, value in overrides.items():
        if value is not None:
            setattr(settings, key, value)
    return settings


def main(argv=None) -> int:
    """Run the visual test and return the exit status."""
    args = parse_args(argv)
    settings = build_config(args)
    setup_logging(settings.LOG_FILE, settings.get_log_level())
    return asyncio.run(run_visual_test(settings, report_path=args.report))


if __name__ == "__main__":
    sys.exit(main())
