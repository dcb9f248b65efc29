#!/usr/bin/env python3
"""
MapChat MCP tools server (streamable HTTP transport).

Exposes the place search and by-place recommendation tools to the chat agent.
Provider keys stay on the server and are never returned to callers.

ENV:
  APP_USER_AGENT      -> identifying User-Agent for Nominatim
  FOURSQUARE_API_KEY  -> Foursquare Places API
  TRIPADVISOR_API_KEY -> TripAdvisor Content API
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from mcp.server.fastmcp import FastMCP

from mapchat.config import Config
from mapchat.tools.tool_registry import register_all_tools
from mapchat.utils.http_client import close_http_client

daemon_mode = False
app = FastMCP("mapchat-tools", host=Config.SERVER_HOST, port=Config.SERVER_PORT)
register_all_tools(app)


def setup_logging(daemon=False):
    """Log to logs/mcp_server.log, and to stderr unless running as a daemon."""
    logs_dir = Path(Config.LOG_DIR)
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_file = logs_dir / "mcp_server.log"

    detailed_formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )
    file_handler = logging.FileHandler(log_file)
    file_handler.setFormatter(detailed_formatter)
    handlers = [file_handler]
    if not daemon:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setFormatter(detailed_formatter)
        handlers.append(console_handler)

    logging.basicConfig(level=logging.INFO, handlers=handlers, force=True)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    return log_file


async def run_server():
    """Run the MCP server until interrupted."""
    log_file = setup_logging(daemon_mode)
    if not daemon_mode:
        print(
            f"MapChat MCP server starting on http://{Config.SERVER_HOST}:{Config.SERVER_PORT}"
        )
        print(f"Logs: {log_file}")
        print(f"Foursquare: {'configured' if Config.FOURSQUARE_API_KEY else 'not configured'}")
        print(f"TripAdvisor: {'configured' if Config.TRIPADVISOR_API_KEY else 'not configured'}")
    logging.info(
        f"MapChat MCP server starting on {Config.SERVER_HOST}:{Config.SERVER_PORT}"
    )
    logging.info(f"Daemon mode: {daemon_mode}")
    if Config.USER_AGENT == "MapChat/1.0":
        logging.warning(
            "APP_USER_AGENT not set; using fallback UA. "
            "Nominatim asks for a UA that identifies the application."
        )

    try:
        await app.run_streamable_http_async()
    except KeyboardInterrupt:
        logging.info("Server shutting down...")
        if not daemon_mode:
            print("\nServer shutting down...")
    finally:
        await close_http_client()


def main():
    parser = argparse.ArgumentParser(description="MapChat MCP Server")
    parser.add_argument(
        "--daemon", action="store_true", help="Run in daemon mode (no console output)"
    )
    args = parser.parse_args()
    global daemon_mode
    daemon_mode = args.daemon
    asyncio.run(run_server())


if __name__ == "__main__":
    main()
