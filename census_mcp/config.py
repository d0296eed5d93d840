import argparse
import os
from dataclasses import dataclass
from typing import Sequence

from dotenv import load_dotenv

from .client import HTTP_TIMEOUT_SECONDS

TRANSPORTS = ("stdio", "sse")
DEFAULT_HOST = "localhost"
DEFAULT_PORT = 8080

load_dotenv()


def census_api_key() -> str:
    key = os.getenv("CENSUS_API_KEY", "").strip()
    if not key:
        raise ValueError("Missing CENSUS_API_KEY environment variable")
    return key


@dataclass(frozen=True)
class ServerConfig:
    transport: str = "stdio"
    test_mode: bool = False
    api_key: str = ""
    log_level: str = "info"
    log_file: str = ""
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout: float = HTTP_TIMEOUT_SECONDS

    def resolve_api_key(self) -> str:
        """Explicit key first, then ``CENSUS_API_KEY``."""
        return self.api_key.strip() or census_api_key()

    @classmethod
    def from_args(cls, argv: Sequence[str] | None = None) -> "ServerConfig":
        parser = build_parser()
        args = parser.parse_args(argv)
        return cls(
            transport=args.transport,
            test_mode=args.test,
            api_key=args.key,
            log_level=args.log_level or os.getenv("LOG_LEVEL", "") or "info",
            log_file=args.log_file or os.getenv("LOG_FILE", ""),
            host=args.host,
            port=args.port,
        )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="census-mcp",
        description="MCP server for the U.S. Census Bureau data API",
    )
    parser.add_argument(
        "-t", "--transport", choices=TRANSPORTS, default="stdio",
        help="Transport type (stdio or sse)",
    )
    parser.add_argument(
        "--test", action="store_true",
        help="Run the demonstration script against mock data and exit",
    )
    parser.add_argument(
        "-k", "--key", default="",
        help="Census API key (defaults to the CENSUS_API_KEY environment variable)",
    )
    parser.add_argument(
        "--log-level", default="", choices=["", "debug", "info", "warn", "warning", "error"],
        type=str.lower, help="Log level (defaults to LOG_LEVEL or info)",
    )
    parser.add_argument(
        "--log-file", default="", help="Write logs to this file (defaults to LOG_FILE)"
    )
    parser.add_argument("--host", default=DEFAULT_HOST, help="SSE listen host")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT, help="SSE listen port")
    return parser
