import asyncio
import logging
import sys
from typing import Sequence

from census_mcp.app import create_app
from census_mcp.client import CensusAPIClient, CensusClient
from census_mcp.config import ServerConfig
from census_mcp.demo import run_demo
from census_mcp.formatter import TextFormatter
from census_mcp.logging_config import setup_logging
from census_mcp.mock import MockCensusClient
from census_mcp.tools import TOOL_SPECS, CensusToolHandler

logger = logging.getLogger("census_server")


def build_client(config: ServerConfig) -> CensusAPIClient:
    if config.test_mode:
        logger.info("Using mock Census API client")
        return MockCensusClient()
    client = CensusClient(
        config.resolve_api_key(),
        timeout=config.timeout,
        logger=logging.getLogger("census_mcp.client"),
    )
    logger.info("Census API client initialized")
    return client


def build_formatter() -> TextFormatter:
    return TextFormatter(logger=logging.getLogger("census_mcp.formatter"))


def build_handler(config: ServerConfig) -> CensusToolHandler:
    return CensusToolHandler(
        build_client(config),
        build_formatter(),
        logger=logging.getLogger("census_mcp.tools"),
    )


def main(argv: Sequence[str] | None = None) -> int:
    config = ServerConfig.from_args(argv)
    setup_logging(config.log_level, config.log_file)
    logger.info(
        "Starting Census MCP server",
        extra={"transport": config.transport, "test_mode": config.test_mode},
    )
    logger.info("Available tools: %s", ", ".join(spec.name for spec in TOOL_SPECS))

    if config.test_mode:
        asyncio.run(
            run_demo(
                build_client(config),
                build_formatter(),
                logger=logging.getLogger("census_mcp.demo"),
            )
        )
        return 0

    try:
        handler = build_handler(config)
    except ValueError as exc:
        logger.error("Failed to create Census API client", extra={"reason": str(exc)})
        return 1

    mcp = create_app(handler, config)
    if config.transport == "sse":
        logger.info("Serving SSE on %s:%d", config.host, config.port)
    mcp.run(transport=config.transport)
    logger.info("Server stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())
