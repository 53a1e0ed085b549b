"""Production line collector entry point.

Usage: python -m prodline_collector.agent [config.json]

Polls every configured line's shared folder for production files and loads
them into DuckDB. Configure via a JSON settings file and environment variables:
    PRODLINE_CONFIG         - Path to the JSON settings file
    PRODLINE_DB             - Database path (overrides the settings file)
    PRODLINE_POLL_INTERVAL  - Seconds between poll cycles (default: 5)
    PRODLINE_LOG_LEVEL      - Logging level (default: INFO)
"""

from __future__ import annotations

import asyncio
import logging
import sys

from prodline_collector.agent.config import CollectorConfig, ConfigError
from prodline_collector.agent.service import configure_logging, serve

logger = logging.getLogger("prodline_collector")


def load_config_or_exit(path: str = "") -> CollectorConfig:
    try:
        config = CollectorConfig.load(path)
    except ConfigError as e:
        logger.error("Config error: %s", e)
        sys.exit(1)
    errors = config.validate()
    if errors:
        for err in errors:
            logger.error("Config error: %s", err)
        sys.exit(1)
    return config


def main() -> None:
    configure_logging()
    config = load_config_or_exit(sys.argv[1] if len(sys.argv) > 1 else "")

    logger.info("Starting collector for %d lines", len(config.lines))
    logger.info("Database: %s", config.database)
    for line in config.lines:
        logger.info("  %s -> %s (%s)", line.name, line.table_name, config.source_root(line))

    asyncio.run(serve(config))
    logger.info("Collector stopped.")


if __name__ == "__main__":
    main()
