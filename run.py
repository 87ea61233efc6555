#!/usr/bin/env python3
"""
Transfer Ledger Entry Point

Starts the FastAPI server with the configured storage backend.
"""

import sys

from transfer_ledger.api import run_server
from transfer_ledger.config import get_config
from transfer_ledger.logging_config import setup_logging


if __name__ == "__main__":
    config = get_config()
    logger = setup_logging(config.log_level, config.log_format, log_file=config.log_file)

    logger.info(f"Starting Transfer Ledger on {config.api_host}:{config.api_port}")
    logger.info(f"Storage backend: {config.storage_backend}, currency: {config.currency}")

    try:
        run_server(host=config.api_host, port=config.api_port, debug=False)
    except KeyboardInterrupt:
        logger.info("Shutting down Transfer Ledger")
    except Exception as e:
        logger.error(f"Error starting server: {e}")
        sys.exit(1)
