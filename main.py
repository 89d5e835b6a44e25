#!/usr/bin/env python3
"""
Drive Notes - Main Entry Point

Usage:
    python main.py                  # Run the proxy API (uvicorn)
    python main.py --check-config   # Validate .env / environment and exit
"""

import sys
from pathlib import Path

# Ensure project root is in path
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from src.config.logging_config import logger, route_server_logs
from src.config.settings import config, validate_env_for_app


def run_server():
    """Launch the proxy API"""
    import uvicorn

    from src.api.drive import create_app

    app = create_app()
    logger.info("Server running on port %s", config.PORT)
    route_server_logs()
    uvicorn.run(app, host=config.HOST, port=config.PORT, log_config=None)


def check_config():
    """Fail loudly on missing or inconsistent settings"""
    validate_env_for_app()
    logger.info("Configuration OK")


def main():
    """Main entry point"""
    if len(sys.argv) > 1 and sys.argv[1] == "--check-config":
        check_config()
    else:
        run_server()


if __name__ == "__main__":
    main()
