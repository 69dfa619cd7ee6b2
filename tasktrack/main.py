"""
Task Tracker Service - REST API for task records.

Main entry point. All initialization logic is in app/factory.py.
"""
import os
import logging

import uvicorn

from tasktrack.app import create_app

# Get logger (logging is configured in app/factory.py)
logger = logging.getLogger(__name__)


def main():
    """Run the service under uvicorn."""
    app = create_app()
    port = int(os.getenv("TASKTRACK_SERVICE_PORT", "8004"))
    host = os.getenv("TASKTRACK_SERVICE_HOST", "0.0.0.0")

    config = uvicorn.Config(
        app,
        host=host,
        port=port,
        log_level=os.getenv("LOG_LEVEL", "INFO").lower(),
        access_log=True,
        timeout_keep_alive=30,
        timeout_graceful_shutdown=30,
    )
    server = uvicorn.Server(config)

    try:
        server.run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
    finally:
        # Cleanup is handled by lifespan context manager in app/factory.py
        logger.info("Service stopped")


if __name__ == "__main__":
    main()
