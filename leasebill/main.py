"""Main application entry point."""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from leasebill.services.logging import setup_server_logging

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the API server."""
    parser = argparse.ArgumentParser(description="LeaseBill API server")
    parser.add_argument("--host", default="0.0.0.0", help="Host to bind to")
    parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    args = parser.parse_args()

    setup_server_logging()

    from leasebill.api.app import app

    logger.info("Starting Uvicorn server on %s:%d...", args.host, args.port)
    config = uvicorn.Config(
        app=app,
        host=args.host,
        port=args.port,
        log_level="info",
    )
    uvicorn.Server(config).run()


if __name__ == "__main__":
    main()
