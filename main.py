"""
Lead Screening Engine - Main Entry Point
========================================
Run this file to start the FastAPI server.

Usage:
    python main.py                    # Start server on port 8000
    python main.py --port 8080        # Start server on custom port
    python main.py --reload           # Start with auto-reload (dev mode)

Rule tables:
    EXCLUSION_RULES_PATH=/path/master_exclusion.json
    COHORT_RULES_PATH=/path/cohort_definitions.json

API Documentation:
    http://localhost:8000/docs        # Swagger UI
    http://localhost:8000/redoc       # ReDoc
"""

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

from lead_screening.config.settings import API_CONFIG, LOG_FORMAT, LOG_LEVEL


def main():
    parser = argparse.ArgumentParser(description="Lead Screening Engine API Server")
    parser.add_argument(
        "--host",
        type=str,
        default=API_CONFIG["host"],
        help=f"Host to bind the server to (default: {API_CONFIG['host']})",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=API_CONFIG["port"],
        help=f"Port to run the server on (default: {API_CONFIG['port']})",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of worker processes (default: 1)",
    )

    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    logger = logging.getLogger("lead_screening")
    logger.info("Starting %s on http://%s:%s", API_CONFIG["title"], args.host, args.port)
    logger.info("API docs: http://localhost:%s/docs", args.port)

    uvicorn.run(
        "lead_screening.api.endpoints:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        workers=args.workers if not args.reload else 1,
    )


if __name__ == "__main__":
    main()
