"""
Run script for starting the Realtime Agents server.

Usage:
    python run.py [--port PORT] [--host HOST] [--log-level LEVEL] [--env-file PATH] [--reload]
"""

import argparse
import os
import sys
from pathlib import Path

import dotenv
import uvicorn

sys.path.append(str(Path(__file__).parent))

from app.config.logging_config import configure_logging

DEFAULT_ENV_FILE = Path(__file__).parent / ".env"


def parse_args(argv=None):
    """Parse command line arguments; defaults come from the environment."""
    parser = argparse.ArgumentParser(description="Serve realtime agent sessions over /ws")
    parser.add_argument("--port", type=int, default=None, help="Listen port (PORT, else 8000)")
    parser.add_argument("--host", default=None, help="Bind address (HOST, else 0.0.0.0)")
    parser.add_argument(
        "--log-level",
        default=None,
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Application log level (LOG_LEVEL, else INFO)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=DEFAULT_ENV_FILE,
        help="dotenv file loaded before the environment is read",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        default=os.getenv("ENV", "production").lower() == "development",
        help="Restart on code changes (default on when ENV=development)",
    )
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    if args.env_file.exists():
        dotenv.load_dotenv(args.env_file)

    port = args.port or int(os.getenv("PORT", "8000"))
    host = args.host or os.getenv("HOST", "0.0.0.0")
    log_level = args.log_level or os.getenv("LOG_LEVEL", "INFO").upper()
    logger = configure_logging(log_level)

    # Needed by the proxy endpoints, the supervisor and the guardrail
    if not os.getenv("OPENAI_API_KEY"):
        logger.error("OPENAI_API_KEY environment variable not set")
        sys.exit(1)

    logger.info(f"Starting realtime agents on http://{host}:{port} (log level {log_level})")

    uvicorn.run(
        "app.main:app",
        host=host,
        port=port,
        log_level=log_level.lower(),
        http="h11",
        access_log=False,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
