"""
Standalone entrypoint for running the job store HTTP API.

Usage:
    python -m jobstore_server [OPTIONS]
    jobstore-server [OPTIONS]  (after pip install)

Environment Variables:
    JOBSTORE_DB_PATH: Database path (default: jobstore.db)
    JOBSTORE_HOST: Bind address (default: 127.0.0.1)
    JOBSTORE_PORT: Bind port (default: 8000)
"""

import argparse
import logging
import os
import sys

import uvicorn

logger = logging.getLogger(__name__)

DEFAULT_PORT = 8000


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="Job Store - HTTP API for job definitions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment Variables:
  JOBSTORE_DB_PATH   Database path (default: jobstore.db)
  JOBSTORE_HOST      Bind address (default: 127.0.0.1)
  JOBSTORE_PORT      Bind port (default: 8000)

Note: Command-line arguments override environment variables.

Examples:
  # Run with default settings
  jobstore-server

  # Serve a specific database on all interfaces
  jobstore-server --db-path /var/lib/jobstore/jobs.db --host 0.0.0.0
        """,
    )

    parser.add_argument(
        "--db-path",
        type=str,
        default=None,
        help="Path to SQLite database file (default: JOBSTORE_DB_PATH env or jobstore.db)",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Bind address (default: JOBSTORE_HOST env or 127.0.0.1)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Bind port (default: JOBSTORE_PORT env or 8000)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO)",
    )

    return parser.parse_args(argv)


def get_host(args: argparse.Namespace) -> str:
    """Get the bind address from CLI args or environment or use default."""
    if args.host:
        return args.host
    return os.environ.get("JOBSTORE_HOST", "127.0.0.1")


def get_port(args: argparse.Namespace) -> int:
    """
    Get the bind port from CLI args or environment or use default.

    Invalid values fall back to the default with a warning.
    """
    if args.port is not None:
        if args.port <= 0:
            logger.warning(f"Invalid port={args.port}, using default {DEFAULT_PORT}")
            return DEFAULT_PORT
        return args.port

    try:
        port = int(os.environ.get("JOBSTORE_PORT", str(DEFAULT_PORT)))
        if port <= 0:
            logger.warning(f"Invalid JOBSTORE_PORT={port}, using default {DEFAULT_PORT}")
            return DEFAULT_PORT
        return port
    except ValueError:
        logger.warning(
            f"Invalid JOBSTORE_PORT={os.environ.get('JOBSTORE_PORT')}, "
            f"using default {DEFAULT_PORT}"
        )
        return DEFAULT_PORT


def main(argv: list[str] | None = None) -> int:
    """
    Main entrypoint for the server.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    # The app reads the database path at startup
    if args.db_path:
        os.environ["JOBSTORE_DB_PATH"] = args.db_path

    host = get_host(args)
    port = get_port(args)
    logger.info(f"Starting job store on {host}:{port}")

    try:
        uvicorn.run(
            "jobstore_server.app:app",
            host=host,
            port=port,
            log_level=args.log_level.lower(),
        )
        return 0
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
