#!/usr/bin/env python3
"""SensorSync command-line interface.

Runs the device registry API server and prepares its database.

Environment Variables:
    - DATABASE_URL: PostgreSQL connection string (required)
    - PORT: Listening port for the API server (default 8080)
    - MQTT_HOST / MQTT_PORT: Broker used for device notifications

Example Usage:
    $ python main.py init-db                      # Create tables if missing
    $ python main.py serve                        # Run the API on $PORT
    $ python main.py serve --port 9000 --reload   # Development server
"""
import argparse
import asyncio
import sys

from dotenv import load_dotenv

load_dotenv()

# Local imports
from src.sensorsync.common import close_pool, create_pool, ensure_schema
from src.sensorsync.common.exceptions import SensorSyncError
from src.sensorsync.config import SensorSyncConfig


async def run_init_db(config: SensorSyncConfig) -> None:
    """Apply db/schema.sql to the configured database."""
    pool = await create_pool(config.require_database_url(), min_size=1, max_size=2)
    try:
        await ensure_schema(pool)
        print("[Main] Schema applied")
    finally:
        await close_pool(pool)


def run_serve(args: argparse.Namespace, config: SensorSyncConfig) -> None:
    import uvicorn

    uvicorn.run(
        "src.sensorsync.registry.app:app",
        host=args.host,
        port=args.port or config.port,
        reload=args.reload,
    )


def main():
    parser = argparse.ArgumentParser(
        description="SensorSync device registry backend",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py init-db                  # Create the users table
  python main.py serve                    # Serve the API on $PORT (8080)
  python main.py serve --reload           # Serve with auto-reload
        """
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the API server")
    serve_parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="Interface to bind (default 0.0.0.0)"
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (defaults to $PORT)"
    )
    serve_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on code changes"
    )

    subparsers.add_parser("init-db", help="Apply db/schema.sql")

    args = parser.parse_args()
    config = SensorSyncConfig.from_env()

    try:
        if args.command == "init-db":
            asyncio.run(run_init_db(config))
        else:
            run_serve(args, config)
    except SensorSyncError as e:
        print(f"[Main] {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
