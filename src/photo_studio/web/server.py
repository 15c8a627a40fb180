#!/usr/bin/env python3
"""
Launcher for the Photo Studio API.

Runs the FastAPI application under uvicorn. ``--check-deps`` verifies the
database and reports which integrations (CDN, Instagram) are configured
before the server starts.
"""

import argparse
import asyncio
import sys
from typing import List

import uvicorn

from photo_studio.core.config import Config, get_config
from photo_studio.core.logger import get_logger, setup_logging

logger = get_logger(__name__)

APP_PATH = "photo_studio.web.app:app"


async def check_dependencies(config: Config) -> List[str]:
    """Return the problems that would stop the studio from serving requests.

    Missing integration credentials only produce warnings: the public site
    works without them.
    """
    from photo_studio.database.engine import get_database_engine

    problems = []
    engine = get_database_engine()
    try:
        await engine.create_all_tables()
        tables = await engine.get_table_names()
        logger.info(f"Database ready with {len(tables)} tables ({config.database.type})")
    except Exception as e:
        logger.error(f"Database check failed: {e}")
        problems.append(f"database: {e}")
    finally:
        await engine.close()

    if not config.cdn.is_configured:
        logger.warning("CDN credentials missing - photo uploads and invoice PDFs will fail")
    if not config.instagram.access_token:
        logger.warning("No Instagram token configured - sync needs one stored in site settings")
    if config.auth.secret_key == "change-me":
        logger.warning("Using the default token secret - set PHOTO_STUDIO_AUTH__SECRET_KEY")

    return problems


def build_parser(config: Config) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Photo Studio API server")
    parser.add_argument("--host", default=config.web.host, help=f"Host to bind to (default: {config.web.host})")
    parser.add_argument("--port", type=int, default=config.web.port,
                        help=f"Port to bind to (default: {config.web.port})")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload for development")
    parser.add_argument("--workers", type=int, default=1, help="Number of worker processes (default: 1)")
    parser.add_argument("--log-level", default="info", choices=["debug", "info", "warning", "error"],
                        help="Log level (default: info)")
    parser.add_argument("--check-deps", action="store_true", help="Check database and integrations first")
    parser.add_argument("--no-access-log", action="store_true", help="Disable access logging")
    return parser


def main():
    """Main entry point for ``photo-studio-server``."""
    config = get_config()
    args = build_parser(config).parse_args()

    setup_logging(log_level=args.log_level, log_dir=config.log_dir)

    if args.check_deps:
        problems = asyncio.run(check_dependencies(config))
        if problems:
            for problem in problems:
                print(f"  - {problem}")
            sys.exit(1)

    print(f"Starting {config.app_name} on http://{args.host}:{args.port}")
    print(f"API documentation: http://{args.host}:{args.port}/docs")
    if config.web.downloads_dir:
        print(f"Downloads served from: {config.web.downloads_dir}")

    try:
        uvicorn.run(
            APP_PATH,
            host=args.host,
            port=args.port,
            reload=args.reload,
            workers=1 if args.reload else args.workers,
            log_level=args.log_level,
            access_log=not args.no_access_log,
            loop="asyncio"
        )
    except KeyboardInterrupt:
        print("\nServer stopped by user")


if __name__ == "__main__":
    main()
