#!/usr/bin/env python3
"""
a42z Judge Gateway server

Runs the FastAPI gateway under uvicorn.

Usage:
    a42z-judge                                  # Serve on 127.0.0.1:8001
    a42z-judge --host 0.0.0.0 --port 8080       # Bind elsewhere
    a42z-judge --check-env                      # Report judge credentials and exit
    a42z-judge --help                           # Show help
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Dict, Optional

from loguru import logger

from .modules.judges import JudgeRegistry, credential_env_var
from .modules.settings import Settings, load_env_file


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Configure logging with loguru."""
    logger.remove()

    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        level=level,
        colorize=True,
    )

    if log_file:
        logger.add(
            log_file,
            format="{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}",
            level="DEBUG",
            rotation="10 MB",
            retention="7 days",
        )


def check_environment(settings: Settings) -> Dict[str, bool]:
    """
    Report which judges have an upstream credential.

    Only variable names and presence are logged, never values.
    """
    registry = JudgeRegistry.from_environment(config_path=settings.registry_config_path)
    status = {judge.id: judge.has_credential for judge in registry}

    for judge_id, present in status.items():
        marker = "✓" if present else "✗"
        logger.info(f"{marker} {judge_id}: {credential_env_var(judge_id)}")

    configured = sum(status.values())
    if configured == len(status):
        logger.info(f"All {configured} judges configured")
    elif configured:
        logger.warning(f"{configured}/{len(status)} judges configured (the others will fail upstream)")
    else:
        logger.error("No judge credentials configured - every analysis will fail upstream")

    logger.info(f"Upstream: {settings.dify_api_url}")
    logger.info(f"Archive: {'enabled' if settings.archive_enabled else 'disabled (DATABASE_URL unset)'}")
    return status


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        description="a42z Judge Gateway - proxy between the judging UI and the upstream judge workflows",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", type=str, default=os.environ.get("HOST", "127.0.0.1"), help="Bind address")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", "8001")), help="Bind port")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose/debug output")
    parser.add_argument("--log-file", type=str, help="Path to log file (optional)")
    parser.add_argument("--check-env", action="store_true", help="Check judge credentials and exit")
    parser.add_argument("--version", action="version", version="a42z Judge Gateway v1.0.0")

    args = parser.parse_args(argv)

    setup_logging(verbose=args.verbose, log_file=args.log_file)
    load_env_file()
    settings = Settings.from_env()

    if args.check_env:
        status = check_environment(settings)
        return 0 if all(status.values()) else 1

    import uvicorn

    uvicorn.run(
        "a42z_judge.modules.api:create_app",
        factory=True,
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="debug" if args.verbose else "info",
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
