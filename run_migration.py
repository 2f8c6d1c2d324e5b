#!/usr/bin/env python3
"""
Deployment migration runner.

Applies pending Alembic revisions (or a target passed on the command line)
against DATABASE_URL_SYNC and exits non-zero when the upgrade fails.
"""
import logging
import subprocess
import sys

from app.core.logging import configure_logging

logger = logging.getLogger("run_migration")


def run_migrations(target: str = "head") -> int:
    """Run `alembic upgrade <target>` and relay its output to the log."""
    logger.info("Upgrading database schema to %s", target)

    try:
        result = subprocess.run(
            ["alembic", "upgrade", target],
            check=True,
            capture_output=True,
            text=True
        )
    except subprocess.CalledProcessError as e:
        logger.error("Migration to %s failed (exit code %s)", target, e.returncode)
        if e.stdout:
            logger.error("alembic stdout:\n%s", e.stdout.rstrip())
        if e.stderr:
            logger.error("alembic stderr:\n%s", e.stderr.rstrip())
        return 1
    except FileNotFoundError:
        logger.error("alembic executable not found on PATH")
        return 1

    # Alembic writes its progress lines to stderr
    for stream in (result.stdout, result.stderr):
        if stream:
            logger.info("%s", stream.rstrip())
    logger.info("Database schema is at %s", target)
    return 0


if __name__ == "__main__":
    configure_logging()
    sys.exit(run_migrations(*sys.argv[1:2]))
