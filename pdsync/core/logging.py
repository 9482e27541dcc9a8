import logging
import sys

import logfire
import sentry_sdk

from .config import Settings


def setup_logging(settings: Settings) -> None:
    """Configure stdout logging, and logfire / Sentry when their credentials are set"""
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
    )
    if settings.logfire_token:
        logfire.configure(token=settings.logfire_token)
    if settings.sentry_dsn:
        sentry_sdk.init(dsn=settings.sentry_dsn, traces_sample_rate=1.0)


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the specified name"""
    return logging.getLogger(name)
