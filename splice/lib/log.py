"""
Centralized application-specific logging using Loguru.

This module provides a function-based logging mechanism (`LOG`) that dynamically
respects the `beQuiet` flag from application settings.

Features:
- A custom `LOG` function for splice debug logging.
- Dynamic checking of the `beQuiet` flag to suppress logs when necessary.
- Logs go to stderr so they never mix with spliced output on stdout.

Example:
    from splice.lib.log import LOG
    LOG("placeholder matched")

Environment:
- Set `SPLICE_BEQUIET=True` to suppress detailed logging output.
"""

from loguru import logger
from typing import Any
import sys

# Create a distinct logger instance for splice
app_logger = logger.bind(app="SPLICE")

logger_format = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> │ "
    "<level>{level: <5}</level> │ "
    "<yellow>{name: >22}</yellow>::"
    "<cyan>{function: <20}</cyan> @ "
    "<cyan>{line: <4}</cyan> ║ "
    "<level>{message}</level>"
)

app_logger.remove()  # Remove any default handlers
app_logger.add(sys.stderr, format=logger_format)


def LOG(*args: Any, **kwargs: Any) -> None:
    """
    Application-specific logging function.

    Checks the `beQuiet` flag in `appsettings` and logs the message only if
    logging is enabled.

    :param args: Positional arguments for the log message.
    :param kwargs: Keyword arguments for additional log metadata.
    """
    try:
        from splice.config.settings import appsettings  # Ensure up-to-date settings

        if not appsettings.beQuiet:
            app_logger.opt(depth=1).debug(*args, **kwargs)
    except Exception as e:
        print(f"Logging error: {e}", file=sys.stderr)
