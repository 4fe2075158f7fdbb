"""nfo logging for farmassist: one terminal sink on stderr, plus an optional markdown file.

Call ``get_logger()`` once from an entry point (CLI command or server startup).
Settings come from FARMASSIST_LOG_LEVEL, FARMASSIST_NFO_LOG_FILE and
FARMASSIST_NFO_FORMAT.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Optional

from nfo.configure import configure
from nfo.logger import Logger
from nfo.sinks import MarkdownSink
from nfo.terminal import TerminalSink

_logger: Optional[Logger] = None


def setup_logging(
    level: str = "INFO",
    markdown_file: str | None = None,
    terminal_format: str = "markdown",
) -> Logger:
    """Configure nfo once for the process. Later calls return the first logger.

    The terminal sink shows timings and tracebacks but not call arguments or
    return values: prompts and farm records are user data.
    """
    global _logger
    if _logger is not None:
        return _logger

    sinks = [
        TerminalSink(
            format=terminal_format,
            stream=sys.stderr,
            show_args=False,
            show_return=False,
            show_duration=True,
            show_traceback=True,
        ),
    ]
    if markdown_file:
        sinks.append(MarkdownSink(file_path=markdown_file))

    _logger = configure(
        name="farmassist",
        level=level.upper(),
        sinks=sinks,
        bridge_stdlib=True,
        propagate_stdlib=False,
        env_prefix="FARMASSIST_NFO_",
        version=_package_version(),
        force=True,
    )

    # httpx logs full request URLs at INFO
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return _logger


def get_logger() -> Logger:
    if _logger is None:
        return setup_logging(
            level=os.getenv("FARMASSIST_LOG_LEVEL", "INFO"),
            markdown_file=os.getenv("FARMASSIST_NFO_LOG_FILE") or None,
            terminal_format=os.getenv("FARMASSIST_NFO_FORMAT", "markdown"),
        )
    return _logger


def _package_version() -> str:
    from farmassist import __version__

    return __version__
