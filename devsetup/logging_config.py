"""
Centralized logging configuration for devsetup.

User-facing progress lines are printed by the render module; this logger
carries the diagnostic trace (commands executed, exit codes, config
resolution), all of it at DEBUG level.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional


LOGGER_NAME = "devsetup"

# Global logger instance
_logger: Optional[logging.Logger] = None


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    verbose: bool = False,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Console log level when not verbose
        log_file: Optional file path that receives the full trace
        verbose: Enable DEBUG output on the console

    Returns:
        Configured logger instance
    """
    global _logger

    effective_level = "DEBUG" if verbose else level.upper()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, effective_level))
    logger.handlers.clear()

    # stderr keeps the trace apart from the progress lines on stdout
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(getattr(logging, effective_level))
    console_handler.setFormatter(ColoredFormatter(
        "%(levelname_colored)s %(message)s",
        use_colors=sys.stderr.isatty()
    ))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file, encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)  # Always log everything to file
        # The file handler only sees what passes the logger level
        logger.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        ))
        logger.addHandler(file_handler)

    logger.propagate = False

    _logger = logger
    return logger


def setup_logging_from_env() -> logging.Logger:
    """
    Configure logging from DEVSETUP_DEBUG and DEVSETUP_LOG_FILE.

    The command line surface is fixed, so diagnostics are switched on
    through the environment.
    """
    verbose = os.environ.get("DEVSETUP_DEBUG", "0") == "1"
    log_file = os.environ.get("DEVSETUP_LOG_FILE") or None
    return setup_logging(log_file=log_file, verbose=verbose)


def get_logger() -> logging.Logger:
    """
    Get the configured logger instance.

    If logging hasn't been set up, initializes with defaults.
    """
    global _logger
    if _logger is None:
        _logger = setup_logging()
    return _logger


class ColoredFormatter(logging.Formatter):
    """
    Formatter that marks trace lines with a colored symbol.
    """

    COLORS = {
        'DEBUG': '\033[36m',      # Cyan
    }
    RESET = '\033[0m'

    SYMBOLS = {
        'DEBUG': '🔍',
    }

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        if self.use_colors:
            levelname = record.levelname
            color = self.COLORS.get(levelname, '')
            symbol = self.SYMBOLS.get(levelname, '')
            record.levelname_colored = f"{color}{symbol} {levelname}{self.RESET}"
        else:
            record.levelname_colored = record.levelname

        return super().format(record)
