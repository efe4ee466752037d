"""
Logging Configuration for the liquidation bot

Provides structured logging with:
- Timestamps
- Console handler on stdout
- Optional file rotation (1 file per day) and a separate error log
"""

import logging
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler, TimedRotatingFileHandler
from typing import Optional


# Log formats
DETAILED_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
SIMPLE_FORMAT = "%(asctime)s - %(levelname)s - (Graphinator) %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def _add_handler(logger: logging.Logger, handler: logging.Handler, level: int, fmt: str) -> None:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt, datefmt=DATE_FORMAT))
    logger.addHandler(handler)


def setup_logger(
    name: str = "graphinator",
    verbose: bool = False,
    log_dir: Optional[Path] = None,
    network: Optional[str] = None,
    console: bool = True,
) -> logging.Logger:
    """
    Configure the bot's root logger.

    Module loggers (``graphinator.liquidation.*`` etc.) propagate into it, so
    one call at startup is enough. Calling it again replaces the handlers,
    e.g. once settings are known after an early configuration error.

    Args:
        name: Logger name
        verbose: DEBUG level and file/line in every record
        log_dir: Directory for rotating log files. No file logging if None.
        network: Appended to the log file names, one set of files per network
        console: Whether to log to stdout

    Returns:
        Configured logger instance
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(name)
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    log_format = DETAILED_FORMAT if verbose else SIMPLE_FORMAT
    if console:
        _add_handler(logger, logging.StreamHandler(sys.stdout), level, log_format)

    if log_dir is not None:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        stem = f"{name}_{network}" if network else name

        # one file per day, 30 days kept
        _add_handler(
            logger,
            TimedRotatingFileHandler(log_dir / f"{stem}.log", when="midnight", backupCount=30, encoding="utf-8"),
            level,
            log_format,
        )
        # failed liquidations only, with file/line
        _add_handler(
            logger,
            RotatingFileHandler(log_dir / f"{stem}_errors.log", maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"),
            logging.ERROR,
            DETAILED_FORMAT,
        )

    return logger


def log_outcome(logger: logging.Logger, outcome) -> None:
    """
    Log a batch submission outcome in structured format.

    Args:
        logger: Logger instance
        outcome: SubmissionOutcome of one batch
    """
    msg = f"{outcome.status.value.upper()} | token: {outcome.token} | flows: {outcome.flow_count}"
    if outcome.tx_hash:
        msg += f" | TX: {outcome.tx_hash}"
    if outcome.error:
        msg += f" | error: {outcome.error}"

    if outcome.failed:
        logger.error(msg)
    else:
        logger.info(msg)
