"""
System Reporter - one logger per process with a verbosity gate.

Every line is ``timestamp | LEVEL | [context] message``. The issuer logs
to stdout; the chat client owns the terminal, so it logs to a file only.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Log files roll over at this size, keeping one previous file
LOG_MAX_BYTES = 1_000_000
LOG_BACKUPS = 1


def parse_level(name: str) -> int:
    """Map a level name such as "debug" to a logging level (INFO when unknown)."""
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.INFO


class SystemReporter:
    """
    Logger wrapper that drops messages above the current verbosity.

    Each call carries a ``verbose_level``; it is written only when the
    reporter's ``verbose`` is at least that high:

        0 = always (errors, lifecycle)
        1 = normal operation (default)
        2 = per-message detail
        3 = debug
    """

    def __init__(
        self,
        name: str = "system",
        log_dir: Optional[str] = None,
        level: int = logging.INFO,
        verbose: int = 1,
        console: bool = True,
    ) -> None:
        """
        Args:
            name: Logger name, also the log file name (``<name>.log``)
            log_dir: Directory for the log file; relative to the working
                directory. None means stdout only.
            level: Python logging level
            verbose: Verbosity gate (0-3)
            console: Also write to stdout when a log_dir is given
        """
        self.name = name
        self.verbose = verbose
        self.log_file: Optional[str] = None

        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)
        self.logger.handlers.clear()
        self.logger.propagate = False

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)
        for handler in self._build_handlers(log_dir, console):
            handler.setFormatter(formatter)
            self.logger.addHandler(handler)

    def _build_handlers(self, log_dir: Optional[str], console: bool) -> list:
        handlers: list = []
        if console or not log_dir:
            handlers.append(logging.StreamHandler(sys.stdout))
        if log_dir:
            directory = os.path.abspath(log_dir)
            os.makedirs(directory, exist_ok=True)
            self.log_file = os.path.join(directory, f"{self.name}.log")
            handlers.append(
                RotatingFileHandler(
                    self.log_file,
                    maxBytes=LOG_MAX_BYTES,
                    backupCount=LOG_BACKUPS,
                    encoding="utf-8",
                )
            )
        return handlers

    def set_verbose(self, level: int) -> None:
        """Change the verbosity gate, clamped to 0-3."""
        self.verbose = max(0, min(3, level))
        self.info(
            f"Verbosity set to {self.verbose}",
            context="SystemReporter",
            verbose_level=0,
        )

    def _emit(self, level: int, msg: str, context: str, verbose_level: int) -> None:
        if self.verbose >= verbose_level:
            self.logger.log(level, f"[{context}] {msg}")

    def debug(self, msg: str, context: str = "system", verbose_level: int = 3) -> None:
        self._emit(logging.DEBUG, msg, context, verbose_level)

    def info(self, msg: str, context: str = "system", verbose_level: int = 1) -> None:
        self._emit(logging.INFO, msg, context, verbose_level)

    def warning(
        self, msg: str, context: str = "system", verbose_level: int = 1
    ) -> None:
        self._emit(logging.WARNING, msg, context, verbose_level)

    def error(self, msg: str, context: str = "system", verbose_level: int = 0) -> None:
        self._emit(logging.ERROR, msg, context, verbose_level)

    def critical(
        self, msg: str, context: str = "system", verbose_level: int = 0
    ) -> None:
        self._emit(logging.CRITICAL, msg, context, verbose_level)
