import logging
import logging.handlers
import sys
import time
from datetime import datetime
from typing import Optional, Dict
from pathlib import Path

LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
}
_RESET = "\033[0m"


class LogFormatter(logging.Formatter):
    """Probe chatter stays short; warnings name the logger, errors add the call site."""

    def __init__(self, colored: bool = False):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")
        self.colored = colored
        self._short = logging.Formatter("%(asctime)s - %(levelname)s - %(message)s", self.datefmt)
        self._named = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s", self.datefmt)
        self._located = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s (%(filename)s:%(lineno)d)", self.datefmt
        )

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno >= logging.ERROR:
            base = self._located
        elif record.levelno >= logging.WARNING:
            base = self._named
        else:
            base = self._short

        color = _LEVEL_COLORS.get(min(record.levelno, logging.ERROR)) if self.colored else None
        if not color:
            return base.format(record)

        levelname = record.levelname
        record.levelname = f"{color}{levelname}{_RESET}"
        try:
            return base.format(record)
        finally:
            record.levelname = levelname


def timestamped_log_path(folder: str, prefix: str = "availability_check_", fmt: str = "%Y-%m-%d_%H-%M-%S") -> str:
    return str(Path(folder) / f"{prefix}{datetime.now().strftime(fmt)}.txt")


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> logging.Logger:
    """Configure the ``goodcheck`` logger tree.

    The console handler writes to stderr so stdout stays clean for the
    report. A log file that cannot be created is reported on the console
    and skipped; the run itself goes on.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logger = logging.getLogger("goodcheck")
    logger.setLevel(log_level)
    logger.propagate = False

    for h in list(logger.handlers):
        logger.removeHandler(h)
        h.close()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(LogFormatter(colored=sys.stderr.isatty()))
    logger.addHandler(console)

    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            fh = logging.handlers.RotatingFileHandler(
                log_file, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8"
            )
        except OSError as e:
            logger.warning(f"Could not create log file {log_file}: {e}")
        else:
            fh.setFormatter(LogFormatter())
            logger.addHandler(fh)
    return logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return logging.getLogger(f"goodcheck.{name}" if name else "goodcheck")


class PerformanceLogger:
    """Named wall-clock timers, reported at debug level."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or get_logger("performance")
        self._started: Dict[str, float] = {}

    def start_timer(self, operation: str):
        self._started[operation] = time.monotonic()
        self.logger.debug(f"Started: {operation}")

    def stop_timer(self, operation: str) -> float:
        start = self._started.pop(operation, None)
        if start is None:
            self.logger.warning(f"No timer found for operation: {operation}")
            return 0.0
        duration = time.monotonic() - start
        self.logger.debug(f"Completed: {operation} in {duration:.3f}s")
        return duration
