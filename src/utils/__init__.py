from .logger import setup_logging, get_logger, PerformanceLogger, timestamped_log_path
from .validator import (
    read_lines,
    file_exists,
    normalize_test_url,
    validate_test_url,
    load_strategies,
    load_checklist,
)
from .output_formatter import OutputFormatter, output_formatter

__all__ = [
    "setup_logging",
    "get_logger",
    "PerformanceLogger",
    "timestamped_log_path",
    "read_lines",
    "file_exists",
    "normalize_test_url",
    "validate_test_url",
    "load_strategies",
    "load_checklist",
    "OutputFormatter",
    "output_formatter",
]
