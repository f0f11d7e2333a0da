"""
Utility functions and logging configuration for PPO Downloader.
"""

import logging
import sys
from datetime import datetime

import numpy as np


def setup_logging(
    level: int = logging.INFO,
    log_file: str | None = None,
    verbose: bool = False,
) -> logging.Logger:
    """
    Configure logging for the application.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional file path to write logs
        verbose: If True, set level to DEBUG

    Returns:
        Configured logger instance
    """
    if verbose:
        level = logging.DEBUG

    logger = logging.getLogger("ppo_downloader")
    logger.setLevel(level)

    # Clear existing handlers
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)

    # Format: timestamp - level - message
    formatter = logging.Formatter(
        "%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def get_logger() -> logging.Logger:
    """Get the application logger."""
    return logging.getLogger("ppo_downloader")


def _as_int(value, field_name: str) -> int:
    # bool is an int subclass; True is never a meaningful year or day
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be an integer, got bool")

    if isinstance(value, str) and value.strip().lstrip("-").isdigit():
        return int(value.strip())

    if isinstance(value, (int, np.integer)):
        return int(value)

    # Whole-number floats such as 1979.0
    if isinstance(value, (float, np.floating)) and float(value).is_integer():
        return int(value)

    raise ValueError(f"{field_name} must be an integer, got {type(value).__name__}")


def validate_year(year: int, field_name: str = "year") -> int:
    """
    Validate a year value.

    Args:
        year: Year to validate (an int, a whole float or a string of digits)
        field_name: Name of the field for error messages

    Returns:
        The validated year

    Raises:
        ValueError: If year is invalid
    """
    year = _as_int(year, field_name)
    current_year = datetime.now().year

    if year < 1700:
        raise ValueError(f"{field_name} must be >= 1700, got {year}")

    if year > current_year:
        raise ValueError(
            f"{field_name} cannot be in the future (max: {current_year}), got {year}"
        )

    return year


def validate_day(day: int, field_name: str = "day") -> int:
    """
    Validate a day-of-year value (1-366).

    Raises:
        ValueError: If day is not an integer in range
    """
    day = _as_int(day, field_name)

    if not 1 <= day <= 366:
        raise ValueError(f"{field_name} must be between 1 and 366, got {day}")

    return day


def validate_positive_int(value: int, field_name: str, allow_zero: bool = False) -> int:
    """
    Validate that a value is a positive integer.

    Args:
        value: Value to validate
        field_name: Name of the field for error messages
        allow_zero: If True, allow zero as a valid value

    Returns:
        The validated value

    Raises:
        ValueError: If value is invalid
    """
    value = _as_int(value, field_name)

    min_val = 0 if allow_zero else 1
    if value < min_val:
        raise ValueError(f"{field_name} must be >= {min_val}, got {value}")

    return value


def format_number(value: int | float) -> str:
    """
    Format a number in plain positional decimal notation.

    Whole floats drop their fractional part and scientific notation is never
    used, so 44.0 -> "44", -122.5 -> "-122.5", 1e-05 -> "0.00001".
    """
    if isinstance(value, (int, np.integer)):
        return str(int(value))

    return np.format_float_positional(float(value), trim="-")


def format_count(count: int) -> str:
    """
    Format a count with thousands separators.

    Args:
        count: The number to format

    Returns:
        Formatted string (e.g., "1,234,567")
    """
    return f"{count:,}"


def sanitize_filename(name: str, max_length: int = 200) -> str:
    """
    Sanitize a string for use as a filename.

    Args:
        name: Input string
        max_length: Maximum allowed length

    Returns:
        Safe filename string
    """
    unsafe_chars = '<>:"/\\|?*'
    for char in unsafe_chars:
        name = name.replace(char, "_")

    # Remove leading/trailing whitespace and dots
    name = name.strip().strip(".")

    if len(name) > max_length:
        name = name[:max_length]

    return name or "unnamed"
