"""Colorful CLI output helpers."""

import sys

GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"
CHECK = "\u2713"  # ✓
BULLET = "\u2022"  # •
CROSS = "\u2717"  # ✗


def _colorize(text: str, color: str) -> str:
    """Apply color when stdout is a terminal."""
    if hasattr(sys.stdout, "isatty") and sys.stdout.isatty():
        return f"{color}{text}{RESET}"
    return text


def success(message: str) -> None:
    print(f"{_colorize(CHECK, GREEN)} {message}")


def info(message: str) -> None:
    print(f"{_colorize(BULLET, YELLOW)} {message}")


def error(message: str) -> None:
    """Print error message with red cross to stderr."""
    print(f"{_colorize(CROSS, RED)} {message}", file=sys.stderr)
