"""Utility functions shared by log-work and update-issue."""

import json
import logging
import os
import sys
from datetime import date, datetime

from patterns import Patterns

logger = logging.getLogger(__name__)

# File paths
CONFIG_FILE = "config.json"
DEFAULT_STORAGE_ROOT = os.path.join("storage", "app")
DEFAULT_LOG_FILE = os.path.join("logs", "jira.log")
LOG_FORMAT = "[%(asctime)s] %(name)s.%(levelname)s: %(message)s"

REQUIRED_KEYS = {
    "jira": ["base_url", "user", "api_token"],
    "timesheet": ["url", "username"],
}


# ============================================================================
# Config
# ============================================================================


def load_config(path: str = CONFIG_FILE) -> dict:
    """Load config.json with Jira and timesheet settings."""
    with open(path) as f:
        return json.load(f)


def validate_config(config: dict, sections: tuple[str, ...] = ("jira",)) -> list[str]:
    """Validate config structure and return list of error messages.

    Returns:
        Empty list if valid, otherwise list of error messages.
    """
    errors = []

    for section in sections:
        if section not in config:
            errors.append(f"Missing section '{section}' in config.json")
            continue
        for key in REQUIRED_KEYS.get(section, []):
            if not config[section].get(key):
                errors.append(f"Missing {section}.{key}")

    return errors


def load_config_safe(path: str = CONFIG_FILE, sections: tuple[str, ...] = ("jira",)) -> dict | None:
    """Load config with user-friendly error messages.

    Returns:
        Config dict if valid, None if errors occurred.
    """
    if not os.path.exists(path):
        print(f"[!] ERROR: {path} not found!")
        print()
        print("    Create config.json based on config.example.json:")
        print("    $ cp config.example.json config.json")
        print("    $ nano config.json  # Fill in your credentials")
        print()
        return None

    try:
        config = load_config(path)
    except json.JSONDecodeError as e:
        print(f"[!] ERROR: {path} is not valid JSON!")
        print(f"    Line {e.lineno}, column {e.colno}: {e.msg}")
        print()
        print("    Check for missing commas, quotes, or brackets.")
        return None

    errors = validate_config(config, sections)
    if errors:
        print(f"[!] ERROR: {path} is incomplete:")
        for err in errors:
            print(f"    - {err}")
        print()
        print("    See config.example.json for the required structure.")
        return None

    return config


# ============================================================================
# Logging
# ============================================================================


def setup_logging(config: dict) -> logging.Handler:
    """Send log records to the configured file."""
    settings = config.get("logging", {})
    log_file = settings.get("file", DEFAULT_LOG_FILE)
    level = getattr(logging, str(settings.get("level", "INFO")).upper(), logging.INFO)

    directory = os.path.dirname(log_file)
    if directory:
        os.makedirs(directory, exist_ok=True)

    handler = logging.FileHandler(log_file, encoding="utf-8")
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root = logging.getLogger()
    root.addHandler(handler)
    root.setLevel(level)
    return handler


def announce(text: str, log: logging.Logger = logger) -> None:
    """Log a progress line on the caller's logger and show it to the operator."""
    log.info(text)
    print(text)


def report_error(error: Exception, log: logging.Logger = logger) -> None:
    """Log a failure with its traceback and show the message."""
    log.critical(str(error), exc_info=error)
    print(f"[!] {error}", file=sys.stderr)


# ============================================================================
# Storage
# ============================================================================


def storage_path(config: dict, path: str) -> str:
    """Resolve a path relative to the local storage root."""
    root = config.get("storage", {}).get("root", DEFAULT_STORAGE_ROOT)
    return os.path.join(root, path)


def read_storage_file(config: dict, path: str) -> str:
    """Read a template or JQL script from local storage."""
    with open(storage_path(config, path), encoding="utf-8") as f:
        return f.read()


# ============================================================================
# Dates
# ============================================================================


def normalize_date(value: str | None) -> str:
    """Return value as YYYY-MM-DD, today if empty.

    Raises:
        ValueError: if value is not a valid calendar date.
    """
    if not value:
        return date.today().strftime("%Y-%m-%d")
    if not Patterns.DATE_FORMAT.match(value):
        raise ValueError(f"Invalid date format '{value}'. Expected YYYY-MM-DD")
    # Catches 2026-02-30 and friends
    return datetime.strptime(value, "%Y-%m-%d").strftime("%Y-%m-%d")


# ============================================================================
# Operator prompts
# ============================================================================


def ask_yes_no(question: str, default: bool = False) -> bool:
    """Ask a yes/no question on the terminal."""
    hint = "[Y/n]" if default else "[y/N]"
    while True:
        try:
            answer = input(f"  {question} {hint} ").strip().lower()
        except EOFError:
            return False
        if not answer:
            return default
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        print("  Please answer yes or no.")


def print_table(headers: list[str], rows: list[tuple]) -> None:
    """Print rows as fixed-width columns."""
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row):
            widths[i] = max(widths[i], len(str(cell)))

    line = "-" * (sum(widths) + 3 * (len(widths) - 1))
    print(" | ".join(f"{h:<{w}}" for h, w in zip(headers, widths)))
    print(line)
    for row in rows:
        print(" | ".join(f"{str(c):<{w}}" for c, w in zip(row, widths)))
