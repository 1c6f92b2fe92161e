"""Utility functions for drive listing."""
import logging
import re
import subprocess
from typing import Any, List, Optional

from drive_scanner.drivelist.models import DriveListError

logger = logging.getLogger(__name__)


def clean_string(value: Optional[str]) -> str:
    """Collapse whitespace and strip a string reported by the platform."""
    if not value:
        return ""
    return re.sub(r'\s+', ' ', str(value)).strip()


def build_description(*parts: Optional[str]) -> str:
    """Join vendor/model style fragments into one description."""
    cleaned = [clean_string(part) for part in parts]
    return " ".join(part for part in cleaned if part)


def as_bool(value: Any) -> bool:
    """Interpret flags that tools report as booleans, numbers or strings."""
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def as_int(value: Any) -> Optional[int]:
    """Interpret sizes that tools report as numbers or strings."""
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def run_command(args: List[str]) -> str:
    """Run a listing command and return its standard output."""
    logger.debug(f"Running {' '.join(args)}")
    try:
        process = subprocess.run(args, capture_output=True, text=True, check=True)
    except FileNotFoundError as e:
        raise DriveListError(f"{args[0]} is not available") from e
    except subprocess.CalledProcessError as e:
        stderr = (e.stderr or "").strip()
        raise DriveListError(f"{args[0]} exited with status {e.returncode}: {stderr}") from e

    return process.stdout
