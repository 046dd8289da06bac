import json
import logging
import re
import sys
from typing import Any

from sst_introspect.exceptions import InvalidRequestError


def setup_logging(log_level: str) -> None:
    """Setup basic logging to stderr, stdout belongs to the stdio transport"""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def validate_path_component(value: Any, label: str = "tab") -> str:
    """Tab and stage names become file names and must stay inside the .sst directory"""
    if not isinstance(value, str):
        raise InvalidRequestError(f"{label.capitalize()} name must be a string")
    if not value:
        raise InvalidRequestError(f"Error: '{label}' parameter required.")
    if value in (".", "..") or not re.match(r"^[a-zA-Z0-9_.-]+$", value):
        raise InvalidRequestError(
            f"Invalid {label} name: {value!r}. "
            "Names can only contain alphanumeric characters, dots, hyphens, and underscores"
        )
    return value


def format_size_kb(size: int) -> str:
    return f"{size / 1024:.1f} KB"


def to_text(result: Any) -> str:
    if isinstance(result, str):
        return result
    return json.dumps(result, indent=2, default=str)

