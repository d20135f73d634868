"""Utility functions for FCPXSub."""

import os
import logging
from .exceptions import FileSystemError

logger = logging.getLogger(__name__)

# '&' must stay first so the entities produced by later rules are not re-escaped.
_XML_ESCAPES = (
    ('&', '&amp;'),
    ('<', '&lt;'),
    ('>', '&gt;'),
    ('"', '&quot;'),
    ("'", '&apos;'),
)

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def escape_xml(text: str) -> str:
    """Escapes the five XML special characters for use in text or attribute values."""
    for char, entity in _XML_ESCAPES:
        text = text.replace(char, entity)
    return text

def format_timestamp(seconds: float) -> str:
    """
    Formats seconds as HH:MM:SS.mmm for display.

    Milliseconds are truncated, not rounded, so a segment never appears to
    start later than it does.

    Args:
        seconds: Time in seconds.

    Returns:
        Formatted time string.
    """
    if seconds < 0:
        seconds = 0.0
    whole = int(seconds)
    hrs = whole // 3600
    mins = (whole % 3600) // 60
    secs = whole % 60
    milliseconds = int((seconds - whole) * 1000)
    return f"{hrs:02d}:{mins:02d}:{secs:02d}.{milliseconds:03d}"
