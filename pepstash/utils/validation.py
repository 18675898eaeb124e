"""Validation utilities for the pepstash package.

Startup checks for the cache directory and the job file. Both return a
``(is_valid, error_message)`` tuple so callers decide how to fail.
"""

import os
from pathlib import Path
from typing import Optional, Tuple


def check_cache_dir(cache_dir: Optional[Path]) -> Tuple[bool, Optional[str]]:
    """Check that the cache directory is set, exists and is writable."""
    if not cache_dir:
        return False, "cache dir not specified"
    path = Path(cache_dir)
    if not path.is_dir():
        return False, f"cache dir not found: {path}"
    if not os.access(path, os.W_OK | os.X_OK):
        return False, f"cache dir not writable: {path}"
    return True, None


def check_job_file(job_file: Optional[Path]) -> Tuple[bool, Optional[str]]:
    """Check that the job file can be created or appended to."""
    if not job_file:
        return False, "job file not specified"
    path = Path(job_file)
    if path.exists():
        if not path.is_file():
            return False, f"job file is not a regular file: {path}"
        if not os.access(path, os.R_OK | os.W_OK):
            return False, f"job file not writable: {path}"
        return True, None

    parent = path.parent
    if not parent.is_dir():
        return False, f"job file directory not found: {parent}"
    if not os.access(parent, os.W_OK | os.X_OK):
        return False, f"job file directory not writable: {parent}"
    return True, None
