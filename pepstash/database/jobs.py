"""The shared job file listing peptides that need a scoring pass.

One peptide key per line, in the order they were first queued. The file is
consumed and rotated by whoever runs the scorer; pepstash only appends.
"""

import logging
import os
from pathlib import Path
from typing import List, Union

from pepstash.utils.locking import exclusive_lock, with_exclusive_lock

logger = logging.getLogger("pepstash.jobs")


def enqueue_if_new(queue_path: Union[Path, str], key: str) -> bool:
    """Append ``key`` to the job file unless it is already listed.

    Returns:
        bool: True if the key was appended
    """
    with exclusive_lock(queue_path) as handle:
        content = handle.read()
        if key in {line.strip() for line in content.splitlines()}:
            return False
        handle.seek(0, os.SEEK_END)
        if content and not content.endswith("\n"):
            handle.write("\n")
        handle.write(f"{key}\n")
        handle.flush()
        os.fsync(handle.fileno())

    logger.info(f"Queued {key} for scoring")
    return True


def read_jobs(queue_path: Union[Path, str]) -> List[str]:
    """Return queued peptide keys in file order."""
    if not Path(queue_path).exists():
        return []
    return with_exclusive_lock(
        queue_path, lambda handle: [line.strip() for line in handle if line.strip()]
    )
