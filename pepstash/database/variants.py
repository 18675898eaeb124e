"""Per-peptide variant sets shared between concurrent workers.

The variant file of a peptide is a sorted list of notations, one per line.
Entries are only ever added. Workers merge under an exclusive lock by
reading the whole file, adding what is missing and rewriting it in full,
since the filesystem offers no atomic append-if-absent.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Set, TextIO, Union

from pepstash.utils.locking import exclusive_lock, with_exclusive_lock

logger = logging.getLogger("pepstash.variants")


def _read_lines(handle: TextIO) -> Set[str]:
    return {line.strip() for line in handle if line.strip()}


def _rewrite(handle: TextIO, content: str) -> None:
    handle.seek(0)
    handle.write(content)
    handle.truncate()
    handle.flush()
    os.fsync(handle.fileno())


def merge_variants(path: Union[Path, str], new_keys: Iterable[str]) -> bool:
    """Merge ``new_keys`` into the variant file at ``path``.

    Blocks until the exclusive lock on the file is held.

    Returns:
        bool: True if at least one variant was added
    """
    with exclusive_lock(path) as handle:
        original = handle.read()
        variants = {line.strip() for line in original.splitlines() if line.strip()}

        # stored lines are stripped, so compare stripped keys
        added = {key.strip() for key in new_keys} - variants
        added.discard("")
        if not added:
            return False

        variants |= added
        content = "".join(f"{variant}\n" for variant in sorted(variants))
        try:
            _rewrite(handle, content)
        except OSError:
            # put back what was committed before this call, then give up
            logger.error(f"Failed to rewrite {path}, restoring previous content")
            _rewrite(handle, original)
            raise

    logger.debug(f"Added {len(added)} variant(s) to {path}")
    return True


def read_variants(path: Union[Path, str]) -> Set[str]:
    """Return the variants recorded at ``path`` (empty if the file does not exist)."""
    if not Path(path).exists():
        return set()
    return with_exclusive_lock(path, _read_lines)
