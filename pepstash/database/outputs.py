"""On-disk layout of the peptide cache.

      <cache_root>/
      ├── <peptide>/
      │   ├── <peptide>.fasta   reference sequence, written once
      │   ├── <peptide>.var     sorted, deduplicated variant notations
      │   └── <peptide>.out     scores produced by the external scorer
      └── ...
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

import pysam
from Bio import SeqIO
from Bio.Seq import Seq
from Bio.SeqRecord import SeqRecord

from pepstash.notation import sanitize_peptide_key

logger = logging.getLogger("pepstash.store")


@dataclass(frozen=True)
class PeptideEntry:
    """Paths making up the cache entry of one peptide."""

    key: str
    directory: Path

    @property
    def fasta_file(self) -> Path:
        return self.directory / f"{self.key}.fasta"

    @property
    def var_file(self) -> Path:
        return self.directory / f"{self.key}.var"

    @property
    def out_file(self) -> Path:
        return self.directory / f"{self.key}.out"


class PeptideStore:
    """
    Encapsulates the cache root holding one subdirectory per peptide.

    Paths are derived on every call; nothing is cached between requests since
    other processes may be changing the tree at the same time.
    """

    def __init__(self, root_dir: Union[Path, str]):
        self.root_dir = Path(root_dir).expanduser().resolve()

    def entry(self, peptide_id: str) -> PeptideEntry:
        key = sanitize_peptide_key(peptide_id)
        return PeptideEntry(key=key, directory=self.root_dir / key)

    def ensure_peptide_dir(self, peptide_id: str) -> PeptideEntry:
        """Create the peptide's directory if needed and return its entry."""
        entry = self.entry(peptide_id)
        # concurrent workers may create it between the check and mkdir
        entry.directory.mkdir(exist_ok=True)
        return entry

    def peptides(self) -> List[str]:
        """Return sorted keys of all peptide directories present in the cache."""
        if not self.root_dir.is_dir():
            return []
        return sorted(child.name for child in self.root_dir.iterdir() if child.is_dir())


def write_sequence_if_absent(entry: PeptideEntry, sequence: str) -> bool:
    """Write the peptide's FASTA file unless another writer got there first.

    The record is written to a temporary file in the peptide directory and
    hard-linked into place. link() fails if the target exists, so exactly one
    process publishes the file and readers never see a partial record.

    Returns:
        bool: True if this call created the file
    """
    if entry.fasta_file.exists():
        logger.debug(f"Sequence already present for {entry.key}")
        return False

    record = SeqRecord(Seq(sequence), id=entry.key, description="")
    fd, tmp_name = tempfile.mkstemp(prefix=f".{entry.key}.", suffix=".tmp", dir=entry.directory)
    try:
        with os.fdopen(fd, "w") as handle:
            SeqIO.write(record, handle, "fasta")
            handle.flush()
            os.fsync(handle.fileno())
        try:
            os.link(tmp_name, entry.fasta_file)
        except FileExistsError:
            logger.debug(f"Sequence for {entry.key} was written by another worker")
            return False
    finally:
        os.unlink(tmp_name)

    logger.debug(f"Wrote sequence for {entry.key} ({len(sequence)} aa)")
    return True


def read_sequence(entry: PeptideEntry) -> Optional[str]:
    """Return the cached reference sequence, or None if it was never written."""
    if not entry.fasta_file.exists():
        return None
    with pysam.FastxFile(str(entry.fasta_file)) as fh:
        for record in fh:
            return record.sequence
    return None
