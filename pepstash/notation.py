"""Protein change notation handling.

Turns the protein-level change reported by the annotation source into the
one-letter form used as a key in the peptide cache, e.g. ``Ala123Thr`` into
``A123T`` and ``Gly45*`` into ``G45del``.
"""

import re
from typing import Dict, Mapping, Optional, Tuple
from urllib.parse import unquote

from Bio.Data.IUPACData import protein_letters_3to1_extended

# 26 codes: Biopython's extended table without Xle (J), plus Ter for stop.
# Xle is ambiguous for Leu/Ile and never appears in VEP HGVSp output.
AMINO_ACID_CODES: Dict[str, str] = {
    **{code: letter for code, letter in protein_letters_3to1_extended.items() if code != "Xle"},
    "Ter": "*",
}

SYNONYMOUS_MARKER = "="
STOP_MARKER = "*"
DELETION_SUFFIX = "del"

_HGVS_PROTEIN_RE = re.compile(r"^(.*?):p\.([^:]+)$")
_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.\-]")
_LOWERCASE = re.compile(r"[a-z]")


def _code_pattern(code_table: Mapping[str, str]) -> "re.Pattern[str]":
    return re.compile("|".join(re.escape(code) for code in code_table))


_DEFAULT_PATTERN = _code_pattern(AMINO_ACID_CODES)


def normalize(
    raw_notation: str, code_table: Mapping[str, str] = AMINO_ACID_CODES
) -> Tuple[str, bool]:
    """Normalize a protein change to its cache key form.

    Args:
        raw_notation: Protein change without the ``p.`` prefix, e.g. ``Ala123Thr``
        code_table: Three-letter to one-letter amino acid codes

    Returns:
        tuple: (variant_notation, is_synonymous)
    """
    is_synonymous = raw_notation.endswith(SYNONYMOUS_MARKER)

    if code_table is AMINO_ACID_CODES:
        variation = _DEFAULT_PATTERN.sub(lambda m: code_table[m.group()], raw_notation)
    elif code_table:
        variation = _code_pattern(code_table).sub(lambda m: code_table[m.group()], raw_notation)
    else:
        variation = raw_notation

    # lowercase letters mark fs/ext style changes, those keep their stop marker
    if variation.endswith(STOP_MARKER) and not _LOWERCASE.search(variation):
        variation = variation[: -len(STOP_MARKER)] + DELETION_SUFFIX

    return variation, is_synonymous


def split_hgvs_protein(hgvs_p: str) -> Optional[Tuple[str, str]]:
    """Split an HGVSp string like ``ENSP0001.1:p.Ala5Val`` into protein id and change."""
    if not hgvs_p:
        return None
    match = _HGVS_PROTEIN_RE.match(unquote(hgvs_p))
    if not match:
        return None
    protein_id, variation = match.groups()
    if not protein_id or not variation:
        return None
    return protein_id, variation


def sanitize_peptide_key(key: str) -> str:
    """Return ``key`` made safe for use as a single directory name."""
    sanitized = _UNSAFE_KEY_CHARS.sub("_", key.strip())
    if sanitized in {"", ".", ".."}:
        raise ValueError(f"Invalid peptide identifier: {key!r}")
    return sanitized
