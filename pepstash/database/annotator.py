"""Per-variant annotation against the shared peptide cache.

This module provides the PeptideAnnotator, which handles one protein change
at a time: it records the change for the external scorer and returns a score
if one is already known, and helpers to annotate batches of requests across
worker processes.
"""

import logging
from dataclasses import dataclass, field
from multiprocessing import Pool
from typing import Dict, Iterable, List, Optional, Tuple

from pepstash.config import StashConfig
from pepstash.database.jobs import enqueue_if_new
from pepstash.database.outputs import PeptideStore, read_sequence, write_sequence_if_absent
from pepstash.database.scores import read_scores
from pepstash.database.variants import merge_variants, read_variants
from pepstash.notation import normalize, split_hgvs_protein

SYNONYMOUS_SCORE = "0"


@dataclass
class PeptideStatus:
    peptide: str
    has_sequence: bool
    variants: int
    scored: int
    pending: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class AnnotationRequest:
    hgvs_protein: str
    sequence: Optional[str]


@dataclass(frozen=True)
class AnnotationResult:
    hgvs_protein: str
    score: Optional[str]
    error: Optional[str] = None


class PeptideAnnotator:
    """Annotate protein changes using scores from the peptide cache.

    Every call re-reads the cache from disk. Any number of annotators, in the
    same or in different processes, can work on one cache at the same time.

    Attributes:
        config (StashConfig): Cache dir, job file and score field name.
        store (PeptideStore): Layout of the cache directory.
    """

    def __init__(self, config: StashConfig, logger: Optional[logging.Logger] = None):
        self.config = config
        self.store = PeptideStore(config.cache_dir)
        self.logger = logger or logging.getLogger("pepstash.annotator")

    def header_info(self) -> Dict[str, str]:
        return {self.config.score_field: f"{self.config.score_field} score"}

    def annotate(self, peptide_id: str, sequence: str, notation: str) -> Optional[str]:
        """Record ``notation`` for ``peptide_id`` and return its score if known.

        Args:
            peptide_id: Protein accession the change refers to
            sequence: Full reference amino acid sequence of the protein
            notation: Protein change, e.g. ``Ala5Val``

        Returns:
            The score as found in the score table, or None if not scored yet.
        """
        variation, is_synonymous = normalize(notation)
        if is_synonymous:
            return SYNONYMOUS_SCORE

        entry = self.store.ensure_peptide_dir(peptide_id)
        write_sequence_if_absent(entry, sequence)

        # scores lag behind the variant set; a change added now has none yet
        scores = read_scores(entry.out_file)

        added = merge_variants(entry.var_file, {variation, *scores})
        if added:
            enqueue_if_new(self.config.job_file, entry.key)

        score = scores.get(variation)
        self.logger.debug(f"{entry.key}:{variation} score={score} new={added}")
        return score

    def annotate_hgvs(self, hgvs_protein: str, sequence: Optional[str]) -> Optional[str]:
        """Annotate an HGVSp string such as ``ENSP0001:p.Ala5Val``.

        Returns None if the string has no protein change or no sequence is available.
        """
        parsed = split_hgvs_protein(hgvs_protein)
        if parsed is None:
            return None
        protein_id, notation = parsed
        if normalize(notation)[1]:
            return SYNONYMOUS_SCORE
        if not sequence:
            self.logger.warning(f"No reference sequence for {protein_id}, skipping {hgvs_protein}")
            return None
        return self.annotate(protein_id, sequence, notation)

    def status(self, peptide_id: str) -> PeptideStatus:
        """Summarize what the cache holds for ``peptide_id``."""
        entry = self.store.entry(peptide_id)
        variants = read_variants(entry.var_file)
        scores = read_scores(entry.out_file)
        return PeptideStatus(
            peptide=entry.key,
            has_sequence=read_sequence(entry) is not None,
            variants=len(variants),
            scored=len(variants & scores.keys()),
            pending=sorted(variants - scores.keys()),
        )


def _annotate_worker(args: Tuple[StashConfig, AnnotationRequest]) -> AnnotationResult:
    config, request = args
    annotator = PeptideAnnotator(config)
    try:
        score = annotator.annotate_hgvs(request.hgvs_protein, request.sequence)
    except (OSError, ValueError) as e:
        annotator.logger.error(f"Failed to annotate {request.hgvs_protein}: {e}")
        return AnnotationResult(request.hgvs_protein, None, error=str(e))
    return AnnotationResult(request.hgvs_protein, score)


def annotate_requests(
    config: StashConfig, requests: Iterable[AnnotationRequest], threads: int = 1
) -> List[AnnotationResult]:
    """Annotate many requests, optionally spread over ``threads`` worker processes.

    Results are returned in request order. A failing request does not stop
    the others; its result carries the error instead of a score.
    """
    jobs = [(config, request) for request in requests]
    if threads <= 1:
        return [_annotate_worker(job) for job in jobs]
    with Pool(processes=threads) as pool:
        return pool.map(_annotate_worker, jobs)
