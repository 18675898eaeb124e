"""Collect the score tables of all peptides in a cache into one table."""

import logging
from pathlib import Path
from typing import Union

import pandas as pd

from pepstash.database.outputs import PeptideStore
from pepstash.database.scores import read_scores

logger = logging.getLogger("pepstash.export")

COLUMNS = ["peptide", "variant", "score"]


def collect_scores(store: PeptideStore) -> pd.DataFrame:
    """Return one row per scored variant across the cache."""
    rows = []
    for peptide in store.peptides():
        entry = store.entry(peptide)
        for variant, score in read_scores(entry.out_file).items():
            rows.append((peptide, variant, score))

    df = pd.DataFrame(rows, columns=COLUMNS)
    df["score"] = pd.to_numeric(df["score"], errors="coerce")
    logger.info(f"Collected {len(df)} scores from {df['peptide'].nunique()} peptides")
    return df


def export_scores(store: PeptideStore, output: Union[Path, str]) -> Path:
    """Write all scores to ``output``; ``.parquet`` paths need the parquet extra."""
    output = Path(output)
    df = collect_scores(store)
    if output.suffix == ".parquet":
        df.to_parquet(output, index=False)
    else:
        df.to_csv(output, sep="\t", index=False)
    return output
