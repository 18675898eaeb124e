"""Reading score tables written by the external scorer.

A score table is tab-separated, one ``<variant>\\t<score>`` row per line.
Lines starting with ``#`` are comments. When a variant appears more than
once, the last row wins.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

logger = logging.getLogger("pepstash.scores")

COMMENT_PREFIX = "#"
SEPARATOR = "\t"


class MalformedScoreLine(ValueError):
    """A non-comment line that is not a two-column score row."""


@dataclass(frozen=True)
class ScoreRow:
    variant: str
    score: str


def parse_score_line(line: str) -> Optional[ScoreRow]:
    """Parse one line of a score table.

    Returns:
        ScoreRow, or None for comment and blank lines

    Raises:
        MalformedScoreLine: if the line does not have exactly two columns
    """
    line = line.rstrip("\r\n")
    if not line or line.startswith(COMMENT_PREFIX):
        return None
    if SEPARATOR not in line:
        raise MalformedScoreLine(f"No separator in score line: {line!r}")

    fields = line.split(SEPARATOR)
    if len(fields) != 2:
        raise MalformedScoreLine(f"Expected 2 columns, got {len(fields)}: {line!r}")
    variant, score = (field.strip() for field in fields)
    return ScoreRow(variant=variant, score=score)


def read_scores(path: Union[Path, str]) -> Dict[str, str]:
    """Read a peptide's score table into a ``{variant: score}`` mapping.

    A missing table is the normal state before the scorer has run and
    yields an empty mapping.
    """
    scores: Dict[str, str] = {}
    try:
        handle = open(path, "r", encoding="utf-8")
    except FileNotFoundError:
        return scores

    with handle:
        for lineno, line in enumerate(handle, start=1):
            try:
                row = parse_score_line(line)
            except MalformedScoreLine as e:
                logger.debug(f"Skipping line {lineno} of {path}: {e}")
                continue
            if row is not None:
                scores[row.variant] = row.score
    return scores
