"""Peptide Score Stash package.

pepstash coordinates many concurrently running annotation workers through a
shared on-disk cache. Each worker records the peptides and protein changes it
sees, the cache deduplicates them per peptide, and a job list tells an
external batch scorer (e.g. PROVEAN) which peptides still need a scoring pass.
Scores written back into the cache are picked up on the next annotation run.
"""

__version__ = "0.1.0"

# Name of the annotation field scores are reported under
DEFAULT_SCORE_FIELD = "PROVEAN"
