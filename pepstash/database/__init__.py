"""On-disk peptide cache: directory store, score tables, variant sets and job queue."""
