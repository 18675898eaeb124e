"""Peptide Score Stash.

Command line front end for the shared peptide cache. Many `pepstash annotate`
runs may share one cache directory and job file at the same time.

Typical cycle:
- `pepstash annotate` records protein changes and reports known scores
- the external scorer runs for every peptide listed in the job file and
  writes <cache_dir>/<peptide>/<peptide>.out
- `pepstash annotate` again picks up the new scores
"""

import argparse
import sys
from pathlib import Path
from typing import Dict, List, Optional

import pysam

from pepstash import __version__
from pepstash.config import ConfigurationError, StashConfig, load_config
from pepstash.database.annotator import (
    AnnotationRequest,
    AnnotationResult,
    PeptideAnnotator,
    annotate_requests,
)
from pepstash.database.export import export_scores
from pepstash.database.jobs import read_jobs
from pepstash.database.outputs import PeptideStore
from pepstash.notation import split_hgvs_protein
from pepstash.utils.logging import log_command, setup_logging


def _load_sequences(fasta: Path) -> Dict[str, str]:
    """Read all records of a (plain or bgzipped) FASTA file into ``{name: sequence}``."""
    if not fasta.exists():
        raise FileNotFoundError(f"FASTA file not found: {fasta}")
    with pysam.FastxFile(str(fasta)) as fh:
        return {record.name: record.sequence for record in fh}


def _read_requests(requests_file: Path, sequences: Dict[str, str]) -> List[AnnotationRequest]:
    """One HGVSp per line, ``#`` comments and blank lines are ignored."""
    if not requests_file.exists():
        raise FileNotFoundError(f"Requests file not found: {requests_file}")

    requests = []
    with open(requests_file, "r") as f:
        for line in f:
            hgvs = line.strip()
            if not hgvs or hgvs.startswith("#"):
                continue
            parsed = split_hgvs_protein(hgvs)
            sequence = sequences.get(parsed[0]) if parsed else None
            requests.append(AnnotationRequest(hgvs_protein=hgvs, sequence=sequence))
    return requests


def _write_results(
    results: List[AnnotationResult], score_field: str, output: Optional[str]
) -> None:
    out = open(output, "w") if output else sys.stdout
    try:
        out.write(f"hgvs_protein\t{score_field}\n")
        for result in results:
            out.write(f"{result.hgvs_protein}\t{result.score if result.score is not None else ''}\n")
    finally:
        if output:
            out.close()


def _build_config(args) -> StashConfig:
    return load_config(
        params_file=args.params,
        cache_dir=args.cache_dir,
        job_file=args.job_file,
    ).validate()


def main() -> None:
    """Main entry point for the pepstash command-line interface.

    Parses command-line arguments and executes the appropriate command.
    """
    parser = argparse.ArgumentParser(
        description="Coordinate peptide variant scoring through a shared on-disk cache.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version",
        action="version",
        version=__version__,
        help="Show version and exit",
    )

    # Create parent parser for shared arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase verbosity: -v for INFO, -vv for DEBUG",
    )
    parent_parser.add_argument(
        "-y",
        "--yaml",
        dest="params",
        required=False,
        metavar="YAML",
        help="Params YAML with cache_dir, job_file and optionally score_field",
    )
    parent_parser.add_argument(
        "--cache-dir",
        dest="cache_dir",
        required=False,
        metavar="DIR",
        help="(optional) Cache directory, overrides cache_dir from the params YAML",
    )
    parent_parser.add_argument(
        "--job-file",
        dest="job_file",
        required=False,
        metavar="FILE",
        help="(optional) Job file, overrides job_file from the params YAML",
    )
    parent_parser.add_argument(
        "--log-file",
        dest="log_file",
        required=False,
        metavar="FILE",
        help="(optional) Also write log messages to this file",
    )

    subparsers = parser.add_subparsers(
        dest="command", required=True, title="Available commands", metavar="command"
    )

    annotate_parser = subparsers.add_parser(
        "annotate",
        help="Record protein changes and report known scores",
        parents=[parent_parser],
        description=(
            "Record every protein change in the cache, queue peptides with new changes "
            "for scoring and report the scores already present in the cache."
        ),
    )
    annotate_parser.add_argument(
        "-i",
        "--input",
        dest="i",
        required=True,
        metavar="FILE",
        help="File with one HGVSp per line, e.g. ENSP00000269305.4:p.Arg175His",
    )
    annotate_parser.add_argument(
        "--fasta",
        dest="fasta",
        required=True,
        metavar="FASTA",
        help="Protein sequences named by the protein ids used in the HGVSp strings",
    )
    annotate_parser.add_argument(
        "-o",
        "--output",
        dest="output",
        required=False,
        metavar="FILE",
        help="(optional) Output TSV (default: stdout)",
    )
    annotate_parser.add_argument(
        "-t",
        "--threads",
        dest="threads",
        type=int,
        default=1,
        metavar="N",
        help="(optional) Number of worker processes (default: 1)",
    )

    subparsers.add_parser(
        "jobs",
        help="List peptides queued for scoring",
        parents=[parent_parser],
    )

    status_parser = subparsers.add_parser(
        "status",
        help="Show what the cache holds for a peptide",
        parents=[parent_parser],
    )
    status_parser.add_argument(
        "-p",
        "--peptide",
        dest="peptide",
        required=True,
        metavar="ID",
        help="Peptide identifier",
    )

    export_parser = subparsers.add_parser(
        "export",
        help="Write all cached scores into one table",
        parents=[parent_parser],
        description="Collect every score table in the cache. Paths ending in .parquet need pyarrow.",
    )
    export_parser.add_argument(
        "-o",
        "--output",
        dest="output",
        required=True,
        metavar="FILE",
        help="Output TSV or .parquet file",
    )

    args = parser.parse_args()

    logger = setup_logging(
        verbosity=args.verbose,
        log_file=Path(args.log_file) if args.log_file else None,
    )
    log_command(logger)

    try:
        config = _build_config(args)
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(1)

    if args.command == "annotate":
        sequences = _load_sequences(Path(args.fasta))
        requests = _read_requests(Path(args.i), sequences)
        logger.info(f"Annotating {len(requests)} protein changes with {args.threads} worker(s)")
        results = annotate_requests(config, requests, threads=args.threads)
        _write_results(results, config.score_field, args.output)

        failed = [r for r in results if r.error]
        if failed:
            logger.error(f"{len(failed)} of {len(results)} requests failed")
            sys.exit(1)

    elif args.command == "jobs":
        for job in read_jobs(config.job_file):
            print(job)

    elif args.command == "status":
        status = PeptideAnnotator(config, logger=logger).status(args.peptide)
        print(f"peptide\t{status.peptide}")
        print(f"sequence\t{'yes' if status.has_sequence else 'no'}")
        print(f"variants\t{status.variants}")
        print(f"scored\t{status.scored}")
        print(f"pending\t{','.join(status.pending)}")

    elif args.command == "export":
        output = export_scores(PeptideStore(config.cache_dir), args.output)
        logger.info(f"Scores written to {output}")


if __name__ == "__main__":
    main()
