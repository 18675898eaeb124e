"""Tests for the peptide cache directory layout and sequence files."""

import os
from multiprocessing import get_context

import pytest
from Bio import SeqIO

from pepstash.database.outputs import PeptideStore, read_sequence, write_sequence_if_absent

SEQUENCE = "MAVLKGSTREQWHPLLACDEFGHIKLMNPQRSTVWYMAVLKGSTREQWHPLLACDEFGHIKLMNPQRSTVWY"


def test_entry_paths(cache_dir):
    entry = PeptideStore(cache_dir).entry("ENSP001")
    assert entry.directory == cache_dir.resolve() / "ENSP001"
    assert entry.fasta_file.name == "ENSP001.fasta"
    assert entry.var_file.name == "ENSP001.var"
    assert entry.out_file.name == "ENSP001.out"
    assert not entry.directory.exists()


def test_ensure_peptide_dir_is_idempotent(cache_dir):
    store = PeptideStore(cache_dir)
    first = store.ensure_peptide_dir("ENSP001")
    second = store.ensure_peptide_dir("ENSP001")
    assert first == second
    assert first.directory.is_dir()
    assert store.peptides() == ["ENSP001"]


def test_sequence_written_once(cache_dir):
    entry = PeptideStore(cache_dir).ensure_peptide_dir("ENSP001")

    assert write_sequence_if_absent(entry, SEQUENCE)
    content = entry.fasta_file.read_bytes()

    assert not write_sequence_if_absent(entry, "MKKKKKKK")
    assert entry.fasta_file.read_bytes() == content
    assert content.startswith(b">ENSP001\n")
    assert read_sequence(entry) == SEQUENCE


def test_read_sequence_missing(cache_dir):
    entry = PeptideStore(cache_dir).entry("ENSP001")
    assert read_sequence(entry) is None


def _write_sequence(cache_dir, sequence):
    entry = PeptideStore(cache_dir).ensure_peptide_dir("ENSP001")
    return write_sequence_if_absent(entry, sequence)


def test_concurrent_sequence_writers_single_winner(cache_dir):
    sequences = [SEQUENCE[: 20 + i] for i in range(8)]
    with get_context("fork").Pool(4) as pool:
        created = pool.starmap(_write_sequence, [(cache_dir, s) for s in sequences])

    assert sum(created) == 1
    entry = PeptideStore(cache_dir).entry("ENSP001")
    assert read_sequence(entry) == sequences[created.index(True)]



def test_failed_sequence_write_leaves_no_file(cache_dir, monkeypatch):
    entry = PeptideStore(cache_dir).ensure_peptide_dir("ENSP001")

    def failing_write(*args, **kwargs):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr(SeqIO, "write", failing_write)
    with pytest.raises(OSError):
        write_sequence_if_absent(entry, SEQUENCE)

    assert not entry.fasta_file.exists()
    assert os.listdir(entry.directory) == []

    monkeypatch.undo()
    assert write_sequence_if_absent(entry, SEQUENCE)
    assert read_sequence(entry) == SEQUENCE
    assert os.listdir(entry.directory) == ["ENSP001.fasta"]
