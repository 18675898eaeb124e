"""Tests for the shared job file."""

from multiprocessing import get_context

from pepstash.database.jobs import enqueue_if_new, read_jobs


def test_enqueue_appends_once(job_file):
    assert enqueue_if_new(job_file, "ENSP001")
    assert not enqueue_if_new(job_file, "ENSP001")
    assert enqueue_if_new(job_file, "ENSP002")
    assert job_file.read_text() == "ENSP001\nENSP002\n"
    assert read_jobs(job_file) == ["ENSP001", "ENSP002"]


def test_enqueue_keeps_insertion_order(job_file):
    for key in ["ENSP003", "ENSP001", "ENSP002"]:
        enqueue_if_new(job_file, key)
    assert read_jobs(job_file) == ["ENSP003", "ENSP001", "ENSP002"]


def test_enqueue_after_unterminated_line(job_file):
    job_file.write_text("ENSP001")
    assert enqueue_if_new(job_file, "ENSP002")
    assert job_file.read_text() == "ENSP001\nENSP002\n"


def test_read_jobs_missing(job_file):
    assert read_jobs(job_file) == []


def _enqueue(job_file, key):
    return enqueue_if_new(job_file, key)


def test_concurrent_enqueue_same_key(job_file):
    with get_context("fork").Pool(8) as pool:
        added = pool.starmap(_enqueue, [(job_file, "ENSP001")] * 32)

    assert sum(added) == 1
    assert job_file.read_text().splitlines() == ["ENSP001"]


def test_concurrent_enqueue_mixed_keys(job_file):
    keys = [f"ENSP{i % 5:03d}" for i in range(40)]
    with get_context("fork").Pool(8) as pool:
        pool.starmap(_enqueue, [(job_file, key) for key in keys])

    lines = job_file.read_text().splitlines()
    assert sorted(lines) == sorted(set(keys))
