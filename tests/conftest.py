"""Shared pytest fixtures for pepstash tests."""

import logging
import shutil
import tempfile
from pathlib import Path

import pytest

from pepstash.config import StashConfig
from pepstash.database.annotator import PeptideAnnotator
from pepstash.utils.logging import LOGGER_NAME


# ============================================================================
# Environment Setup
# ============================================================================

@pytest.fixture(autouse=True)
def reset_logging():
    """Drop handlers the CLI attached so later tests do not write to closed streams."""
    yield
    logging.getLogger(LOGGER_NAME).handlers.clear()


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def test_output_dir(request):
    """Provides a fresh working directory for a test.
    If the test fails, the directory is NOT removed and a big warning is printed.
    """
    temp_dir = Path(tempfile.mkdtemp(prefix="pepstash_test_"))

    yield temp_dir

    if hasattr(request.node, "rep_call") and request.node.rep_call.passed:
        shutil.rmtree(temp_dir, ignore_errors=True)
    else:
        banner = "\n" + "=" * 80
        print(
            f"{banner}\n"
            f"TEST FAILED! Temporary directory NOT removed for forensic analysis:\n"
            f"    {temp_dir}\n"
            f"Please clean up manually after investigation.\n"
            f"{banner}\n"
        )


@pytest.fixture
def cache_dir(test_output_dir):
    path = test_output_dir / "cache"
    path.mkdir()
    return path


@pytest.fixture
def job_file(test_output_dir):
    return test_output_dir / "jobs.txt"


@pytest.fixture
def config(cache_dir, job_file):
    return StashConfig(cache_dir=cache_dir, job_file=job_file).validate()


@pytest.fixture
def annotator(config):
    return PeptideAnnotator(config)


@pytest.fixture
def params_file(test_output_dir, cache_dir, job_file):
    """Params YAML pointing at the test cache."""
    path = test_output_dir / "params.yaml"
    path.write_text(f"cache_dir: {cache_dir}\njob_file: {job_file}\n")
    return path


# This hook is needed to properly track test results
@pytest.hookimpl(tryfirst=True, hookwrapper=True)
def pytest_runtest_makereport(item, call):
    outcome = yield
    rep = outcome.get_result()
    setattr(item, f"rep_{rep.when}", rep)
