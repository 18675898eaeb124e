"""Configuration of a pepstash run.

Settings come from a params YAML and may be overridden on the command line:

    cache_dir: /data/provean/cache
    job_file: ${PEPSTASH_WORK}/jobs.txt
    score_field: PROVEAN
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Union

import yaml

from pepstash import DEFAULT_SCORE_FIELD
from pepstash.utils.validation import check_cache_dir, check_job_file


class ConfigurationError(ValueError):
    """Raised at startup when the cache dir or job file cannot be used."""


def _expand(value: Optional[Union[Path, str]]) -> Optional[Path]:
    if value is None or value == "":
        return None
    return Path(os.path.expandvars(str(value))).expanduser()


@dataclass
class StashConfig:
    cache_dir: Optional[Path]
    job_file: Optional[Path]
    score_field: str = DEFAULT_SCORE_FIELD

    def __post_init__(self):
        self.cache_dir = _expand(self.cache_dir)
        self.job_file = _expand(self.job_file)

    def validate(self) -> "StashConfig":
        """Fail fast if the cache dir or job file is unusable."""
        for ok, error in (check_cache_dir(self.cache_dir), check_job_file(self.job_file)):
            if not ok:
                raise ConfigurationError(f"ERROR: {error}")
        return self


def load_config(
    params_file: Optional[Union[Path, str]] = None,
    cache_dir: Optional[Union[Path, str]] = None,
    job_file: Optional[Union[Path, str]] = None,
    score_field: Optional[str] = None,
) -> StashConfig:
    """Build a StashConfig from a params YAML, letting explicit arguments take precedence."""
    params = {}
    if params_file:
        params_path = Path(params_file).expanduser().resolve()
        if not params_path.exists():
            raise ConfigurationError(f"ERROR: params file not found: {params_path}")
        with open(params_path, "r") as f:
            params = yaml.safe_load(f) or {}
        if not isinstance(params, dict):
            raise ConfigurationError(f"ERROR: params file must contain a mapping: {params_path}")

    return StashConfig(
        cache_dir=cache_dir or params.get("cache_dir"),
        job_file=job_file or params.get("job_file"),
        score_field=score_field or params.get("score_field") or DEFAULT_SCORE_FIELD,
    )
