"""Loading sync jobs from JSON job files.

A job file holds a list of job objects::

    [
        {
            "name": "documents",
            "source": "/home/user/Documents",
            "destination": "/mnt/backup/Documents",
            "syncMode": "copyAndDelete",
            "logLevel": 9,
            "dateFormat": "yyyyMMddhhmmss",
            "exclude": [".*\\\\.tmp$"]
        }
    ]
"""

import json
import logging
from pathlib import Path
from typing import Optional

from ..exceptions import ConfigurationError, SyncConfigError
from .job import SyncJob
from .store import ExclusionStore

logger = logging.getLogger(__name__)

REQUIRED_KEYS = ("name", "source", "destination")


def load_sync_jobs_from_json(
    path: Path, store: Optional[ExclusionStore] = None
) -> list[SyncJob]:
    """Load sync jobs from a JSON file.

    Args:
        path: Job file
        store: Exclusion store handed to every job

    Returns:
        List of SyncJob objects, in file order

    Raises:
        SyncConfigError: If the file is missing, malformed, or describes an
            invalid job
    """
    if not path.exists():
        raise SyncConfigError(f"Sync job file not found: {path}")

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SyncConfigError(f"Invalid JSON in {path}: {e}") from e
    except OSError as e:
        raise SyncConfigError(f"Cannot read {path}: {e}") from e

    if not isinstance(data, list):
        raise SyncConfigError(f"{path} must contain a list of sync jobs")

    jobs: list[SyncJob] = []
    names: set[str] = set()
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise SyncConfigError(f"Sync job #{index + 1} in {path} is not an object")
        missing = [key for key in REQUIRED_KEYS if key not in item]
        if missing:
            raise SyncConfigError(
                f"Sync job #{index + 1} in {path} is missing: {', '.join(missing)}"
            )
        if item["name"] in names:
            raise SyncConfigError(f"Duplicate sync job name in {path}: {item['name']}")
        names.add(item["name"])

        try:
            jobs.append(SyncJob.from_dict(item, store=store))
        except (ConfigurationError, ValueError) as e:
            raise SyncConfigError(f"Sync job {item['name']!r}: {e}") from e

    logger.debug(f"Loaded {len(jobs)} sync job(s) from {path}")
    return jobs
