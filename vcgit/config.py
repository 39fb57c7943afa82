"""Global configuration: paths, constants, settings."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel

logger = logging.getLogger(__name__)

# Control directory created by ``vcgit init`` inside the project root
CONTROL_DIR_NAME = ".VCGit"

# User-editable directory that is snapshotted from and restored into
WORKING_TREE_NAME = "Project"

STAGING_DIR_NAME = "staging"
COMMITS_DIR_NAME = "commits"
CONFIG_FILE_NAME = "config.json"
COMMIT_LEDGER_NAME = "allCommits.json"
PUSH_LEDGER_NAME = "allPush.json"
COMMIT_METADATA_NAME = "commit.json"
LOCK_FILE_NAME = ".lock"

# Remote key prefix; objects live under commits/{owner}/{repo}/
REMOTE_ROOT_PREFIX = "commits"

# S3 ListObjectsV2 returns at most 1000 keys per page
DEFAULT_PAGE_SIZE = 1000

# S3 DeleteObjects accepts at most 1000 keys per request
MAX_DELETE_BATCH = 1000

DEFAULT_SIGNED_URL_TTL = 3600

DEFAULT_LOCK_TIMEOUT = 30.0
DEFAULT_LOCK_STALE_AFTER = 3600.0

# All known environment keys with defaults
_ENV_KEYS: dict[str, dict[str, Any]] = {
    "VCGIT_BUCKET": {"default": "", "description": "Remote bucket identifier"},
    "VCGIT_LOG_LEVEL": {"default": "INFO", "description": "Logging level"},
    "VCGIT_STRICT_LEDGER": {"default": "false", "description": "Fail on corrupt ledgers"},
    "VCGIT_LOCK_TIMEOUT": {"default": str(DEFAULT_LOCK_TIMEOUT), "description": "Seconds to wait for the repository lock"},
}

_TRUTHY = {"1", "true", "yes", "on"}


def env_help() -> str:
    """Describe every environment key, one per line, for CLI help text."""
    lines = ["environment variables:"]
    for key, info in _ENV_KEYS.items():
        lines.append(f"  {key:<22}{info['description']} (default: {info['default'] or '-'})")
    return "\n".join(lines)


class Settings(BaseModel):
    """Effective settings for one project root."""

    bucket: str = ""
    log_level: str = "INFO"
    strict_ledger: bool = False
    lock_timeout: float = DEFAULT_LOCK_TIMEOUT


def load_settings(project_root: str | Path) -> Settings:
    """Load merged settings: defaults -> config.json -> env vars.

    ``S3_BUCKET`` is honoured as a fallback for ``VCGIT_BUCKET``.
    """
    root = Path(project_root)
    values: dict[str, str] = {key: str(info["default"]) for key, info in _ENV_KEYS.items()}

    config_json = root / CONTROL_DIR_NAME / CONFIG_FILE_NAME
    if config_json.is_file():
        try:
            data = json.loads(config_json.read_text(encoding="utf-8"))
            bucket = data.get("bucket") or data.get("remoteBucketIdentifier")
            if bucket:
                values["VCGIT_BUCKET"] = str(bucket)
        except (json.JSONDecodeError, OSError, AttributeError):
            logger.debug("Could not read %s", config_json, exc_info=True)

    if not values["VCGIT_BUCKET"] and os.environ.get("S3_BUCKET"):
        values["VCGIT_BUCKET"] = os.environ["S3_BUCKET"]

    for key in _ENV_KEYS:
        env_val = os.environ.get(key)
        if env_val is not None:
            values[key] = env_val

    try:
        lock_timeout = float(values["VCGIT_LOCK_TIMEOUT"])
    except ValueError:
        logger.warning("Ignoring invalid VCGIT_LOCK_TIMEOUT=%r", values["VCGIT_LOCK_TIMEOUT"])
        lock_timeout = DEFAULT_LOCK_TIMEOUT

    return Settings(
        bucket=values["VCGIT_BUCKET"],
        log_level=values["VCGIT_LOG_LEVEL"].upper(),
        strict_ledger=values["VCGIT_STRICT_LEDGER"].strip().lower() in _TRUTHY,
        lock_timeout=lock_timeout,
    )
