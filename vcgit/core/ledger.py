"""Append-only JSON ledgers of commit records.

A ledger is a single JSON array rewritten whole on every append.  The last
element is the latest entry; entries are never re-sorted.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from pydantic import ValidationError

from vcgit.core.state import ControlState
from vcgit.errors import CorruptLedgerError
from vcgit.models.records import CommitRecord

logger = logging.getLogger(__name__)


class Ledger:
    """An ordered list of :class:`CommitRecord` stored at *path*.

    Parameters
    ----------
    path:
        Ledger file.  A missing file is an empty ledger.
    strict:
        If *True*, unparsable content raises :class:`CorruptLedgerError`.
        Otherwise it is treated as an empty ledger: a warning is logged and
        the next write first moves the damaged file aside as
        ``<name>.corrupt-<timestamp>``.
    """

    def __init__(self, path: str | Path, *, strict: bool = False) -> None:
        self.path = Path(path)
        self.strict = strict
        self._corrupt = False

    def read(self) -> list[CommitRecord]:
        """Return every record in ledger order."""
        self._corrupt = False
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return []

        try:
            data = json.loads(raw.decode("utf-8"))
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array, got {type(data).__name__}")
            return [CommitRecord.model_validate(item) for item in data]
        except (ValueError, ValidationError) as exc:
            # JSONDecodeError and UnicodeDecodeError are both ValueError
            if self.strict:
                raise CorruptLedgerError(str(self.path), str(exc)) from exc
            logger.warning(
                "Ledger %s is unreadable (%s); treating it as empty. "
                "Prior history will be dropped from this ledger.",
                self.path, exc,
            )
            self._corrupt = True
            return []

    def latest(self) -> CommitRecord | None:
        """Return the last record, or *None* for an empty ledger."""
        records = self.read()
        return records[-1] if records else None

    def find(self, commit_id: str) -> CommitRecord | None:
        for record in self.read():
            if record.commit_id == commit_id:
                return record
        return None

    def append(self, record: CommitRecord) -> list[CommitRecord]:
        """Append *record* and rewrite the file.  Returns the new contents."""
        records = self.read()
        if self._corrupt:
            self._quarantine()
        records.append(record)
        self.write(records)
        return records

    def write(self, records: list[CommitRecord]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = [r.to_json_dict() for r in records]
        self.path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def _quarantine(self) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%S%fZ")
        backup = self.path.with_name(f"{self.path.name}.corrupt-{stamp}")
        self.path.replace(backup)
        logger.warning("Moved corrupt ledger %s to %s", self.path, backup)
        self._corrupt = False
        return backup

    def __len__(self) -> int:
        return len(self.read())


def rebuild_commit_ledger(state: ControlState) -> list[CommitRecord]:
    """Rebuild ``allCommits.json`` from the snapshots' ``commit.json`` files.

    Snapshots whose metadata is missing or unreadable are skipped.  Records
    are ordered by timestamp since creation order is not recoverable from
    the snapshots alone.  An existing ledger is moved aside first.

    Returns the rebuilt records.
    """
    records: list[CommitRecord] = []
    for commit_id in state.list_snapshot_ids():
        meta_path = state.snapshot_metadata_path(commit_id)
        try:
            data = json.loads(meta_path.read_text(encoding="utf-8"))
            records.append(CommitRecord.model_validate(data))
        except (OSError, ValueError, ValidationError) as exc:
            logger.warning("Skipping snapshot %s: %s", commit_id, exc)

    records.sort(key=lambda r: r.timestamp.timestamp())

    ledger = Ledger(state.commit_ledger_path)
    if ledger.path.exists():
        ledger._quarantine()
    ledger.write(records)

    logger.info("Rebuilt %s with %d commits", ledger.path, len(records))
    return records
