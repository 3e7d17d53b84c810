"""
JSON file repository adapter - Implements IdentityRepository protocol.

This module provides a file-backed implementation of the domain's
repository port. The whole id -> record mapping lives in memory and
is written as a single JSON snapshot after every mutation.

Durability & Concurrency Design:
--------------------------------

1. **Copy-on-write**: A mutation builds a new mapping, saves it, and only
   then swaps the in-memory reference. If the save fails the previous
   mapping stays in place, so the mutation is rolled back and StorageError
   propagates to the caller.

2. **Atomic snapshot**: save() writes to a temporary file in the snapshot's
   directory, fsyncs it, and os.replace()s it over the live file. A crash
   mid-write leaves the previous snapshot intact.

3. **Single writer**: One reentrant lock serializes mutations. The domain
   service takes the same lock via locked() around check-then-act
   sequences. Readers take no lock and always see a complete mapping.

4. **Relaxed load**: A missing, unparseable or inconsistent snapshot (a key
   not matching its record id, a repeated email) at startup yields an empty
   store, so first run needs no bootstrap step. Corruption is logged at
   WARNING and the bad file is left untouched until the next save.
"""

import logging
import os
import tempfile
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from pydantic import BaseModel, TypeAdapter, ValidationError

from src.domain.exceptions import EmailAlreadyRegistered, StorageError, UserNotFound
from src.domain.models import IdentityRecord

logger = logging.getLogger(__name__)


class SnapshotRecord(BaseModel):
    """
    On-disk shape of one record.

    The digest is stored under "password" to stay readable by existing
    users.json files.
    """

    id: str
    username: str
    email: str
    password: str


_snapshot_adapter = TypeAdapter(dict[str, SnapshotRecord])


def _to_domain(entry: SnapshotRecord) -> IdentityRecord:
    return IdentityRecord(
        id=entry.id,
        username=entry.username,
        email=entry.email,
        password_hash=entry.password,
    )


def _to_snapshot(record: IdentityRecord) -> SnapshotRecord:
    return SnapshotRecord(
        id=record.id,
        username=record.username,
        email=record.email,
        password=record.password_hash,
    )


class JsonFileIdentityRepository:
    """
    Implements IdentityRepository protocol over a JSON snapshot file.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Call load() once at startup before serving requests.
    """

    def __init__(self, path: str | Path) -> None:
        """
        Initialize an empty repository bound to a snapshot path.

        Args:
            path: Location of the JSON snapshot
        """
        self._path = Path(path)
        self._records: dict[str, IdentityRecord] = {}
        self._lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def __len__(self) -> int:
        return len(self._records)

    @contextmanager
    def locked(self) -> Iterator[None]:
        """Hold the single-writer lock for the duration of the block."""
        with self._lock:
            yield

    def load(self) -> None:
        """
        Replace the in-memory mapping with the snapshot's contents.

        A missing or corrupt snapshot leaves the store empty.
        """
        with self._lock:
            try:
                self._records = self._read_snapshot()
            except FileNotFoundError:
                logger.info(f"No snapshot at {self._path}, starting empty")
                self._records = {}
            except StorageError as e:
                logger.warning(f"Unreadable snapshot at {self._path}, starting empty: {e}")
                self._records = {}
            else:
                logger.info(f"Loaded {len(self._records)} user(s) from {self._path}")

    def save(self) -> None:
        """
        Write the current mapping to the snapshot.

        Raises:
            StorageError: If the snapshot could not be written
        """
        with self._lock:
            self._write_snapshot(self._records)

    def list_all(self) -> list[IdentityRecord]:
        return list(self._records.values())

    def get_by_id(self, user_id: str) -> IdentityRecord | None:
        return self._records.get(user_id)

    def get_by_email(self, email: str) -> IdentityRecord | None:
        # Linear scan; no secondary index at this scale.
        for record in self._records.values():
            if record.email == email:
                return record
        return None

    def insert(self, record: IdentityRecord) -> None:
        with self._lock:
            if record.id in self._records:
                raise EmailAlreadyRegistered(f"Duplicate id: {record.id}")
            if self.get_by_email(record.email) is not None:
                raise EmailAlreadyRegistered(record.email)

            updated = dict(self._records)
            updated[record.id] = record
            self._commit(updated)

    def replace(self, user_id: str, record: IdentityRecord) -> None:
        with self._lock:
            if user_id not in self._records:
                raise UserNotFound(user_id)
            owner = self.get_by_email(record.email)
            if owner is not None and owner.id != user_id:
                raise EmailAlreadyRegistered(record.email)

            updated = dict(self._records)
            updated[user_id] = record
            self._commit(updated)

    def delete(self, user_id: str) -> None:
        with self._lock:
            if user_id not in self._records:
                raise UserNotFound(user_id)

            updated = dict(self._records)
            del updated[user_id]
            self._commit(updated)

    def _commit(self, records: dict[str, IdentityRecord]) -> None:
        """Persist records, then make them the live mapping."""
        self._write_snapshot(records)
        self._records = records

    def _read_snapshot(self) -> dict[str, IdentityRecord]:
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError:
            raise
        except OSError as e:
            raise StorageError(f"Cannot read {self._path}") from e

        try:
            entries = _snapshot_adapter.validate_json(raw)
        except ValidationError as e:
            raise StorageError(f"Invalid snapshot {self._path}") from e

        records: dict[str, IdentityRecord] = {}
        seen_emails: set[str] = set()
        for key, entry in entries.items():
            if key != entry.id:
                raise StorageError(f"Invalid snapshot {self._path}: key {key} holds id {entry.id}")
            if entry.email in seen_emails:
                raise StorageError(f"Invalid snapshot {self._path}: duplicate email {entry.email}")
            seen_emails.add(entry.email)
            records[key] = _to_domain(entry)
        return records

    def _write_snapshot(self, records: dict[str, IdentityRecord]) -> None:
        payload = _snapshot_adapter.dump_json(
            {key: _to_snapshot(record) for key, record in records.items()},
            indent=2,
        )

        tmp_name = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._path.parent, prefix=f".{self._path.name}.", suffix=".tmp"
            )
            with os.fdopen(fd, "wb") as tmp:
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self._path)
        except OSError as e:
            logger.error(f"Snapshot write failed: {self._path} - {e}")
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except FileNotFoundError:
                    pass
            raise StorageError(f"Cannot write {self._path}") from e
