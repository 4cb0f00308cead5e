"""Versioned storage of extraction results.

One immutable record per (document_id, version). Allocating the next
version is a read-increment-insert sequence, so every store makes it
atomic: the in-memory store under a lock, the SQLite store through a
UNIQUE(document_id, version) constraint with retry on conflict.
"""

import json
import logging
import os
import sqlite3
import threading
from abc import ABC, abstractmethod
from datetime import datetime, timezone

from config import settings
from models.schemas.extracted_resume import ExtractedResumeData
from models.schemas.feedback_record import FeedbackRecord, SectionSummary

logger = logging.getLogger(__name__)


class VersionConflictError(RuntimeError):
    """Raised when a version number could not be allocated after retries."""


def build_record(document_id: str, version: int, extracted: ExtractedResumeData) -> FeedbackRecord:
    return FeedbackRecord(
        document_id=document_id,
        version=version,
        created_at=datetime.now(timezone.utc),
        extracted=extracted,
        extracted_sections=[
            SectionSummary(id=s.id, type=s.type, title=s.title) for s in extracted.sections
        ],
    )


class FeedbackStore(ABC):
    """Store boundary for extraction records.

    Subclasses must implement:
        - append(): allocate the next version and persist atomically
        - latest() / get() / history(): read access
    """

    @abstractmethod
    def append(self, document_id: str, extracted: ExtractedResumeData) -> FeedbackRecord:
        """Persist ``extracted`` under the next free version of ``document_id``."""

    @abstractmethod
    def latest(self, document_id: str) -> FeedbackRecord | None:
        """Most recent record for the document, if any."""

    @abstractmethod
    def get(self, document_id: str, version: int) -> FeedbackRecord | None:
        """Record for an exact version, if stored."""

    @abstractmethod
    def history(self, document_id: str) -> list[FeedbackRecord]:
        """All records for the document, newest first."""


class InMemoryFeedbackStore(FeedbackStore):
    def __init__(self) -> None:
        self._records: dict[str, list[FeedbackRecord]] = {}
        self._lock = threading.Lock()

    def append(self, document_id: str, extracted: ExtractedResumeData) -> FeedbackRecord:
        with self._lock:
            records = self._records.setdefault(document_id, [])
            version = records[-1].version + 1 if records else 1
            record = build_record(document_id, version, extracted)
            records.append(record)
        return record

    def latest(self, document_id: str) -> FeedbackRecord | None:
        with self._lock:
            records = self._records.get(document_id)
            return records[-1] if records else None

    def get(self, document_id: str, version: int) -> FeedbackRecord | None:
        with self._lock:
            for record in self._records.get(document_id, []):
                if record.version == version:
                    return record
        return None

    def history(self, document_id: str) -> list[FeedbackRecord]:
        with self._lock:
            return list(reversed(self._records.get(document_id, [])))


class SqliteFeedbackStore(FeedbackStore):
    def __init__(self, db_path: str, max_retries: int = 5) -> None:
        self.db_path = db_path
        self.max_retries = max_retries
        self._lock = threading.Lock()

        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self._conn = sqlite3.connect(
            db_path,
            check_same_thread=False,
            timeout=5,
            isolation_level=None,
        )
        if db_path != ":memory:":
            self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA busy_timeout=5000;")
        self._conn.execute(
            """
            CREATE TABLE IF NOT EXISTS feedback_records (
                document_id TEXT NOT NULL,
                version INTEGER NOT NULL,
                created_at TEXT NOT NULL,
                extracted_json TEXT NOT NULL,
                sections_json TEXT NOT NULL,
                UNIQUE (document_id, version)
            );
            """
        )

    def _next_version(self, document_id: str) -> int:
        with self._lock:
            row = self._conn.execute(
                "SELECT MAX(version) FROM feedback_records WHERE document_id = ?",
                (document_id,),
            ).fetchone()
        return (row[0] or 0) + 1

    def append(self, document_id: str, extracted: ExtractedResumeData) -> FeedbackRecord:
        for attempt in range(1, self.max_retries + 1):
            record = build_record(document_id, self._next_version(document_id), extracted)
            try:
                with self._lock:
                    self._conn.execute(
                        """
                        INSERT INTO feedback_records (
                            document_id, version, created_at, extracted_json, sections_json
                        ) VALUES (?, ?, ?, ?, ?)
                        """,
                        (
                            record.document_id,
                            record.version,
                            record.created_at.isoformat(),
                            record.extracted.model_dump_json(by_alias=True),
                            json.dumps([s.model_dump(mode="json") for s in record.extracted_sections]),
                        ),
                    )
            except sqlite3.IntegrityError:
                logger.warning(
                    "Version %d of %s already taken (attempt %d/%d)",
                    record.version, document_id, attempt, self.max_retries,
                )
                continue
            return record
        raise VersionConflictError(
            f"Could not allocate a version for {document_id!r} after {self.max_retries} attempts"
        )

    def _select(self, where: str, params: tuple) -> list[FeedbackRecord]:
        with self._lock:
            rows = self._conn.execute(
                f"""
                SELECT document_id, version, created_at, extracted_json, sections_json
                FROM feedback_records
                WHERE {where}
                ORDER BY version DESC
                """,
                params,
            ).fetchall()
        return [
            FeedbackRecord(
                document_id=row[0],
                version=row[1],
                created_at=datetime.fromisoformat(row[2]),
                extracted=ExtractedResumeData.model_validate_json(row[3]),
                extracted_sections=json.loads(row[4]),
            )
            for row in rows
        ]

    def latest(self, document_id: str) -> FeedbackRecord | None:
        records = self._select("document_id = ?", (document_id,))
        return records[0] if records else None

    def get(self, document_id: str, version: int) -> FeedbackRecord | None:
        records = self._select("document_id = ? AND version = ?", (document_id, version))
        return records[0] if records else None

    def history(self, document_id: str) -> list[FeedbackRecord]:
        return self._select("document_id = ?", (document_id,))

    def close(self) -> None:
        with self._lock:
            self._conn.close()


_store: FeedbackStore | None = None
_store_lock = threading.Lock()


def get_store() -> FeedbackStore:
    """Return the process-wide store configured by settings.

    Creation is locked so concurrent first calls share one store.
    """
    global _store
    if _store is None:
        with _store_lock:
            if _store is None:
                if settings.feedback_store_backend == "sqlite":
                    _store = SqliteFeedbackStore(
                        settings.feedback_db_path, settings.store_max_retries
                    )
                    logger.info("Feedback store: sqlite at %s", settings.feedback_db_path)
                else:
                    _store = InMemoryFeedbackStore()
                    logger.info("Feedback store: in-memory")
    return _store


def clear() -> None:
    """Drop the configured store. Useful for testing."""
    global _store
    with _store_lock:
        _store = None
