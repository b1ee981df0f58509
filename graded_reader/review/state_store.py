"""
SQLite State Store for the review core.

Provides portable persistence for:
- Vocabulary records with forward and reverse SRS state
- Daily sessions keyed by day + language
- Review history log

Database location: ~/.graded_reader/state.db (see config.Settings.db_path)
"""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from datetime import date, datetime
from pathlib import Path

from loguru import logger

from .session import SessionState
from .srs import Direction, Judgment, SRSState, parse_datetime
from .vocabulary import DEFAULT_LANG_ID, VocabularyRecord

# Per-direction SRS columns in the vocabulary table
_SRS_COLUMNS = ("interval", "ease", "next_review", "review_count", "lapses")


def _srs_columns(direction: Direction) -> list[str]:
    prefix = "reverse_" if direction is Direction.REVERSE else ""
    return [f"{prefix}{column}" for column in _SRS_COLUMNS]


def _srs_values(state: SRSState) -> tuple:
    next_review = state.next_review.isoformat() if state.next_review else None
    return (state.interval, state.ease, next_review, state.review_count, state.lapses)


# =============================================================================
# Data Classes
# =============================================================================


@dataclass
class ReviewRecord:
    """A single logged review."""

    id: int
    target: str
    direction: Direction
    judgment: Judgment
    reviewed_at: datetime | None
    interval_after: int
    ease_after: float


# =============================================================================
# State Store
# =============================================================================


class StateStore:
    """
    SQLite-backed persistence for vocabulary and sessions.

    Handles:
    - Vocabulary rows (metadata + both directions' SRS fields)
    - One session per (date, language)
    - Review log for history
    """

    def __init__(self, db_path: Path | str | None = None):
        """
        Initialize the state store.

        Args:
            db_path: Custom database path (defaults to the configured path)
        """
        if db_path is None:
            from graded_reader.config import get_settings

            db_path = get_settings().db_path
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self._conn: sqlite3.Connection | None = None
        self._init_schema()

        logger.info(f"StateStore initialized at {self.db_path}")

    @property
    def conn(self) -> sqlite3.Connection:
        """Get or create database connection."""
        if self._conn is None:
            self._conn = sqlite3.connect(str(self.db_path))
            self._conn.row_factory = sqlite3.Row
        return self._conn

    def _init_schema(self) -> None:
        """Initialize database schema."""
        cursor = self.conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS vocabulary (
                target TEXT PRIMARY KEY,
                lang_id TEXT NOT NULL,
                translation TEXT DEFAULT '',
                romanization TEXT DEFAULT '',
                date_added TEXT,
                interval INTEGER DEFAULT 0,
                ease REAL DEFAULT 2.5,
                next_review TEXT,
                review_count INTEGER DEFAULT 0,
                lapses INTEGER DEFAULT 0,
                reverse_interval INTEGER DEFAULT 0,
                reverse_ease REAL DEFAULT 2.5,
                reverse_next_review TEXT,
                reverse_review_count INTEGER DEFAULT 0,
                reverse_lapses INTEGER DEFAULT 0
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS daily_session (
                date TEXT NOT NULL,
                lang_id TEXT NOT NULL,
                payload TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                PRIMARY KEY (date, lang_id)
            )
        """)

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS review_log (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                target TEXT NOT NULL,
                direction TEXT NOT NULL,
                judgment TEXT NOT NULL,
                reviewed_at TEXT NOT NULL,
                interval_after INTEGER,
                ease_after REAL
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_vocabulary_lang
            ON vocabulary(lang_id)
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_review_log_target
            ON review_log(target)
        """)

        self.conn.commit()

    # =========================================================================
    # Vocabulary Operations
    # =========================================================================

    def _row_to_record(self, row: sqlite3.Row) -> VocabularyRecord:
        data = dict(row)
        return VocabularyRecord(
            target=data["target"],
            lang_id=data["lang_id"],
            translation=data["translation"] or "",
            romanization=data["romanization"] or "",
            date_added=parse_datetime(data["date_added"]),
            forward=SRSState.from_dict(data, Direction.FORWARD),
            reverse=SRSState.from_dict(data, Direction.REVERSE),
        )

    def _upsert(self, record: VocabularyRecord, overwrite: bool) -> bool:
        columns = [
            "target", "lang_id", "translation", "romanization", "date_added",
            *_srs_columns(Direction.FORWARD),
            *_srs_columns(Direction.REVERSE),
        ]
        values = (
            record.target,
            record.lang_id,
            record.translation,
            record.romanization,
            record.date_added.isoformat() if record.date_added else None,
            *_srs_values(record.forward),
            *_srs_values(record.reverse),
        )
        placeholders = ", ".join("?" for _ in columns)
        if overwrite:
            updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c != "target")
            conflict = f"DO UPDATE SET {updates}"
        else:
            conflict = "DO NOTHING"

        cursor = self.conn.cursor()
        cursor.execute(
            f"INSERT INTO vocabulary ({', '.join(columns)}) VALUES ({placeholders}) "
            f"ON CONFLICT(target) {conflict}",
            values,
        )
        return cursor.rowcount > 0

    def add_words(self, words: Iterable[Mapping], lang_id: str | None = None) -> int:
        """
        Add newly learned words without touching existing progress.

        Args:
            words: Word entries (generic or legacy field names)
            lang_id: Language to record when an entry has none

        Returns:
            Number of words actually inserted
        """
        now = datetime.now()
        inserted = 0
        for word in words:
            record = VocabularyRecord.from_dict(None, word, lang_id or DEFAULT_LANG_ID)
            if not record.target:
                continue
            if record.date_added is None:
                record.date_added = now
            if self._upsert(record, overwrite=False):
                inserted += 1
        self.conn.commit()

        logger.debug(f"Added {inserted} new words")
        return inserted

    def import_vocabulary(self, records: Iterable[VocabularyRecord]) -> int:
        """
        Upsert normalized records, replacing existing rows.

        Returns:
            Number of records written
        """
        count = 0
        for record in records:
            self._upsert(record, overwrite=True)
            count += 1
        self.conn.commit()
        return count

    def get_vocabulary(self, lang_id: str | None = None) -> dict[str, VocabularyRecord]:
        """
        Get vocabulary records in insertion order.

        Args:
            lang_id: Restrict to one language (all languages if None)

        Returns:
            Records keyed by target
        """
        cursor = self.conn.cursor()
        if lang_id is None:
            cursor.execute("SELECT * FROM vocabulary ORDER BY rowid")
        else:
            cursor.execute("SELECT * FROM vocabulary WHERE lang_id = ? ORDER BY rowid", (lang_id,))
        return {row["target"]: self._row_to_record(row) for row in cursor.fetchall()}

    def get_record(self, target: str) -> VocabularyRecord | None:
        """Get one vocabulary record by its target text."""
        cursor = self.conn.cursor()
        cursor.execute("SELECT * FROM vocabulary WHERE target = ?", (target,))
        row = cursor.fetchone()
        return self._row_to_record(row) if row else None

    def delete_word(self, target: str) -> bool:
        """Remove a word. Returns False if it did not exist."""
        cursor = self.conn.cursor()
        cursor.execute("DELETE FROM vocabulary WHERE target = ?", (target,))
        self.conn.commit()
        return cursor.rowcount > 0

    def save_srs(self, target: str, direction: Direction, state: SRSState) -> None:
        """
        Save one direction's SRS state for a word.

        Args:
            target: Word key
            direction: Direction whose fields are written
            state: New scheduling state
        """
        assignments = ", ".join(f"{column} = ?" for column in _srs_columns(direction))
        cursor = self.conn.cursor()
        cursor.execute(
            f"UPDATE vocabulary SET {assignments} WHERE target = ?",
            (*_srs_values(state), target),
        )
        self.conn.commit()

    # =========================================================================
    # Review Log Operations
    # =========================================================================

    def log_review(
        self,
        target: str,
        direction: Direction,
        judgment: Judgment,
        state: SRSState,
    ) -> int:
        """
        Log a review event.

        Returns:
            Review record ID
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO review_log (
                target, direction, judgment, reviewed_at, interval_after, ease_after
            ) VALUES (?, ?, ?, ?, ?, ?)
        """,
            (
                target,
                direction.value,
                judgment.value,
                datetime.now().isoformat(),
                state.interval,
                state.ease,
            ),
        )
        self.conn.commit()
        return cursor.lastrowid

    def get_review_history(self, target: str, limit: int = 10) -> list[ReviewRecord]:
        """
        Get review history for a word, most recent first.
        """
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT * FROM review_log
            WHERE target = ?
            ORDER BY id DESC
            LIMIT ?
        """,
            (target, limit),
        )

        return [
            ReviewRecord(
                id=row["id"],
                target=row["target"],
                direction=Direction(row["direction"]),
                judgment=Judgment(row["judgment"]),
                reviewed_at=parse_datetime(row["reviewed_at"]),
                interval_after=row["interval_after"],
                ease_after=row["ease_after"],
            )
            for row in cursor.fetchall()
        ]

    # =========================================================================
    # Session Operations
    # =========================================================================

    def load_session(self, lang_id: str, day: date | str) -> SessionState | None:
        """
        Load the session saved for a language on one day.

        Args:
            lang_id: Language the session covers
            day: Calendar day (date or ``YYYY-MM-DD``)

        Returns:
            SessionState, or None when nothing usable is stored for that day
        """
        day_key = day.isoformat() if isinstance(day, date) else day
        cursor = self.conn.cursor()
        cursor.execute(
            """
            SELECT payload FROM daily_session
            WHERE lang_id = ? AND date = ?
        """,
            (lang_id, day_key),
        )
        row = cursor.fetchone()
        if row is None:
            return None

        try:
            payload = json.loads(row["payload"])
        except json.JSONDecodeError:
            logger.warning(f"Ignoring unreadable session payload for {lang_id} on {day_key}")
            return None
        return SessionState.from_dict(payload)

    def save_session(self, session: SessionState) -> None:
        """Save or update the session for its (date, language)."""
        cursor = self.conn.cursor()
        cursor.execute(
            """
            INSERT INTO daily_session (date, lang_id, payload, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(date, lang_id) DO UPDATE SET
                payload = excluded.payload,
                updated_at = excluded.updated_at
        """,
            (
                session.date,
                session.lang_id,
                json.dumps(session.to_dict(), ensure_ascii=False),
                datetime.now().isoformat(),
            ),
        )
        self.conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._conn:
            self._conn.close()
            self._conn = None
