"""
Review Controller.

Connects a presentation (flashcard CLI, or any other review mode) to the
core:

    store -> today's session -> one card at a time -> judgment
          -> SRS update -> record written back -> session advances

The in-memory session is authoritative. Store writes that fail are logged
and never undo progress already made.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from datetime import date

from loguru import logger

from .session import SessionBuilder, SessionState
from .srs import Direction, Judgment, SRSState, calculate_srs
from .state_store import StateStore
from .vocabulary import VocabularyRecord


@dataclass
class ReviewCard:
    """A vocabulary record presented in one direction."""

    record: VocabularyRecord
    direction: Direction

    @property
    def front(self) -> str:
        """Prompt side: the word for forward cards, the meaning for reverse."""
        if self.direction is Direction.REVERSE:
            return self.record.translation
        return self.record.target

    @property
    def back(self) -> str:
        if self.direction is Direction.REVERSE:
            return self.record.target
        return self.record.translation


class ReviewController:
    """
    Drives one language's daily review.

    Key responsibilities:
    1. Resume or rebuild today's session, saving only on rebuild
    2. Hand out the next card
    3. Apply judgments to the SRS state and the session progress
    """

    def __init__(
        self,
        store: StateStore,
        builder: SessionBuilder | None = None,
        today: date | None = None,
    ):
        """
        Initialize the controller.

        Args:
            store: Persistence for vocabulary and sessions
            builder: SessionBuilder (creates default if None)
            today: Fixed reference date (defaults to the current date)
        """
        self.store = store
        self.builder = builder or SessionBuilder()
        self._today = today

        self.session: SessionState | None = None
        self.vocabulary: dict[str, VocabularyRecord] = {}

    @property
    def today(self) -> date:
        return self._today or date.today()

    def preview(self, lang_id: str, new_only: bool | None = None) -> SessionState:
        """Build (or resume) today's session without saving anything."""
        vocabulary = self.store.get_vocabulary(lang_id)
        existing = self.store.load_session(lang_id, self.today)
        return self.builder.build(
            vocabulary.values(), existing, lang_id, new_only=new_only, today=self.today
        )

    def start(self, lang_id: str, new_only: bool | None = None) -> SessionState:
        """
        Start or resume today's session for a language.

        Args:
            lang_id: Language to review
            new_only: Override the builder's new-only setting

        Returns:
            The active SessionState
        """
        self.vocabulary = self.store.get_vocabulary(lang_id)
        existing = self.store.load_session(lang_id, self.today)

        session = self.builder.build(
            self.vocabulary.values(), existing, lang_id, new_only=new_only, today=self.today
        )
        if session is not existing:
            self._save_session(session)

        self.session = session
        return session

    def current_card(self) -> ReviewCard | None:
        """
        Get the card to present next.

        Cards whose word has since been removed are skipped.
        """
        if self.session is None:
            return None

        while (pair := self.session.current()) is not None:
            key, direction = pair
            record = self.vocabulary.get(key)
            if record is not None:
                return ReviewCard(record=record, direction=direction)
            logger.debug(f"Skipping {key!r}: no longer in vocabulary")
            self.session.skip()

        return None

    def judge(self, judgment: Judgment | str) -> SRSState | None:
        """
        Apply a judgment to the current card.

        Args:
            judgment: got / almost / missed

        Returns:
            The card's new SRSState, or None if nothing was recorded
            (unrecognized judgment or no card left)
        """
        parsed = Judgment.parse(judgment)
        if parsed is None:
            logger.warning(f"Ignoring unrecognized judgment {judgment!r}")
            return None

        card = self.current_card()
        if card is None:
            return None

        state = calculate_srs(parsed, card.record, card.direction, today=self.today)
        record = card.record.with_srs(card.direction, state)
        self.vocabulary[record.target] = record
        self.session.record_result(parsed)

        self._save_review(record.target, card.direction, parsed, state)
        self._save_session(self.session)

        logger.debug(
            f"Recorded {parsed.value} for {record.target} ({card.direction.value}): "
            f"interval={state.interval}d, ease={state.ease:.2f}"
        )

        return state

    def _save_review(
        self,
        target: str,
        direction: Direction,
        judgment: Judgment,
        state: SRSState,
    ) -> None:
        try:
            self.store.save_srs(target, direction, state)
            self.store.log_review(target, direction, judgment, state)
        except sqlite3.Error as e:
            logger.warning(f"Could not save review for {target}: {e}")

    def _save_session(self, session: SessionState) -> None:
        try:
            self.store.save_session(session)
        except sqlite3.Error as e:
            logger.warning(f"Could not save {session.lang_id} session: {e}")
