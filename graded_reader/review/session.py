"""
Daily Session Builder.

Builds the bounded review queue for one calendar day and one language.

Key principles:
1. A session built today for a language is resumed, never rebuilt
2. Due cards always come first and are never budget-limited
3. New cards share one daily budget across both directions
4. New forward and reverse cards alternate, forward first
5. Cards that are not yet due are left out of the day entirely
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from loguru import logger

from .srs import Direction, Judgment, sort_cards_by_srs

RESULT_KEYS = tuple(judgment.value for judgment in Judgment)


def _empty_results() -> dict[str, int]:
    return {key: 0 for key in RESULT_KEYS}


# =============================================================================
# Session State
# =============================================================================


@dataclass
class SessionState:
    """
    The review plan for one day and one language.

    ``card_keys`` and ``card_directions`` are parallel sequences; ``index``
    points at the next card to present.
    """

    date: str  # YYYY-MM-DD
    lang_id: str
    card_keys: list[str] = field(default_factory=list)
    card_directions: list[Direction] = field(default_factory=list)
    index: int = 0
    results: dict[str, int] = field(default_factory=_empty_results)
    new_cards_used: int = 0

    @property
    def total(self) -> int:
        return len(self.card_keys)

    @property
    def remaining(self) -> int:
        return self.total - self.index

    @property
    def is_complete(self) -> bool:
        return self.index >= self.total

    @property
    def due_count(self) -> int:
        """Due pairs lead the queue, so everything before the new ones."""
        return self.total - self.new_cards_used

    def is_valid_for(self, today: date, lang_id: str) -> bool:
        """Check whether this session belongs to ``today`` and ``lang_id``."""
        return self.date == today.isoformat() and self.lang_id == lang_id

    def current(self) -> tuple[str, Direction] | None:
        """Get the next (key, direction) pair, or None when finished."""
        if self.is_complete:
            return None
        return self.card_keys[self.index], self.card_directions[self.index]

    def record_result(self, judgment: Judgment | str) -> bool:
        """
        Tally a judgment for the current card and advance.

        Returns:
            False (and changes nothing) for an unrecognized judgment or a
            finished session
        """
        parsed = Judgment.parse(judgment)
        if parsed is None or self.is_complete:
            return False
        self.results[parsed.value] = self.results.get(parsed.value, 0) + 1
        self.index += 1
        return True

    def skip(self) -> bool:
        """Advance past the current card without recording a result."""
        if self.is_complete:
            return False
        self.index += 1
        return True

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the persisted session shape."""
        return {
            "date": self.date,
            "langId": self.lang_id,
            "cardKeys": list(self.card_keys),
            "cardDirections": [direction.value for direction in self.card_directions],
            "index": self.index,
            "results": dict(self.results),
            "newCardsUsed": self.new_cards_used,
        }

    @classmethod
    def from_dict(cls, data: Any) -> SessionState | None:
        """
        Restore a persisted session.

        Returns:
            SessionState, or None when the payload is malformed or breaks
            the session invariants (callers then build a fresh session)
        """
        if not isinstance(data, Mapping):
            return None

        try:
            day = data["date"]
            lang_id = data["langId"]
            card_keys = list(data.get("cardKeys") or [])
            card_directions = [Direction(value) for value in data.get("cardDirections") or []]
            index = int(data.get("index", 0))
            new_cards_used = int(data.get("newCardsUsed", 0))
            results = _empty_results()
            for key, value in (data.get("results") or {}).items():
                results[key] = int(value)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning(f"Discarding malformed session payload: {e}")
            return None

        if not isinstance(day, str) or not isinstance(lang_id, str):
            return None
        if (
            len(card_keys) != len(card_directions)
            or not 0 <= index <= len(card_keys)
            or not 0 <= new_cards_used <= len(card_keys)
        ):
            logger.warning(f"Discarding inconsistent session for {lang_id} on {day}")
            return None

        return cls(
            date=day,
            lang_id=lang_id,
            card_keys=card_keys,
            card_directions=card_directions,
            index=index,
            results=results,
            new_cards_used=new_cards_used,
        )


# =============================================================================
# Session Building
# =============================================================================


def should_resume(existing_session: SessionState | None, today: date, lang_id: str) -> bool:
    """Resume only a session built for the same day and language."""
    return existing_session is not None and existing_session.is_valid_for(today, lang_id)


def _card_key(card: Any) -> str | None:
    if isinstance(card, Mapping):
        return card.get("target")
    return getattr(card, "target", None)


def _pairs(
    cards: list,
    direction: Direction,
    seen: set[tuple[str, Direction]],
) -> list[tuple[str, Direction]]:
    """Turn cards into unique (key, direction) pairs, keeping order."""
    pairs = []
    for card in cards:
        key = _card_key(card)
        if not key or (key, direction) in seen:
            continue
        seen.add((key, direction))
        pairs.append((key, direction))
    return pairs


def _interleave_new(
    forward_new: list[tuple[str, Direction]],
    reverse_new: list[tuple[str, Direction]],
    budget: int,
) -> list[tuple[str, Direction]]:
    """
    Pick new pairs up to the shared budget.

    Strategy:
    - Alternate forward, reverse, forward, ... while both pools have cards
    - Continue from whichever pool is left once the other runs out
    """
    budget = max(0, budget)
    selected: list[tuple[str, Direction]] = []
    fi = ri = 0

    while len(selected) < budget and (fi < len(forward_new) or ri < len(reverse_new)):
        if fi < len(forward_new):
            selected.append(forward_new[fi])
            fi += 1
            if len(selected) >= budget:
                break
        if ri < len(reverse_new):
            selected.append(reverse_new[ri])
            ri += 1

    return selected


def build_daily_session(
    all_cards: Iterable,
    new_card_budget: int,
    existing_session: SessionState | None,
    lang_id: str,
    *,
    new_only: bool = False,
    today: date | None = None,
) -> SessionState:
    """
    Build (or resume) today's review session for a language.

    Args:
        all_cards: Every vocabulary record for ``lang_id``
        new_card_budget: Maximum never-reviewed pairs for the day
        existing_session: Previously built session, if any
        lang_id: Language the session covers
        new_only: Leave out due cards entirely
        today: Reference date (defaults to today)

    Returns:
        ``existing_session`` itself when it is still valid, otherwise a
        fresh SessionState
    """
    today = today or date.today()

    if should_resume(existing_session, today, lang_id):
        logger.debug(f"Resuming {lang_id} session for {today} at card {existing_session.index}")
        return existing_session

    cards = list(all_cards)
    forward = sort_cards_by_srs(cards, Direction.FORWARD, today)
    reverse = sort_cards_by_srs(cards, Direction.REVERSE, today)
    seen: set[tuple[str, Direction]] = set()

    # 1. Due cards, forward then reverse
    due_pairs: list[tuple[str, Direction]] = []
    if not new_only:
        due_pairs.extend(_pairs(forward.due, Direction.FORWARD, seen))
        due_pairs.extend(_pairs(reverse.due, Direction.REVERSE, seen))

    logger.debug(f"Found {len(due_pairs)} due pairs for {lang_id}")

    # 2. New cards from both directions under one budget
    new_pairs = _interleave_new(
        _pairs(forward.new, Direction.FORWARD, seen),
        _pairs(reverse.new, Direction.REVERSE, seen),
        new_card_budget,
    )

    logger.debug(f"Selected {len(new_pairs)} new pairs (budget {new_card_budget})")

    queue = due_pairs + new_pairs
    session = SessionState(
        date=today.isoformat(),
        lang_id=lang_id,
        card_keys=[key for key, _ in queue],
        card_directions=[direction for _, direction in queue],
        new_cards_used=len(new_pairs),
    )

    logger.info(
        f"Session built for {lang_id} on {session.date}: {len(due_pairs)} due + "
        f"{len(new_pairs)} new = {session.total} cards"
    )

    return session


# =============================================================================
# Session Builder
# =============================================================================


@dataclass
class SessionConfig:
    """Configuration for daily session building."""

    new_cards_per_day: int = 20
    new_only: bool = False


class SessionBuilder:
    """
    Builds daily sessions with a fixed configuration.

    Thin wrapper so callers configure the new-card budget once.
    """

    def __init__(self, config: SessionConfig | None = None):
        """
        Initialize the builder.

        Args:
            config: Session configuration (uses defaults if None)
        """
        self.config = config or SessionConfig()

    def build(
        self,
        all_cards: Iterable,
        existing_session: SessionState | None,
        lang_id: str,
        *,
        new_only: bool | None = None,
        today: date | None = None,
    ) -> SessionState:
        """Build or resume today's session (see build_daily_session)."""
        return build_daily_session(
            all_cards,
            self.config.new_cards_per_day,
            existing_session,
            lang_id,
            new_only=self.config.new_only if new_only is None else new_only,
            today=today,
        )
