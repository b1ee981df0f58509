"""
SM-2 Derived Spaced Repetition Engine.

Implements:
- Per-card scheduling update from a recall judgment (got / almost / missed)
- Due / new / not-due classification against local midnight
- Mastery level classification

Every card carries two independent scheduling states, one per recall
direction (forward: see the word, recall the meaning; reverse: see the
meaning, produce the word).

Judgment rules:
    got    - interval 0 -> 1, 1 -> 3, otherwise interval * ease; ease + 0.1
    almost - interval reset to 1; ease unchanged
    missed - interval reset to 0; ease - 0.2; lapse recorded
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any

# =============================================================================
# Constants
# =============================================================================

DEFAULT_EASE = 2.5
MIN_EASE = 1.3
MAX_EASE = 3.0
EASE_BONUS = 0.1
EASE_PENALTY = 0.2
MASTERED_INTERVAL_DAYS = 21


# =============================================================================
# Enums
# =============================================================================


class Direction(str, Enum):
    """Recall direction of a card."""

    FORWARD = "forward"
    REVERSE = "reverse"

    @classmethod
    def parse(cls, value: Any) -> Direction:
        """Anything that is not ``reverse`` is treated as forward."""
        if value == cls.REVERSE or value == cls.REVERSE.value:
            return cls.REVERSE
        return cls.FORWARD


class Judgment(str, Enum):
    """User-reported recall outcome for one review."""

    GOT = "got"
    ALMOST = "almost"
    MISSED = "missed"

    @classmethod
    def parse(cls, value: Any) -> Judgment | None:
        """Return the matching judgment, or None for an unrecognized value."""
        try:
            return cls(value)
        except (ValueError, TypeError):
            return None


class MasteryLevel(str, Enum):
    """Coarse progress bucket for dashboards and word lists."""

    NEW = "new"
    LEARNING = "learning"
    MASTERED = "mastered"


# =============================================================================
# Field Normalization
# =============================================================================

# (camelCase name, snake_case name) for each scheduling field
_SRS_FIELDS = (
    ("interval", "interval"),
    ("ease", "ease"),
    ("nextReview", "next_review"),
    ("reviewCount", "review_count"),
    ("lapses", "lapses"),
)


def _camel_key(name: str, direction: Direction) -> str:
    if direction is Direction.REVERSE:
        return f"reverse{name[0].upper()}{name[1:]}"
    return name


def _snake_key(name: str, direction: Direction) -> str:
    if direction is Direction.REVERSE:
        return f"reverse_{name}"
    return name


def _lookup(data: Mapping, camel: str, snake: str, direction: Direction) -> Any:
    value = data.get(_camel_key(camel, direction))
    if value is None:
        value = data.get(_snake_key(snake, direction))
    return value


def _as_count(value: Any, default: int = 0) -> int:
    """Coerce to a non-negative integer, falling back to ``default``."""
    if value is None or isinstance(value, bool):
        return default
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number) or number < 0:
        return default
    return int(number)


def _as_ease(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return DEFAULT_EASE
    try:
        number = float(value)
    except (TypeError, ValueError):
        return DEFAULT_EASE
    if not math.isfinite(number):
        return DEFAULT_EASE
    return min(max(number, MIN_EASE), MAX_EASE)


def parse_datetime(value: Any) -> datetime | None:
    """
    Parse a stored timestamp into a naive local datetime.

    Accepts datetimes, dates and ISO-8601 strings (a trailing ``Z`` and UTC
    offsets are honoured and converted to local time). Anything else yields
    None.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        return datetime.combine(value, time.min)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class SRSState:
    """Scheduling state for one direction of one card."""

    interval: int = 0  # Days until next review
    ease: float = DEFAULT_EASE  # Interval growth multiplier
    next_review: datetime | None = None  # Local midnight of the due day
    review_count: int = 0
    lapses: int = 0

    @classmethod
    def from_dict(
        cls,
        data: Mapping | None,
        direction: Direction = Direction.FORWARD,
    ) -> SRSState:
        """
        Normalize whatever a stored record carries into a full state.

        Reads camelCase keys (``reverseInterval``) first, then snake_case
        (``reverse_interval``). Missing or malformed fields take their
        defaults; ease is clamped into range.

        Args:
            data: Record mapping (may be empty or None)
            direction: Which direction's fields to read

        Returns:
            Fully populated SRSState
        """
        if not data:
            return cls()

        values = {
            snake: _lookup(data, camel, snake, direction) for camel, snake in _SRS_FIELDS
        }
        return cls(
            interval=_as_count(values["interval"]),
            ease=_as_ease(values["ease"]),
            next_review=parse_datetime(values["next_review"]),
            review_count=_as_count(values["review_count"]),
            lapses=_as_count(values["lapses"]),
        )

    def to_dict(self, direction: Direction = Direction.FORWARD) -> dict[str, Any]:
        """Serialize with the direction's camelCase keys."""
        next_review = self.next_review.isoformat() if self.next_review else None
        return {
            _camel_key("interval", direction): self.interval,
            _camel_key("ease", direction): self.ease,
            _camel_key("nextReview", direction): next_review,
            _camel_key("reviewCount", direction): self.review_count,
            _camel_key("lapses", direction): self.lapses,
        }

    @property
    def is_new(self) -> bool:
        """Never reviewed and never scheduled."""
        return self.review_count == 0 and self.next_review is None


@dataclass
class SortedCards:
    """Result of classifying cards for one direction."""

    due: list = field(default_factory=list)
    new: list = field(default_factory=list)
    not_due: list = field(default_factory=list)

    @property
    def sorted(self) -> list:
        """Default presentation order: due, then new, then not-due."""
        return [*self.due, *self.new, *self.not_due]


# =============================================================================
# Scheduling
# =============================================================================


def start_of_day(today: date | None = None) -> datetime:
    """Local midnight of ``today`` (defaults to the current date)."""
    return datetime.combine(today or date.today(), time.min)


def get_next_review_date(interval_days: int, today: date | None = None) -> datetime:
    """
    Get the next review timestamp for an interval.

    Normalized to midnight so that every review made on the same day
    compares equal.

    Args:
        interval_days: Days from today
        today: Reference date (defaults to the current date)

    Returns:
        Local midnight ``interval_days`` after today
    """
    return start_of_day(today) + timedelta(days=interval_days)


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _resolve_state(record: Any, direction: Direction) -> SRSState:
    if record is None:
        return SRSState()
    if isinstance(record, SRSState):
        return record
    if isinstance(record, Mapping):
        return SRSState.from_dict(record, direction)
    return record.srs(direction)


def calculate_srs(
    judgment: Judgment | str,
    record: Any,
    direction: Direction | str = Direction.FORWARD,
    today: date | None = None,
) -> SRSState:
    """
    Calculate the next scheduling state after a judgment.

    Args:
        judgment: got / almost / missed (anything else is a no-op)
        record: VocabularyRecord, SRSState, raw mapping or None
        direction: Which direction's state to update
        today: Reference date for the next review (defaults to today)

    Returns:
        Updated SRSState; the caller persists it onto the record
    """
    direction = Direction.parse(direction)
    state = _resolve_state(record, direction)
    parsed = Judgment.parse(judgment)

    if parsed is Judgment.GOT:
        if state.interval == 0:
            interval = 1
        elif state.interval == 1:
            interval = 3
        else:
            interval = _round_half_up(state.interval * state.ease)
        ease = min(state.ease + EASE_BONUS, MAX_EASE)
        lapses = state.lapses
    elif parsed is Judgment.ALMOST:
        interval = 1
        ease = state.ease
        lapses = state.lapses
    elif parsed is Judgment.MISSED:
        interval = 0
        ease = max(state.ease - EASE_PENALTY, MIN_EASE)
        lapses = state.lapses + 1
    else:
        # Unrecognized judgment: no review happened
        return state

    return SRSState(
        interval=interval,
        ease=ease,
        next_review=get_next_review_date(interval, today),
        review_count=state.review_count + 1,
        lapses=lapses,
    )


# =============================================================================
# Classification
# =============================================================================


def sort_cards_by_srs(
    cards: Iterable,
    direction: Direction | str = Direction.FORWARD,
    today: date | None = None,
) -> SortedCards:
    """
    Split cards into due, new and not-due groups for one direction.

    Due cards are ordered most overdue first; a reviewed card without a
    scheduled date counts as infinitely overdue. Ties keep input order.

    Args:
        cards: VocabularyRecords or mappings carrying SRS fields
        direction: Which direction's state to classify
        today: Reference date (defaults to today)

    Returns:
        SortedCards holding the input card objects
    """
    direction = Direction.parse(direction)
    now = start_of_day(today)
    result = SortedCards()
    due: list[tuple[float, Any]] = []

    for card in cards:
        state = _resolve_state(card, direction)
        if state.is_new:
            result.new.append(card)
        elif state.next_review is None or state.next_review <= now:
            if state.next_review is None:
                overdue_by = math.inf
            else:
                overdue_by = (now - state.next_review).total_seconds()
            due.append((overdue_by, card))
        else:
            result.not_due.append(card)

    due.sort(key=lambda entry: entry[0], reverse=True)
    result.due = [card for _, card in due]
    return result


def get_mastery_level(record: Any, direction: Direction | str = Direction.FORWARD) -> MasteryLevel:
    """Classify a card direction as new, learning or mastered."""
    state = _resolve_state(record, Direction.parse(direction))
    if state.review_count == 0:
        return MasteryLevel.NEW
    if state.interval >= MASTERED_INTERVAL_DAYS:
        return MasteryLevel.MASTERED
    return MasteryLevel.LEARNING
