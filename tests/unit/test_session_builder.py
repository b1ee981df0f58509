"""
Unit tests for daily session building.

Covers resumption, queue composition across both directions, the shared
new-card budget and forward-first interleaving.
"""

from datetime import date

from graded_reader.review.session import (
    SessionBuilder,
    SessionConfig,
    SessionState,
    build_daily_session,
    should_resume,
)
from graded_reader.review.srs import Direction

TODAY = date(2024, 3, 15)
F = Direction.FORWARD
R = Direction.REVERSE


def _pairs(session):
    return list(zip(session.card_keys, session.card_directions))


class TestResumption:
    def test_same_day_same_language_returns_identical_object(self, make_record):
        cards = [make_record("a"), make_record("b")]
        first = build_daily_session(cards, 10, None, "zh", today=TODAY)
        first.record_result("got")

        again = build_daily_session(cards, 10, first, "zh", today=TODAY)

        assert again is first
        assert again.index == 1

    def test_other_language_rebuilds(self, make_record):
        cards = [make_record("a")]
        zh_session = build_daily_session(cards, 10, None, "zh", today=TODAY)

        ko_session = build_daily_session([], 10, zh_session, "ko", today=TODAY)

        assert ko_session is not zh_session
        assert ko_session.lang_id == "ko"

    def test_stale_session_rebuilds(self, make_record):
        old = SessionState(date="2024-03-14", lang_id="zh", card_keys=["a"], card_directions=[F])

        session = build_daily_session([make_record("b")], 10, old, "zh", today=TODAY)

        assert session is not old
        assert session.date == "2024-03-15"

    def test_should_resume(self):
        existing = SessionState(date="2024-03-15", lang_id="zh")

        assert should_resume(existing, TODAY, "zh")
        assert not should_resume(existing, TODAY, "yue")
        assert not should_resume(None, TODAY, "zh")


class TestComposition:
    def test_fresh_session_shape(self, make_record):
        cards = [make_record(key) for key in "abc"]

        session = build_daily_session(cards, 2, None, "zh", today=TODAY)

        assert session.total <= 2
        assert session.index == 0
        assert session.results == {"got": 0, "almost": 0, "missed": 0}
        assert session.date == "2024-03-15"
        assert session.lang_id == "zh"

    def test_forward_due_then_reverse_due_then_new(self, make_record):
        cards = [
            make_record("new"),
            make_record("fwd", due_in=-1),
            make_record("rev", due_in=3, reverse_due_in=-2),
        ]

        session = build_daily_session(cards, 10, None, "zh", today=TODAY)

        assert _pairs(session) == [
            ("fwd", F),
            ("rev", R),
            ("new", F),
            ("new", R),
            ("fwd", R),
        ]
        assert session.new_cards_used == 3
        assert session.due_count == 2

    def test_due_cards_ignore_budget(self, make_record):
        cards = [make_record(key, due_in=-1, reverse_due_in=0) for key in "abcd"]

        session = build_daily_session(cards, 0, None, "zh", today=TODAY)

        assert session.total == 8
        assert session.new_cards_used == 0

    def test_due_ordered_most_overdue_first(self, make_record):
        cards = [make_record("recent", due_in=-1), make_record("old", due_in=-3)]

        session = build_daily_session(cards, 0, None, "zh", today=TODAY)

        assert session.card_keys == ["old", "recent"]

    def test_not_due_cards_excluded(self, make_record):
        cards = [make_record("later", due_in=4, reverse_due_in=1)]

        session = build_daily_session(cards, 10, None, "zh", today=TODAY)

        assert session.total == 0
        assert session.is_complete

    def test_new_only_drops_due(self, make_record):
        cards = [make_record("due", due_in=-1), make_record("new")]

        session = build_daily_session(cards, 10, None, "zh", new_only=True, today=TODAY)

        assert _pairs(session) == [("new", F), ("due", R), ("new", R)]
        assert session.due_count == 0

    def test_new_only_with_zero_budget_is_empty(self, make_record):
        cards = [make_record("due", due_in=-1), make_record("new")]

        session = build_daily_session(cards, 0, None, "zh", new_only=True, today=TODAY)

        assert session.total == 0

    def test_empty_input(self):
        session = build_daily_session([], 20, None, "zh", today=TODAY)

        assert session.total == 0
        assert session.new_cards_used == 0

    def test_duplicate_targets_kept_once_per_direction(self, make_record):
        cards = [make_record("a"), make_record("a")]

        session = build_daily_session(cards, 10, None, "zh", today=TODAY)

        assert _pairs(session) == [("a", F), ("a", R)]

    def test_accepts_raw_mappings(self):
        cards = [{"target": "a", "reviewCount": 1, "nextReview": "2024-03-10T00:00:00"}]

        session = build_daily_session(cards, 0, None, "zh", today=TODAY)

        assert _pairs(session) == [("a", F)]


class TestNewCardBudget:
    def test_alternates_forward_first(self, make_record):
        cards = [make_record(key) for key in "abc"]

        session = build_daily_session(cards, 4, None, "zh", today=TODAY)

        assert _pairs(session) == [("a", F), ("a", R), ("b", F), ("b", R)]

    def test_odd_budget_ends_on_forward(self, make_record):
        cards = [make_record(key) for key in "abc"]

        session = build_daily_session(cards, 3, None, "zh", today=TODAY)

        assert _pairs(session) == [("a", F), ("a", R), ("b", F)]
        assert session.new_cards_used == 3

    def test_continues_from_remaining_pool(self, make_record):
        cards = [
            make_record("a"),
            make_record("b", due_in=5),
            make_record("c", due_in=5),
        ]

        session = build_daily_session(cards, 10, None, "zh", today=TODAY)

        # Forward pool has only "a"; reverse pool has all three
        assert _pairs(session) == [("a", F), ("a", R), ("b", R), ("c", R)]

    def test_negative_budget_means_no_new(self, make_record):
        cards = [make_record("a"), make_record("b", due_in=-1)]

        session = build_daily_session(cards, -5, None, "zh", today=TODAY)

        assert _pairs(session) == [("b", F)]


class TestSessionBuilder:
    def test_uses_config(self, make_record):
        builder = SessionBuilder(SessionConfig(new_cards_per_day=1))
        cards = [make_record("a"), make_record("b")]

        session = builder.build(cards, None, "zh", today=TODAY)

        assert _pairs(session) == [("a", F)]

    def test_new_only_override(self, make_record):
        builder = SessionBuilder(SessionConfig(new_cards_per_day=5))
        cards = [make_record("due", due_in=-1), make_record("new")]

        session = builder.build(cards, None, "zh", new_only=True, today=TODAY)

        assert ("due", F) not in _pairs(session)

    def test_default_config(self):
        assert SessionBuilder().config.new_cards_per_day == 20
