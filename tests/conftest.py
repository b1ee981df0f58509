"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import date, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from graded_reader.review.srs import SRSState  # noqa: E402
from graded_reader.review.state_store import StateStore  # noqa: E402
from graded_reader.review.vocabulary import VocabularyRecord  # noqa: E402

TODAY = date(2024, 3, 15)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (SQLite on tmp_path)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


@pytest.fixture
def make_record():
    """
    Factory for vocabulary records.

    ``due_in`` schedules the forward direction relative to TODAY (negative
    means overdue); ``reverse_due_in`` does the same for reverse.
    """

    def _make(
        target,
        due_in=None,
        reverse_due_in=None,
        lang_id="zh",
        translation=None,
        interval=1,
    ):
        def _state(offset):
            if offset is None:
                return SRSState()
            return SRSState(
                interval=interval,
                next_review=datetime.combine(TODAY, datetime.min.time()) + timedelta(days=offset),
                review_count=1,
            )

        return VocabularyRecord(
            target=target,
            lang_id=lang_id,
            translation=translation if translation is not None else f"meaning of {target}",
            forward=_state(due_in),
            reverse=_state(reverse_due_in),
        )

    return _make


@pytest.fixture
def store(tmp_path):
    """StateStore backed by a throwaway SQLite file."""
    state_store = StateStore(tmp_path / "state.db")
    yield state_store
    state_store.close()
