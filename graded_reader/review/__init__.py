"""
Graded Reader Review Core.

Daily flashcard review of learned vocabulary, in both recall directions.

Components:
- srs: SM-2 derived scheduling, classification and mastery
- VocabularyRecord: Learned-word normalization and JSON loading
- SessionBuilder: Bounded daily review queue
- StateStore: SQLite persistence
- ReviewController: Card-by-card review loop
"""

from .reviewer import ReviewCard, ReviewController
from .session import (
    SessionBuilder,
    SessionConfig,
    SessionState,
    build_daily_session,
    should_resume,
)
from .srs import (
    Direction,
    Judgment,
    MasteryLevel,
    SortedCards,
    SRSState,
    calculate_srs,
    get_mastery_level,
    get_next_review_date,
    sort_cards_by_srs,
    start_of_day,
)
from .state_store import ReviewRecord, StateStore
from .vocabulary import (
    VocabularyFileError,
    VocabularyRecord,
    filter_by_language,
    load_vocabulary,
    load_vocabulary_file,
)

__all__ = [
    # Scheduling
    "Direction",
    "Judgment",
    "MasteryLevel",
    "SRSState",
    "SortedCards",
    "calculate_srs",
    "get_mastery_level",
    "get_next_review_date",
    "sort_cards_by_srs",
    "start_of_day",
    # Vocabulary
    "VocabularyRecord",
    "VocabularyFileError",
    "load_vocabulary",
    "load_vocabulary_file",
    "filter_by_language",
    # Sessions
    "SessionState",
    "SessionConfig",
    "SessionBuilder",
    "build_daily_session",
    "should_resume",
    # Persistence
    "StateStore",
    "ReviewRecord",
    # Review loop
    "ReviewCard",
    "ReviewController",
]
