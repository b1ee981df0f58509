"""
Vocabulary Records: Learned Word Loader.

Loads and normalizes learned-vocabulary entries from:
- In-memory mappings (``{target: entry}``, the persisted store shape)
- JSON exports of the same mapping (via load_vocabulary_file)

Legacy entries use per-language field names (``chinese``/``pinyin``/
``english``) and camelCase, direction-prefixed SRS fields
(``reverseInterval``). Everything is normalized once here so the engine
and session builder can assume fully populated records.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from pathlib import Path
from typing import Any

from loguru import logger

from .srs import Direction, SRSState, parse_datetime

# =============================================================================
# Languages
# =============================================================================

DEFAULT_LANG_ID = "zh"

# Legacy field names per language
LANGUAGE_FIELDS: dict[str, dict[str, str]] = {
    "zh": {"target": "chinese", "romanization": "pinyin", "translation": "english"},
    "yue": {"target": "chinese", "romanization": "jyutping", "translation": "english"},
    "ko": {"target": "korean", "romanization": "romanization", "translation": "english"},
}

SUPPORTED_LANG_IDS = tuple(LANGUAGE_FIELDS)


class VocabularyFileError(ValueError):
    """A vocabulary export could not be read or has the wrong shape."""


# =============================================================================
# Vocabulary Record
# =============================================================================


@dataclass
class VocabularyRecord:
    """
    One learned word, keyed by its target-language text.

    Holds display metadata plus one independent scheduling state per
    recall direction.
    """

    target: str
    lang_id: str = DEFAULT_LANG_ID
    translation: str = ""
    romanization: str = ""
    date_added: datetime | None = None

    forward: SRSState = field(default_factory=SRSState)
    reverse: SRSState = field(default_factory=SRSState)

    def srs(self, direction: Direction | str = Direction.FORWARD) -> SRSState:
        """Get the scheduling state for a direction."""
        if Direction.parse(direction) is Direction.REVERSE:
            return self.reverse
        return self.forward

    def with_srs(self, direction: Direction | str, state: SRSState) -> VocabularyRecord:
        """Return a copy with one direction's state replaced."""
        if Direction.parse(direction) is Direction.REVERSE:
            return replace(self, reverse=state)
        return replace(self, forward=state)

    @classmethod
    def from_dict(
        cls,
        target: str | None,
        data: Mapping,
        default_lang_id: str = DEFAULT_LANG_ID,
    ) -> VocabularyRecord:
        """
        Create a record from a stored vocabulary entry.

        Args:
            target: Mapping key (falls back to the entry's own target field)
            data: Entry dictionary in any historical shape
            default_lang_id: Language for entries saved without one

        Returns:
            Normalized VocabularyRecord
        """
        lang_id = data.get("langId") or data.get("lang_id") or default_lang_id
        legacy = LANGUAGE_FIELDS.get(lang_id, LANGUAGE_FIELDS[DEFAULT_LANG_ID])

        def pick(name: str) -> str:
            value = data.get(name) or data.get(legacy[name]) or ""
            return str(value)

        return cls(
            target=target or pick("target"),
            lang_id=lang_id,
            translation=pick("translation"),
            romanization=pick("romanization"),
            date_added=parse_datetime(data.get("dateAdded") or data.get("date_added")),
            forward=SRSState.from_dict(data, Direction.FORWARD),
            reverse=SRSState.from_dict(data, Direction.REVERSE),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the stored entry shape."""
        return {
            "target": self.target,
            "langId": self.lang_id,
            "translation": self.translation,
            "romanization": self.romanization,
            "dateAdded": self.date_added.isoformat() if self.date_added else None,
            **self.forward.to_dict(Direction.FORWARD),
            **self.reverse.to_dict(Direction.REVERSE),
        }


# =============================================================================
# Loading
# =============================================================================


def load_vocabulary(
    mapping: Mapping[str, Any],
    default_lang_id: str = DEFAULT_LANG_ID,
) -> dict[str, VocabularyRecord]:
    """
    Normalize a whole ``{target: entry}`` vocabulary mapping.

    Entries that are not mappings are skipped.
    """
    records: dict[str, VocabularyRecord] = {}
    for target, entry in mapping.items():
        if not isinstance(entry, Mapping):
            logger.warning(f"Skipping malformed vocabulary entry for {target!r}")
            continue
        record = VocabularyRecord.from_dict(target, entry, default_lang_id)
        if not record.target:
            logger.warning("Skipping vocabulary entry without a target")
            continue
        records[record.target] = record
    return records


def load_vocabulary_file(
    path: Path | str,
    default_lang_id: str = DEFAULT_LANG_ID,
) -> dict[str, VocabularyRecord]:
    """
    Load a JSON export of the learned-vocabulary map.

    Args:
        path: JSON file holding ``{target: entry}`` or
            ``{"learnedVocabulary": {target: entry}}``
        default_lang_id: Language for entries saved without one

    Returns:
        Normalized records keyed by target

    Raises:
        VocabularyFileError: File missing, not JSON, or not an object
    """
    path = Path(path)
    try:
        with open(path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise VocabularyFileError(f"Cannot read vocabulary file {path}: {e}") from e

    if isinstance(payload, dict) and isinstance(payload.get("learnedVocabulary"), dict):
        payload = payload["learnedVocabulary"]
    if not isinstance(payload, dict):
        raise VocabularyFileError(f"Vocabulary file {path} must contain a JSON object")

    records = load_vocabulary(payload, default_lang_id)
    logger.info(f"Loaded {len(records)} vocabulary records from {path}")
    return records


def filter_by_language(
    records: Iterable[VocabularyRecord],
    lang_id: str,
) -> list[VocabularyRecord]:
    """Keep only records for one language, preserving order."""
    return [record for record in records if record.lang_id == lang_id]
