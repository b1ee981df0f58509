"""
Smoke Tests for CLI Commands.

These tests verify that CLI commands run without errors and produce output.
Each test points the CLI at a throwaway database through the
GRADED_READER_DB_PATH environment variable.

Usage:
    pytest tests/smoke/test_cli_commands.py -v
    pytest tests/smoke/test_cli_commands.py -v -m smoke
"""

import json

import pytest
from typer.testing import CliRunner

from graded_reader.config import get_settings
from graded_reader.review.cli import app
from graded_reader.review.state_store import StateStore

# Mark all tests in this module as smoke tests
pytestmark = pytest.mark.smoke

runner = CliRunner()


@pytest.fixture(autouse=True)
def db_path(tmp_path, monkeypatch):
    """Route settings to a temporary database."""
    path = tmp_path / "state.db"
    monkeypatch.setenv("GRADED_READER_DB_PATH", str(path))
    monkeypatch.setenv("GRADED_READER_DEFAULT_LANG_ID", "zh")
    get_settings.cache_clear()
    yield path
    get_settings.cache_clear()


def _stored(db_path, target):
    store = StateStore(db_path)
    try:
        return store.get_record(target)
    finally:
        store.close()


class TestCLIHelp:
    """Test that help commands work."""

    def test_main_help(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "study" in result.stdout
        assert "import" in result.stdout

    def test_study_help(self):
        result = runner.invoke(app, ["study", "--help"])

        assert result.exit_code == 0


class TestCLIWords:
    """Test add, words and remove."""

    def test_add_and_list(self, db_path):
        result = runner.invoke(app, ["add", "你好", "-t", "hello", "-r", "nǐ hǎo"])

        assert result.exit_code == 0
        assert "Added" in result.stdout
        assert _stored(db_path, "你好").translation == "hello"

        result = runner.invoke(app, ["words"])

        assert result.exit_code == 0
        assert "你好" in result.stdout
        assert "new" in result.stdout

    def test_add_duplicate(self):
        runner.invoke(app, ["add", "你好", "-t", "hello"])
        result = runner.invoke(app, ["add", "你好", "-t", "hi"])

        assert result.exit_code == 0
        assert "already" in result.stdout

    def test_remove(self, db_path):
        runner.invoke(app, ["add", "谢谢", "-t", "thanks"])

        result = runner.invoke(app, ["remove", "谢谢"])

        assert result.exit_code == 0
        assert _stored(db_path, "谢谢") is None

    def test_remove_missing_word(self):
        result = runner.invoke(app, ["remove", "不在"])

        assert result.exit_code == 1

    def test_unknown_language_rejected(self):
        result = runner.invoke(app, ["words", "--lang", "xx"])

        assert result.exit_code == 1
        assert "Unknown language" in result.stdout

    def test_words_empty(self):
        result = runner.invoke(app, ["words", "--lang", "ko"])

        assert result.exit_code == 0
        assert "No ko words" in result.stdout


class TestCLIImport:
    def test_import_json_export(self, tmp_path, db_path):
        path = tmp_path / "vocab.json"
        path.write_text(json.dumps({
            "안녕": {"korean": "안녕", "english": "hi", "langId": "ko"},
            "감사": {"korean": "감사", "english": "thanks"},
        }), encoding="utf-8")

        result = runner.invoke(app, ["import", str(path), "--lang", "ko"])

        assert result.exit_code == 0
        assert "Imported 2" in result.stdout
        assert _stored(db_path, "감사").lang_id == "ko"

    def test_import_bad_file(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("[]", encoding="utf-8")

        result = runner.invoke(app, ["import", str(path)])

        assert result.exit_code == 1


class TestCLIQueue:
    def test_queue_lists_new_cards(self):
        runner.invoke(app, ["add", "你好", "-t", "hello"])
        runner.invoke(app, ["add", "谢谢", "-t", "thanks"])

        result = runner.invoke(app, ["queue", "--new", "3"])

        assert result.exit_code == 0
        assert "3 cards left" in result.stdout
        assert "reverse" in result.stdout

    def test_queue_new_only_with_zero_budget(self):
        runner.invoke(app, ["add", "你好", "-t", "hello"])

        result = runner.invoke(app, ["queue", "--new", "0", "--new-only"])

        assert result.exit_code == 0
        assert "Nothing to review" in result.stdout


class TestCLIStudy:
    def test_study_full_session(self, db_path):
        runner.invoke(app, ["add", "你好", "-t", "hello"])

        # Reveal + judge for the forward card, then the reverse card
        result = runner.invoke(app, ["study"], input="\ng\n\nm\n")

        assert result.exit_code == 0, result.stdout
        assert "Session Complete!" in result.stdout

        record = _stored(db_path, "你好")
        assert record.forward.interval == 1
        assert record.forward.review_count == 1
        assert record.reverse.lapses == 1

    def test_study_resumes_same_day(self):
        runner.invoke(app, ["add", "你好", "-t", "hello"])
        runner.invoke(app, ["study"], input="\ng\n\ng\n")

        result = runner.invoke(app, ["study"])

        assert result.exit_code == 0
        assert "Nothing left to review" in result.stdout

    def test_study_with_empty_vocabulary(self):
        result = runner.invoke(app, ["study", "--lang", "yue"])

        assert result.exit_code == 0
        assert "Nothing left to review" in result.stdout
