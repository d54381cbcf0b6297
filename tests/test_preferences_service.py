"""
Tests for the JSON-file Preferences Store
"""

import json
import pytest
import sys
import os

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from services.preferences_service import Preferences


class TestPreferences:
    """Tests for reading and writing preferences."""

    def test_missing_file_reads_empty(self, tmp_preferences):
        assert tmp_preferences.get("anything") is None
        assert tmp_preferences.get("anything", 5) == 5
        assert tmp_preferences.hidden_posts() == {}

    def test_set_creates_directory_and_file(self, tmp_preferences):
        tmp_preferences.set("theme", "dark")

        assert os.path.exists(tmp_preferences.path)
        with open(tmp_preferences.path, encoding="utf-8") as f:
            assert json.load(f) == {"theme": "dark"}

    def test_set_preserves_other_keys(self, tmp_preferences):
        tmp_preferences.set("a", 1)
        tmp_preferences.set("b", 2)

        assert tmp_preferences.get("a") == 1
        assert tmp_preferences.get("b") == 2

    def test_dictionary_rejects_non_dict(self, tmp_preferences):
        tmp_preferences.set("hiddenPosts", ["post-1"])
        assert tmp_preferences.dictionary("hiddenPosts") is None

    def test_corrupt_file_reads_empty(self, tmp_path, capture_logs):
        path = tmp_path / "preferences.json"
        path.write_text("{not json", encoding="utf-8")

        prefs = Preferences(path=str(path))

        assert prefs.get("hiddenPosts") is None
        assert any("Could not read preferences" in r.getMessage() for r in capture_logs)

    def test_hide_post(self, tmp_preferences):
        tmp_preferences.hide_post("post-1")
        tmp_preferences.hide_post("post-2")

        assert tmp_preferences.is_hidden("post-1")
        assert tmp_preferences.is_hidden("post-2")
        assert not tmp_preferences.is_hidden("post-3")
        assert set(tmp_preferences.dictionary("hiddenPosts")) == {"post-1", "post-2"}

    def test_reads_hidden_posts_written_elsewhere(self, tmp_path):
        path = tmp_path / "preferences.json"
        path.write_text(json.dumps({"hiddenPosts": {"post-9": 1700000000}}), encoding="utf-8")

        assert Preferences(path=str(path)).is_hidden("post-9")

    def test_default_path_from_settings(self, patched_settings):
        assert Preferences().path == "/tmp/pulse_test_preferences.json"
