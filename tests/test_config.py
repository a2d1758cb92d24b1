"""
Tests for engine configuration loading.
"""

import pytest
from pydantic import ValidationError

from docvars.config import EngineConfig, load_config


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    for name in ("DOCVARS_DOCUMENT_NUMBER_PREFIX", "DOCVARS_MAX_FOUNDER_SHARE_SLOTS", "DOCVARS_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    # No stray docvars.yaml from the working directory.
    monkeypatch.chdir(tmp_path)


def test_defaults():
    config = load_config()
    assert config == EngineConfig()
    assert config.document_number_prefix == "FR"
    assert config.max_founder_share_slots == 9
    assert config.log_level == "INFO"


def test_file_values(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("document_number_prefix: INC\nmax_founder_share_slots: 4\n", encoding="utf-8")
    config = load_config(path)
    assert config.document_number_prefix == "INC"
    assert config.max_founder_share_slots == 4


def test_default_file_in_working_directory(tmp_path):
    (tmp_path / "docvars.yaml").write_text("log_level: debug\n", encoding="utf-8")
    assert load_config().log_level == "DEBUG"


def test_environment_beats_file(tmp_path, monkeypatch):
    path = tmp_path / "settings.yaml"
    path.write_text("document_number_prefix: INC\n", encoding="utf-8")
    monkeypatch.setenv("DOCVARS_DOCUMENT_NUMBER_PREFIX", "ENV")
    monkeypatch.setenv("DOCVARS_MAX_FOUNDER_SHARE_SLOTS", "12")
    config = load_config(path)
    assert config.document_number_prefix == "ENV"
    assert config.max_founder_share_slots == 12


def test_unreadable_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "settings.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    assert load_config(path) == EngineConfig()
    path.write_text("key: [unclosed\n", encoding="utf-8")
    assert load_config(path) == EngineConfig()


class TestInvalidValues:
    """Invalid settings are rejected."""

    def test_unknown_log_level(self, monkeypatch):
        monkeypatch.setenv("DOCVARS_LOG_LEVEL", "chatty")
        with pytest.raises(ValidationError):
            load_config()

    def test_slot_range(self):
        with pytest.raises(ValidationError):
            EngineConfig(max_founder_share_slots=0)

    def test_blank_prefix(self):
        with pytest.raises(ValidationError):
            EngineConfig(document_number_prefix="   ")

    def test_prefix_is_trimmed(self):
        assert EngineConfig(document_number_prefix=" INC ").document_number_prefix == "INC"
