import pytest

import config


@pytest.fixture
def no_groq_keys(monkeypatch):
    monkeypatch.delenv("GROQ_API_KEY", raising=False)
    for i in range(2, config.MAX_GROQ_API_KEYS + 2):
        monkeypatch.delenv(f"GROQ_API_KEY_{i}", raising=False)
    return monkeypatch


def test_no_keys_configured(no_groq_keys):
    assert config._load_groq_api_keys() == []


def test_keys_are_read_in_order_and_stripped(no_groq_keys):
    no_groq_keys.setenv("GROQ_API_KEY", " gsk_first ")
    no_groq_keys.setenv("GROQ_API_KEY_2", "gsk_second")
    no_groq_keys.setenv("GROQ_API_KEY_3", "gsk_third\n")
    assert config._load_groq_api_keys() == ["gsk_first", "gsk_second", "gsk_third"]


def test_blank_slot_does_not_hide_later_keys(no_groq_keys):
    no_groq_keys.setenv("GROQ_API_KEY", "gsk_first")
    no_groq_keys.setenv("GROQ_API_KEY_2", "   ")
    no_groq_keys.setenv("GROQ_API_KEY_4", "gsk_fourth")
    assert config._load_groq_api_keys() == ["gsk_first", "gsk_fourth"]


def test_numbered_keys_work_without_the_base_key(no_groq_keys):
    no_groq_keys.setenv("GROQ_API_KEY_2", "gsk_second")
    assert config._load_groq_api_keys() == ["gsk_second"]


def test_duplicate_keys_are_kept_once(no_groq_keys):
    no_groq_keys.setenv("GROQ_API_KEY", "gsk_same")
    no_groq_keys.setenv("GROQ_API_KEY_2", "gsk_same")
    assert config._load_groq_api_keys() == ["gsk_same"]


def test_slots_past_the_limit_are_ignored(no_groq_keys):
    no_groq_keys.setenv("GROQ_API_KEY", "gsk_first")
    no_groq_keys.setenv(f"GROQ_API_KEY_{config.MAX_GROQ_API_KEYS}", "gsk_last")
    no_groq_keys.setenv(f"GROQ_API_KEY_{config.MAX_GROQ_API_KEYS + 1}", "gsk_extra")
    assert config._load_groq_api_keys() == ["gsk_first", "gsk_last"]
    assert config._load_groq_api_keys(limit=2) == ["gsk_first"]


def test_env_helper_falls_back_on_blank(monkeypatch):
    monkeypatch.setenv("SUPPORT_TEST_VALUE", "  ")
    assert config._env("SUPPORT_TEST_VALUE", "fallback") == "fallback"
    monkeypatch.setenv("SUPPORT_TEST_VALUE", " set ")
    assert config._env("SUPPORT_TEST_VALUE", "fallback") == "set"
    monkeypatch.delenv("SUPPORT_TEST_VALUE")
    assert config._env("SUPPORT_TEST_VALUE") == ""
