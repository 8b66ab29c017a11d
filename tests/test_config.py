"""Tests for chainkit config."""

from src.chainkit.config import ChainSettings, get_settings


def test_chain_settings_defaults():
    """ChainSettings has expected default values."""
    settings = ChainSettings()
    assert settings.ENABLE_CHAIN_TRACING is False
    assert settings.TRACING_LOG_LEVEL == "INFO"
    assert settings.MEMORY_KEY == "history"
    assert settings.HUMAN_PREFIX == "Human"
    assert settings.AI_PREFIX == "AI"
    assert settings.MEMORY_MAX_TURNS == 0


def test_chain_settings_env_override(monkeypatch):
    monkeypatch.setenv("MEMORY_MAX_TURNS", "5")
    monkeypatch.setenv("ENABLE_CHAIN_TRACING", "1")
    settings = ChainSettings()
    assert settings.MEMORY_MAX_TURNS == 5
    assert settings.ENABLE_CHAIN_TRACING is True


def test_get_settings_is_cached():
    """get_settings returns one cached ChainSettings instance."""
    settings = get_settings()
    assert isinstance(settings, ChainSettings)
    assert get_settings() is settings


def test_chain_settings_fields_match_documented_set():
    assert set(ChainSettings.model_fields) == {
        "ENABLE_CHAIN_TRACING",
        "TRACING_LOG_LEVEL",
        "MEMORY_KEY",
        "HUMAN_PREFIX",
        "AI_PREFIX",
        "MEMORY_MAX_TURNS",
    }
