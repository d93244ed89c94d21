import pytest

from jippity.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in (
        "OPENAI_API_KEY",
        "OPENAI_MODEL",
        "JIPPITY_API_KEY",
        "JIPPITY_MODEL",
        "JIPPITY_PORT",
        "JIPPITY_THINK_INTERVAL_SECONDS",
        "JIPPITY_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir("/")


def test_defaults() -> None:
    settings = Settings(_env_file=None)
    assert settings.model == "gpt-4o-mini"
    assert settings.api_key is None
    assert settings.host == "127.0.0.1"
    assert settings.port == 8000
    assert settings.think_interval_seconds == 10.0
    assert settings.max_tokens == 2048
    assert settings.temperature == 1.0
    assert settings.retry_failed_forced_actions is False
    assert settings.log_profile == "default"


def test_openai_environment_names(monkeypatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-openai")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
    settings = Settings(_env_file=None)
    assert settings.api_key == "sk-openai"
    assert settings.model == "gpt-4o"


def test_prefixed_environment_names(monkeypatch) -> None:
    monkeypatch.setenv("JIPPITY_API_KEY", "sk-jippity")
    monkeypatch.setenv("JIPPITY_PORT", "9001")
    monkeypatch.setenv("JIPPITY_LOG_LEVEL", "debug")
    settings = Settings(_env_file=None)
    assert settings.api_key == "sk-jippity"
    assert settings.port == 9001
    assert settings.log_level == "DEBUG"


def test_think_interval_is_clamped(monkeypatch) -> None:
    monkeypatch.setenv("JIPPITY_THINK_INTERVAL_SECONDS", "0.2")
    assert Settings(_env_file=None).think_interval_seconds == 1.0
    assert Settings(_env_file=None, think_interval_seconds=30).think_interval_seconds == 30.0


def test_get_settings_ignores_unset_overrides(monkeypatch) -> None:
    monkeypatch.setenv("JIPPITY_PORT", "9001")
    settings = get_settings(port=None, model="gpt-test", host="0.0.0.0")
    assert settings.port == 9001
    assert settings.model == "gpt-test"
    assert settings.host == "0.0.0.0"
