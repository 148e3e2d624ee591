import pytest

from startup_companion.config import DEFAULT_ALLOWED_ORIGINS, get_settings, load_settings


def test_defaults_without_environment() -> None:
    settings = load_settings({})

    assert settings.openrouter_api_key is None
    assert not settings.has_api_key
    assert not settings.has_supabase
    assert settings.openrouter_base_url == "https://openrouter.ai/api/v1"
    assert settings.request_timeout_seconds == 90.0
    assert settings.storage_bucket == "business-documents"
    assert settings.poll_interval_seconds == 2.0
    assert settings.poll_max_attempts == 30
    assert settings.allowed_origins == DEFAULT_ALLOWED_ORIGINS


def test_environment_overrides(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENROUTER_API_KEY", "or-key")
    monkeypatch.setenv("OPENROUTER_MODEL", "anthropic/claude-3-haiku")
    monkeypatch.setenv("SUPABASE_URL", "https://example.supabase.co")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service-role")
    monkeypatch.setenv("COMPANION_POLL_INTERVAL_SECONDS", "0.5")
    monkeypatch.setenv("COMPANION_POLL_MAX_ATTEMPTS", "120")
    monkeypatch.setenv("COMPANION_LOG_LEVEL", "debug")

    settings = get_settings()

    assert settings.has_api_key
    assert settings.openrouter_model == "anthropic/claude-3-haiku"
    assert settings.has_supabase
    assert settings.poll_interval_seconds == 0.5
    assert settings.poll_max_attempts == 120
    assert settings.log_level == "DEBUG"


def test_supabase_needs_both_credentials() -> None:
    settings = load_settings({"SUPABASE_URL": "https://example.supabase.co"})

    assert not settings.has_supabase


@pytest.mark.parametrize(
    "key, raw",
    [
        ("COMPANION_POLL_MAX_ATTEMPTS", "lots"),
        ("COMPANION_POLL_MAX_ATTEMPTS", "0"),
        ("COMPANION_POLL_INTERVAL_SECONDS", "-1"),
        ("OPENROUTER_TIMEOUT_SECONDS", "soon"),
    ],
)
def test_invalid_numbers_fall_back_to_defaults(key: str, raw: str) -> None:
    settings = load_settings({key: raw})
    defaults = load_settings({})

    assert settings == defaults


def test_allowed_origins_override() -> None:
    settings = load_settings({"COMPANION_ALLOWED_ORIGINS": "https://app.example.com, ,https://admin.example.com"})

    assert settings.allowed_origins == ["https://app.example.com", "https://admin.example.com"]


def test_settings_are_cached() -> None:
    assert get_settings() is get_settings()
