import pytest

from ghosthuman.core.config import Settings


@pytest.mark.parametrize(
    ("raw_origins", "expected"),
    [
        ("https://ghosthuman.example.com/", ["https://ghosthuman.example.com"]),
        ("ghosthuman.example.com", ["https://ghosthuman.example.com"]),
        (
            "https://ghosthuman.example.com, http://localhost:3000/",
            ["https://ghosthuman.example.com", "http://localhost:3000"],
        ),
        (
            '["https://ghosthuman.example.com/","http://localhost:3000"]',
            ["https://ghosthuman.example.com", "http://localhost:3000"],
        ),
        ("", []),
    ],
)
def test_settings_normalizes_cors_origins(monkeypatch, raw_origins, expected):
    monkeypatch.setenv("CORS_ALLOWED_ORIGINS", raw_origins)

    settings = Settings()

    assert settings.cors_origins == expected


def test_settings_reads_cors_origin_regex(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGIN_REGEX", r"^https://ghosthuman\.example\.com$")

    settings = Settings()

    assert settings.cors_origin_regex == r"^https://ghosthuman\.example\.com$"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("https://llm.internal/v1/", "https://llm.internal/v1"), ("   ", None)],
)
def test_settings_normalizes_openai_base_url(monkeypatch, raw, expected):
    monkeypatch.setenv("OPENAI_BASE_URL", raw)

    assert Settings().openai_base_url == expected


@pytest.mark.parametrize(("raw", "expected"), [("debug", "DEBUG"), (" warning ", "WARNING"), ("loud", "INFO")])
def test_settings_normalizes_log_level(monkeypatch, raw, expected):
    monkeypatch.setenv("LOG_LEVEL", raw)

    assert Settings().log_level == expected


def test_settings_defaults():
    settings = Settings()

    assert settings.openai_model == "gpt-5-nano"
    assert settings.max_input_chars == 10_000
    assert settings.rewrite_max_completion_tokens == 4096
    assert settings.meaning_check_max_completion_tokens == 512
    assert settings.rate_limit_enabled is False
    assert settings.generation_configured is False


def test_settings_flags_follow_env(monkeypatch):
    monkeypatch.setenv("REDIS_URL", "redis://localhost:6379/0")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")

    settings = Settings()

    assert settings.rate_limit_enabled is True
    assert settings.generation_configured is True
