"""Integration tests for configuration module."""

import pytest

from patchworks.config import (
    AIConfig,
    ConfigurationError,
    FetchConfig,
    load_config,
    load_environment_config,
)

ENV_VARS = (
    "GITHUB_TOKEN",
    "LOG_LEVEL",
    "PATCHWORKS_ENVIRONMENT",
    "ANTHROPIC_API_KEY",
    "OPENAI_API_KEY",
    "GEMINI_API_KEY",
)

VALID_CONFIG = """
fetch:
  http_request_timeout: 15
  user_agent: "Patchworks-Test/1.0"
categorization:
  term_limit: 5
ai:
  enabled: true
  anthropic_api_key: "sk-ant-file"
  focus_areas: [breaking, security, breaking]
logging:
  level: DEBUG
  format: json
reports:
  directory: out/reports
  formats: [markdown]
"""


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and working directory."""
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def write_config(tmp_path):
    def _write(content, name="patchworks.yaml"):
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        return path

    return _write


class TestConfigurationLoading:
    """Test configuration loading from YAML files."""

    def test_load_valid_config(self, write_config):
        app_config, env_config = load_config(write_config(VALID_CONFIG))

        assert app_config.fetch.http_request_timeout == 15
        assert app_config.fetch.user_agent == "Patchworks-Test/1.0"
        assert app_config.categorization.term_limit == 5
        assert app_config.ai.enabled is True
        assert app_config.ai.anthropic_api_key == "sk-ant-file"
        assert app_config.ai.focus_areas == ["breaking", "security"]
        assert app_config.logging.level == "DEBUG"
        assert app_config.logging.format == "json"
        assert app_config.reports.directory == "out/reports"
        assert app_config.reports.formats == ["markdown"]
        assert env_config.environment == "local"

    def test_defaults_without_file(self):
        app_config, _ = load_config()

        assert app_config.fetch.http_request_timeout == 8
        assert app_config.categorization.term_limit == 10
        assert app_config.ai.enabled is False
        assert app_config.logging.level == "INFO"
        assert app_config.logging.format == "key-value"
        assert app_config.reports.directory == "patchworks-reports"
        assert app_config.reports.formats == ["markdown", "json"]

    def test_default_location_in_cwd(self, write_config):
        write_config("fetch:\n  http_request_timeout: 20\n")

        app_config, _ = load_config()

        assert app_config.fetch.http_request_timeout == 20

    def test_config_directory_location(self, write_config):
        write_config("categorization:\n  term_limit: 3\n", name="config/patchworks.yaml")

        app_config, _ = load_config()

        assert app_config.categorization.term_limit == 3

    def test_empty_file_uses_defaults(self, write_config):
        app_config, _ = load_config(write_config(""))

        assert app_config.fetch.http_request_timeout == 8

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_config(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, write_config):
        with pytest.raises(ConfigurationError, match="Failed to parse YAML"):
            load_config(write_config("fetch: [unclosed\n"))

    def test_top_level_must_be_mapping(self, write_config):
        with pytest.raises(ConfigurationError, match="mapping"):
            load_config(write_config("- just\n- a list\n"))


class TestConfigurationValidation:
    """Test configuration validation errors."""

    def test_timeout_out_of_range(self, write_config):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(write_config("fetch:\n  http_request_timeout: 0\n"))

        assert any("fetch -> http_request_timeout" in e for e in exc_info.value.errors)

    def test_wrong_type_reported(self, write_config):
        with pytest.raises(ConfigurationError) as exc_info:
            load_config(write_config("reports:\n  formats: markdown\n"))

        assert any(
            e.startswith("Invalid type for 'reports -> formats': expected list")
            for e in exc_info.value.errors
        )

    def test_empty_formats_rejected(self, write_config):
        with pytest.raises(ConfigurationError):
            load_config(write_config("reports:\n  formats: []\n"))

    def test_unknown_log_level(self, write_config):
        with pytest.raises(ConfigurationError):
            load_config(write_config("logging:\n  level: LOUD\n"))

    def test_error_rendering(self):
        error = ConfigurationError(
            "Configuration validation failed",
            errors=["fetch -> http_request_timeout: too small"],
            suggestions=["Use a value between 1 and 120"],
        )

        rendered = str(error)
        assert rendered.startswith("Configuration validation failed")
        assert "Validation Errors:\n  1. fetch -> http_request_timeout: too small" in rendered
        assert "Suggestions:\n  - Use a value between 1 and 120" in rendered


class TestConfigurationWarnings:
    """Test non-fatal configuration warnings."""

    def test_ai_enabled_without_keys(self, write_config):
        with pytest.warns(UserWarning, match="no API key"):
            load_config(write_config("ai:\n  enabled: true\n"))

    def test_large_timeout(self, write_config):
        with pytest.warns(UserWarning, match="http_request_timeout"):
            load_config(write_config("fetch:\n  http_request_timeout: 60\n"))

    def test_provider_without_its_key(self, write_config):
        content = "ai:\n  enabled: true\n  provider: openai\n  anthropic_api_key: sk-ant\n"

        with pytest.warns(UserWarning, match="openai_api_key is not set"):
            load_config(write_config(content))


class TestEnvironmentConfig:
    """Test environment variable handling."""

    def test_env_credentials_override_file(self, monkeypatch, write_config):
        monkeypatch.setenv("ANTHROPIC_API_KEY", "sk-ant-env")
        monkeypatch.setenv("GEMINI_API_KEY", "gm-env")

        app_config, _ = load_config(write_config(VALID_CONFIG))

        assert app_config.ai.anthropic_api_key == "sk-ant-env"
        assert app_config.ai.gemini_api_key == "gm-env"
        assert app_config.ai.configured_providers() == ["anthropic", "gemini"]

    def test_env_credentials_without_file(self, monkeypatch):
        monkeypatch.setenv("OPENAI_API_KEY", "sk-env")

        app_config, _ = load_config()

        assert app_config.ai.has_credentials()

    def test_values_read_and_trimmed(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "  ghp_abc  ")
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PATCHWORKS_ENVIRONMENT", "ci")

        env_config = load_environment_config()

        assert env_config.github_token == "ghp_abc"
        assert env_config.log_level == "DEBUG"
        assert env_config.environment == "ci"

    def test_blank_values_are_missing(self, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "   ")

        env_config = load_environment_config()

        assert env_config.github_token is None
        assert env_config.log_level is None

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "chatty")

        with pytest.raises(ConfigurationError) as exc_info:
            load_environment_config()

        assert "Invalid LOG_LEVEL" in exc_info.value.errors[0]


class TestModels:
    """Test configuration model helpers."""

    def test_blank_api_key_is_missing(self):
        config = AIConfig(anthropic_api_key="  ")

        assert config.anthropic_api_key is None
        assert not config.has_credentials()
        assert config.configured_providers() == []

    def test_default_focus_areas(self):
        assert AIConfig().focus_areas == ["breaking", "security", "migration"]

    def test_user_agent_stripped(self):
        assert FetchConfig(user_agent=" Patchworks/2 ").user_agent == "Patchworks/2"
