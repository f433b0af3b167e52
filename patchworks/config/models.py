"""Configuration schema models using Pydantic."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class AIProvider(str, Enum):
    """Provider selector for the enrichment step."""

    AUTO = "auto"
    ANTHROPIC = "anthropic"
    OPENAI = "openai"
    GEMINI = "gemini"


class FocusArea(str, Enum):
    """Topics the enrichment summary should concentrate on."""

    BREAKING = "breaking"
    SECURITY = "security"
    DEPRECATION = "deprecation"
    PERFORMANCE = "performance"
    MIGRATION = "migration"


class ReportFormat(str, Enum):
    """Report files written at the end of a run."""

    MARKDOWN = "markdown"
    JSON = "json"


DEFAULT_FOCUS_AREAS = [FocusArea.BREAKING, FocusArea.SECURITY, FocusArea.MIGRATION]


class FetchConfig(BaseModel):
    """HTTP settings shared by the release-data fetchers."""

    http_request_timeout: int = Field(
        8, ge=1, le=120, description="Timeout for each release-data request (seconds)"
    )
    user_agent: str = Field(
        "Patchworks/1.0", min_length=1, description="User-Agent header for HTTP requests"
    )

    @field_validator("user_agent")
    @classmethod
    def strip_user_agent(cls, v: str) -> str:
        """Strip whitespace from user agent."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("user_agent cannot be empty")
        return stripped


class CategorizationConfig(BaseModel):
    """Tuning for the release-note categorizer."""

    term_limit: int = Field(10, ge=1, le=100, description="Maximum important terms per package")


class AIConfig(BaseModel):
    """Settings handed to the optional enrichment collaborator."""

    enabled: bool = Field(False, description="Run the enrichment step")
    anthropic_api_key: Optional[str] = None
    openai_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    focus_areas: List[FocusArea] = Field(
        default_factory=lambda: [area.value for area in DEFAULT_FOCUS_AREAS]
    )
    provider: AIProvider = Field(AIProvider.AUTO, description="auto or a specific provider")

    model_config = {"use_enum_values": True}

    @field_validator("anthropic_api_key", "openai_api_key", "gemini_api_key")
    @classmethod
    def blank_key_is_missing(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None

    @field_validator("focus_areas")
    @classmethod
    def dedupe_focus_areas(cls, v: List[FocusArea]) -> List[FocusArea]:
        seen = []
        for area in v:
            if area not in seen:
                seen.append(area)
        return seen

    def has_credentials(self) -> bool:
        """True when at least one provider key is configured."""
        return any((self.anthropic_api_key, self.openai_api_key, self.gemini_api_key))

    def configured_providers(self) -> List[str]:
        providers = []
        if self.anthropic_api_key:
            providers.append(AIProvider.ANTHROPIC.value)
        if self.openai_api_key:
            providers.append(AIProvider.OPENAI.value)
        if self.gemini_api_key:
            providers.append(AIProvider.GEMINI.value)
        return providers


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class ReportConfig(BaseModel):
    """Where and how final reports are written."""

    directory: str = Field("patchworks-reports", min_length=1)
    formats: List[ReportFormat] = Field(
        default_factory=lambda: [ReportFormat.MARKDOWN, ReportFormat.JSON]
    )

    model_config = {"use_enum_values": True}

    @model_validator(mode="after")
    def require_a_format(self):
        if not self.formats:
            raise ValueError("reports.formats must list at least one of: markdown, json")
        return self


class AppConfig(BaseModel):
    """Root configuration object for Patchworks."""

    fetch: FetchConfig = Field(default_factory=FetchConfig)
    categorization: CategorizationConfig = Field(default_factory=CategorizationConfig)
    ai: AIConfig = Field(default_factory=AIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    reports: ReportConfig = Field(default_factory=ReportConfig)
