"""
Configuration Module
====================

Application settings and configuration management using Pydantic.

Also hosts the closed enumerations shared by every bounded context
(case classification, lifecycle status, SLA states, alert kinds).
"""

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Uses Pydantic for validation and type safety.
    """

    # ========== Application ==========
    app_name: str = Field(default="caseflow", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root log level")

    # ========== Server ==========
    host: str = Field(default="0.0.0.0", description="Server host")
    port: int = Field(default=8000, description="Server port", ge=1, le=65535)

    # ========== Database ==========
    database_url: str = Field(
        default="postgresql+asyncpg://localhost:5432/caseflow",
        description="Database connection URL (async driver)"
    )
    db_pool_size: int = Field(default=5, description="Database connection pool size", ge=1)
    db_max_overflow: int = Field(default=10, description="Max overflow connections", ge=0)

    # ========== SLA Configuration ==========
    sla_config_path: Path = Field(
        default=Path("sla_config.yaml"),
        description="Path to the YAML file holding global default SLA policies"
    )
    sla_sweep_interval_seconds: int = Field(
        default=300,
        description="Seconds between background SLA sweeps (0 disables the scheduler)",
        ge=0
    )
    sla_sweep_batch_size: int = Field(
        default=200,
        description="Cases loaded per page during a sweep",
        ge=1
    )
    sla_warning_ratio: float = Field(
        default=0.75,
        description="Fraction of a budget after which a clock is due soon",
        gt=0.0,
        lt=1.0
    )

    # ========== Retainer ==========
    retainer_warning_thresholds: List[int] = Field(
        default=[75, 90],
        description="Utilization percentages that raise a usage alert when crossed"
    )
    retainer_default_max_rollover_hours: float = Field(
        default=10.0,
        description="Rollover cap applied when a retainer does not set its own",
        ge=0
    )
    retainer_rollover_enabled: bool = Field(
        default=True,
        description="Run the monthly rollover job"
    )

    # ========== Client visibility ==========
    share_token_bytes: int = Field(
        default=32,
        description="Entropy of generated share tokens in bytes",
        ge=16
    )
    share_token_ttl_days: Optional[int] = Field(
        default=None,
        description="Days a share token stays valid (unset = until revoked)",
        ge=1
    )

    # ========== Slack Integration ==========
    slack_webhook_url: Optional[str] = Field(
        default=None,
        description="Slack webhook URL for alert notifications"
    )
    slack_channel: str = Field(
        default="#case-alerts",
        description="Slack channel for alert notifications"
    )
    slack_timeout_seconds: float = Field(
        default=5.0,
        description="Timeout for Slack API calls",
        ge=0.1,
        le=30
    )

    # ========== CORS ==========
    cors_origins: List[str] = Field(
        default=["http://localhost:3000", "http://localhost:8080"],
        description="Allowed CORS origins"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of allowed values."""
        allowed = {"development", "staging", "production", "test"}
        if v not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v

    @field_validator("retainer_warning_thresholds")
    @classmethod
    def validate_thresholds(cls, v: List[int]) -> List[int]:
        """Thresholds are percentages strictly below 100 (overage covers 100)."""
        for threshold in v:
            if not 0 < threshold < 100:
                raise ValueError("retainer warning thresholds must be between 1 and 99")
        return sorted(set(v))


@lru_cache()
def get_settings() -> Settings:
    """Returns cached Settings instance."""
    return Settings()


# Global settings instance
settings = get_settings()


# ========== Enumerations ==========

class CaseType(str, Enum):
    """Case classification."""
    HR = "hr"
    PAYROLL = "payroll"
    BENEFITS = "benefits"
    COMPLIANCE = "compliance"
    SAFETY = "safety"
    ONBOARDING = "onboarding"
    GENERAL_SUPPORT = "general_support"
    TECHNICAL = "technical"
    BILLING = "billing"


class CasePriority(str, Enum):
    """Case priority levels."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class CaseSource(str, Enum):
    """Channel a case arrived through."""
    EMAIL = "email"
    MANUAL = "manual"
    PHONE = "phone"
    INTERNAL = "internal"
    WEB_FORM = "web_form"


class CaseStatus(str, Enum):
    """Case lifecycle statuses."""
    OPEN = "open"
    IN_PROGRESS = "in_progress"
    WAITING = "waiting"
    CLOSED = "closed"


class CaseVisibility(str, Enum):
    """Who may see a case."""
    INTERNAL = "internal"
    CLIENT_VIEWABLE = "client_viewable"


class ActivityType(str, Enum):
    """Kinds of activity entries on a case."""
    NOTE = "note"
    EMAIL = "email"
    FILE = "file"
    STATUS_CHANGE = "status_change"
    ASSIGNMENT_CHANGE = "assignment_change"


class SLADimension(str, Enum):
    """The two SLA clocks."""
    RESPONSE = "response"
    RESOLUTION = "resolution"


class SLAState(str, Enum):
    """State of a single SLA clock."""
    ON_TRACK = "on_track"
    DUE_SOON = "due_soon"
    BREACHED = "breached"
    MET = "met"


class SLAStatus(str, Enum):
    """Overall SLA status of a case (the more severe clock wins)."""
    ON_TRACK = "on_track"
    RESPONSE_DUE_SOON = "response_due_soon"
    RESPONSE_BREACHED = "response_breached"
    RESOLUTION_DUE_SOON = "resolution_due_soon"
    RESOLUTION_BREACHED = "resolution_breached"


class AlertType(str, Enum):
    """Alert kinds raised by the engine."""
    SLA_BREACH = "sla_breach"
    SLA_ESCALATION = "sla_escalation"
    RETAINER_THRESHOLD = "retainer_threshold"
    RETAINER_OVERAGE = "retainer_overage"


class FeedbackSentiment(str, Enum):
    """Client feedback sentiment."""
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


OPEN_STATUSES = [CaseStatus.OPEN, CaseStatus.IN_PROGRESS, CaseStatus.WAITING]
