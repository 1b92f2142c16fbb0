"""
Application Settings (Pydantic Settings).

Loads configuration from environment variables (.env file or system env).

Every enforcement knob (anomaly cut points, mitigation delay, monitor
defaults, trust floor) lives here so deployments can tune the guardrail
without code changes.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Field names double as environment variable names (case-insensitive).
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars
    )

    # ========================================================================
    # ANOMALY DETECTION
    # ========================================================================
    ANOMALY_WARN_THRESHOLD: float = Field(default=0.25, ge=0.0, le=1.0)
    ANOMALY_SLOW_THRESHOLD: float = Field(default=0.40, ge=0.0, le=1.0)
    ANOMALY_REQUIRE_APPROVAL_THRESHOLD: float = Field(default=0.60, ge=0.0, le=1.0)
    ANOMALY_HALT_THRESHOLD: float = Field(default=0.80, ge=0.0, le=1.0)
    ANOMALY_SLOW_DELAY_SECONDS: float = Field(
        default=0.25,
        ge=0.0,
        description="Delay applied to the caller when the SLOW mitigation fires",
    )

    # ========================================================================
    # IN-PROCESS MONITOR DEFAULTS
    # ========================================================================
    MAX_RECORDS_PER_STEP: int = Field(default=1000, ge=1)
    MIN_COOPERATIVE_STABILITY: float = Field(default=0.5, ge=0.0, le=1.0)
    MAX_COOPERATIVE_CONFLICT: float = Field(default=0.5, ge=0.0, le=1.0)
    CRITICAL_VIOLATION_POLICY: str = Field(
        default="log",
        description="log (continue past CRITICAL violations) or suspend (stop in-process monitoring)",
        pattern="^(log|suspend)$",
    )

    # ========================================================================
    # ORCHESTRATION
    # ========================================================================
    EXECUTION_SIMULATION_SECONDS: float = Field(
        default=0.5,
        ge=0.0,
        description="Simulated execution time between in-process and post-execution stages",
    )

    # ========================================================================
    # PRE-EXECUTION & INTERVENTION
    # ========================================================================
    MIN_TRUST_COEFFICIENT: float = Field(
        default=0.2,
        description="Actions proposed below this trust coefficient fail pre-execution",
    )
    TRUST_PENALTY_WEIGHT: float = Field(
        default=0.2,
        ge=0.0,
        le=1.0,
        description="Weight of (1 - trust) added to severity-based intervention scores",
    )
    PROTECTED_TARGETS: str = Field(
        default="prod.iam,prod.audit_log",
        description="Comma-separated system-change target prefixes no agent may touch",
    )

    # ========================================================================
    # OPENTELEMETRY
    # ========================================================================
    OTEL_EXPORTER_OTLP_ENDPOINT: str = Field(default="http://localhost:4317")
    OTEL_SERVICE_NAME: str = Field(default="rampart")
    OTEL_TRACES_ENABLED: bool = Field(default=False)

    # ========================================================================
    # API SERVER
    # ========================================================================
    API_HOST: str = Field(default="0.0.0.0")
    API_PORT: int = Field(default=8000)
    API_CORS_ORIGINS: str = Field(default="http://localhost:5173")
    API_CORS_ALLOW_CREDENTIALS: bool = Field(default=True)

    # ========================================================================
    # LOGGING
    # ========================================================================
    LOG_LEVEL: str = Field(default="INFO", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")
    LOG_FORMAT: str = Field(default="json", pattern="^(json|text)$")

    # ========================================================================
    # DEPLOYMENT
    # ========================================================================
    ENVIRONMENT: str = Field(
        default="development", pattern="^(development|staging|production)$"
    )

    def protected_targets(self) -> list[str]:
        """Split PROTECTED_TARGETS into its non-empty prefixes."""
        return [t.strip() for t in self.PROTECTED_TARGETS.split(",") if t.strip()]
