"""Configuration schemas for the labwork workflow."""

from __future__ import annotations

from pydantic import Field, field_validator, model_validator

from lwm_schemas.base import BaseSchema
from lwm_schemas.primitives import Locale, LogSinkType, WorkflowPhase


class LogSinkConfig(BaseSchema):
    """Configuration for a single log sink."""

    type: LogSinkType = Field(..., description="Log sink type (console|file|noop)")

    @field_validator("type", mode="before")
    @classmethod
    def _coerce_type(cls, value: object) -> LogSinkType:
        if isinstance(value, LogSinkType):
            return value
        if isinstance(value, str):
            return LogSinkType(value)
        return value  # type: ignore[return-value]


class LoggingConfig(BaseSchema):
    """Logging configuration for workflow views."""

    sinks: list[LogSinkConfig] = Field(
        ..., min_length=1, description="Log sinks to enable"
    )
    log_dir: str | None = Field(
        None, description="Directory for JSONL logs when the file sink is enabled"
    )

    @model_validator(mode="after")
    def validate_sinks(self) -> LoggingConfig:
        """Ensure log sink types are unique and the file sink has a directory.

        Returns:
            LoggingConfig: Validated logging configuration.

        Raises:
            ValueError: If sink types are duplicated or log_dir is missing.
        """
        sink_types = [sink.type for sink in self.sinks]
        if len(set(sink_types)) != len(sink_types):
            raise ValueError("log sinks must not contain duplicates")
        if LogSinkType.FILE in sink_types and not self.log_dir:
            raise ValueError("log_dir is required for the file sink")
        return self


class WorkflowConfig(BaseSchema):
    """Top-level workflow configuration."""

    locale: Locale = Field(Locale.DE, description="Locale for phase labels")
    initial_phase: WorkflowPhase = Field(
        WorkflowPhase.APPLICATION, description="Phase the cursor starts on"
    )
    logging: LoggingConfig = Field(
        default_factory=lambda: LoggingConfig(
            sinks=[LogSinkConfig(type=LogSinkType.NOOP)]
        ),
        description="Logging configuration",
    )

    @field_validator("locale", mode="before")
    @classmethod
    def _coerce_locale(cls, value: object) -> Locale:
        if isinstance(value, str) and not isinstance(value, Locale):
            return Locale(value)
        return value  # type: ignore[return-value]

    @field_validator("initial_phase", mode="before")
    @classmethod
    def _coerce_phase(cls, value: object) -> WorkflowPhase:
        if isinstance(value, str) and not isinstance(value, WorkflowPhase):
            return WorkflowPhase(value)
        return value  # type: ignore[return-value]
