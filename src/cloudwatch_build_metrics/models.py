"""Pydantic models for build metric configuration, datums and publish results."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StandardUnit(str, Enum):
    """CloudWatch unit for the build duration datum. Only milliseconds are emitted."""

    MILLISECONDS = "Milliseconds"


class SynchronizationLevel(str, Enum):
    """Host synchronisation required between build steps of the same job."""

    NONE = "none"
    STEP = "step"
    BUILD = "build"


class PublishState(str, Enum):
    """Lifecycle of a single publish: ready -> submitting -> succeeded | failed."""

    READY = "ready"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# --- Configuration: per-job overrides, global defaults, resolved triple ---

class JobConfig(BaseModel):
    """Per-job publisher settings. Any field may be absent or blank."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    region: str | None = Field(None, description="AWS region name, e.g. us-east-1")
    namespace: str | None = Field(None, description="CloudWatch namespace")
    metric_name: str | None = Field(
        None, alias="metricName", description="CloudWatch metric name"
    )


class GlobalDefaults(BaseModel):
    """Snapshot of the process-wide defaults used when a job leaves a field blank."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    region: str | None = None
    namespace: str | None = None
    metric_name: str | None = Field(None, alias="metricName")


class EffectiveConfig(BaseModel):
    """Resolved (region, namespace, metric_name). All fields are non-blank."""

    model_config = ConfigDict(frozen=True)

    region: str = Field(..., min_length=1)
    namespace: str = Field(..., min_length=1)
    metric_name: str = Field(..., min_length=1)

    @field_validator("region", "namespace", "metric_name")
    @classmethod
    def reject_whitespace_only(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be blank")
        return v


# --- CloudWatch payload ---

class MetricDatum(BaseModel):
    """One build-duration observation for PutMetricData."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1)
    timestamp: datetime = Field(..., description="Publication instant (UTC)")
    unit: StandardUnit = StandardUnit.MILLISECONDS
    value: float = Field(..., ge=0)

    @field_validator("timestamp")
    @classmethod
    def ensure_utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)

    def to_cloudwatch(self) -> dict[str, Any]:
        """Return the MetricData entry as boto3 expects it (no dimensions)."""
        return {
            "MetricName": self.name,
            "Timestamp": self.timestamp,
            "Unit": self.unit.value,
            "Value": self.value,
        }


class PutRequest(BaseModel):
    """PutMetricData request: a namespace and exactly one datum."""

    model_config = ConfigDict(frozen=True)

    namespace: str = Field(..., min_length=1)
    data: list[MetricDatum] = Field(..., min_length=1, max_length=1)

    def to_cloudwatch(self) -> dict[str, Any]:
        return {
            "Namespace": self.namespace,
            "MetricData": [d.to_cloudwatch() for d in self.data],
        }


class PublishResult(BaseModel):
    """Outcome of an acknowledged PutMetricData call."""

    state: PublishState
    region: str
    namespace: str
    request_id: str | None = Field(None, description="AWS request id from the response")
