"""Publish the wall-clock duration of completed builds to Amazon CloudWatch."""

from .credentials import CredentialChain, credentials
from .errors import (
    ConfigurationIncomplete,
    CredentialsUnavailable,
    Interrupted,
    MetricPublishError,
    SubmissionFailed,
    UnknownRegion,
)
from .host import BuildDurationPublisher, DefaultsStore
from .interfaces import BuildRecord, LineSink, MetricsPublisher
from .logging_config import configure_logging
from .metric_builder import build
from .models import (
    EffectiveConfig,
    GlobalDefaults,
    JobConfig,
    MetricDatum,
    PublishResult,
    PublishState,
    PutRequest,
    StandardUnit,
    SynchronizationLevel,
)
from .publisher import CloudWatchPublisher
from .resolver import resolve

__version__ = "0.1.0"
__all__ = [
    "BuildDurationPublisher",
    "BuildRecord",
    "CloudWatchPublisher",
    "ConfigurationIncomplete",
    "CredentialChain",
    "CredentialsUnavailable",
    "DefaultsStore",
    "EffectiveConfig",
    "GlobalDefaults",
    "Interrupted",
    "JobConfig",
    "LineSink",
    "MetricDatum",
    "MetricPublishError",
    "MetricsPublisher",
    "PublishResult",
    "PublishState",
    "PutRequest",
    "StandardUnit",
    "SubmissionFailed",
    "SynchronizationLevel",
    "UnknownRegion",
    "build",
    "configure_logging",
    "credentials",
    "resolve",
]
