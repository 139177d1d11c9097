"""Errors raised on the build metric emission path. Each carries a short kind for the build log."""

from collections.abc import Iterable

SUBMISSION_REASONS = ("transport", "auth", "validation", "throttled", "service")


class MetricPublishError(Exception):
    """Base class for configuration, credential and submission failures."""

    kind = "MetricPublishError"


class ConfigurationIncomplete(MetricPublishError):
    """One or more of region, namespace, metricName is blank after resolution."""

    kind = "ConfigurationIncomplete"

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"missing {', '.join(self.missing)}")


class UnknownRegion(MetricPublishError):
    """Region name is not known to the AWS SDK for CloudWatch."""

    kind = "UnknownRegion"

    def __init__(self, region: str) -> None:
        self.region = region
        super().__init__(f"unknown region {region!r}")


class CredentialsUnavailable(MetricPublishError):
    """No credential source in the chain produced credentials."""

    kind = "CredentialsUnavailable"

    def __init__(
        self,
        message: str = "no AWS credentials found (environment, instance profile, shared file)",
    ) -> None:
        super().__init__(message)


class SubmissionFailed(MetricPublishError):
    """PutMetricData was rejected or the transport failed after SDK retries."""

    kind = "SubmissionFailed"

    def __init__(self, reason: str, message: str, *, code: str | None = None) -> None:
        if reason not in SUBMISSION_REASONS:
            raise ValueError(f"unknown submission failure reason {reason!r}")
        self.reason = reason
        self.code = code
        super().__init__(f"{reason}: {message}")


class Interrupted(MetricPublishError):
    """The host interrupted the build while the submission was blocked."""

    kind = "Interrupted"

    def __init__(self, message: str = "interrupted while submitting metric data") -> None:
        super().__init__(message)
