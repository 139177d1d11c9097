"""
Seams between the CI host and the publisher core.

The host supplies BuildRecord and LineSink implementations; the core supplies a
MetricsPublisher. Tests and the CLI provide their own lightweight implementations.
"""

from typing import TYPE_CHECKING, Protocol, runtime_checkable

from .models import PublishResult, PutRequest

if TYPE_CHECKING:
    from .credentials import CredentialChain


@runtime_checkable
class LineSink(Protocol):
    """Line-oriented build log."""

    def println(self, line: str) -> None:
        """Append one line to the build log."""
        ...


@runtime_checkable
class BuildRecord(Protocol):
    """A completed build as seen by the publisher (read-only)."""

    @property
    def start_time_millis(self) -> int:
        """Build start as milliseconds since the Unix epoch."""
        ...

    @property
    def log(self) -> LineSink:
        """Build log the publisher writes its status lines to."""
        ...


@runtime_checkable
class MetricsPublisher(Protocol):
    """Submits a PutRequest to a metrics sink bound to a region."""

    def publish(
        self,
        req: PutRequest,
        region: str,
        creds: "CredentialChain",
    ) -> PublishResult:
        """Submit req. Returns a succeeded result or raises MetricPublishError."""
        ...
