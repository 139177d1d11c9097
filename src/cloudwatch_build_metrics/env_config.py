"""
Build publisher instances from environment variables.

Optional env vars (see config.PublisherSettings):
- AWS_ENDPOINT_URL (e.g. for LocalStack)
- BUILD_METRICS_DEFAULTS_FILE: JSON file holding the global defaults
- BUILD_METRICS_METADATA_TIMEOUT / BUILD_METRICS_METADATA_ATTEMPTS: instance role lookup
- AWS_PROFILE, AWS_SHARED_CREDENTIALS_FILE: shared credentials file lookup
"""

from .config import PublisherSettings, get_settings
from .credentials import CredentialChain, credentials
from .host import BuildDurationPublisher, DefaultsStore
from .models import JobConfig
from .publisher import CloudWatchPublisher


def publisher_from_env(settings: PublisherSettings | None = None) -> CloudWatchPublisher:
    """Build CloudWatchPublisher (uses AWS_ENDPOINT_URL when set)."""
    settings = settings or get_settings()
    return CloudWatchPublisher(endpoint_url=settings.aws_endpoint_url)


def credential_chain_from_env(settings: PublisherSettings | None = None) -> CredentialChain:
    """Build the env -> instance role -> shared file credential chain."""
    settings = settings or get_settings()
    return credentials(
        metadata_timeout=settings.metadata_timeout,
        metadata_attempts=settings.metadata_attempts,
    )


def defaults_store_from_env(settings: PublisherSettings | None = None) -> DefaultsStore:
    """Build DefaultsStore backed by BUILD_METRICS_DEFAULTS_FILE."""
    settings = settings or get_settings()
    return DefaultsStore(settings.defaults_file)


def build_duration_publisher_from_env(
    job: JobConfig,
    settings: PublisherSettings | None = None,
) -> BuildDurationPublisher:
    """Wire a BuildDurationPublisher for job from the current environment."""
    settings = settings or get_settings()
    return BuildDurationPublisher(
        job,
        defaults_store_from_env(settings),
        publisher=publisher_from_env(settings),
        credential_chain=credential_chain_from_env(settings),
    )
