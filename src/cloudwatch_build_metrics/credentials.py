"""
AWS credential chain for the publisher: environment, instance role, shared credentials file.

Nothing is fetched when the chain is built. Credentials are looked up the first
time a CloudWatch client is created for a publish, so a missing credential only
surfaces at submission time.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping

import botocore.session
from botocore.credentials import (
    CredentialResolver,
    Credentials,
    EnvProvider,
    InstanceMetadataFetcher,
    InstanceMetadataProvider,
    SharedCredentialProvider,
)

from .errors import CredentialsUnavailable

logger = logging.getLogger(__name__)

DEFAULT_CREDENTIALS_FILE = "~/.aws/credentials"
DEFAULT_PROFILE = "default"


class CredentialChain:
    """Ordered botocore credential providers. Hashable by identity for client caching.

    Providers are rebuilt on every lookup. With environ left as None, the process
    environment is read at lookup time, so rotated env or profile settings apply
    to the next client created through the chain.
    """

    def __init__(
        self,
        *,
        environ: Mapping[str, str] | None = None,
        profile: str | None = None,
        credentials_file: str | None = None,
        metadata_timeout: float = 1.0,
        metadata_attempts: int = 1,
    ) -> None:
        self._environ = environ
        self._profile = profile
        self._credentials_file = credentials_file
        self._metadata_timeout = metadata_timeout
        self._metadata_attempts = metadata_attempts

    def _env(self) -> dict[str, str]:
        return dict(os.environ if self._environ is None else self._environ)

    @property
    def profile(self) -> str:
        return self._profile or self._env().get("AWS_PROFILE") or DEFAULT_PROFILE

    @property
    def credentials_file(self) -> str:
        return os.path.expanduser(
            self._credentials_file
            or self._env().get("AWS_SHARED_CREDENTIALS_FILE")
            or DEFAULT_CREDENTIALS_FILE
        )

    def _providers(self) -> list:
        env = self._env()
        return [
            EnvProvider(environ=env),
            InstanceMetadataProvider(
                iam_role_fetcher=InstanceMetadataFetcher(
                    timeout=self._metadata_timeout,
                    num_attempts=self._metadata_attempts,
                    env=env,
                )
            ),
            SharedCredentialProvider(
                creds_filename=self.credentials_file,
                profile_name=self.profile,
            ),
        ]

    @property
    def provider_methods(self) -> list[str]:
        """Provider names in lookup order (env, iam-role, shared-credentials-file)."""
        return [p.METHOD for p in self._providers()]

    def resolver(self) -> CredentialResolver:
        return CredentialResolver(providers=self._providers())

    def load(self) -> Credentials:
        """Walk the chain now. Raises CredentialsUnavailable when every source is empty."""
        creds = self.resolver().load_credentials()
        if creds is None:
            raise CredentialsUnavailable()
        logger.debug("Loaded AWS credentials via %s", creds.method)
        return creds

    def session(self) -> botocore.session.Session:
        """
        Return a fresh botocore session that resolves credentials through this chain.

        One session per client: botocore sessions are not safe to share across threads.
        """
        session = botocore.session.get_session()
        session.register_component("credential_provider", self.resolver())
        return session


def credentials(
    *,
    environ: Mapping[str, str] | None = None,
    profile: str | None = None,
    credentials_file: str | None = None,
    metadata_timeout: float = 1.0,
    metadata_attempts: int = 1,
) -> CredentialChain:
    """Build the default credential chain (no I/O)."""
    return CredentialChain(
        environ=environ,
        profile=profile,
        credentials_file=credentials_file,
        metadata_timeout=metadata_timeout,
        metadata_attempts=metadata_attempts,
    )
