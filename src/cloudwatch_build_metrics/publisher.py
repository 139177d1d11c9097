"""CloudWatch PutMetricData publisher with a per-region client cache."""

from __future__ import annotations

import functools
import logging
import threading

import boto3
import botocore.session
from botocore.config import Config
from botocore.exceptions import (
    BotoCoreError,
    ClientError,
    NoCredentialsError,
    PartialCredentialsError,
)

from .credentials import CredentialChain
from .errors import CredentialsUnavailable, Interrupted, SubmissionFailed, UnknownRegion
from .models import PublishResult, PublishState, PutRequest, StandardUnit

logger = logging.getLogger(__name__)

SERVICE_NAME = "cloudwatch"

THROTTLING_CODES = frozenset(
    {
        "Throttling",
        "ThrottlingException",
        "ThrottledException",
        "RequestThrottled",
        "RequestLimitExceeded",
        "TooManyRequestsException",
        "LimitExceededException",
    }
)
AUTH_CODES = frozenset(
    {
        "InvalidClientTokenId",
        "SignatureDoesNotMatch",
        "AccessDenied",
        "AccessDeniedException",
        "UnrecognizedClientException",
        "ExpiredToken",
        "ExpiredTokenException",
        "AuthFailure",
        "IncompleteSignature",
    }
)
VALIDATION_CODES = frozenset(
    {
        "InvalidParameterValue",
        "InvalidParameterCombination",
        "MissingParameter",
        "ValidationError",
    }
)


@functools.lru_cache(maxsize=1)
def known_regions() -> frozenset[str]:
    """Every region botocore's endpoint data lists for CloudWatch, across all partitions."""
    session = botocore.session.get_session()
    regions: set[str] = set()
    for partition in session.get_available_partitions():
        regions.update(session.get_available_regions(SERVICE_NAME, partition_name=partition))
    return frozenset(regions)


def validate_region(region: str) -> str:
    """Return region unchanged, or raise UnknownRegion."""
    if region not in known_regions():
        raise UnknownRegion(region)
    return region


def _submission_reason(code: str) -> str:
    if code in THROTTLING_CODES:
        return "throttled"
    if code in AUTH_CODES:
        return "auth"
    if code in VALIDATION_CODES:
        return "validation"
    return "service"


def _check_request(req: PutRequest) -> None:
    """PutMetricData from this publisher always carries a single Milliseconds datum."""
    if len(req.data) != 1:
        raise ValueError(f"expected exactly one datum, got {len(req.data)}")
    if req.data[0].unit is not StandardUnit.MILLISECONDS:
        raise ValueError(f"unsupported unit {req.data[0].unit!r}")


class CloudWatchPublisher:
    """MetricsPublisher implementation using CloudWatch PutMetricData.

    Clients are cached per (region, credential chain). boto3 clients are
    thread-safe, so a cached client is shared by concurrent publishes; the
    cache lock is never held while a client is created or a request is sent.
    A cached client keeps the credentials it was created with (instance role
    credentials refresh themselves); call clear_clients() after rotating static
    env or shared-file credentials.
    """

    def __init__(
        self,
        *,
        endpoint_url: str | None = None,
        client_config: Config | None = None,
    ) -> None:
        self._endpoint_url = endpoint_url
        self._client_config = client_config
        self._clients: dict[tuple[str, CredentialChain], object] = {}
        self._lock = threading.Lock()

    def _create_client(self, region: str, creds: CredentialChain):
        botocore_session = creds.session()
        if botocore_session.get_credentials() is None:
            raise CredentialsUnavailable()
        session = boto3.session.Session(
            botocore_session=botocore_session,
            region_name=region,
        )
        return session.client(
            SERVICE_NAME,
            region_name=region,
            endpoint_url=self._endpoint_url,
            config=self._client_config,
        )

    def clear_clients(self) -> None:
        """Drop cached clients so the next publish resolves credentials again."""
        with self._lock:
            self._clients.clear()

    def client_for(self, region: str, creds: CredentialChain):
        """Return the cached client for region; creates it and resolves credentials on first use."""
        key = (region, creds)
        with self._lock:
            client = self._clients.get(key)
        if client is not None:
            return client
        client = self._create_client(region, creds)
        with self._lock:
            # A parallel publish may have created one first; keep that one.
            return self._clients.setdefault(key, client)

    def publish(
        self,
        req: PutRequest,
        region: str,
        creds: CredentialChain,
    ) -> PublishResult:
        """
        Submit one PutMetricData call for req in region.

        Raises UnknownRegion before any network call, CredentialsUnavailable when
        the chain is empty, SubmissionFailed when AWS rejects the request or the
        transport fails after botocore's own retries, Interrupted when the
        blocking call is interrupted.
        """
        _check_request(req)
        validate_region(region)
        state = PublishState.READY
        logger.debug("publish %s/%s: %s", region, req.namespace, state.value)
        try:
            client = self.client_for(region, creds)
            state = PublishState.SUBMITTING
            logger.debug("publish %s/%s: %s", region, req.namespace, state.value)
            response = client.put_metric_data(**req.to_cloudwatch())
        except (NoCredentialsError, PartialCredentialsError) as e:
            self._failed(region, req, "CredentialsUnavailable")
            raise CredentialsUnavailable(str(e)) from e
        except ClientError as e:
            error = e.response.get("Error") or {}
            code = error.get("Code", "Unknown")
            reason = _submission_reason(code)
            self._failed(region, req, f"SubmissionFailed({reason})")
            raise SubmissionFailed(
                reason, f"{code}: {error.get('Message', str(e))}", code=code
            ) from e
        except BotoCoreError as e:
            self._failed(region, req, "SubmissionFailed(transport)")
            raise SubmissionFailed("transport", str(e)) from e
        except (KeyboardInterrupt, InterruptedError) as e:
            # KeyboardInterrupt is how host cancellation (SIGINT) reaches a blocked call
            self._failed(region, req, "Interrupted")
            raise Interrupted() from e
        except CredentialsUnavailable:
            self._failed(region, req, "CredentialsUnavailable")
            raise

        metadata = response.get("ResponseMetadata") or {}
        state = PublishState.SUCCEEDED
        logger.debug("publish %s/%s: %s", region, req.namespace, state.value)
        return PublishResult(
            state=state,
            region=region,
            namespace=req.namespace,
            request_id=metadata.get("RequestId"),
        )

    @staticmethod
    def _failed(region: str, req: PutRequest, kind: str) -> None:
        logger.debug(
            "publish %s/%s: %s(%s)", region, req.namespace, PublishState.FAILED.value, kind
        )
