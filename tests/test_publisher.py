"""Tests for CloudWatch PutMetricData publishing: moto round trip, region check, error mapping."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError, NoCredentialsError

from cloudwatch_build_metrics import (
    CloudWatchPublisher,
    CredentialsUnavailable,
    Interrupted,
    MetricDatum,
    PublishState,
    PutRequest,
    SubmissionFailed,
    UnknownRegion,
    credentials,
)
from cloudwatch_build_metrics.publisher import known_regions, validate_region

NOW = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _request(value: float = 2345.0, namespace: str = "Builds") -> PutRequest:
    return PutRequest(
        namespace=namespace,
        data=[MetricDatum(name="Duration", timestamp=NOW, value=value)],
    )


def _recent_request(value: float = 2345.0, now: datetime | None = None) -> PutRequest:
    now = now or datetime.now(timezone.utc)
    return PutRequest(
        namespace="Builds",
        data=[MetricDatum(name="Duration", timestamp=now, value=value)],
    )


def _client_error(code: str, message: str = "boom") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": message}}, "PutMetricData")


@pytest.fixture
def mock_client():
    client = MagicMock()
    client.put_metric_data.return_value = {"ResponseMetadata": {"RequestId": "req-1"}}
    return client


@pytest.fixture
def publisher(mock_client, monkeypatch):
    """CloudWatchPublisher whose client factory returns mock_client."""
    pub = CloudWatchPublisher()
    factory = MagicMock(return_value=mock_client)
    monkeypatch.setattr(pub, "_create_client", factory)
    pub.factory = factory
    return pub


class TestMotoRoundTrip:
    def test_publish_puts_metric(self, cloudwatch) -> None:
        pub = CloudWatchPublisher()
        result = pub.publish(_recent_request(), "us-east-1", credentials())
        assert result.state is PublishState.SUCCEEDED
        assert result.region == "us-east-1"
        assert result.namespace == "Builds"
        metrics = cloudwatch.list_metrics(Namespace="Builds")["Metrics"]
        assert [m["MetricName"] for m in metrics] == ["Duration"]
        assert metrics[0].get("Dimensions", []) == []

    def test_published_value(self, cloudwatch) -> None:
        pub = CloudWatchPublisher()
        now = datetime.now(timezone.utc)
        pub.publish(_recent_request(value=1500.0, now=now), "us-east-1", credentials())
        stats = cloudwatch.get_metric_statistics(
            Namespace="Builds",
            MetricName="Duration",
            StartTime=now - timedelta(minutes=30),
            EndTime=now + timedelta(minutes=30),
            Period=3600,
            Statistics=["Maximum"],
        )
        assert 1500.0 in [dp.get("Maximum") for dp in stats["Datapoints"]]


class TestRequestShape:
    def test_single_put_with_one_datum(self, publisher, mock_client) -> None:
        result = publisher.publish(_request(), "us-east-1", credentials())
        mock_client.put_metric_data.assert_called_once()
        kwargs = mock_client.put_metric_data.call_args.kwargs
        assert kwargs["Namespace"] == "Builds"
        assert kwargs["MetricData"] == [
            {"MetricName": "Duration", "Timestamp": NOW, "Unit": "Milliseconds", "Value": 2345.0}
        ]
        assert result.request_id == "req-1"

    def test_rejects_batched_request(self, publisher, mock_client) -> None:
        datum = MetricDatum(name="Duration", timestamp=NOW, value=1.0)
        req = PutRequest.model_construct(namespace="Builds", data=[datum, datum])
        with pytest.raises(ValueError, match="exactly one datum"):
            publisher.publish(req, "us-east-1", credentials())
        mock_client.put_metric_data.assert_not_called()


class TestRegion:
    def test_known_regions(self) -> None:
        regions = known_regions()
        assert "us-east-1" in regions
        assert "ap-northeast-1" in regions

    def test_validate_region(self) -> None:
        assert validate_region("eu-west-1") == "eu-west-1"
        with pytest.raises(UnknownRegion, match="xx-invalid-1"):
            validate_region("xx-invalid-1")

    def test_unknown_region_before_any_client(self, publisher, mock_client) -> None:
        with pytest.raises(UnknownRegion):
            publisher.publish(_request(), "xx-invalid-1", credentials())
        publisher.factory.assert_not_called()
        mock_client.put_metric_data.assert_not_called()

    def test_region_not_normalized(self, publisher) -> None:
        with pytest.raises(UnknownRegion):
            publisher.publish(_request(), "US-EAST-1", credentials())


class TestClientCache:
    def test_client_reused_per_region(self, publisher, mock_client) -> None:
        chain = credentials()
        publisher.publish(_request(), "us-east-1", chain)
        publisher.publish(_request(), "us-east-1", chain)
        assert publisher.factory.call_count == 1
        assert mock_client.put_metric_data.call_count == 2

    def test_separate_client_per_region(self, publisher) -> None:
        chain = credentials()
        publisher.publish(_request(), "us-east-1", chain)
        publisher.publish(_request(), "eu-west-1", chain)
        assert [c.args[0] for c in publisher.factory.call_args_list] == ["us-east-1", "eu-west-1"]

    def test_client_bound_to_region(self, moto_aws) -> None:
        client = CloudWatchPublisher().client_for("ap-northeast-1", credentials())
        assert client.meta.region_name == "ap-northeast-1"

    def test_endpoint_url(self, aws_credentials) -> None:
        pub = CloudWatchPublisher(endpoint_url="http://localhost:4566")
        client = pub.client_for("us-east-1", credentials())
        assert client.meta.endpoint_url == "http://localhost:4566"


class TestErrors:
    def test_no_credentials_in_chain(self, tmp_path) -> None:
        chain = credentials(
            environ={"AWS_EC2_METADATA_DISABLED": "true"},
            credentials_file=str(tmp_path / "missing"),
        )
        with pytest.raises(CredentialsUnavailable):
            CloudWatchPublisher().publish(_request(), "us-east-1", chain)

    def test_failed_credentials_not_cached(self, tmp_path) -> None:
        chain = credentials(
            environ={"AWS_EC2_METADATA_DISABLED": "true"},
            credentials_file=str(tmp_path / "missing"),
        )
        pub = CloudWatchPublisher()
        with pytest.raises(CredentialsUnavailable):
            pub.publish(_request(), "us-east-1", chain)
        assert pub._clients == {}

    def test_no_credentials_error_from_sdk(self, publisher, mock_client) -> None:
        mock_client.put_metric_data.side_effect = NoCredentialsError()
        with pytest.raises(CredentialsUnavailable):
            publisher.publish(_request(), "us-east-1", credentials())

    @pytest.mark.parametrize(
        "code,reason",
        [
            ("Throttling", "throttled"),
            ("InvalidClientTokenId", "auth"),
            ("AccessDenied", "auth"),
            ("InvalidParameterValue", "validation"),
            ("MissingParameter", "validation"),
            ("InternalServiceError", "service"),
        ],
    )
    def test_client_error_reason(self, publisher, mock_client, code: str, reason: str) -> None:
        mock_client.put_metric_data.side_effect = _client_error(code)
        with pytest.raises(SubmissionFailed) as exc_info:
            publisher.publish(_request(), "us-east-1", credentials())
        assert exc_info.value.reason == reason
        assert exc_info.value.code == code
        assert mock_client.put_metric_data.call_count == 1

    def test_transport_error(self, publisher, mock_client) -> None:
        mock_client.put_metric_data.side_effect = EndpointConnectionError(
            endpoint_url="https://monitoring.us-east-1.amazonaws.com/"
        )
        with pytest.raises(SubmissionFailed) as exc_info:
            publisher.publish(_request(), "us-east-1", credentials())
        assert exc_info.value.reason == "transport"

    def test_interrupted(self, publisher, mock_client) -> None:
        mock_client.put_metric_data.side_effect = InterruptedError()
        with pytest.raises(Interrupted):
            publisher.publish(_request(), "us-east-1", credentials())

    def test_keyboard_interrupt_while_blocked(self, publisher, mock_client) -> None:
        mock_client.put_metric_data.side_effect = KeyboardInterrupt()
        with pytest.raises(Interrupted) as exc_info:
            publisher.publish(_request(), "us-east-1", credentials())
        assert isinstance(exc_info.value.__cause__, KeyboardInterrupt)


def test_clear_clients_recreates_client(publisher) -> None:
    chain = credentials()
    publisher.publish(_request(), "us-east-1", chain)
    publisher.clear_clients()
    publisher.publish(_request(), "us-east-1", chain)
    assert publisher.factory.call_count == 2
