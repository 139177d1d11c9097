"""
Post-build hook: resolves configuration, builds the duration datum, publishes it,
and reports the outcome on the build log.

DefaultsStore holds the global defaults the host's configuration form writes to.
"""

from __future__ import annotations

import json
import logging
import threading
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from pathlib import Path

from . import metric_builder
from .credentials import CredentialChain, credentials
from .errors import ConfigurationIncomplete, Interrupted, MetricPublishError
from .interfaces import BuildRecord, LineSink, MetricsPublisher
from .models import GlobalDefaults, JobConfig, PutRequest, SynchronizationLevel
from .publisher import CloudWatchPublisher
from .resolver import resolve

logger = logging.getLogger(__name__)

DISPLAY_NAME = "Amazon CloudWatch Publisher"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class DefaultsStore:
    """Process-wide defaults. Readers get frozen snapshots; the host's configure callback writes."""

    def __init__(self, path: Path | str | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._lock = threading.Lock()
        self._defaults = GlobalDefaults()
        self.load()

    @property
    def path(self) -> Path | None:
        return self._path

    def snapshot(self) -> GlobalDefaults:
        with self._lock:
            return self._defaults

    def load(self) -> None:
        """Read persisted defaults from path, if the file exists."""
        if self._path is None or not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
            defaults = GlobalDefaults.model_validate(data)
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable global defaults %s: %s", self._path, e)
            return
        with self._lock:
            self._defaults = defaults
        logger.debug("Loaded global defaults from %s", self._path)

    def configure(self, form_data: Mapping[str, object]) -> GlobalDefaults:
        """Replace the defaults from form data (region, namespace, metricName) and persist them."""
        defaults = GlobalDefaults(
            region=_form_string(form_data, "region"),
            namespace=_form_string(form_data, "namespace"),
            metricName=_form_string(form_data, "metricName"),
        )
        with self._lock:
            self._defaults = defaults
        self._save(defaults)
        return defaults

    def _save(self, defaults: GlobalDefaults) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(
            defaults.model_dump_json(by_alias=True, indent=2),
            encoding="utf-8",
        )
        logger.info("Saved global defaults to %s", self._path)


def _form_string(form_data: Mapping[str, object], key: str) -> str:
    value = form_data.get(key)
    return "" if value is None else str(value)


class BuildDurationPublisher:
    """
    Publishes the duration of each completed build of one job to CloudWatch.

    The host calls on_build_complete on a worker thread; builds of different jobs
    may run it concurrently. Nothing here is mutated per build.
    """

    display_name = DISPLAY_NAME
    required_monitor_service = SynchronizationLevel.STEP

    def __init__(
        self,
        job: JobConfig,
        defaults: DefaultsStore,
        *,
        publisher: MetricsPublisher | None = None,
        credential_chain: CredentialChain | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.job = job
        self._defaults = defaults
        self._publisher = publisher or CloudWatchPublisher()
        self._credential_chain = credential_chain or credentials()
        self._clock = clock or _utcnow

    def on_build_complete(self, build: BuildRecord) -> bool:
        """Publish the build's duration. True iff CloudWatch acknowledged the datum."""
        log = build.log
        try:
            cfg = resolve(self.job, self._defaults.snapshot())
        except ConfigurationIncomplete as e:
            _report(log, e)
            return False

        log.println(f"RegionName: {cfg.region}")
        log.println(f"Namespace: {cfg.namespace}")
        log.println(f"MetricName: {cfg.metric_name}")

        datum = metric_builder.build(build, cfg, self._clock())
        req = PutRequest(namespace=cfg.namespace, data=[datum])
        try:
            self._publisher.publish(req, cfg.region, self._credential_chain)
        except Interrupted as e:
            _report(log, e)
            raise
        except MetricPublishError as e:
            _report(log, e)
            return False

        log.println(f"Metric data: {int(datum.value)}ms")
        return True


def _report(log: LineSink, error: MetricPublishError) -> None:
    logger.warning("Build metric not published: %s: %s", error.kind, error)
    log.println(f"ERROR: {error.kind}: {error}")
