"""Build the build-duration MetricDatum from a completed build."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from .interfaces import BuildRecord
from .models import EffectiveConfig, MetricDatum, StandardUnit

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def to_epoch_millis(instant: datetime) -> int:
    """Milliseconds since the Unix epoch. Naive datetimes are taken as UTC."""
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    return (instant - EPOCH) // timedelta(milliseconds=1)


def from_epoch_millis(millis: int) -> datetime:
    return EPOCH + timedelta(milliseconds=millis)


def duration_millis(start_time_millis: int, now: datetime) -> int:
    """Elapsed milliseconds from start to now; 0 when the clock went backwards."""
    elapsed = to_epoch_millis(now) - start_time_millis
    if elapsed < 0:
        logger.warning(
            "Build start %d is %dms after publication time; reporting duration 0",
            start_time_millis,
            -elapsed,
        )
        return 0
    return elapsed


def build(record: BuildRecord, cfg: EffectiveConfig, now: datetime) -> MetricDatum:
    """
    Return the duration datum for record, stamped with the publication instant.

    When the clock went backwards the value is 0 and the timestamp is the build
    start, so the datum never predates the build. A start too far in the future
    for datetime keeps the publication instant.
    """
    start = record.start_time_millis
    value = duration_millis(start, now)
    timestamp = now
    if to_epoch_millis(now) < start:
        try:
            timestamp = from_epoch_millis(start)
        except (OverflowError, ValueError):
            logger.warning(
                "Build start %d is outside the datetime range; stamping with publication time",
                start,
            )
    return MetricDatum(
        name=cfg.metric_name,
        timestamp=timestamp,
        unit=StandardUnit.MILLISECONDS,
        value=float(value),
    )
