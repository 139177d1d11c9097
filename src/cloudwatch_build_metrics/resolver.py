"""Merge per-job publisher settings with the global defaults."""

from .errors import ConfigurationIncomplete
from .models import EffectiveConfig, GlobalDefaults, JobConfig

# (model attribute, name used in the build log and configuration forms)
FIELDS = (
    ("region", "region"),
    ("namespace", "namespace"),
    ("metric_name", "metricName"),
)


def is_blank(value: str | None) -> bool:
    """True for None, empty, or whitespace-only strings."""
    return value is None or not value.strip()


def _default_if_blank(value: str | None, default: str | None) -> str | None:
    return default if is_blank(value) else value


def resolve(job: JobConfig, defaults: GlobalDefaults) -> EffectiveConfig:
    """
    Pick each of region, namespace, metric_name from job when non-blank, else from defaults.

    Values are returned as given (no trimming or case changes). Raises
    ConfigurationIncomplete naming every field that is still blank.
    """
    resolved: dict[str, str | None] = {}
    missing: list[str] = []
    for attr, display in FIELDS:
        value = _default_if_blank(getattr(job, attr), getattr(defaults, attr))
        if is_blank(value):
            missing.append(display)
        resolved[attr] = value
    if missing:
        raise ConfigurationIncomplete(missing)
    return EffectiveConfig(**resolved)
