"""
CLI host for shell-driven CI systems.

Usage:
  cloudwatch-build-metrics configure --region us-east-1 --namespace Builds --metric-name Duration
  cloudwatch-build-metrics publish --start-time-millis "$BUILD_START_MS" [--metric-name Deploy]
  cloudwatch-build-metrics show-defaults

publish prints the build log lines to stdout and exits 0 on success, 1 on failure.
Config and env var handling live in config.py (PublisherSettings).
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass, field
from typing import TextIO

from .config import bootstrap_env, get_settings
from .env_config import build_duration_publisher_from_env, defaults_store_from_env
from .errors import Interrupted
from .logging_config import configure_logging
from .models import JobConfig

logger = logging.getLogger(__name__)


class StreamLog:
    """LineSink that writes to a text stream (stdout by default)."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream or sys.stdout

    def println(self, line: str) -> None:
        self._stream.write(line + "\n")
        self._stream.flush()


@dataclass(frozen=True)
class CommandLineBuild:
    """BuildRecord for a build described on the command line."""

    start_time_millis: int
    log: StreamLog = field(default_factory=StreamLog)


def _add_triple_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--region", default=None, help="AWS region, e.g. us-east-1")
    parser.add_argument("--namespace", default=None, help="CloudWatch namespace")
    parser.add_argument("--metric-name", default=None, help="CloudWatch metric name")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cloudwatch-build-metrics",
        description="Publish build durations to Amazon CloudWatch",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Load environment variables from this .env file first",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    publish = sub.add_parser("publish", help="Publish the duration of a completed build")
    publish.add_argument(
        "--start-time-millis",
        type=int,
        required=True,
        help="Build start, milliseconds since the Unix epoch",
    )
    _add_triple_args(publish)

    configure = sub.add_parser("configure", help="Set the global defaults")
    _add_triple_args(configure)

    sub.add_parser("show-defaults", help="Print the global defaults as JSON")
    return parser


def _publish(args: argparse.Namespace) -> int:
    job = JobConfig(
        region=args.region,
        namespace=args.namespace,
        metric_name=args.metric_name,
    )
    hook = build_duration_publisher_from_env(job)
    build = CommandLineBuild(start_time_millis=args.start_time_millis)
    try:
        ok = hook.on_build_complete(build)
    except Interrupted:
        return 130
    return 0 if ok else 1


def _configure(args: argparse.Namespace) -> int:
    store = defaults_store_from_env()
    store.configure(
        {
            "region": args.region,
            "namespace": args.namespace,
            "metricName": args.metric_name,
        }
    )
    print(f"Saved defaults to {store.path}")
    return 0


def _show_defaults(args: argparse.Namespace) -> int:
    store = defaults_store_from_env()
    print(store.snapshot().model_dump_json(by_alias=True, indent=2))
    return 0


COMMANDS = {
    "publish": _publish,
    "configure": _configure,
    "show-defaults": _show_defaults,
}


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    bootstrap_env(args.env_file)
    configure_logging(get_settings().log_level)
    logger.debug("Running %s", args.command)
    return COMMANDS[args.command](args)
