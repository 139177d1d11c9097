"""Shared test helpers: a recording build log and a minimal build record."""

from __future__ import annotations

from dataclasses import dataclass, field


class RecordingLog:
    """LineSink that keeps every line."""

    def __init__(self) -> None:
        self.lines: list[str] = []

    def println(self, line: str) -> None:
        self.lines.append(line)


@dataclass(frozen=True)
class FakeBuild:
    start_time_millis: int
    log: RecordingLog = field(default_factory=RecordingLog)
