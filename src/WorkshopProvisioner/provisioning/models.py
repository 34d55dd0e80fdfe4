"""Data models for provisioning script execution."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence


@dataclass(frozen=True)
class ScriptStep:
    """A provisioning script resolved against the scripts directory."""

    name: str
    path: Path


@dataclass(frozen=True)
class ScriptResult:
    """Outcome of running a single provisioning script."""

    name: str
    path: Path
    returncode: int
    started_at: datetime
    finished_at: datetime
    notes: str = ""

    @property
    def passed(self) -> bool:
        return self.returncode == 0

    @property
    def duration_seconds(self) -> float:
        return (self.finished_at - self.started_at).total_seconds()


@dataclass(frozen=True)
class ProvisioningReport:
    """Aggregated results for one provisioning pass."""

    run_id: str
    user_count: int
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    results: Sequence[ScriptResult] = field(default_factory=tuple)
    failed_script: str | None = None

    @property
    def overall_passed(self) -> bool:
        return self.failed_script is None

    def to_payload(self) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "user_count": self.user_count,
            "generated_at": self.generated_at.isoformat(),
            "overall_passed": self.overall_passed,
            "failed_script": self.failed_script,
            "scripts": [
                {
                    "name": result.name,
                    "path": str(result.path),
                    "returncode": result.returncode,
                    "passed": result.passed,
                    "duration_seconds": result.duration_seconds,
                    "notes": result.notes,
                }
                for result in self.results
            ],
        }
