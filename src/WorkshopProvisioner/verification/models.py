"""Data models for deployment verification."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence


class NamespaceState(str, Enum):
    """Outcome of the per-namespace availability re-check."""

    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"
    MISSING = "missing"


@dataclass(frozen=True)
class NamespaceStatus:
    namespace: str
    state: NamespaceState


@dataclass(frozen=True)
class CountResult:
    """Result of polling for the expected number of deployments."""

    expected: int
    observed: int
    attempts: int
    elapsed_seconds: int

    @property
    def reached(self) -> bool:
        return self.observed == self.expected


@dataclass(frozen=True)
class VerificationReport:
    """Aggregated verification outcome for a run."""

    expected: int
    observed: int
    count_reached: bool
    available: bool = False
    namespaces: Sequence[NamespaceStatus] = field(default_factory=tuple)
    passed: bool = False
    notes: str = ""

    @property
    def failed_namespaces(self) -> Sequence[str]:
        return tuple(item.namespace for item in self.namespaces if item.state is NamespaceState.UNAVAILABLE)

    @property
    def missing_namespaces(self) -> Sequence[str]:
        return tuple(item.namespace for item in self.namespaces if item.state is NamespaceState.MISSING)

    def to_payload(self) -> dict[str, object]:
        return {
            "expected": self.expected,
            "observed": self.observed,
            "count_reached": self.count_reached,
            "available": self.available,
            "passed": self.passed,
            "notes": self.notes,
            "namespaces": [
                {"namespace": item.namespace, "state": item.state.value} for item in self.namespaces
            ],
            "failed_namespaces": list(self.failed_namespaces),
            "missing_namespaces": list(self.missing_namespaces),
        }
