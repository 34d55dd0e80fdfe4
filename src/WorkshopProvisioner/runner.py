"""End-to-end orchestration: identity check, provisioning scripts, verification."""
from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .cluster import OpenShiftClient
from .config import ProvisionerConfig
from .exceptions import ProvisionerError, ScriptFailedError, VerificationError
from .metrics import MetricsEmitter
from .provisioning import (
    ProvisioningPipeline,
    ProvisioningReport,
    build_steps,
    check_cluster_login,
    validate_user_count,
)
from .utils import write_json
from .verification import DeploymentVerifier, VerificationReport

logger = logging.getLogger(__name__)


class RunMode(str, Enum):
    FULL = "run"
    PROVISION = "provision"
    VERIFY = "verify"

    @property
    def provisions(self) -> bool:
        return self in {RunMode.FULL, RunMode.PROVISION}

    @property
    def verifies(self) -> bool:
        return self in {RunMode.FULL, RunMode.VERIFY}


@dataclass
class RunReport:
    run_id: str
    mode: RunMode
    user_count: int
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    identity: Optional[str] = None
    provisioning: Optional[ProvisioningReport] = None
    verification: Optional[VerificationReport] = None
    error: str = ""
    report_path: Optional[Path] = None

    @property
    def passed(self) -> bool:
        return not self.error

    def to_payload(self, metrics: list[dict[str, object]]) -> dict[str, object]:
        return {
            "run_id": self.run_id,
            "mode": self.mode.value,
            "user_count": self.user_count,
            "started_at": self.started_at.isoformat(),
            "finished_at": datetime.now(timezone.utc).isoformat(),
            "identity": self.identity,
            "passed": self.passed,
            "error": self.error,
            "provisioning": self.provisioning.to_payload() if self.provisioning else None,
            "verification": self.verification.to_payload() if self.verification else None,
            "metrics": metrics,
        }


class WorkshopRunner:
    def __init__(
        self,
        config: ProvisionerConfig,
        *,
        client: Optional[OpenShiftClient] = None,
        metrics_emitter: Optional[MetricsEmitter] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.client = client or OpenShiftClient(binary=config.cluster.binary)
        self.metrics = metrics_emitter or MetricsEmitter()
        self._sleep = sleep

    def run(self, raw_user_count: str | None, *, mode: RunMode = RunMode.FULL) -> RunReport:
        """Execute ``mode`` for ``raw_user_count`` users.

        Raises a :class:`ProvisionerError` subclass on the first failure. Once the
        user count is valid a JSON report is written whether or not the run succeeds.
        """

        user_count = validate_user_count(raw_user_count)
        report = RunReport(run_id=uuid.uuid4().hex[:12], mode=mode, user_count=user_count)
        logger.info("Starting %s for %s users", mode.value, user_count, extra={"run_id": report.run_id})
        try:
            report.identity = check_cluster_login(self.client, self.config.cluster.expected_user)
            if mode.provisions:
                report.provisioning = self._provision(user_count, report.run_id)
                if not report.provisioning.overall_passed:
                    raise ScriptFailedError(f"Script {report.provisioning.failed_script} failed")
            if mode.verifies:
                report.verification = self._verify(user_count)
                if not report.verification.passed:
                    raise VerificationError(report.verification.notes or "verification failed")
        except ProvisionerError as exc:
            report.error = str(exc)
            raise
        finally:
            report.report_path = self._write_report(report)
        return report

    def _provision(self, user_count: int, run_id: str) -> ProvisioningReport:
        scripts = self.config.scripts
        pipeline = ProvisioningPipeline(
            build_steps(scripts.names, scripts.directory),
            timeout_seconds=scripts.timeout_seconds,
            metrics_emitter=self.metrics,
        )
        return pipeline.run(user_count, run_id=run_id)

    def _verify(self, user_count: int) -> VerificationReport:
        verifier = DeploymentVerifier(
            self.client,
            self.config.verification,
            metrics_emitter=self.metrics,
            sleep=self._sleep,
        )
        return verifier.verify(user_count)

    def _write_report(self, report: RunReport) -> Optional[Path]:
        metrics = [
            {"name": point.name, "value": point.value, "tags": dict(point.tags)}
            for point in self.metrics.points()
        ]
        path = self.config.reporting.report_dir / f"run-{report.run_id}.json"
        try:
            write_json(path, report.to_payload(metrics))
        except OSError:
            logger.exception("Could not write run report", extra={"report_path": str(path)})
            return None
        logger.info("Run report written", extra={"report_path": str(path), "passed": report.passed})
        return path
