"""Polls the cluster until per-user deployments exist and become available."""

from __future__ import annotations

import logging
import time
from dataclasses import replace
from typing import Callable, Sequence

import typer

from ..cluster import OpenShiftClient
from ..config import VerificationConfig
from ..logging_utils import progress_spinner
from ..metrics import MetricsEmitter
from .models import CountResult, NamespaceState, NamespaceStatus, VerificationReport

logger = logging.getLogger(__name__)

BANNER = "=" * 64


def _component_name(selector: str) -> str:
    # app.kubernetes.io/instance=ai-agent -> ai-agent
    return selector.rsplit("=", 1)[-1] or selector


class DeploymentVerifier:
    """Confirms that every workshop user received an available deployment."""

    def __init__(
        self,
        client: OpenShiftClient,
        config: VerificationConfig | None = None,
        *,
        metrics_emitter: MetricsEmitter | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._config = config or VerificationConfig()
        self._metrics = metrics_emitter or MetricsEmitter()
        self._sleep = sleep
        self._component = _component_name(self._config.label_selector)

    @property
    def config(self) -> VerificationConfig:
        return self._config

    def wait_for_count(self, expected: int) -> CountResult:
        timeout = self._config.count_timeout_seconds
        interval = self._config.poll_interval_seconds
        selector = self._config.label_selector
        elapsed = 0
        attempts = 0

        typer.echo(f"Checking if all {self._component} deployments have been created...")
        typer.echo(f"Expected: {expected} deployment(s)")
        typer.echo()

        while elapsed < timeout:
            observed = self._client.count_deployments(selector)
            attempts += 1
            typer.echo(f"Current deployment count: {observed}/{expected}")
            if observed == expected:
                typer.secho(
                    f"✓ All {expected} {self._component} deployment(s) have been created!",
                    fg=typer.colors.GREEN,
                )
                typer.echo()
                return self._count_result(expected, observed, attempts, elapsed)
            typer.echo(f"Waiting for deployments to be created... ({elapsed}s/{timeout}s)")
            self._sleep(interval)
            elapsed += interval

        observed = self._client.count_deployments(selector)
        attempts += 1
        typer.echo(f"Current deployment count: {observed}/{expected}")
        return self._count_result(expected, observed, attempts, elapsed)

    def _count_result(self, expected: int, observed: int, attempts: int, elapsed: int) -> CountResult:
        self._metrics.emit("provisioner.verification.poll_attempts", float(attempts))
        self._metrics.emit("provisioner.verification.observed_deployments", float(observed))
        logger.info(
            "Deployment count poll finished",
            extra={"expected": expected, "observed": observed, "attempts": attempts, "elapsed": elapsed},
        )
        return CountResult(expected=expected, observed=observed, attempts=attempts, elapsed_seconds=elapsed)

    def wait_for_available(self) -> bool:
        timeout = self._config.available_timeout
        typer.echo(f"Waiting for {self._component} deployments to become available in all namespaces...")
        typer.echo(f"This may take up to {timeout}...")
        typer.echo()
        with progress_spinner(f"Waiting for {self._component} deployments"):
            return self._client.wait_for_condition(
                self._config.label_selector,
                condition="Available",
                timeout=timeout,
            )

    def diagnose_namespaces(self, user_count: int) -> Sequence[NamespaceStatus]:
        """Re-check every expected user namespace individually."""

        statuses: list[NamespaceStatus] = []
        for index in range(1, user_count + 1):
            namespace = self._config.namespace_for(index)
            if not self._client.namespace_exists(namespace):
                typer.secho(f"  ⚠ {namespace}: namespace does not exist", fg=typer.colors.YELLOW)
                statuses.append(NamespaceStatus(namespace=namespace, state=NamespaceState.MISSING))
                continue
            available = self._client.wait_for_condition(
                self._config.label_selector,
                condition="Available",
                timeout=self._config.namespace_timeout,
                namespace=namespace,
            )
            if available:
                typer.secho(
                    f"  ✓ {namespace}: {self._component} deployment is available",
                    fg=typer.colors.GREEN,
                )
                statuses.append(NamespaceStatus(namespace=namespace, state=NamespaceState.AVAILABLE))
            else:
                typer.secho(
                    f"  ✗ {namespace}: {self._component} deployment is not available",
                    fg=typer.colors.RED,
                )
                statuses.append(NamespaceStatus(namespace=namespace, state=NamespaceState.UNAVAILABLE))
        return tuple(statuses)

    def verify(self, expected: int) -> VerificationReport:
        typer.echo(BANNER)
        typer.echo("Starting verification process")
        typer.echo(BANNER)
        typer.echo()

        count = self.wait_for_count(expected)
        if not count.reached:
            typer.echo()
            typer.secho(
                f"✗ Timeout: Expected {expected} deployment(s), but found {count.observed}",
                fg=typer.colors.RED,
            )
            typer.echo("Aborting verification.")
            return VerificationReport(
                expected=expected,
                observed=count.observed,
                count_reached=False,
                passed=False,
                notes=f"deployment count {count.observed}/{expected} after {count.elapsed_seconds}s",
            )

        if self.wait_for_available():
            typer.echo()
            typer.secho(f"✓ All {self._component} deployments are available!", fg=typer.colors.GREEN)
            typer.echo()
            return VerificationReport(
                expected=expected,
                observed=count.observed,
                count_reached=True,
                available=True,
                passed=True,
            )

        typer.echo()
        typer.secho(
            f"✗ Verification failed: Some {self._component} deployments are not available",
            fg=typer.colors.RED,
        )
        typer.echo()
        typer.echo("Checking deployment status in user namespaces...")
        typer.echo()
        statuses = self.diagnose_namespaces(expected)
        report = VerificationReport(
            expected=expected,
            observed=count.observed,
            count_reached=True,
            available=False,
            namespaces=statuses,
        )
        failed = len(report.failed_namespaces)
        self._metrics.emit("provisioner.verification.failed_namespaces", float(failed))
        if failed:
            typer.echo()
            typer.secho(
                f"Error: {failed} namespace(s) have unavailable {self._component} deployments",
                fg=typer.colors.RED,
            )
            notes = f"{failed} namespace(s) unavailable"
            passed = False
        elif self._config.accept_recovered_namespaces:
            notes = "cluster-wide wait failed; every namespace passed its individual check"
            passed = True
        else:
            notes = "cluster-wide availability wait failed"
            passed = False
        return replace(report, passed=passed, notes=notes)
