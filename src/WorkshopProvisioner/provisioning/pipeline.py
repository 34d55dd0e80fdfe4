"""Runs the provisioning scripts in order, stopping at the first failure."""

from __future__ import annotations

import logging
import os
import subprocess
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Mapping, Sequence

import typer

from ..exceptions import ScriptNotFoundError
from ..metrics import MetricsEmitter
from .models import ProvisioningReport, ScriptResult, ScriptStep

logger = logging.getLogger(__name__)

BANNER = "=" * 64


def build_steps(names: Iterable[str], scripts_dir: Path) -> list[ScriptStep]:
    return [ScriptStep(name=name, path=scripts_dir / name) for name in names]


class ProvisioningPipeline:
    """Runs configured provisioning scripts and produces a report."""

    def __init__(
        self,
        steps: Iterable[ScriptStep],
        *,
        timeout_seconds: int | None = None,
        env: Mapping[str, str] | None = None,
        workdir: Path | None = None,
        metrics_emitter: MetricsEmitter | None = None,
    ) -> None:
        self._steps = tuple(steps)
        if not self._steps:
            msg = "At least one provisioning script is required"
            raise ValueError(msg)
        self._timeout = timeout_seconds
        self._env = dict(env or {})
        self._workdir = workdir
        self._metrics = metrics_emitter or MetricsEmitter()

    @property
    def steps(self) -> Sequence[ScriptStep]:
        return self._steps

    def run(self, user_count: int, *, run_id: str | None = None) -> ProvisioningReport:
        run_id = run_id or uuid.uuid4().hex
        results: list[ScriptResult] = []
        failed_script: str | None = None

        typer.echo(BANNER)
        typer.echo(f"Running all admin scripts for {user_count} users")
        typer.echo(BANNER)
        typer.echo()

        for step in self._steps:
            if not step.path.is_file():
                logger.error("Provisioning script missing", extra={"script": str(step.path)})
                raise ScriptNotFoundError(f"Script {step.name} not found!")

            typer.echo(BANNER)
            typer.echo(f"Running: {step.name}")
            typer.echo(BANNER)
            typer.echo()

            result = self._run_script(step, user_count)
            results.append(result)
            self._emit_metrics(result)
            typer.echo()
            if not result.passed:
                failed_script = step.name
                typer.secho(f"✗ Script {step.name} failed!", fg=typer.colors.RED)
                typer.echo()
                typer.echo("Aborting execution.")
                break
            typer.secho(f"✓ Script {step.name} completed successfully", fg=typer.colors.GREEN)
            typer.echo()

        if failed_script is None:
            typer.echo(BANNER)
            typer.echo("All scripts completed successfully!")
            typer.echo(BANNER)

        return ProvisioningReport(
            run_id=run_id,
            user_count=user_count,
            results=tuple(results),
            failed_script=failed_script,
        )

    def _run_script(self, step: ScriptStep, user_count: int) -> ScriptResult:
        command = [str(step.path), str(user_count)]
        proc_env = os.environ.copy()
        proc_env.update(self._env)
        logger.info("Running provisioning script", extra={"script": step.name, "command": command})
        start = datetime.now(timezone.utc)
        notes = ""
        try:
            completed = subprocess.run(
                command,
                cwd=self._workdir,
                env=proc_env,
                check=False,
                timeout=self._timeout,
            )
            returncode = completed.returncode
        except subprocess.TimeoutExpired as exc:
            returncode = -1
            notes = f"timeout: {exc.timeout}s"
        except PermissionError as exc:
            returncode = 126
            notes = f"not executable: {exc}"
        finished = datetime.now(timezone.utc)
        if returncode != 0:
            logger.error(
                "Provisioning script failed",
                extra={"script": step.name, "returncode": returncode, "notes": notes},
            )
        return ScriptResult(
            name=step.name,
            path=step.path,
            returncode=returncode,
            started_at=start,
            finished_at=finished,
            notes=notes,
        )

    def _emit_metrics(self, result: ScriptResult) -> None:
        tags = {"script": result.name, "passed": str(result.passed).lower()}
        self._metrics.emit("provisioner.script.duration_seconds", result.duration_seconds, **tags)
        self._metrics.emit("provisioner.script.passed", 1.0 if result.passed else 0.0, **tags)
