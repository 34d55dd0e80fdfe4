from __future__ import annotations

from pathlib import Path

import pytest

from WorkshopProvisioner.exceptions import ScriptNotFoundError
from WorkshopProvisioner.metrics import MetricsEmitter
from WorkshopProvisioner.provisioning import ProvisioningPipeline, build_steps

NAMES = ["01-first.sh", "02-second.sh", "03-third.sh"]


def test_pipeline_runs_scripts_in_order_with_user_count(tmp_path: Path, write_script, recorded_calls, capsys) -> None:
    for name in NAMES:
        write_script(name)

    pipeline = ProvisioningPipeline(build_steps(NAMES, tmp_path / "admin"))
    report = pipeline.run(4)

    assert report.overall_passed
    assert report.failed_script is None
    assert [result.name for result in report.results] == NAMES
    assert recorded_calls() == ["01-first.sh 4", "02-second.sh 4", "03-third.sh 4"]
    out = capsys.readouterr().out
    assert "Running all admin scripts for 4 users" in out
    assert "✓ Script 03-third.sh completed successfully" in out
    assert "All scripts completed successfully!" in out


def test_pipeline_stops_at_first_failure(tmp_path: Path, write_script, recorded_calls, capsys) -> None:
    write_script(NAMES[0])
    write_script(NAMES[1], exit_code=3)
    write_script(NAMES[2])
    metrics = MetricsEmitter(env={})

    pipeline = ProvisioningPipeline(build_steps(NAMES, tmp_path / "admin"), metrics_emitter=metrics)
    report = pipeline.run(2)

    assert not report.overall_passed
    assert report.failed_script == "02-second.sh"
    assert [result.returncode for result in report.results] == [0, 3]
    assert recorded_calls() == ["01-first.sh 2", "02-second.sh 2"]
    out = capsys.readouterr().out
    assert "✗ Script 02-second.sh failed!" in out
    assert "Aborting execution." in out
    assert "All scripts completed successfully!" not in out
    passed_points = [point for point in metrics.points() if point.name == "provisioner.script.passed"]
    assert [point.value for point in passed_points] == [1.0, 0.0]


def test_pipeline_raises_for_missing_script(tmp_path: Path, write_script, recorded_calls) -> None:
    write_script(NAMES[0])

    pipeline = ProvisioningPipeline(build_steps(NAMES, tmp_path / "admin"))
    with pytest.raises(ScriptNotFoundError, match="02-second.sh not found"):
        pipeline.run(1)
    assert recorded_calls() == ["01-first.sh 1"]


def test_pipeline_marks_non_executable_script_failed(tmp_path: Path, write_script) -> None:
    script = write_script(NAMES[0])
    script.chmod(0o644)

    report = ProvisioningPipeline(build_steps(NAMES[:1], tmp_path / "admin")).run(1)

    assert report.failed_script == NAMES[0]
    assert report.results[0].returncode == 126


def test_pipeline_enforces_timeout(tmp_path: Path) -> None:
    admin = tmp_path / "admin"
    admin.mkdir()
    slow = admin / "01-slow.sh"
    slow.write_text("#!/bin/bash\nsleep 5\n", encoding="utf-8")
    slow.chmod(0o755)

    report = ProvisioningPipeline(build_steps(["01-slow.sh"], admin), timeout_seconds=1).run(1)

    assert report.failed_script == "01-slow.sh"
    assert report.results[0].notes.startswith("timeout")


def test_pipeline_requires_steps() -> None:
    with pytest.raises(ValueError, match="At least one provisioning script is required"):
        ProvisioningPipeline([])
