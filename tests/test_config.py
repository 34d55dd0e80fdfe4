"""Tests for provisioner configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from WorkshopProvisioner.config import DEFAULT_SCRIPTS, load_provisioner_config
from WorkshopProvisioner.exceptions import ConfigError


def write_config(tmp_path: Path, text: str) -> Path:
    config_path = tmp_path / "provisioner.yaml"
    config_path.write_text(text, encoding="utf-8")
    return config_path


def test_defaults_without_config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    config = load_provisioner_config(None, env={})

    assert config.cluster.binary == "oc"
    assert config.cluster.expected_user == "admin"
    assert config.scripts.names == DEFAULT_SCRIPTS
    assert config.scripts.directory == tmp_path.resolve()
    assert config.verification.count_timeout_seconds == 300
    assert config.verification.poll_interval_seconds == 10
    assert config.verification.available_timeout == "20m"
    assert config.verification.namespace_for(3) == "user3-ai-agent"
    assert config.config_path is None


def test_relative_paths_resolve_against_config_file(tmp_path: Path) -> None:
    config_path = write_config(
        tmp_path,
        """
scripts:
  directory: ./admin
  names: [a.sh, b.sh]
reporting:
  report_dir: ./out
""",
    )
    config = load_provisioner_config(config_path, env={})

    assert config.scripts.directory == (tmp_path / "admin").resolve()
    assert config.scripts.names == ["a.sh", "b.sh"]
    assert config.reporting.report_dir == (tmp_path / "out").resolve()
    assert config.config_path == config_path


def test_env_overrides_file_values(tmp_path: Path) -> None:
    config_path = write_config(tmp_path, "cluster:\n  expected_user: admin\n")
    env = {
        "WP_EXPECTED_USER": "kubeadmin",
        "WP_OC_BINARY": "/opt/bin/oc",
        "WP_COUNT_TIMEOUT": "60",
        "WP_LOG_FORMAT": "json",
    }
    config = load_provisioner_config(config_path, env=env)

    assert config.cluster.expected_user == "kubeadmin"
    assert config.cluster.binary == "/opt/bin/oc"
    assert config.verification.count_timeout_seconds == 60
    assert config.reporting.log_format == "json"


def test_flag_overrides_env(tmp_path: Path) -> None:
    config = load_provisioner_config(
        None,
        env={"WP_LOG_FORMAT": "json", "WP_CONFIG": str(write_config(tmp_path, "{}\n"))},
        overrides={"log_format": "text", "verbose": True, "scripts_dir": tmp_path / "scripts"},
    )

    assert config.reporting.log_format == "text"
    assert config.reporting.verbose is True
    assert config.scripts.directory == (tmp_path / "scripts").resolve()


@pytest.mark.parametrize(
    "text",
    [
        "verification:\n  available_timeout: soon\n",
        "verification:\n  namespace_template: user-ai-agent\n",
        "verification:\n  namespace_template: user{index}-{team}\n",
        "verification:\n  namespace_template: user{index}-{}\n",
        "scripts:\n  names: []\n",
        "reporting:\n  log_format: xml\n",
        "- just\n- a list\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, text: str) -> None:
    with pytest.raises(ConfigError):
        load_provisioner_config(write_config(tmp_path, text), env={})


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        load_provisioner_config(tmp_path / "missing.yaml", env={})


def test_durations_are_normalised_for_oc(tmp_path: Path) -> None:
    config_path = write_config(tmp_path, "verification:\n  namespace_timeout: 45S\n")
    config = load_provisioner_config(config_path, env={"WP_AVAILABLE_TIMEOUT": "1200"})

    assert config.verification.available_timeout == "1200s"
    assert config.verification.namespace_timeout == "45s"


def test_numeric_yaml_duration_is_accepted(tmp_path: Path) -> None:
    config = load_provisioner_config(write_config(tmp_path, "verification:\n  available_timeout: 90\n"), env={})

    assert config.verification.available_timeout == "90s"
