"""Configuration models for the workshop provisioner."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from .exceptions import ConfigError
from .utils import parse_duration

DEFAULT_SCRIPTS = [
    "01-create-mcp-github.sh",
    "02-update-llama-stack-config.sh",
    "03-create-ai-agent-pipelinerun.sh",
    "04-create-ai-agent-application.sh",
    "05-create-java-app-build.sh",
]


class ClusterConfig(BaseModel):
    binary: str = Field(default="oc", description="Cluster CLI executable")
    expected_user: str = Field(default="admin", description="Identity required by `oc whoami`")


class ScriptsConfig(BaseModel):
    directory: Path = Field(default=Path("."))
    names: List[str] = Field(default_factory=lambda: list(DEFAULT_SCRIPTS))
    timeout_seconds: Optional[int] = Field(default=None, ge=1)

    @field_validator("names")
    @classmethod
    def validate_names(cls, value: List[str]) -> List[str]:
        if not value:
            raise ValueError("scripts.names must list at least one script")
        for name in value:
            if not name or "/" in name:
                raise ValueError(f"Invalid script name: {name!r}")
        return value


class VerificationConfig(BaseModel):
    label_selector: str = Field(default="app.kubernetes.io/instance=ai-agent")
    namespace_template: str = Field(default="user{index}-ai-agent")
    count_timeout_seconds: int = Field(default=300, ge=0)
    poll_interval_seconds: int = Field(default=10, ge=1)
    available_timeout: str = Field(default="20m")
    namespace_timeout: str = Field(default="30s")
    accept_recovered_namespaces: bool = False

    @field_validator("available_timeout", "namespace_timeout", mode="before")
    @classmethod
    def validate_timeouts(cls, value: Any) -> str:
        # `oc wait --timeout` needs a lowercase unit, so bare numbers become seconds.
        text = str(value).strip().lower()
        parse_duration(text)
        if text[-1].isdigit():
            text = f"{text}s"
        return text

    @field_validator("namespace_template")
    @classmethod
    def validate_template(cls, value: str) -> str:
        if "{index}" not in value:
            raise ValueError("namespace_template must contain '{index}'")
        try:
            value.format(index=1)
        except (KeyError, IndexError, ValueError) as exc:
            raise ValueError(f"namespace_template may only use the {{index}} placeholder: {exc}") from exc
        return value

    def namespace_for(self, index: int) -> str:
        return self.namespace_template.format(index=index)


class ReportingConfig(BaseModel):
    report_dir: Path = Field(default=Path("reports"))
    log_path: Path = Field(default=Path("logs/provisioner.log"))
    log_format: str = Field(default="text")
    verbose: bool = False

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        lowered = value.lower()
        if lowered not in {"text", "json"}:
            raise ValueError("log_format must be 'text' or 'json'")
        return lowered


class ProvisionerConfig(BaseModel):
    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    scripts: ScriptsConfig = Field(default_factory=ScriptsConfig)
    verification: VerificationConfig = Field(default_factory=VerificationConfig)
    reporting: ReportingConfig = Field(default_factory=ReportingConfig)
    config_path: Optional[Path] = None


def load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(path)
    with path.open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def _resolve_relative(config: ProvisionerConfig, base: Path) -> ProvisionerConfig:
    scripts = config.scripts
    reporting = config.reporting
    if not scripts.directory.is_absolute():
        scripts = scripts.model_copy(update={"directory": (base / scripts.directory).resolve()})
    if not reporting.report_dir.is_absolute():
        reporting = reporting.model_copy(update={"report_dir": (base / reporting.report_dir).resolve()})
    if not reporting.log_path.is_absolute():
        reporting = reporting.model_copy(update={"log_path": (base / reporting.log_path).resolve()})
    return config.model_copy(update={"scripts": scripts, "reporting": reporting})


def _apply_env_overrides(data: Dict[str, Any], env: Mapping[str, str]) -> Dict[str, Any]:
    mapping = {
        "WP_OC_BINARY": ("cluster", "binary"),
        "WP_EXPECTED_USER": ("cluster", "expected_user"),
        "WP_SCRIPTS_DIR": ("scripts", "directory"),
        "WP_COUNT_TIMEOUT": ("verification", "count_timeout_seconds"),
        "WP_POLL_INTERVAL": ("verification", "poll_interval_seconds"),
        "WP_AVAILABLE_TIMEOUT": ("verification", "available_timeout"),
        "WP_REPORT_DIR": ("reporting", "report_dir"),
        "WP_LOG_FORMAT": ("reporting", "log_format"),
    }
    for variable, (section, key) in mapping.items():
        value = env.get(variable)
        if not value:
            continue
        if key in {"directory", "report_dir"}:
            value = str(Path(value).expanduser().resolve())
        data.setdefault(section, {})[key] = value
    verbose = env.get("WP_VERBOSE")
    if verbose is not None:
        data.setdefault("reporting", {})["verbose"] = verbose.strip().lower() in {"1", "true", "yes"}
    return data


def _apply_cli_overrides(data: Dict[str, Any], overrides: Mapping[str, Any]) -> Dict[str, Any]:
    if overrides.get("log_format"):
        data.setdefault("reporting", {})["log_format"] = overrides["log_format"]
    if overrides.get("verbose"):
        data.setdefault("reporting", {})["verbose"] = True
    if overrides.get("scripts_dir"):
        data.setdefault("scripts", {})["directory"] = str(Path(overrides["scripts_dir"]).expanduser().resolve())
    return data


def load_provisioner_config(
    config_path: Optional[Path] = None,
    env: Optional[Mapping[str, str]] = None,
    overrides: Optional[Mapping[str, Any]] = None,
) -> ProvisionerConfig:
    """Resolve defaults, config file, environment and flag overrides in that order."""

    env = os.environ if env is None else env
    overrides = dict(overrides or {})

    path = config_path
    if path is None and env.get("WP_CONFIG"):
        path = Path(env["WP_CONFIG"])

    data: Dict[str, Any] = {}
    base = Path.cwd()
    if path is not None:
        path = Path(path).expanduser()
        try:
            data = load_yaml(path)
        except FileNotFoundError as exc:
            raise ConfigError(f"Config file not found: {path}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"Config file is not valid YAML: {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file must contain a mapping: {path}")
        base = path.resolve().parent

    data = _apply_env_overrides(data, env)
    data = _apply_cli_overrides(data, overrides)

    try:
        config = ProvisionerConfig.model_validate(data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid provisioner configuration: {exc}") from exc

    config = _resolve_relative(config, base)
    return config.model_copy(update={"config_path": path})
