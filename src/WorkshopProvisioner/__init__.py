"""WorkshopProvisioner package exports."""

from .cluster import OpenShiftClient
from .config import ProvisionerConfig, load_provisioner_config
from .exceptions import (
    ClusterLoginError,
    ConfigError,
    ProvisionerError,
    ScriptFailedError,
    ScriptNotFoundError,
    UsageError,
    VerificationError,
)
from .provisioning import ProvisioningPipeline, ProvisioningReport, validate_user_count
from .runner import RunMode, RunReport, WorkshopRunner
from .verification import DeploymentVerifier, VerificationReport

__version__ = "0.1.0"

__all__ = [
    "ClusterLoginError",
    "ConfigError",
    "DeploymentVerifier",
    "OpenShiftClient",
    "ProvisionerConfig",
    "ProvisionerError",
    "ProvisioningPipeline",
    "ProvisioningReport",
    "RunMode",
    "RunReport",
    "ScriptFailedError",
    "ScriptNotFoundError",
    "UsageError",
    "VerificationError",
    "VerificationReport",
    "WorkshopRunner",
    "load_provisioner_config",
    "validate_user_count",
]
