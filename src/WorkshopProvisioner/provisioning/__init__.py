"""Provisioning script orchestration."""

from .models import ProvisioningReport, ScriptResult, ScriptStep
from .pipeline import ProvisioningPipeline, build_steps
from .preflight import check_cluster_login, validate_user_count

__all__ = [
    "ProvisioningPipeline",
    "ProvisioningReport",
    "ScriptResult",
    "ScriptStep",
    "build_steps",
    "check_cluster_login",
    "validate_user_count",
]
