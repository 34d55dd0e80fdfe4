"""Deployment verification utilities."""

from .models import CountResult, NamespaceState, NamespaceStatus, VerificationReport
from .poller import DeploymentVerifier

__all__ = [
    "CountResult",
    "DeploymentVerifier",
    "NamespaceState",
    "NamespaceStatus",
    "VerificationReport",
]
