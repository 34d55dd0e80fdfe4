"""Cluster access helpers."""

from .client import CommandRunner, OpenShiftClient

__all__ = ["CommandRunner", "OpenShiftClient"]
