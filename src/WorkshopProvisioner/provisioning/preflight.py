"""Argument and cluster session checks run before provisioning."""
from __future__ import annotations

import logging
import re

import typer

from ..cluster import OpenShiftClient
from ..exceptions import ClusterLoginError, UsageError

logger = logging.getLogger(__name__)

_USER_COUNT_PATTERN = re.compile(r"[1-9][0-9]*")


def validate_user_count(raw: str | None) -> int:
    """Return the user count if ``raw`` is a positive integer without leading zeros."""

    if raw is None or raw == "":
        raise UsageError("Number of users is required")
    text = str(raw)
    if not _USER_COUNT_PATTERN.fullmatch(text):
        raise UsageError("Number of users must be a positive integer")
    return int(text)


def check_cluster_login(client: OpenShiftClient, expected_user: str) -> str:
    identity = client.whoami()
    if identity is None:
        raise ClusterLoginError("Not logged in to the cluster. Please run 'oc login' first.")
    if identity != expected_user:
        logger.error("Unexpected cluster identity", extra={"expected": expected_user, "actual": identity})
        raise ClusterLoginError(f"Must be logged in as '{expected_user}'. Current user: {identity}")
    typer.secho(f"✓ Logged in as: {identity}", fg=typer.colors.GREEN)
    typer.echo()
    return identity
