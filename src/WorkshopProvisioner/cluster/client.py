"""Thin wrapper around the OpenShift ``oc`` command line client."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from ..utils import CommandResult, run_command

logger = logging.getLogger(__name__)

CommandRunner = Callable[[list[str]], CommandResult]


class OpenShiftClient:
    """Issue blocking ``oc`` calls and interpret their results."""

    def __init__(self, binary: str = "oc", runner: Optional[CommandRunner] = None) -> None:
        self.binary = binary
        self._runner = runner or run_command

    def _run(self, *args: str) -> CommandResult:
        command = [self.binary, *args]
        logger.debug("Running cluster command: %s", " ".join(command))
        result = self._runner(command)
        if not result.ok:
            logger.debug(
                "Cluster command failed",
                extra={"command": command, "returncode": result.returncode, "stderr": result.stderr[-2000:]},
            )
        return result

    def whoami(self) -> Optional[str]:
        result = self._run("whoami")
        if not result.ok:
            return None
        identity = result.stdout.strip()
        return identity or None

    def count_deployments(self, selector: str) -> int:
        """Count deployments matching ``selector`` across all namespaces.

        A failing query counts as zero, mirroring ``oc get ... 2>/dev/null | wc -l``.
        """

        result = self._run("get", "deploy", "-l", selector, "-A", "--no-headers")
        if not result.ok:
            logger.warning("Deployment query failed: %s", result.stderr.strip())
            return 0
        return len(result.lines())

    def wait_for_condition(
        self,
        selector: str,
        *,
        condition: str = "Available",
        timeout: str = "30s",
        namespace: Optional[str] = None,
    ) -> bool:
        scope = ["-n", namespace] if namespace else ["-A"]
        result = self._run(
            "wait",
            f"--for=condition={condition}",
            "deploy",
            "-l",
            selector,
            *scope,
            f"--timeout={timeout}",
        )
        return result.ok

    def namespace_exists(self, name: str) -> bool:
        return self._run("get", "namespace", name).ok
