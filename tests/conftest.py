from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Callable, Iterable, Optional, Sequence

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

import pytest  # noqa: E402

from WorkshopProvisioner.utils import CommandResult  # noqa: E402

# Keep metric export local during tests.
os.environ.setdefault("WP_ENABLE_OTEL", "0")
os.environ.setdefault("OTEL_SDK_DISABLED", "true")


class FakeCluster:
    """Answers ``oc`` invocations from canned state and records every call."""

    def __init__(
        self,
        *,
        identity: Optional[str] = "admin",
        counts: Sequence[int] = (1,),
        available: bool = True,
        namespaces: Iterable[str] = (),
        available_namespaces: Iterable[str] = (),
    ) -> None:
        self.identity = identity
        self._counts = list(counts)
        self.available = available
        self.namespaces = set(namespaces)
        self.available_namespaces = set(available_namespaces)
        self.calls: list[list[str]] = []

    def _next_count(self) -> int:
        if len(self._counts) > 1:
            return self._counts.pop(0)
        return self._counts[0]

    @staticmethod
    def _result(command: list[str], ok: bool, stdout: str = "", stderr: str = "") -> CommandResult:
        return CommandResult(command=command, returncode=0 if ok else 1, stdout=stdout, stderr=stderr)

    def __call__(self, command: list[str]) -> CommandResult:
        self.calls.append(list(command))
        args = command[1:]
        if args == ["whoami"]:
            if self.identity is None:
                return self._result(command, False, stderr="error: You must be logged in to the server (Unauthorized)")
            return self._result(command, True, stdout=f"{self.identity}\n")
        if args[:2] == ["get", "deploy"]:
            count = self._next_count()
            lines = [f"user{i}-ai-agent   ai-agent   1/1   1   1   5m" for i in range(1, count + 1)]
            return self._result(command, True, stdout="\n".join(lines) + ("\n" if lines else ""))
        if args[:2] == ["get", "namespace"]:
            name = args[2]
            if name in self.namespaces:
                return self._result(command, True, stdout=f"{name}   Active   5m\n")
            return self._result(command, False, stderr=f'Error from server (NotFound): namespaces "{name}" not found')
        if args and args[0] == "wait":
            if "-n" in args:
                namespace = args[args.index("-n") + 1]
                return self._result(command, namespace in self.available_namespaces)
            return self._result(command, self.available)
        return self._result(command, False, stderr=f"unexpected command: {command}")

    def commands(self, verb: str) -> list[list[str]]:
        return [call for call in self.calls if len(call) > 1 and call[1] == verb]


@pytest.fixture
def make_cluster() -> Callable[..., FakeCluster]:
    return FakeCluster


@pytest.fixture
def write_script(tmp_path: Path) -> Callable[..., Path]:
    """Create an executable provisioning script that records its invocation."""

    calls_log = tmp_path / "calls.log"

    def _write(name: str, exit_code: int = 0, directory: Optional[Path] = None) -> Path:
        target_dir = directory or tmp_path / "admin"
        target_dir.mkdir(parents=True, exist_ok=True)
        script = target_dir / name
        script.write_text(
            "#!/bin/bash\n"
            f'echo "{name} $1" >> "{calls_log}"\n'
            f"exit {exit_code}\n",
            encoding="utf-8",
        )
        script.chmod(0o755)
        return script

    _write.calls_log = calls_log  # type: ignore[attr-defined]
    return _write


@pytest.fixture
def recorded_calls(tmp_path: Path) -> Callable[[], list[str]]:
    def _read() -> list[str]:
        path = tmp_path / "calls.log"
        if not path.exists():
            return []
        return path.read_text(encoding="utf-8").splitlines()

    return _read
