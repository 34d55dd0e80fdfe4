"""Utility functions."""
from __future__ import annotations

import json
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

MISSING_BINARY_RETURNCODE = 127


@dataclass
class CommandResult:
    command: list[str]
    returncode: int
    stdout: str
    stderr: str

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def lines(self) -> list[str]:
        return [line for line in self.stdout.splitlines() if line.strip()]


def run_command(command: list[str], *, timeout: int | None = None) -> CommandResult:
    try:
        process = subprocess.run(
            command,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError as exc:
        return CommandResult(
            command=command,
            returncode=MISSING_BINARY_RETURNCODE,
            stdout="",
            stderr=str(exc),
        )
    return CommandResult(command=command, returncode=process.returncode, stdout=process.stdout, stderr=process.stderr)


def parse_duration(value: str | int | float) -> int:
    """Convert ``30s``/``20m``/``1h`` style durations into seconds."""

    if isinstance(value, (int, float)):
        return int(value)
    text = value.strip().lower()
    if not text:
        raise ValueError("Duration cannot be empty")
    units = {"s": 1, "m": 60, "h": 3600}
    unit = text[-1]
    if unit in units:
        number = text[:-1]
        factor = units[unit]
    else:
        number = text
        factor = 1
    if not number.isdigit():
        raise ValueError(f"Invalid duration: {value!r}")
    return int(number) * factor


def write_json(path: Path, payload: Mapping[str, object]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(payload, handle, indent=2, sort_keys=True, default=str)

