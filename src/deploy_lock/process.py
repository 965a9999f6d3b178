"""Subprocess wrapper — the single mock seam for remote store and deploy steps."""

import subprocess
from dataclasses import dataclass


@dataclass
class Result:
    returncode: int
    stdout: str
    stderr: str


def run(
    args: list[str],
    env: dict[str, str] | None = None,
    cwd: str | None = None,
    input: str | None = None,
    errors: str | None = None,
) -> Result:
    """Run a command and capture output. Never raises on non-zero exit."""
    merged_env = None
    if env is not None:
        import os

        merged_env = {**os.environ, **env}

    proc = subprocess.run(
        args,
        capture_output=True,
        text=True,
        env=merged_env,
        cwd=cwd,
        input=input,
        encoding="utf-8",
        errors=errors,
    )
    return Result(returncode=proc.returncode, stdout=proc.stdout, stderr=proc.stderr)


def run_streaming(
    args: list[str], env: dict[str, str] | None = None, cwd: str | None = None
) -> int:
    """Run a command with passthrough stdout/stderr. Returns exit code."""
    merged_env = None
    if env is not None:
        import os

        merged_env = {**os.environ, **env}

    proc = subprocess.run(
        args,
        env=merged_env,
        cwd=cwd,
    )
    return proc.returncode


def run_shell(command: str, env: dict[str, str] | None = None) -> int:
    """Run a shell command line with passthrough output. Returns exit code."""
    return run_streaming(["sh", "-c", command], env=env)
