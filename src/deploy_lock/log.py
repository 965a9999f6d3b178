"""Timestamped output + GitHub Actions formatting."""

import os
import sys
from datetime import datetime

import click


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _is_github_actions() -> bool:
    return os.environ.get("GITHUB_ACTIONS") == "true"


def info(msg: str) -> None:
    print(f"[{_timestamp()}] {msg}", flush=True)


def header(title: str) -> None:
    line = f"── {title} " + "─" * max(0, 45 - len(title))
    if _is_github_actions():
        print(f"::group::{title}", flush=True)
    info(line)


def footer(title: str) -> None:
    line = f"── {title} " + "─" * max(0, 45 - len(title))
    info(line)
    if _is_github_actions():
        print("::endgroup::", flush=True)


def step(msg: str) -> None:
    info(f"  {msg}")


def success(msg: str) -> None:
    info(f"  ✓ {msg}")


def failure(msg: str) -> None:
    if _is_github_actions():
        print(f"::error::{msg}", flush=True)
    info(f"  ✗ {msg}")


def warning(msg: str) -> None:
    if _is_github_actions():
        print(f"::warning::{msg}", flush=True)
    info(f"  ! {msg}")


def important(msg: str) -> None:
    """High-priority notice (lock held). Bright red on a terminal."""
    if _is_github_actions():
        # Annotations are single-line; GitHub decodes %0A as a newline
        print(f"::warning::{msg.replace(chr(10), '%0A')}", flush=True)
    for line in msg.splitlines():
        click.secho(f"[{_timestamp()}] {line}", fg="red", bold=True)
    sys.stdout.flush()


def countdown(msg: str) -> None:
    """Overwrite the current line (self-owned lock countdown)."""
    print(f"\r{msg}", end="", flush=True)


def countdown_done() -> None:
    print(flush=True)


def error(msg: str) -> None:
    if _is_github_actions():
        print(f"::error::{msg}", flush=True)
    print(f"[{_timestamp()}] ERROR: {msg}", file=sys.stderr, flush=True)
