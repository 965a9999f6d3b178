"""Shared test fixtures."""

from datetime import datetime, timezone

import pytest

NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_process(monkeypatch):
    """Mock process.run and process.run_streaming for tests."""
    from deploy_lock import process

    calls = []
    responses = []

    def fake_run(args, env=None, cwd=None, input=None, errors=None):
        calls.append(("run", args, env, cwd, input))
        if responses:
            return responses.pop(0)
        return process.Result(returncode=0, stdout="", stderr="")

    def fake_run_streaming(args, env=None, cwd=None):
        calls.append(("run_streaming", args, env, cwd, None))
        return 0

    monkeypatch.setattr(process, "run", fake_run)
    monkeypatch.setattr(process, "run_streaming", fake_run_streaming)

    return type("MockProcess", (), {"calls": calls, "responses": responses})()


class MemoryStore:
    """In-memory remote store that records every operation."""

    def __init__(self):
        self.files = {}
        self.ops = []

    def read(self, path):
        self.ops.append(("read", path))
        return self.files.get(path)

    def write(self, path, data, mode=0o777):
        self.ops.append(("write", path))
        self.files[path] = data

    def delete(self, path):
        self.ops.append(("delete", path))
        self.files.pop(path, None)

    def count(self, op):
        return sum(1 for o, _ in self.ops if o == op)


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def frozen_now(monkeypatch):
    """Pin the coordinator clock to NOW."""
    from deploy_lock import coordinator

    monkeypatch.setattr(coordinator, "_now", lambda: NOW)
    return NOW


@pytest.fixture
def no_sleep(monkeypatch):
    """Record countdown sleeps instead of sleeping."""
    from deploy_lock import coordinator

    sleeps = []
    monkeypatch.setattr(coordinator.time, "sleep", lambda s: sleeps.append(s))
    return sleeps


@pytest.fixture
def lock_config():
    from deploy_lock.config import LockConfig

    return LockConfig(
        application="myapp",
        stage="production",
        branch="main",
        identity="alice",
        lock_path="/srv/myapp/shared/deploy-lock.yml",
        time_format="absolute",
    )
