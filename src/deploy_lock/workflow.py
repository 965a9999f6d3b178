"""Deploy pipeline: check → refresh → create → deploy → finalize/rollback → release."""

import signal
import time
from collections.abc import Callable
from datetime import datetime

from deploy_lock import log
from deploy_lock.coordinator import LockCoordinator, RunContext
from deploy_lock.errors import LockedError

Step = Callable[[], int]


def deploy(
    coordinator: LockCoordinator,
    ctx: RunContext | None = None,
    deploy_step: Step | None = None,
    rollback_step: Step | None = None,
    message: str | None = None,
) -> int:
    """Run a deploy under the lock. Returns exit code (0=success, 1=failure, 2=locked)."""
    ctx = ctx or RunContext()

    try:
        coordinator.check(ctx)
    except LockedError:
        log.error("Deploy locked, aborting")
        return 2

    coordinator.refresh(ctx)
    coordinator.acquire(ctx, message=message)

    # Release a routine lock if the deploy is interrupted
    _original_sigterm = signal.getsignal(signal.SIGTERM)
    _original_sigint = signal.getsignal(signal.SIGINT)

    def _cleanup_handler(signum, frame):
        log.error(f"Received signal {signum}, cleaning up...")
        coordinator.release(ctx)
        raise SystemExit(1)

    signal.signal(signal.SIGTERM, _cleanup_handler)
    signal.signal(signal.SIGINT, _cleanup_handler)

    try:
        log.header("deploy")
        start_time = time.time()

        code = deploy_step() if deploy_step else 0
        if code != 0:
            log.failure(f"deploy step failed (exit {code})")
            if rollback_step:
                log.step("rolling back...")
                rollback_code = rollback_step()
                if rollback_code != 0:
                    log.failure(f"rollback failed (exit {rollback_code})")
            log.footer("FAILED (deploy aborted)")
            return 1

        elapsed = time.time() - start_time
        log.footer(f"complete ({elapsed:.1f}s)")
    finally:
        coordinator.release(ctx)
        signal.signal(signal.SIGTERM, _original_sigterm)
        signal.signal(signal.SIGINT, _original_sigint)

    return 0


def with_lock(
    coordinator: LockCoordinator,
    message: str,
    expiry: datetime | None = None,
    ctx: RunContext | None = None,
    deploy_step: Step | None = None,
    rollback_step: Step | None = None,
) -> int:
    """Place an explicit lock, then deploy. The lock outlives the deploy."""
    ctx = ctx or RunContext()
    coordinator.lock(ctx, message, expiry=expiry)
    return deploy(coordinator, ctx, deploy_step=deploy_step, rollback_step=rollback_step)
