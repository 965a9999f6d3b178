"""Click entry point — all commands."""

import sys

import click

from deploy_lock import __version__, config, log, process, store, workflow
from deploy_lock.coordinator import LockCoordinator, RunContext
from deploy_lock.errors import LockedError, StoreUnavailableError
from deploy_lock.expiry import get_parser


def _coordinator(obj: dict) -> LockCoordinator:
    try:
        cfg = config.load_config(obj.get("config_path"))
    except ValueError as e:
        log.error(f"Invalid configuration: {e}")
        sys.exit(1)
    if obj.get("stage"):
        cfg.stage = obj["stage"]
    return LockCoordinator(store.for_config(cfg), cfg)


def _parse_expiry(coordinator: LockCoordinator, text: str):
    """Returns (ok, expiry). An empty string means "never expires"."""
    if text == "":
        return True, None
    parsed = get_parser(coordinator.config.expiry_format).parse(text, coordinator.now())
    return parsed is not None, parsed


def _prompt_lock(coordinator: LockCoordinator, message, expire):
    if message is None:
        message = click.prompt("Lock Message", default="", show_default=False)

    if expire is not None:
        ok, expiry = _parse_expiry(coordinator, expire)
        if not ok:
            log.error(f"'{expire}' could not be parsed")
            sys.exit(1)
        return message, expiry

    while True:
        text = click.prompt("Expire lock at? (optional)", default="", show_default=False)
        ok, expiry = _parse_expiry(coordinator, text)
        if ok:
            return message, expiry
        log.info(f"'{text}' could not be parsed. Please try again.")


@click.group()
@click.version_option(version=__version__, prog_name="deploy-lock")
@click.option("--config", "config_path", default=None, help="Settings file (default: deploy-lock.yml)")
@click.option("--stage", default=None, help="Override the configured stage label")
@click.pass_context
def main(ctx, config_path, stage):
    """Advisory deploy lock for shared deploy targets."""
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["stage"] = stage


@main.command()
@click.pass_obj
def check(obj):
    """Check the deploy lock. Exits 2 if locked by someone else."""
    coordinator = _coordinator(obj)
    try:
        coordinator.check(RunContext())
    except LockedError:
        sys.exit(2)
    except StoreUnavailableError as e:
        log.error(str(e))
        sys.exit(1)


@main.command()
@click.pass_obj
def status(obj):
    """Show the current deploy lock."""
    coordinator = _coordinator(obj)
    try:
        record = coordinator.status(RunContext())
    except StoreUnavailableError as e:
        log.error(str(e))
        sys.exit(1)

    if record is None:
        log.info(f"{coordinator.config.target} is not locked")
        return

    log.info(coordinator.describe(record))
    if record.is_expired(coordinator.now()):
        log.info("(expired, will be removed by the next deploy)")
    elif record.custom:
        log.info("(custom lock)")


@main.command()
@click.option("--message", "-m", default=None, help="Reason for locking")
@click.option("--expire", "-e", default=None, help="When the lock expires, e.g. '2 hours' (empty: never)")
@click.pass_obj
def lock(obj, message, expire):
    """Lock deploys with a custom message and optional expiry."""
    coordinator = _coordinator(obj)
    message, expiry = _prompt_lock(coordinator, message, expire)
    try:
        coordinator.lock(RunContext(), message, expiry=expiry)
    except StoreUnavailableError as e:
        log.error(str(e))
        sys.exit(1)
    log.success(f"Deploy to {coordinator.config.target} locked")


@main.command()
@click.option("--force", is_flag=True, help="Also remove custom locks")
@click.pass_obj
def unlock(obj, force):
    """Remove the deploy lock."""
    coordinator = _coordinator(obj)
    ctx = RunContext()
    try:
        record = coordinator.fetch(ctx)
        if record is not None:
            ctx.custom = record.custom
        coordinator.release(ctx, force=force)
    except StoreUnavailableError as e:
        log.error(str(e))
        sys.exit(1)

    if ctx.removed:
        log.success(f"Deploy to {coordinator.config.target} unlocked")
    else:
        log.info("Use --force to remove it.")
        sys.exit(1)


@main.command(context_settings={"ignore_unknown_options": True})
@click.option("--with-lock", is_flag=True, help="Place a custom lock that stays after the deploy")
@click.option("--message", "-m", default=None, help="Lock message")
@click.option("--expire", "-e", default=None, help="Custom lock expiry (with --with-lock)")
@click.option("--rollback", default=None, help="Shell command to run if the deploy fails")
@click.argument("command", nargs=-1, type=click.UNPROCESSED)
@click.pass_obj
def deploy(obj, with_lock, message, expire, rollback, command):
    """Run COMMAND under the deploy lock."""
    if not command:
        click.echo("Error: No command specified", err=True)
        sys.exit(1)

    coordinator = _coordinator(obj)

    def deploy_step():
        return process.run_streaming(list(command))

    rollback_step = (lambda: process.run_shell(rollback)) if rollback else None

    try:
        if with_lock:
            message, expiry = _prompt_lock(coordinator, message, expire)
            code = workflow.with_lock(
                coordinator,
                message,
                expiry=expiry,
                deploy_step=deploy_step,
                rollback_step=rollback_step,
            )
        else:
            code = workflow.deploy(
                coordinator,
                deploy_step=deploy_step,
                rollback_step=rollback_step,
                message=message,
            )
    except StoreUnavailableError as e:
        log.error(str(e))
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
