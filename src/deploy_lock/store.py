"""Remote store: read/write/delete the lock record on the shared target.

Two stores ship: a local filesystem store (for a shared mount, or when the
tool runs on the deploy target itself) and an SSH store that runs plain
shell commands on the target host through ``process.run``.
"""

import os
import shlex
from typing import Protocol

from deploy_lock import process
from deploy_lock.errors import StoreUnavailableError

DEFAULT_MODE = 0o777


class RemoteStore(Protocol):
    def read(self, path: str) -> bytes | None: ...

    def write(self, path: str, data: str, mode: int = DEFAULT_MODE) -> None: ...

    def delete(self, path: str) -> None: ...


class LocalStore:
    """Lock record on a locally mounted filesystem."""

    def read(self, path: str) -> bytes | None:
        try:
            with open(path, "rb") as f:
                return f.read()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreUnavailableError(f"cannot read {path}: {e}") from e

    def write(self, path: str, data: str, mode: int = DEFAULT_MODE) -> None:
        try:
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            with open(path, "w") as f:
                f.write(data)
            os.chmod(path, mode)
        except OSError as e:
            raise StoreUnavailableError(f"cannot write {path}: {e}") from e

    def delete(self, path: str) -> None:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StoreUnavailableError(f"cannot remove {path}: {e}") from e


class SSHStore:
    """Lock record on a remote host, accessed with the ``ssh`` client."""

    def __init__(self, host: str, user: str | None = None, port: int | None = None):
        self.host = host
        self.user = user
        self.port = port

    @property
    def destination(self) -> str:
        return f"{self.user}@{self.host}" if self.user else self.host

    def _ssh(
        self, command: str, input: str | None = None, errors: str | None = None
    ) -> process.Result:
        args = ["ssh", "-o", "BatchMode=yes"]
        if self.port:
            args += ["-p", str(self.port)]
        args += [self.destination, command]
        result = process.run(args, input=input, errors=errors)
        if result.returncode != 0:
            raise StoreUnavailableError(
                f"ssh {self.destination} failed ({result.returncode}): {result.stderr.strip()}"
            )
        return result

    def read(self, path: str) -> bytes | None:
        quoted = shlex.quote(path)
        # Prints nothing and exits 0 when the file is missing
        result = self._ssh(
            f"if [ -e {quoted} ]; then cat {quoted}; fi", errors="surrogateescape"
        )
        if not result.stdout:
            return None
        # Undecodable bytes come back unchanged for the record parser to reject
        return result.stdout.encode("utf-8", "surrogateescape")

    def write(self, path: str, data: str, mode: int = DEFAULT_MODE) -> None:
        quoted = shlex.quote(path)
        self._ssh(f"cat > {quoted} && chmod {mode:o} {quoted}", input=data)

    def delete(self, path: str) -> None:
        self._ssh(f"rm -f {shlex.quote(path)}")


def for_config(config) -> RemoteStore:
    """SSH store when a host is configured, local store otherwise."""
    if config.host:
        return SSHStore(config.host, user=config.user, port=config.port)
    return LocalStore()
