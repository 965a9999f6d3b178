"""Load deploy lock settings from deploy-lock.yml + DEPLOY_LOCK_* env vars."""

import getpass
import os
from dataclasses import dataclass, field

import yaml

from deploy_lock.expiry import PARSERS
from deploy_lock.timefmt import FORMATTERS

CONFIG_FILE = "deploy-lock.yml"
ENV_PREFIX = "DEPLOY_LOCK_"
DEFAULT_LOCK_EXPIRY = 10 * 60
DEFAULT_COUNTDOWN = 5


def _default_identity() -> str:
    user = os.environ.get("USER")
    if user:
        return user
    try:
        return getpass.getuser()
    except (OSError, KeyError):
        return "unknown"


@dataclass
class LockConfig:
    application: str = ""
    stage: str | None = None
    branch: str | None = None
    default_lock_expiry: int = DEFAULT_LOCK_EXPIRY
    lock_path: str = ""
    identity: str = field(default_factory=_default_identity)
    host: str | None = None
    user: str | None = None
    port: int | None = None
    dir: str | None = None
    countdown_seconds: int = DEFAULT_COUNTDOWN
    time_format: str = "relative"
    expiry_format: str = "natural"

    def __post_init__(self):
        if not self.lock_path:
            if self.dir:
                self.lock_path = f"{self.dir.rstrip('/')}/shared/deploy-lock.yml"
            else:
                self.lock_path = ".deploy-lock.yml"

    @property
    def target(self) -> str:
        """Human label for messages, e.g. "myapp (production)"."""
        name = self.application or "deploy target"
        return f"{name} ({self.stage})" if self.stage else name


_INT_KEYS = ("default_lock_expiry", "port", "countdown_seconds")
_KEYS = (
    "application",
    "stage",
    "branch",
    "default_lock_expiry",
    "lock_path",
    "identity",
    "host",
    "user",
    "port",
    "dir",
    "countdown_seconds",
    "time_format",
    "expiry_format",
)


def _read_file(path: str) -> dict:
    """Read the YAML file. Keys may live under an x-deploy-lock mapping."""
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: expected a mapping")
    section = data.get("x-deploy-lock", data) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{path}: x-deploy-lock must be a mapping")
    return section


def _env_overrides(env) -> dict:
    overrides = {}
    for key in _KEYS:
        value = env.get(ENV_PREFIX + key.upper())
        if value:
            overrides[key] = value
    return overrides


def parse_config(data: dict, env=None) -> LockConfig:
    """Build a LockConfig from a settings dict, with env overrides on top."""
    env = os.environ if env is None else env
    merged = {k: v for k, v in data.items() if k in _KEYS and v is not None}
    merged.update(_env_overrides(env))
    if "identity" not in merged and env.get("USER"):
        merged["identity"] = env["USER"]

    for key in _INT_KEYS:
        if key in merged:
            try:
                merged[key] = int(merged[key])
            except (TypeError, ValueError):
                raise ValueError(f"{key} must be an integer, got {merged[key]!r}") from None

    if merged.get("time_format", "relative") not in FORMATTERS:
        raise ValueError(f"unknown time_format: {merged['time_format']!r}")
    if merged.get("expiry_format", "natural") not in PARSERS:
        raise ValueError(f"unknown expiry_format: {merged['expiry_format']!r}")

    for key in ("application", "stage", "branch", "identity", "host", "user", "dir"):
        if key in merged:
            merged[key] = str(merged[key])

    return LockConfig(**merged)


def load_config(path: str | None = None, env=None) -> LockConfig:
    """Load settings from *path* (default deploy-lock.yml, optional)."""
    return parse_config(_read_file(path or CONFIG_FILE), env=env)
