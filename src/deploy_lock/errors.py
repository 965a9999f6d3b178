"""Exceptions raised by the deploy lock."""


class DeployLockError(Exception):
    """Base class for deploy lock errors."""


class LockedError(DeployLockError):
    """The deploy target is locked by someone else. Aborts the run."""

    def __init__(self, message: str, record=None):
        super().__init__(message)
        self.record = record


class MalformedRecordError(DeployLockError):
    """The stored lock record could not be parsed."""


class StoreUnavailableError(DeployLockError):
    """The remote store could not be reached or refused the operation."""
