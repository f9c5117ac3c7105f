from __future__ import annotations


class RemoteStackError(Exception):
    """Base error for the remotestack domain."""
    pass

class ReconcilerConfigError(RemoteStackError):
    """Raised when a reconciler is constructed with an incompatible descriptor kind."""
    pass

class WrongDescriptorVariantError(RemoteStackError, TypeError):
    """Raised when a packager or modifier receives the wrong descriptor type."""
    pass

class ReconcileError(RemoteStackError):
    """A failure inside one reconcile cycle, carrying its context message."""
    pass

class ReconcileTimeoutError(ReconcileError, TimeoutError):
    """Raised when a reconcile cycle exceeds its deadline."""
    pass

class StoreError(RemoteStackError):
    """Base error for object store failures."""
    pass

class NotFoundError(StoreError):
    """Raised when the requested object does not exist."""
    pass

class ConflictError(StoreError):
    """Raised when a write is rejected because the stored object changed."""
    pass

class OwnerMismatchError(ConflictError):
    """Raised when an apply targets an object controlled by someone else."""
    pass

class StoreAuthError(StoreError):
    """Raised when the store rejects the caller's credentials."""
    pass

class StoreRateLimitError(StoreError):
    """Raised when the store throttles the caller."""
    pass

class StoreTimeoutError(StoreError):
    """Raised when a store request does not complete in time."""
    pass

class StoreNetworkError(StoreError):
    """Raised when the store cannot be reached."""
    pass


def wrap(err: BaseException, message: str) -> ReconcileError:
    """Return a ReconcileError reading ``"<message>: <err>"`` chained to ``err``."""
    wrapped = ReconcileError(f"{message}: {err}")
    wrapped.__cause__ = err
    return wrapped
