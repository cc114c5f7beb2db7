"""Exceptions raised by the litstage core."""


class LitStageError(Exception):
    """Base class for all litstage errors."""


class RepositoryError(LitStageError):
    """The repository is missing, or already exists where one is created."""


class ObjectNotFoundError(LitStageError, KeyError):
    """An object id does not resolve to a stored object."""

    def __init__(self, oid: str):
        super().__init__(f"Object {oid} not found")
        self.oid = oid

    def __str__(self) -> str:
        return self.args[0]


class PatchMismatchError(LitStageError):
    """A hunk could not be applied to, or reversed from, the current content."""

    def __init__(self, path: str, reason: str = "patch does not apply"):
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class UnexpectedError(LitStageError):
    """An internal invariant was violated (unreadable index, missing blob...)."""
