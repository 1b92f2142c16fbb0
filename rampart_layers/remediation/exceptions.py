"""Remediation exceptions.

Custom exception hierarchy for rollback failures.
"""


class RampartError(Exception):
    """Base exception for Rampart."""

    pass


class RollbackError(RampartError):
    """A rollback handler could not undo a system change."""

    pass
