"""Error taxonomy shared by the repository client and the workflow services."""
from __future__ import annotations


class ApprovalError(RuntimeError):
    """Base class for every failure surfaced by the approval workflow."""


class AuthError(ApprovalError):
    """The credential is missing, expired or rejected; the operator must log in again."""


class ConflictError(ApprovalError):
    """The document no longer matches the state the action assumed."""


class TransportError(ApprovalError):
    """Network failure or server-side error; retrying the same call is allowed."""


class CommandError(ApprovalError):
    """Raised when the command state machine is driven out of order."""


class CommandInProgressError(CommandError):
    """Another approve/unapprove is still executing."""


class InvalidCommandStateError(CommandError):
    """The requested transition is not valid from the current command state."""
