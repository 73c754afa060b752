"""Domain layer definitions."""

from .commands import COMMAND_TRANSITIONS, CommandAction, CommandState, PendingCommand
from .documents import (
    ApprovalProjection,
    ApprovalReceipt,
    Document,
    DocumentKey,
    DocumentKind,
    Identity,
    IndicatorSummary,
    UnapprovalReceipt,
)
from .errors import (
    ApprovalError,
    AuthError,
    CommandError,
    CommandInProgressError,
    ConflictError,
    InvalidCommandStateError,
    TransportError,
)

__all__ = [
    "ApprovalError",
    "ApprovalProjection",
    "ApprovalReceipt",
    "AuthError",
    "COMMAND_TRANSITIONS",
    "CommandAction",
    "CommandError",
    "CommandInProgressError",
    "CommandState",
    "ConflictError",
    "Document",
    "DocumentKey",
    "DocumentKind",
    "Identity",
    "IndicatorSummary",
    "InvalidCommandStateError",
    "PendingCommand",
    "TransportError",
    "UnapprovalReceipt",
]
