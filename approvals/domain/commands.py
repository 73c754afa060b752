"""The single approve/unapprove intent owned by the dashboard."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from .documents import ApprovalReceipt, DocumentKey, DocumentKind, UnapprovalReceipt
from .errors import ApprovalError, AuthError


class CommandAction(str, Enum):
    APPROVE = "aprobar"
    UNAPPROVE = "desaprobar"


class CommandState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTING = "executing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


COMMAND_TRANSITIONS: dict[CommandState, frozenset[CommandState]] = {
    CommandState.IDLE: frozenset({CommandState.AWAITING_CONFIRMATION}),
    CommandState.AWAITING_CONFIRMATION: frozenset(
        {CommandState.IDLE, CommandState.AWAITING_CONFIRMATION, CommandState.EXECUTING}
    ),
    CommandState.EXECUTING: frozenset({CommandState.SUCCEEDED, CommandState.FAILED}),
    CommandState.SUCCEEDED: frozenset({CommandState.IDLE}),
    CommandState.FAILED: frozenset(
        {CommandState.IDLE, CommandState.AWAITING_CONFIRMATION, CommandState.EXECUTING}
    ),
}


@dataclass(slots=True)
class PendingCommand:
    kind: DocumentKind
    key: DocumentKey
    action: CommandAction
    state: CommandState = CommandState.AWAITING_CONFIRMATION
    error: ApprovalError | None = None
    receipt: ApprovalReceipt | UnapprovalReceipt | None = None
    attempts: int = 0

    @property
    def requires_login(self) -> bool:
        return isinstance(self.error, AuthError)

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind.value,
            "location_code": self.key.location_code,
            "document_number": self.key.document_number,
            "action": self.action.value,
            "state": self.state.value,
            "error": str(self.error) if self.error else None,
            "error_type": type(self.error).__name__ if self.error else None,
            "requires_login": self.requires_login,
            "attempts": self.attempts,
        }
