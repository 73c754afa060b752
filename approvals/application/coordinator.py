"""Owner of the single approve/unapprove intent.

State machine::

    IDLE --request_action--> AWAITING_CONFIRMATION --confirm--> EXECUTING
    AWAITING_CONFIRMATION --cancel--> IDLE
    EXECUTING --receipt--> SUCCEEDED --(invalidation dispatched)--> IDLE
    EXECUTING --error--> FAILED --confirm--> EXECUTING
    FAILED --cancel--> IDLE

Only one command exists at a time, so at most one mutation is ever in
flight. ``SUCCEEDED`` is only visible on the value returned by
:meth:`ApprovalCoordinator.confirm`.
"""
from __future__ import annotations

import logging
from typing import Callable

from approvals.domain import (
    COMMAND_TRANSITIONS,
    ApprovalError,
    AuthError,
    CommandAction,
    CommandInProgressError,
    CommandState,
    DocumentKey,
    DocumentKind,
    InvalidCommandStateError,
    PendingCommand,
)
from approvals.infrastructure import DocumentRepository

logger = logging.getLogger(__name__)


class ApprovalCoordinator:
    def __init__(
        self,
        repository: DocumentRepository,
        *,
        on_settled: Callable[[DocumentKind], object] | None = None,
    ) -> None:
        self._repository = repository
        self._on_settled = on_settled
        self._command: PendingCommand | None = None

    @property
    def command(self) -> PendingCommand | None:
        return self._command

    @property
    def state(self) -> CommandState:
        return self._command.state if self._command else CommandState.IDLE

    def _check(self, target: CommandState) -> None:
        current = self.state
        if target not in COMMAND_TRANSITIONS[current]:
            raise InvalidCommandStateError(f"cannot go from {current.value} to {target.value}")

    def _move(self, command: PendingCommand, target: CommandState) -> None:
        if target not in COMMAND_TRANSITIONS[command.state]:
            raise InvalidCommandStateError(f"cannot go from {command.state.value} to {target.value}")
        command.state = target

    def request_action(
        self,
        kind: DocumentKind | str,
        key: DocumentKey,
        action: CommandAction | str,
    ) -> PendingCommand:
        if self.state is CommandState.EXECUTING:
            raise CommandInProgressError("another approval is still executing")
        self._check(CommandState.AWAITING_CONFIRMATION)
        command = PendingCommand(kind=DocumentKind(kind), key=key, action=CommandAction(action))
        if self._command is not None:
            logger.info("dropping unconfirmed %s of %s", self._command.action.value, self._command.key)
        self._command = command
        return command

    def cancel(self) -> None:
        if self.state is CommandState.EXECUTING:
            raise CommandInProgressError("a mutation already sent cannot be cancelled")
        if self._command is None:
            return
        self._check(CommandState.IDLE)
        self._command = None

    async def confirm(self) -> PendingCommand:
        command = self._command
        if command is None:
            raise InvalidCommandStateError("there is no action awaiting confirmation")
        if command.state is CommandState.EXECUTING:
            raise CommandInProgressError("this action is already executing")
        self._move(command, CommandState.EXECUTING)
        command.error = None
        command.attempts += 1
        logger.info("executing %s of %s %s (attempt %d)", command.action.value, command.kind.value, command.key, command.attempts)

        settled = False
        try:
            if command.action is CommandAction.APPROVE:
                receipt = await self._repository.approve(command.kind, command.key)
            else:
                receipt = await self._repository.unapprove(command.kind, command.key)
            settled = True
        except AuthError as exc:
            self._move(command, CommandState.FAILED)
            command.error = exc
            # nothing can succeed before a new login; drop the command
            self._command = None
            logger.warning("%s of %s rejected, session is no longer valid", command.action.value, command.key)
            return command
        except ApprovalError as exc:
            self._move(command, CommandState.FAILED)
            command.error = exc
            logger.warning("%s of %s failed: %s", command.action.value, command.key, exc)
            return command
        finally:
            if not settled and command.state is CommandState.EXECUTING:
                # unexpected exception or cancellation of the awaiting task
                self._move(command, CommandState.FAILED)

        self._move(command, CommandState.SUCCEEDED)
        command.receipt = receipt
        if self._on_settled is not None:
            self._on_settled(command.kind)
        self._check(CommandState.IDLE)
        self._command = None
        return command

    def reset(self) -> None:
        """Forget any command that is not executing (used at logout)."""

        if self._command is not None and self.state is not CommandState.EXECUTING:
            self._check(CommandState.IDLE)
            self._command = None
