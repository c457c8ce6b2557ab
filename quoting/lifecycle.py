"""
Quotation lifecycle — status state machine gated by actor role.

    Draft ──(any actor)──> Sent ──(Admin)──> Approved
                                 └─(Admin)──> Rejected

Draft is the only initial state; Approved and Rejected are terminal.
Knows nothing about pricing: a transition returns a copy of the quotation
with only `status` changed.

Checks run in a fixed order so each bad request gets exactly one error:
same-status (NoOpTransition), terminal source (TerminalState), edge not in
the table (IllegalTransition), role mismatch (Unauthorized).
"""

import logging
from typing import List

from .domain import Actor, QuotationStatus, Role, parse_status
from .exceptions import IllegalTransition, NoOpTransition, TerminalState, Unauthorized

logger = logging.getLogger(__name__)

TERMINAL_STATES = frozenset({QuotationStatus.APPROVED, QuotationStatus.REJECTED})

# (current, requested) -> roles allowed to take that edge
TRANSITIONS = {
    (QuotationStatus.DRAFT, QuotationStatus.SENT): frozenset({Role.STAFF, Role.ADMIN}),
    (QuotationStatus.SENT, QuotationStatus.APPROVED): frozenset({Role.ADMIN}),
    (QuotationStatus.SENT, QuotationStatus.REJECTED): frozenset({Role.ADMIN}),
}


def _actor(actor) -> Actor:
    if isinstance(actor, Actor):
        return actor
    # A bare role string or Role
    return Actor.from_role(getattr(actor, "value", actor))


class QuotationLifecycle:

    def check_transition(self, current, requested, actor) -> None:
        """Raise the matching WorkflowError if the move is not allowed."""
        current = parse_status(current)
        requested = parse_status(requested)
        actor = _actor(actor)

        if current == requested:
            raise NoOpTransition(current.value, requested.value)
        if current in TERMINAL_STATES:
            raise TerminalState(current.value, requested.value)

        allowed_roles = TRANSITIONS.get((current, requested))
        if allowed_roles is None:
            raise IllegalTransition(current.value, requested.value)
        if actor.role not in allowed_roles:
            raise Unauthorized(current.value, requested.value, actor.role.value)

    def can_transition(self, current, requested, actor_role) -> bool:
        try:
            self.check_transition(current, requested, actor_role)
        except (IllegalTransition, NoOpTransition, TerminalState, Unauthorized):
            return False
        return True

    def request_transition(self, quotation, requested, actor):
        """
        Validate and apply a status change to an immutable quotation value.

        Returns a new quotation with status = requested; items and totals are
        carried over untouched. Raises IllegalTransition, TerminalState,
        NoOpTransition or Unauthorized.
        """
        requested = parse_status(requested)
        try:
            self.check_transition(quotation.status, requested, actor)
        except (IllegalTransition, NoOpTransition, TerminalState, Unauthorized) as e:
            logger.warning(
                "Rejected transition for quotation %s: %s (%s)",
                quotation.id, e, e.code,
            )
            raise
        return quotation.model_copy(update={"status": requested})

    def allowed_transitions(self, current, actor) -> List[QuotationStatus]:
        """Statuses this actor may move to from `current` — drives UI buttons."""
        current = parse_status(current)
        return [
            requested for requested in QuotationStatus
            if self.can_transition(current, requested, actor)
        ]


lifecycle = QuotationLifecycle()
