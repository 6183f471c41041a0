from storefront.common.errors import InvalidStateError
from storefront.schema.full_schema import CheckoutStatus

PENDING = CheckoutStatus.PENDING.value
COMPLETED = CheckoutStatus.COMPLETED.value
FAILED = CheckoutStatus.FAILED.value
CANCELLED = CheckoutStatus.CANCELLED.value

TERMINAL_STATUSES = frozenset({COMPLETED, FAILED, CANCELLED})

# pending is the only state with a way out, every transition leaves it exactly once
ALLOWED_TRANSITIONS = {
    PENDING: frozenset({COMPLETED, FAILED, CANCELLED}),
    COMPLETED: frozenset(),
    FAILED: frozenset(),
    CANCELLED: frozenset(),
}


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: str, new: str) -> bool:
    return new in ALLOWED_TRANSITIONS.get(current, frozenset())


def ensure_transition_allowed(current: str, new: str, message: str = None) -> None:
    if not can_transition(current, new):
        raise InvalidStateError(current, message)
