# backend/bookbar/services/booking_states.py
"""
Booking status state machine.

    pending_deposit ──deposit paid / admin──▶ confirmed
    pending_deposit ──expiry / admin──▶ cancelled
    confirmed ──admin──▶ cancelled

cancelled is terminal.
"""

PENDING_DEPOSIT = "pending_deposit"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"

STATUSES = (PENDING_DEPOSIT, CONFIRMED, CANCELLED)

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING_DEPOSIT: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({CANCELLED}),
    CANCELLED: frozenset(),
}

# Notification event emitted when a booking enters a status
STATUS_EVENTS = {
    CONFIRMED: "booking_confirmed",
    CANCELLED: "booking_cancelled",
}


def is_valid_status(status: str) -> bool:
    return status in STATUSES


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())
