from app.core.exceptions import QuoteError
from app.models.enums.quote_status import QuoteStatus

# Directional and acyclic; statuses missing from a value set are terminal.
VALID_TRANSITIONS: dict[QuoteStatus, frozenset[QuoteStatus]] = {
    QuoteStatus.DRAFT: frozenset({QuoteStatus.SUBMITTED}),
    QuoteStatus.SUBMITTED: frozenset({
        QuoteStatus.APPROVED,
        QuoteStatus.DECLINED,
        QuoteStatus.CANCELLED,
        QuoteStatus.EXPIRED,
        QuoteStatus.ORDERED,
    }),
    QuoteStatus.APPROVED: frozenset({QuoteStatus.ORDERED, QuoteStatus.EXPIRED}),
    QuoteStatus.DECLINED: frozenset(),
    QuoteStatus.CANCELLED: frozenset(),
    QuoteStatus.EXPIRED: frozenset(),
    QuoteStatus.ORDERED: frozenset(),
}

# Statuses the expiration scan is allowed to move to Expired
EXPIRABLE_STATUSES = tuple(
    s for s in QuoteStatus if QuoteStatus.EXPIRED in VALID_TRANSITIONS[s]
)


def _coerce(status) -> QuoteStatus | None:
    if isinstance(status, QuoteStatus):
        return status
    try:
        return QuoteStatus(status)
    except ValueError:
        return None


def can_transition(current, requested) -> bool:
    current_status = _coerce(current)
    requested_status = _coerce(requested)
    if current_status is None or requested_status is None:
        return False
    return requested_status in VALID_TRANSITIONS.get(current_status, frozenset())


def validate_status_transition(current, requested) -> None:
    """Raise QuoteError (400) unless ``requested`` is reachable from ``current``."""
    if not can_transition(current, requested):
        raise QuoteError.invalid_status_transition(current, requested)
