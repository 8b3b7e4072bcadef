from datetime import datetime

from sqlalchemy import select, update

from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import Quote
from app.services.quotes.quote_transitions import EXPIRABLE_STATUSES


def _expired_candidates_stmt(now: datetime):
    """Ids of quotes past their expiration date that can still expire."""
    return (
        select(Quote.id)
        .where(
            Quote.expiration_date.isnot(None),
            Quote.expiration_date < now,
            Quote.status != QuoteStatus.CANCELLED,
            Quote.status.in_(EXPIRABLE_STATUSES),
        )
        .order_by(Quote.id)
    )


def _expire_quotes_stmt(quote_ids: list[int], now: datetime, updated_by: str | None = None):
    # status/date are re-checked so rows changed since the scan are skipped;
    # callers reload quotes with populate_existing, so no session sync
    return (
        update(Quote)
        .where(
            Quote.id.in_(quote_ids),
            Quote.expiration_date < now,
            Quote.status.in_(EXPIRABLE_STATUSES),
        )
        .values(
            status=QuoteStatus.EXPIRED,
            updated_at=now,
            updated_by=updated_by,
        )
        .returning(Quote.id)
        .execution_options(synchronize_session=False)
    )
