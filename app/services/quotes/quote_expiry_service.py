from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.quote_note_templates import SYSTEM_ACTOR, SYSTEM_EXPIRED_NOTE
from app.core.config import QUOTE_EXPIRY_BATCH_SIZE
from app.models.enums.quote_note_type import QuoteNoteType
from app.services.quotes.quote_expiry_core import _expire_quotes_stmt, _expired_candidates_stmt
from app.utils.logger import get_logger
from app.utils.note_helpers import emit_quote_note

logger = get_logger(__name__)


def _chunks(ids: list[int], size: int):
    for start in range(0, len(ids), size):
        yield ids[start:start + size]


async def scan_and_expire_quotes(
    db: AsyncSession,
    now: datetime | None = None,
    batch_size: int = QUOTE_EXPIRY_BATCH_SIZE,
) -> list[int]:
    """
    Move every Submitted/Approved quote whose expiration date has passed to
    Expired, appending one system note per quote.

    Ids are processed in batches of ``batch_size`` and each batch commits on
    its own. Safe to re-run: already expired, cancelled or ordered quotes are
    never selected. Returns the ids that were expired.
    """
    now = now or datetime.now(timezone.utc)
    logger.info("Scanning for expired quotes", extra={"now": now.isoformat()})

    result = await db.execute(_expired_candidates_stmt(now))
    candidate_ids = list(result.scalars().all())

    if not candidate_ids:
        logger.info("No quotes to expire")
        return []

    expired_ids: list[int] = []

    try:
        for batch in _chunks(candidate_ids, batch_size):
            result = await db.execute(_expire_quotes_stmt(batch, now, updated_by=SYSTEM_ACTOR))
            updated = list(result.scalars().all())

            for quote_id in updated:
                await emit_quote_note(
                    db,
                    quote_id=quote_id,
                    note_type=QuoteNoteType.EXPIRED,
                    created_by=SYSTEM_ACTOR,
                    content=SYSTEM_EXPIRED_NOTE,
                )

            await db.commit()
            expired_ids.extend(updated)

            logger.info(
                "Expired quote batch",
                extra={"batch_size": len(batch), "expired": len(updated)},
            )
    except Exception:
        await db.rollback()
        logger.exception(
            "Failed to expire quotes",
            extra={"expired_so_far": expired_ids},
        )
        raise

    logger.info("Quote expiration scan finished", extra={"expired_count": len(expired_ids)})
    return sorted(expired_ids)
