"""Expiration scan: batching, status filtering and idempotency."""

from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select

from app.constants.quote_note_templates import SYSTEM_ACTOR, SYSTEM_EXPIRED_NOTE
from app.models.enums.quote_note_type import QuoteNoteType
from app.models.enums.quote_status import QuoteStatus
from app.models.quotes.quote_models import QuoteNote
from app.services.quotes.quote_expiry_service import scan_and_expire_quotes
from tests.conftest import future, past, reload


async def _expired_notes(db) -> list[QuoteNote]:
    result = await db.execute(
        select(QuoteNote).where(QuoteNote.note_type == QuoteNoteType.EXPIRED)
    )
    return list(result.scalars().all())


class TestScanAndExpireQuotes:

    @pytest.mark.asyncio
    async def test_expires_only_submitted_and_approved(self, db, make_quote):
        submitted = await make_quote(status=QuoteStatus.SUBMITTED, expiration_date=past())
        approved = await make_quote(status=QuoteStatus.APPROVED, expiration_date=past())
        cancelled = await make_quote(status=QuoteStatus.CANCELLED, expiration_date=past())
        draft = await make_quote(status=QuoteStatus.DRAFT, expiration_date=past())
        ordered = await make_quote(status=QuoteStatus.ORDERED, expiration_date=past())
        fresh = await make_quote(status=QuoteStatus.SUBMITTED, expiration_date=future())

        expired_ids = await scan_and_expire_quotes(db)

        assert expired_ids == sorted([submitted.id, approved.id])
        assert (await reload(db, submitted.id)).status == QuoteStatus.EXPIRED
        assert (await reload(db, approved.id)).status == QuoteStatus.EXPIRED
        assert (await reload(db, cancelled.id)).status == QuoteStatus.CANCELLED
        assert (await reload(db, draft.id)).status == QuoteStatus.DRAFT
        assert (await reload(db, ordered.id)).status == QuoteStatus.ORDERED
        assert (await reload(db, fresh.id)).status == QuoteStatus.SUBMITTED

    @pytest.mark.asyncio
    async def test_appends_one_system_note_per_quote(self, db, make_quote):
        quote = await make_quote(expiration_date=past())

        await scan_and_expire_quotes(db)

        notes = await _expired_notes(db)
        assert len(notes) == 1
        assert notes[0].quote_id == quote.id
        assert notes[0].note_content == SYSTEM_EXPIRED_NOTE
        assert notes[0].created_by == SYSTEM_ACTOR
        assert (await reload(db, quote.id)).updated_by == SYSTEM_ACTOR

    @pytest.mark.asyncio
    async def test_second_run_finds_nothing(self, db, make_quote):
        await make_quote(expiration_date=past())
        await make_quote(status=QuoteStatus.APPROVED, expiration_date=past())

        first = await scan_and_expire_quotes(db)
        second = await scan_and_expire_quotes(db)

        assert len(first) == 2
        assert second == []
        assert len(await _expired_notes(db)) == 2

    @pytest.mark.asyncio
    async def test_processes_in_batches(self, db, make_quote):
        quotes = [await make_quote(expiration_date=past()) for _ in range(5)]

        expired_ids = await scan_and_expire_quotes(db, batch_size=2)

        assert expired_ids == sorted(q.id for q in quotes)
        assert len(await _expired_notes(db)) == 5

    @pytest.mark.asyncio
    async def test_now_is_the_cutoff(self, db, make_quote):
        quote = await make_quote(expiration_date=future(days=3))

        assert await scan_and_expire_quotes(db, now=datetime.now(timezone.utc)) == []

        later = datetime.now(timezone.utc) + timedelta(days=4)
        assert await scan_and_expire_quotes(db, now=later) == [quote.id]

    @pytest.mark.asyncio
    async def test_nothing_to_expire(self, db):
        assert await scan_and_expire_quotes(db) == []
