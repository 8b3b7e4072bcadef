from sqlalchemy.ext.asyncio import AsyncSession

from app.constants.quote_note_templates import QUOTE_NOTE_TEMPLATES
from app.models.enums.quote_note_type import QuoteNoteType
from app.models.quotes.quote_models import QuoteNote


def build_quote_note(
    *,
    quote_id: int,
    note_type: QuoteNoteType,
    created_by: str | None,
    content: str | None = None,
) -> QuoteNote:
    if content is None or not content.strip():
        content = QUOTE_NOTE_TEMPLATES.get(note_type)
        if content is None:
            raise ValueError(f"No note template for type {note_type}")

    return QuoteNote(
        quote_id=quote_id,
        note_type=note_type,
        note_content=content.strip(),
        created_by=created_by,
    )


async def emit_quote_note(
    db: AsyncSession,
    *,
    quote_id: int,
    note_type: QuoteNoteType,
    created_by: str | None,
    content: str | None = None,
) -> QuoteNote:
    note = build_quote_note(
        quote_id=quote_id,
        note_type=note_type,
        created_by=created_by,
        content=content,
    )
    db.add(note)
    return note
