from app.models.enums.quote_note_type import QuoteNoteType


# Used when the caller attaches no text to a lifecycle action
QUOTE_NOTE_TEMPLATES = {
    QuoteNoteType.SUBMITTED:
        "Quote submitted for review",

    QuoteNoteType.APPROVED:
        "Quote approved",

    QuoteNoteType.DECLINED:
        "Quote declined",

    QuoteNoteType.CANCELLED:
        "Quote cancelled",

    QuoteNoteType.EXPIRED:
        "Quote has expired",

    QuoteNoteType.ORDERED:
        "Quote converted to order",
}

SYSTEM_EXPIRED_NOTE = "Quote automatically expired by system"
SYSTEM_ACTOR = "system"
