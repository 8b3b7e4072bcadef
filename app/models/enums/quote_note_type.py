# app/models/enums/quote_note_type.py
import enum


class QuoteNoteType(str, enum.Enum):
    SUBMITTED = "Submitted"
    APPROVED = "Approved"
    DECLINED = "Declined"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"
    ORDERED = "Ordered"
