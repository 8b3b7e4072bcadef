from decimal import Decimal

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from app.core.db import Base
from app.models.base.mixins import AuditMixin, TimestampMixin
from app.models.enums.quote_note_type import QuoteNoteType
from app.models.enums.quote_status import QuoteStatus


class Quote(Base, TimestampMixin, AuditMixin):
    __tablename__ = "quotes"

    id = Column(Integer, primary_key=True)
    store_name = Column(String(255), nullable=False, index=True)
    status = Column(Enum(QuoteStatus), nullable=False, default=QuoteStatus.DRAFT, index=True)

    customer_id = Column(String(255), nullable=False, index=True)
    company_location_id = Column(String(255), nullable=True, index=True)
    currency_code = Column(String(3), nullable=False, default="USD")
    po_number = Column(String(255), nullable=True)

    subtotal = Column(Numeric(14, 2), nullable=False, default=Decimal("0.00"))
    expiration_date = Column(DateTime(timezone=True), nullable=True, index=True)

    # last customer/admin that moved the quote through the lifecycle
    action_by = Column(String(255), nullable=True)

    items = relationship(
        "QuoteItem",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteItem.id",
        lazy="selectin",
    )
    notes = relationship(
        "QuoteNote",
        back_populates="quote",
        cascade="all, delete-orphan",
        order_by="QuoteNote.created_at.desc()",
        lazy="selectin",
    )

    __table_args__ = (
        Index("ix_quote_store_location_status", "store_name", "company_location_id", "status"),
        Index("ix_quote_status_expiration", "status", "expiration_date"),
        CheckConstraint("subtotal >= 0", name="ck_quote_subtotal_non_negative"),
    )

    def __repr__(self):
        return f"<Quote id={self.id} status={self.status}>"


class QuoteItem(Base):
    __tablename__ = "quote_items"

    id = Column(Integer, primary_key=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(String(255), nullable=False)
    variant_id = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False)
    original_price = Column(Numeric(12, 2), nullable=False)
    offer_price = Column(Numeric(12, 2), nullable=False)
    description = Column(Text, nullable=True)

    quote = relationship("Quote", back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_quote_item_quantity_positive"),
        CheckConstraint("original_price >= 0", name="ck_quote_item_original_price_non_negative"),
        CheckConstraint("offer_price >= 0", name="ck_quote_item_offer_price_non_negative"),
    )

    @property
    def line_total(self) -> Decimal:
        return Decimal(self.offer_price) * self.quantity

    def __repr__(self):
        return f"<QuoteItem id={self.id} variant_id={self.variant_id} qty={self.quantity}>"


class QuoteNote(Base, TimestampMixin):
    """Audit trail of lifecycle actions. Append-only."""

    __tablename__ = "quote_notes"

    id = Column(Integer, primary_key=True)
    quote_id = Column(Integer, ForeignKey("quotes.id", ondelete="CASCADE"), nullable=False, index=True)
    note_type = Column(Enum(QuoteNoteType), nullable=False)
    note_content = Column(Text, nullable=False)
    created_by = Column(String(255), nullable=True)

    quote = relationship("Quote", back_populates="notes")

    def __repr__(self):
        return f"<QuoteNote id={self.id} quote_id={self.quote_id} type={self.note_type}>"
