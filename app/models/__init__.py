# Quotes
from app.models.quotes.quote_models import Quote, QuoteItem, QuoteNote
