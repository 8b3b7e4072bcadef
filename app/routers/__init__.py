# app/routers/__init__.py

from .quotes.quote_router import router as quote_router
from .quotes.draft_quote_router import router as draft_quote_router


__all__ = [
"quote_router",
"draft_quote_router",
]
