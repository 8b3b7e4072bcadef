from apscheduler.schedulers.asyncio import AsyncIOScheduler

from app.core.config import QUOTE_EXPIRY_SCAN_MINUTE
from app.core.db import AsyncSessionLocal
from app.services.quotes.quote_expiry_service import scan_and_expire_quotes

scheduler = AsyncIOScheduler()


@scheduler.scheduled_job("cron", minute=QUOTE_EXPIRY_SCAN_MINUTE)  # hourly
async def expire_quotes_job():
    async with AsyncSessionLocal() as db:
        await scan_and_expire_quotes(db)
