import asyncio
import logging

from config.env import SHIPMENT_CACHE_SWEEP_SECONDS
from utils.shipment_cache import ShipmentRecordCache

logger = logging.getLogger(__name__)


async def shipment_cache_worker(cache: ShipmentRecordCache, interval_seconds: float = SHIPMENT_CACHE_SWEEP_SECONDS):
    while True:
        await asyncio.sleep(interval_seconds)

        try:
            purged = cache.purge_expired()
            if purged:
                logger.info("SHIPMENT_CACHE_PURGED count=%s", purged)
        except Exception:
            logger.exception("SHIPMENT_CACHE_SWEEP_ERROR")
