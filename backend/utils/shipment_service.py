import asyncio
import logging
from typing import Iterable

from config.constants import SYNTHESIZED_STORE_MARKER
from models.order import CustomerOrder
from utils.commerce_api import CommerceApi
from utils.shipment_cache import ShipmentRecordCache

logger = logging.getLogger(__name__)


def is_synthesized_store_order(order: CustomerOrder, store_order_id: str) -> bool:
    return store_order_id.startswith(f"{order.id}{SYNTHESIZED_STORE_MARKER}")


def store_order_ids(orders: Iterable[CustomerOrder]) -> list[str]:
    """
    Store order ids worth a carrier lookup, deduplicated, in list order.
    Synthesized store orders have no server-side counterpart.
    """
    seen = []
    for order in orders:
        for store_order in order.store_orders:
            store_order_id = store_order.id
            if not store_order_id or is_synthesized_store_order(order, store_order_id):
                continue
            if store_order_id not in seen:
                seen.append(store_order_id)
    return seen


def _cache_key(customer_id: str, store_order_id: str) -> tuple[str, str]:
    # records carry the receiver's address; never shared across customers
    return customer_id, store_order_id


def _record_body(record) -> dict | None:
    if isinstance(record, dict) and "data" in record:
        record = record["data"]
    if isinstance(record, dict) and record:
        return record
    return None


async def _lookup(
    api: CommerceApi,
    cache: ShipmentRecordCache,
    customer_id: str,
    store_order_id: str,
) -> dict | None:
    record = _record_body(await api.get_shipment_record(store_order_id))
    if record is not None:
        cache.set(_cache_key(customer_id, store_order_id), record)
    return record


async def load_shipment_records(
    api: CommerceApi,
    cache: ShipmentRecordCache,
    customer_id: str,
    orders: Iterable[CustomerOrder],
) -> dict[str, dict]:
    """
    One lookup per uncached store order, run together. A failed lookup
    only leaves its own store order without a record.
    """
    targets = [
        store_order_id
        for store_order_id in store_order_ids(orders)
        if cache.get(_cache_key(customer_id, store_order_id)) is None
    ]
    if not targets:
        return {}

    results = await asyncio.gather(
        *(_lookup(api, cache, customer_id, store_order_id) for store_order_id in targets),
        return_exceptions=True,
    )

    loaded = {}
    for store_order_id, result in zip(targets, results):
        if isinstance(result, Exception):
            logger.warning("SHIPMENT_LOOKUP_FAILED store_order=%s error=%s", store_order_id, result)
            continue
        if result is not None:
            loaded[store_order_id] = result
    return loaded


def cached_shipment_records(
    cache: ShipmentRecordCache,
    customer_id: str,
    ids: Iterable[str],
) -> dict[str, dict]:
    records = {}
    for store_order_id in ids:
        record = cache.get(_cache_key(customer_id, store_order_id))
        if record is not None:
            records[store_order_id] = record
    return records


def invalidate_shipment_records(
    cache: ShipmentRecordCache,
    customer_id: str,
    orders: Iterable[CustomerOrder],
) -> None:
    for store_order_id in store_order_ids(orders):
        cache.invalidate(_cache_key(customer_id, store_order_id))
