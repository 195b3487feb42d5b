import logging

from config.constants import (
    CANCEL_MODE_REQUEST,
    DEFAULT_CANCEL_REASON,
    RECENT_ORDERS_LOOKUP_SIZE,
)
from models.order import CustomerOrder, OrderItem, OrderPage
from models.requests import CreateReturnRequest, ReturnReasonType, ReturnRequestResponse
from utils.commerce_api import CommerceApi
from utils.errors import CommerceApiError, OrderValidationError
from utils.guards import clean_text
from utils.order_status import can_open_return_request, cancel_mode
from utils.reconciliation import normalize_order, normalize_order_page

logger = logging.getLogger(__name__)


# ======================================================
# READ
# ======================================================

def filter_orders(orders: list[CustomerOrder], search: str | None) -> list[CustomerOrder]:
    """
    Case-insensitive match on order id or payment-gateway code.
    """
    term = (clean_text(search) or "").lower()
    if not term:
        return list(orders)

    return [
        order
        for order in orders
        if term in order.id.lower()
        or (order.external_order_code and term in order.external_order_code.lower())
    ]


async def list_orders(
    api: CommerceApi,
    customer_id: str,
    *,
    page: int = 1,
    size: int = 20,
    status: str | None = None,
    search: str | None = None,
) -> OrderPage:
    # storefront pages are 1-based, the commerce API is 0-based
    backend_page = max(page - 1, 0)

    raw = await api.list_orders(customer_id, page=backend_page, size=size, status=status)
    result = normalize_order_page(raw, page=backend_page, size=size)

    if search:
        result.items = filter_orders(result.items, search)
    return result


async def get_order(api: CommerceApi, customer_id: str, order_id: str) -> CustomerOrder | None:
    raw = await api.get_order(customer_id, order_id)
    if not raw:
        return None
    return normalize_order(raw)


async def find_by_external_code(api: CommerceApi, customer_id: str, external_code: str) -> CustomerOrder | None:
    """
    The commerce API has no lookup by gateway code; scan recent orders.
    """
    result = await list_orders(api, customer_id, page=1, size=RECENT_ORDERS_LOOKUP_SIZE)
    return next(
        (order for order in result.items if order.external_order_code == external_code),
        None,
    )


def merge_order(
    orders: list[CustomerOrder],
    updated: CustomerOrder | None,
    order_id: str,
) -> list[CustomerOrder]:
    """
    Replace one order in place, keeping positions. An order that no longer
    exists is dropped.
    """
    merged = []
    for order in orders:
        if order.id != order_id:
            merged.append(order)
        elif updated is not None:
            merged.append(updated)
    return merged


async def refetch_after_action(api: CommerceApi, customer_id: str, order_id: str) -> CustomerOrder | None:
    """
    The action already went through upstream; a failed re-fetch only
    leaves the caller without the refreshed order.
    """
    try:
        return await get_order(api, customer_id, order_id)
    except CommerceApiError as e:
        logger.warning("ORDER_REFETCH_FAILED order=%s status=%s message=%s", order_id, e.status_code, e.message)
        return None


async def reload_order(
    api: CommerceApi,
    customer_id: str,
    orders: list[CustomerOrder],
    order_id: str,
) -> list[CustomerOrder]:
    updated = await get_order(api, customer_id, order_id)
    return merge_order(orders, updated, order_id)


# ======================================================
# CANCEL
# ======================================================

async def cancel_order(
    api: CommerceApi,
    customer_id: str,
    order: CustomerOrder,
    *,
    reason: str = DEFAULT_CANCEL_REASON,
    note: str | None = None,
) -> tuple[str, CustomerOrder | None]:
    """
    Returns the dispatch mode used and the re-fetched order.
    """
    mode = cancel_mode(order.status)
    if mode is None:
        raise OrderValidationError("Order can no longer be cancelled")

    note = clean_text(note)
    if mode == CANCEL_MODE_REQUEST:
        await api.request_cancel(customer_id, order.id, reason, note)
    else:
        await api.cancel(customer_id, order.id, reason, note)

    logger.info("ORDER_CANCEL_%s order=%s reason=%s", mode.upper(), order.id, reason)

    return mode, await refetch_after_action(api, customer_id, order.id)


# ======================================================
# RETURN
# ======================================================

def select_return_item(order: CustomerOrder, order_item_id: str | None) -> OrderItem | None:
    items = order.all_items()
    if not order_item_id:
        return items[0] if items else None
    return next((item for item in items if item.id == order_item_id), None)


def derive_item_price(order: CustomerOrder, item: OrderItem | None):
    candidates = (
        item.line_total if item else None,
        item.unit_price if item else None,
        order.total_amount,
        order.grand_total,
    )
    return next((value for value in candidates if value is not None), 0)


def build_return_request(
    order: CustomerOrder,
    *,
    order_item_id: str | None,
    reason_type: ReturnReasonType,
    reason: str | None,
    customer_video_url: str | None = None,
    customer_image_urls: list[str] | None = None,
) -> CreateReturnRequest:
    if not can_open_return_request(order.status):
        raise OrderValidationError("Returns are only available for delivered orders")

    item = select_return_item(order, order_item_id)
    if item is None:
        raise OrderValidationError("Please select the product to return")

    reason = clean_text(reason)
    if not reason:
        raise OrderValidationError("Please enter a reason for the return")

    image_urls = [url for url in (clean_text(u) for u in customer_image_urls or []) if url]

    return CreateReturnRequest(
        order_item_id=item.id,
        product_id=item.ref_id,
        item_price=derive_item_price(order, item),
        reason_type=reason_type,
        reason=reason,
        customer_video_url=clean_text(customer_video_url),
        customer_image_urls=image_urls or None,
    )


async def submit_return(
    api: CommerceApi,
    customer_id: str,
    order: CustomerOrder,
    *,
    order_item_id: str | None = None,
    reason_type: ReturnReasonType = ReturnReasonType.CUSTOMER_FAULT,
    reason: str | None = None,
    customer_video_url: str | None = None,
    customer_image_urls: list[str] | None = None,
) -> tuple[ReturnRequestResponse | None, CustomerOrder | None]:
    """
    Validation happens before anything is sent. Returns the commerce API's
    return request and the re-fetched order.
    """
    payload = build_return_request(
        order,
        order_item_id=order_item_id,
        reason_type=reason_type,
        reason=reason,
        customer_video_url=customer_video_url,
        customer_image_urls=customer_image_urls,
    )

    raw = await api.request_return(payload)
    response = ReturnRequestResponse.model_validate(raw) if isinstance(raw, dict) else None

    logger.info(
        "RETURN_REQUESTED order=%s item=%s reason_type=%s",
        order.id,
        payload.order_item_id,
        payload.reason_type.value,
    )

    return response, await refetch_after_action(api, customer_id, order.id)
