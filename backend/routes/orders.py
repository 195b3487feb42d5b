from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from typing import List

from config.env import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from models.requests import CancelOrderBody, ReturnRequestBody
from upstream import get_commerce_api, get_shipment_cache, get_submission_guard
from utils.commerce_api import CommerceApi
from utils.errors import WORKFLOW_ERRORS, http_error_from
from utils.guards import clean_text
from utils.order_service import (
    cancel_order,
    find_by_external_code,
    get_order,
    list_orders,
    submit_return,
)
from utils.order_status import status_tables
from utils.security import get_current_customer_id
from utils.serializers import serialize_order, serialize_order_page
from utils.shipment_cache import ShipmentRecordCache
from utils.shipment_service import (
    cached_shipment_records,
    invalidate_shipment_records,
    load_shipment_records,
)
from utils.submission_guard import SubmissionGuard


router = APIRouter(
    prefix="/orders",
    tags=["Orders"]
)


async def _require_order(api: CommerceApi, customer_id: str, order_id: str):
    try:
        order = await get_order(api, customer_id, order_id)
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    if order is None:
        raise HTTPException(404, "Order not found")
    return order


# ======================================================
# ORDER LIST (BUYER)
# ======================================================

@router.get("")
async def list_my_orders(
    background_tasks: BackgroundTasks,
    status: str | None = Query(None),
    search: str | None = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(DEFAULT_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    refresh: bool = Query(False),
    customer_id: str = Depends(get_current_customer_id),
    api: CommerceApi = Depends(get_commerce_api),
    cache: ShipmentRecordCache = Depends(get_shipment_cache),
):
    status = clean_text(status)

    try:
        result = await list_orders(
            api,
            customer_id,
            page=page,
            size=size,
            status=status.upper() if status else None,
            search=search,
        )
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    if refresh:
        invalidate_shipment_records(cache, customer_id, result.items)

    # carrier records are fetched after the list is returned
    background_tasks.add_task(load_shipment_records, api, cache, customer_id, result.items)

    return serialize_order_page(result)


# ======================================================
# STATIC TABLES
# ======================================================

@router.get("/status-config")
async def status_config():
    return status_tables()


# ======================================================
# SHIPMENT RECORDS
# ======================================================

@router.get("/shipments")
async def shipment_records(
    store_order_id: List[str] = Query(default=[]),
    customer_id: str = Depends(get_current_customer_id),
    cache: ShipmentRecordCache = Depends(get_shipment_cache),
):
    return {"items": cached_shipment_records(cache, customer_id, store_order_id)}


# ======================================================
# LOOKUPS
# ======================================================

@router.get("/by-external-code/{external_code}")
async def order_by_external_code(
    external_code: str,
    customer_id: str = Depends(get_current_customer_id),
    api: CommerceApi = Depends(get_commerce_api),
):
    try:
        order = await find_by_external_code(api, customer_id, external_code)
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    if order is None:
        raise HTTPException(404, "Order not found")
    return serialize_order(order)


@router.get("/{order_id}")
async def order_detail(
    order_id: str,
    customer_id: str = Depends(get_current_customer_id),
    api: CommerceApi = Depends(get_commerce_api),
):
    order = await _require_order(api, customer_id, order_id)
    return serialize_order(order)


# ======================================================
# BUYER CANCEL
# ======================================================

@router.post("/{order_id}/cancel")
async def cancel_my_order(
    order_id: str,
    data: CancelOrderBody | None = None,
    customer_id: str = Depends(get_current_customer_id),
    api: CommerceApi = Depends(get_commerce_api),
    guard: SubmissionGuard = Depends(get_submission_guard),
):
    data = data or CancelOrderBody()

    try:
        async with guard.hold(order_id):
            order = await _require_order(api, customer_id, order_id)
            mode, updated = await cancel_order(
                api,
                customer_id,
                order,
                reason=data.reason.value,
                note=data.note,
            )
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    return {
        "mode": mode,
        # None when the order no longer exists after the update
        "order": serialize_order(updated) if updated else None,
    }


# ======================================================
# BUYER RETURN REQUEST
# ======================================================

@router.post("/{order_id}/return-request")
async def request_return(
    order_id: str,
    data: ReturnRequestBody,
    customer_id: str = Depends(get_current_customer_id),
    api: CommerceApi = Depends(get_commerce_api),
    guard: SubmissionGuard = Depends(get_submission_guard),
):
    try:
        async with guard.hold(order_id):
            order = await _require_order(api, customer_id, order_id)
            response, updated = await submit_return(
                api,
                customer_id,
                order,
                order_item_id=data.order_item_id,
                reason_type=data.reason_type,
                reason=data.reason,
                customer_video_url=data.customer_video_url,
                customer_image_urls=data.customer_image_urls,
            )
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    return {
        "message": "Return requested",
        "returnRequest": response.model_dump(by_alias=True, exclude_none=True) if response else None,
        "order": serialize_order(updated) if updated else None,
    }
