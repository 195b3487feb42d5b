from fastapi import APIRouter, Depends

from models.requests import RejectCancelBody
from upstream import get_commerce_api, get_submission_guard
from utils.cancel_request_service import (
    approve_cancel_request,
    list_cancel_requests,
    reject_cancel_request,
)
from utils.commerce_api import CommerceApi
from utils.errors import WORKFLOW_ERRORS, http_error_from
from utils.security import get_current_store_id
from utils.serializers import serialize_cancel_request
from utils.submission_guard import SubmissionGuard

router = APIRouter(
    prefix="/seller",
    tags=["Seller"]
)


def _records_response(records) -> dict:
    return {"items": [serialize_cancel_request(record) for record in records]}


# ----------------------------------------
# CANCELLATION REQUESTS
# ----------------------------------------

@router.get("/store-orders/{store_order_id}/cancel-requests")
async def store_cancel_requests(
    store_order_id: str,
    store_id: str = Depends(get_current_store_id),
    api: CommerceApi = Depends(get_commerce_api),
):
    try:
        records = await list_cancel_requests(api, store_id, store_order_id)
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    return _records_response(records)


@router.post("/store-orders/{store_order_id}/cancel-requests/approve")
async def approve_store_cancel_request(
    store_order_id: str,
    store_id: str = Depends(get_current_store_id),
    api: CommerceApi = Depends(get_commerce_api),
    guard: SubmissionGuard = Depends(get_submission_guard),
):
    try:
        async with guard.hold(store_order_id):
            records = await approve_cancel_request(api, store_id, store_order_id)
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    return {"message": "Cancellation approved", **_records_response(records)}


@router.post("/store-orders/{store_order_id}/cancel-requests/reject")
async def reject_store_cancel_request(
    store_order_id: str,
    data: RejectCancelBody | None = None,
    store_id: str = Depends(get_current_store_id),
    api: CommerceApi = Depends(get_commerce_api),
    guard: SubmissionGuard = Depends(get_submission_guard),
):
    note = data.note if data else None

    try:
        async with guard.hold(store_order_id):
            records = await reject_cancel_request(api, store_id, store_order_id, note)
    except WORKFLOW_ERRORS as e:
        raise http_error_from(e)

    return {"message": "Cancellation rejected", **_records_response(records)}
