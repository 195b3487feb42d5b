import logging

import httpx

from config.constants import (
    MSG_APPROVE_FAILED,
    MSG_CANCEL_FAILED,
    MSG_CANCEL_REQUEST_FAILED,
    MSG_CANCEL_REQUESTS_FAILED,
    MSG_DETAIL_FAILED,
    MSG_LIST_FAILED,
    MSG_REJECT_FAILED,
    MSG_RETURN_FAILED,
    MSG_SHIPMENT_FAILED,
    SHIPMENT_NOT_FOUND_STATUSES,
)
from models.requests import CreateReturnRequest
from utils.errors import CommerceApiError

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response, fallback: str) -> str:
    try:
        body = response.json()
    except ValueError:
        return fallback

    if isinstance(body, dict):
        message = body.get("message") or body.get("detail")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return fallback


def _note_params(reason: str, note: str | None) -> dict:
    params = {"reason": reason}
    if note:
        params["note"] = note
    return params


class CommerceApi:
    """
    Calls to the remote commerce REST API on behalf of one caller.

    Every failure surfaces as ``CommerceApiError`` carrying a message the
    storefront can show; not-found lookups return None instead.
    """

    def __init__(self, client: httpx.AsyncClient, token: str | None = None):
        self.client = client
        self.token = token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        fallback: str,
        params: dict | None = None,
        json: dict | None = None,
    ):
        headers = {"Authorization": f"Bearer {self.token}"} if self.token else None

        try:
            response = await self.client.request(
                method,
                path,
                params=params,
                json=json,
                headers=headers,
            )
        except httpx.HTTPError as e:
            raise CommerceApiError(fallback) from e

        if not response.is_success:
            raise CommerceApiError(_error_message(response, fallback), response.status_code)

        if response.status_code in (204, 205) or not response.content.strip():
            return None

        try:
            return response.json()
        except ValueError as e:
            raise CommerceApiError(fallback, response.status_code) from e

    # ======================================================
    # CUSTOMER ORDERS
    # ======================================================

    async def list_orders(
        self,
        customer_id: str,
        *,
        page: int = 0,
        size: int = 20,
        status: str | None = None,
    ):
        params = {"page": page, "size": size}
        if status:
            params["status"] = status

        return await self._request(
            "GET",
            f"/api/customers/{customer_id}/orders",
            params=params,
            fallback=MSG_LIST_FAILED,
        )

    async def get_order(self, customer_id: str, order_id: str):
        try:
            return await self._request(
                "GET",
                f"/api/customers/{customer_id}/orders/{order_id}",
                fallback=MSG_DETAIL_FAILED,
            )
        except CommerceApiError as e:
            if e.status_code == 404:
                return None
            raise

    async def cancel(self, customer_id: str, order_id: str, reason: str, note: str | None = None) -> None:
        await self._request(
            "POST",
            f"/api/v1/customers/{customer_id}/orders/{order_id}/cancel",
            params=_note_params(reason, note),
            fallback=MSG_CANCEL_FAILED,
        )

    async def request_cancel(self, customer_id: str, order_id: str, reason: str, note: str | None = None) -> None:
        await self._request(
            "POST",
            f"/api/v1/customers/{customer_id}/orders/{order_id}/cancel-request",
            params=_note_params(reason, note),
            fallback=MSG_CANCEL_REQUEST_FAILED,
        )

    async def request_return(self, payload: CreateReturnRequest):
        return await self._request(
            "POST",
            "/api/customers/me/returns",
            json=payload.model_dump(by_alias=True, exclude_none=True, mode="json"),
            fallback=MSG_RETURN_FAILED,
        )

    # ======================================================
    # SHIPMENT RECORDS
    # ======================================================

    async def get_shipment_record(self, store_order_id: str):
        """
        None when the carrier has no record for the store order yet.
        """
        try:
            return await self._request(
                "GET",
                f"/api/v1/ghn-orders/by-store-order/{store_order_id}",
                fallback=MSG_SHIPMENT_FAILED,
            )
        except CommerceApiError as e:
            if e.status_code not in SHIPMENT_NOT_FOUND_STATUSES:
                logger.warning(
                    "SHIPMENT_LOOKUP_ERROR store_order=%s status=%s message=%s",
                    store_order_id,
                    e.status_code,
                    e.message,
                )
            return None

    # ======================================================
    # STORE CANCELLATION REQUESTS
    # ======================================================

    async def get_cancel_requests(self, store_id: str, store_order_id: str) -> list:
        try:
            body = await self._request(
                "GET",
                f"/api/v1/stores/{store_id}/orders/{store_order_id}/cancel-requests",
                fallback=MSG_CANCEL_REQUESTS_FAILED,
            )
        except CommerceApiError as e:
            if e.status_code == 404:
                return []
            raise

        if isinstance(body, dict):
            body = body.get("data")
        return body if isinstance(body, list) else []

    async def approve_cancel_request(self, store_id: str, store_order_id: str) -> None:
        await self._request(
            "POST",
            f"/api/v1/stores/{store_id}/orders/{store_order_id}/cancel/approve",
            fallback=MSG_APPROVE_FAILED,
        )

    async def reject_cancel_request(self, store_id: str, store_order_id: str, note: str | None = None) -> None:
        await self._request(
            "POST",
            f"/api/v1/stores/{store_id}/orders/{store_order_id}/cancel/reject",
            params={"note": note} if note else None,
            fallback=MSG_REJECT_FAILED,
        )
