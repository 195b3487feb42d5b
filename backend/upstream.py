import httpx
from fastapi import Depends, Request

from config.env import COMMERCE_API_BASE_URL, COMMERCE_API_TIMEOUT_SECONDS
from utils.commerce_api import CommerceApi
from utils.security import get_bearer_token
from utils.shipment_cache import ShipmentRecordCache
from utils.submission_guard import SubmissionGuard


def create_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=COMMERCE_API_BASE_URL,
        timeout=httpx.Timeout(COMMERCE_API_TIMEOUT_SECONDS),
        headers={"Accept": "application/json"},
    )


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http_client


def get_commerce_api(
    client: httpx.AsyncClient = Depends(get_http_client),
    token: str = Depends(get_bearer_token),
) -> CommerceApi:
    # caller's token is forwarded as-is
    return CommerceApi(client, token)


def get_shipment_cache(request: Request) -> ShipmentRecordCache:
    return request.app.state.shipment_cache


def get_submission_guard(request: Request) -> SubmissionGuard:
    return request.app.state.submission_guard
