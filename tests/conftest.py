# tests/conftest.py
import json
import os
import re

import httpx
import pytest
import pytest_asyncio
from jose import jwt

# token verification must be on before the app reads its config
os.environ["JWT_SECRET"] = "test-secret"
os.environ.setdefault("ENV", "test")

from main import app  # noqa: E402
from utils.commerce_api import CommerceApi  # noqa: E402
from utils.shipment_cache import ShipmentRecordCache  # noqa: E402
from utils.submission_guard import SubmissionGuard  # noqa: E402

TEST_SECRET = "test-secret"
CUSTOMER_ID = "cust-1"
STORE_ID = "store-1"


# ============================================================
# Fake commerce API (httpx.MockTransport handler)
# ============================================================

class FakeCommerceBackend:
    """
    In-memory stand-in for the commerce REST API. Every request is kept in
    ``calls``; ``failures`` maps a path to a canned ``(status, body)``.
    """

    def __init__(self):
        self.orders: dict[str, dict] = {}
        self.shipments: dict[str, dict] = {}
        self.cancel_requests: dict[str, list] = {}
        self.failures: dict[str, tuple] = {}
        self.calls: list[httpx.Request] = []

    # ---------- helpers ----------

    def add_order(self, payload: dict) -> dict:
        self.orders[str(payload["id"])] = payload
        return payload

    def paths(self, method: str | None = None) -> list[str]:
        return [c.url.path for c in self.calls if method is None or c.method == method]

    def params_of(self, path_suffix: str) -> dict:
        for call in reversed(self.calls):
            if call.url.path.endswith(path_suffix):
                return dict(call.url.params)
        raise AssertionError(f"no call to {path_suffix}")

    # ---------- routing ----------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        path = request.url.path

        if path in self.failures:
            status_code, body = self.failures[path]
            return httpx.Response(status_code, json=body)

        routes = [
            ("GET", r"^/api/customers/[^/]+/orders$", self._list_orders),
            ("GET", r"^/api/customers/[^/]+/orders/([^/]+)$", self._get_order),
            ("POST", r"^/api/v1/customers/[^/]+/orders/([^/]+)/cancel$", self._cancel),
            ("POST", r"^/api/v1/customers/[^/]+/orders/([^/]+)/cancel-request$", self._cancel_request),
            ("POST", r"^/api/customers/me/returns$", self._create_return),
            ("GET", r"^/api/v1/ghn-orders/by-store-order/([^/]+)$", self._shipment),
            ("GET", r"^/api/v1/stores/[^/]+/orders/([^/]+)/cancel-requests$", self._cancel_requests),
            ("POST", r"^/api/v1/stores/[^/]+/orders/([^/]+)/cancel/approve$", self._approve),
            ("POST", r"^/api/v1/stores/[^/]+/orders/([^/]+)/cancel/reject$", self._reject),
        ]
        for method, pattern, action in routes:
            match = re.match(pattern, path)
            if match and request.method == method:
                return action(request, *match.groups())

        return httpx.Response(404, json={"message": "Not found"})

    def _list_orders(self, request):
        page = int(request.url.params.get("page", 0))
        size = int(request.url.params.get("size", 20))
        status = request.url.params.get("status")

        orders = [o for o in self.orders.values() if not status or o.get("status") == status]
        return httpx.Response(200, json={
            "content": orders,
            "totalElements": len(orders),
            "totalPages": 1,
            "number": page,
            "size": size,
        })

    def _get_order(self, request, order_id):
        order = self.orders.get(order_id)
        if order is None:
            return httpx.Response(404, json={"message": "Order not found"})
        return httpx.Response(200, json={"status": 200, "message": "OK", "data": order})

    def _cancel(self, request, order_id):
        self.orders[order_id]["status"] = "CANCELLED"
        return httpx.Response(204)

    def _cancel_request(self, request, order_id):
        return httpx.Response(200, json={"message": "Cancellation requested"})

    def _create_return(self, request):
        body = json.loads(request.content)
        for order in self.orders.values():
            order["status"] = "RETURN_REQUESTED"
        return httpx.Response(201, json={"id": 77, "status": "PENDING", **body})

    def _shipment(self, request, store_order_id):
        record = self.shipments.get(store_order_id)
        if record is None:
            return httpx.Response(404, json={"message": "No carrier order"})
        return httpx.Response(200, json={"data": record})

    def _cancel_requests(self, request, store_order_id):
        if store_order_id not in self.cancel_requests:
            return httpx.Response(404, json={"message": "Not found"})
        return httpx.Response(200, json={"data": self.cancel_requests[store_order_id]})

    def _resolve_pending(self, store_order_id, status, note=None):
        for entry in self.cancel_requests.get(store_order_id, []):
            if entry["status"] == "REQUESTED":
                entry["status"] = status
                entry["processedAt"] = "2024-05-03T09:00:00Z"
                if note:
                    entry["note"] = note
        return httpx.Response(204)

    def _approve(self, request, store_order_id):
        return self._resolve_pending(store_order_id, "APPROVED")

    def _reject(self, request, store_order_id):
        return self._resolve_pending(store_order_id, "REJECTED", request.url.params.get("note"))


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def backend() -> FakeCommerceBackend:
    return FakeCommerceBackend()


@pytest_asyncio.fixture
async def upstream_client(backend):
    async with httpx.AsyncClient(
        transport=httpx.MockTransport(backend.handler),
        base_url="http://commerce.test",
    ) as client:
        yield client


@pytest.fixture
def api(upstream_client) -> CommerceApi:
    return CommerceApi(upstream_client, token="upstream-token")


@pytest.fixture
def shipment_cache() -> ShipmentRecordCache:
    return ShipmentRecordCache(300)


@pytest_asyncio.fixture
async def client(upstream_client, shipment_cache):
    # ASGITransport skips startup events; wire app.state by hand
    app.state.http_client = upstream_client
    app.state.shipment_cache = shipment_cache
    app.state.submission_guard = SubmissionGuard()

    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://testserver",
    ) as c:
        yield c


def make_token(**claims) -> str:
    return jwt.encode(claims, TEST_SECRET, algorithm="HS256")


@pytest.fixture
def customer_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(sub=CUSTOMER_ID, customerId=CUSTOMER_ID)}"}


@pytest.fixture
def store_headers() -> dict:
    return {"Authorization": f"Bearer {make_token(sub='seller@example.com', storeId=STORE_ID)}"}
