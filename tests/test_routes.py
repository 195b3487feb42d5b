import pytest
from jose import jwt

from conftest import make_token
from main import app
from payloads import flat_order, grouped_order


# ============================================================
# Health / auth
# ============================================================

@pytest.mark.asyncio
async def test_health(client):
    resp = await client.get("/api/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


@pytest.mark.asyncio
async def test_orders_require_bearer_token(client):
    resp = await client.get("/api/orders")

    assert resp.status_code in (401, 403)


@pytest.mark.asyncio
async def test_token_signed_with_other_secret_is_rejected(client):
    token = jwt.encode({"sub": "cust-1"}, "another-secret", algorithm="HS256")
    headers = {"Authorization": f"Bearer {token}"}

    resp = await client.get("/api/orders", headers=headers)

    assert resp.status_code == 401


# ============================================================
# List
# ============================================================

@pytest.mark.asyncio
async def test_list_returns_reconciled_orders_with_actions(client, backend, customer_headers):
    backend.add_order(flat_order(status="AWAITING_SHIPMENT"))

    resp = await client.get("/api/orders", params={"page": 1, "size": 5}, headers=customer_headers)

    assert resp.status_code == 200
    body = resp.json()
    assert body["page"] == 1
    assert body["total"] == 1

    order = body["items"][0]
    assert order["statusLabel"] == "Awaiting pickup"
    assert order["actions"]["canCancel"] is True
    assert order["actions"]["cancelMode"] == "request"
    assert [so["shippingFee"] for so in order["storeOrders"]] == [30000, 10000]
    assert order["storeOrders"][0]["items"][0]["refId"] == "p-1"
    assert backend.params_of("/orders") == {"page": "0", "size": "5"}


@pytest.mark.asyncio
async def test_list_loads_shipment_records_in_background(client, backend, customer_headers):
    backend.add_order(grouped_order())
    backend.shipments["so-1"] = {"orderCode": "GHN-001"}

    resp = await client.get("/api/orders", headers=customer_headers)
    assert resp.status_code == 200

    resp = await client.get(
        "/api/orders/shipments",
        params=[("store_order_id", "so-1"), ("store_order_id", "so-2")],
        headers=customer_headers,
    )

    assert resp.json() == {"items": {"so-1": {"orderCode": "GHN-001"}}}


@pytest.mark.asyncio
async def test_refresh_drops_cached_shipment_records(client, backend, customer_headers, shipment_cache):
    backend.add_order(grouped_order())
    shipment_cache.set(("cust-1", "so-1"), {"orderCode": "OLD"})
    backend.shipments["so-1"] = {"orderCode": "NEW"}

    await client.get("/api/orders", headers=customer_headers)
    assert shipment_cache.get(("cust-1", "so-1")) == {"orderCode": "OLD"}

    await client.get("/api/orders", params={"refresh": "true"}, headers=customer_headers)
    assert shipment_cache.get(("cust-1", "so-1")) == {"orderCode": "NEW"}


@pytest.mark.asyncio
async def test_list_upstream_failure_maps_to_bad_gateway(client, backend, customer_headers):
    backend.failures["/api/customers/cust-1/orders"] = (500, {"message": "Database unavailable"})

    resp = await client.get("/api/orders", headers=customer_headers)

    assert resp.status_code == 502
    assert resp.json()["detail"] == "Database unavailable"


@pytest.mark.asyncio
async def test_list_rejects_oversized_page(client, customer_headers):
    resp = await client.get("/api/orders", params={"size": 1000}, headers=customer_headers)

    assert resp.status_code == 422


# ============================================================
# Detail / lookups
# ============================================================

@pytest.mark.asyncio
async def test_detail_not_found(client, customer_headers):
    resp = await client.get("/api/orders/missing", headers=customer_headers)

    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_detail_includes_store_order_actions(client, backend, customer_headers):
    backend.add_order(grouped_order())

    resp = await client.get("/api/orders/ord-2", headers=customer_headers)

    store_orders = resp.json()["storeOrders"]
    assert store_orders[1]["statusLabel"] == "Awaiting pickup"
    assert store_orders[1]["actions"] == {"canConfirm": False, "canCancel": True}


@pytest.mark.asyncio
async def test_customer_id_falls_back_to_subject_claim(client, backend):
    backend.add_order(grouped_order())
    headers = {"Authorization": f"Bearer {make_token(sub='cust-9')}"}

    await client.get("/api/orders/ord-2", headers=headers)

    assert backend.paths() == ["/api/customers/cust-9/orders/ord-2"]


@pytest.mark.asyncio
async def test_lookup_by_external_code(client, backend, customer_headers):
    backend.add_order(flat_order())
    backend.add_order(grouped_order())

    resp = await client.get("/api/orders/by-external-code/PAY-2002", headers=customer_headers)
    assert resp.json()["id"] == "ord-2"

    resp = await client.get("/api/orders/by-external-code/PAY-0000", headers=customer_headers)
    assert resp.status_code == 404


@pytest.mark.asyncio
async def test_status_config_tables(client):
    resp = await client.get("/api/orders/status-config")

    body = resp.json()
    assert body["customer"]["COMPLETED"]["label"] == "Completed"
    assert body["store"]["COMPLETED"]["label"] == "Delivered"


# ============================================================
# Cancel
# ============================================================

@pytest.mark.asyncio
async def test_cancel_pending_order(client, backend, customer_headers):
    backend.add_order(flat_order(status="PENDING"))

    resp = await client.post(
        "/api/orders/ord-1/cancel",
        json={"reason": "ORDERED_BY_ACCIDENT"},
        headers=customer_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["mode"] == "immediate"
    assert body["order"]["status"] == "CANCELLED"
    assert body["order"]["actions"]["isActive"] is False


@pytest.mark.asyncio
async def test_cancel_awaiting_shipment_sends_request(client, backend, customer_headers):
    backend.add_order(flat_order(status="AWAITING_SHIPMENT"))

    resp = await client.post("/api/orders/ord-1/cancel", headers=customer_headers)

    assert resp.json()["mode"] == "request"
    assert backend.params_of("/cancel-request") == {"reason": "CHANGE_OF_MIND"}


@pytest.mark.asyncio
async def test_cancel_shipping_order_is_bad_request(client, backend, customer_headers):
    backend.add_order(flat_order(status="SHIPPING"))

    resp = await client.post("/api/orders/ord-1/cancel", headers=customer_headers)

    assert resp.status_code == 400
    assert backend.paths("POST") == []


@pytest.mark.asyncio
async def test_cancel_unknown_reason_is_unprocessable(client, backend, customer_headers):
    backend.add_order(flat_order(status="PENDING"))

    resp = await client.post("/api/orders/ord-1/cancel", json={"reason": "BORED"}, headers=customer_headers)

    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_duplicate_submission_is_conflict(client, backend, customer_headers):
    backend.add_order(flat_order(status="PENDING"))

    async with app.state.submission_guard.hold("ord-1"):
        resp = await client.post("/api/orders/ord-1/cancel", headers=customer_headers)

    assert resp.status_code == 409
    assert backend.calls == []
    assert not app.state.submission_guard.is_in_flight("ord-1")


# ============================================================
# Return
# ============================================================

@pytest.mark.asyncio
async def test_return_request_round_trip(client, backend, customer_headers):
    backend.add_order(grouped_order(status="DELIVERY_SUCCESS"))

    resp = await client.post(
        "/api/orders/ord-2/return-request",
        json={"orderItemId": "it-2", "reasonType": "SHOP_FAULT", "reason": "Cracked glass"},
        headers=customer_headers,
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["returnRequest"]["id"] == "77"
    assert body["returnRequest"]["itemPrice"] == 100000
    assert body["order"]["status"] == "RETURN_REQUESTED"


@pytest.mark.asyncio
async def test_return_with_blank_reason_is_bad_request(client, backend, customer_headers):
    backend.add_order(grouped_order(status="COMPLETED"))

    resp = await client.post(
        "/api/orders/ord-2/return-request",
        json={"reason": "   "},
        headers=customer_headers,
    )

    assert resp.status_code == 400
    assert resp.json()["detail"] == "Please enter a reason for the return"
    assert "/api/customers/me/returns" not in backend.paths()


@pytest.mark.asyncio
async def test_return_for_missing_order_is_not_found(client, customer_headers):
    resp = await client.post(
        "/api/orders/nope/return-request",
        json={"reason": "Broken"},
        headers=customer_headers,
    )

    assert resp.status_code == 404


# ============================================================
# Seller cancellation requests
# ============================================================

@pytest.mark.asyncio
async def test_seller_lists_cancel_requests(client, backend, store_headers):
    backend.cancel_requests["so-1"] = [{"id": 5, "status": "REQUESTED", "reason": "FOUND_BETTER_PRICE"}]

    resp = await client.get("/api/seller/store-orders/so-1/cancel-requests", headers=store_headers)

    (record,) = resp.json()["items"]
    assert record["id"] == "5"
    assert record["reasonLabel"] == "Found a better price"
    assert backend.paths() == ["/api/v1/stores/store-1/orders/so-1/cancel-requests"]


@pytest.mark.asyncio
async def test_seller_routes_need_store_claim(client, customer_headers):
    resp = await client.get("/api/seller/store-orders/so-1/cancel-requests", headers=customer_headers)

    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_seller_approves_request(client, backend, store_headers):
    backend.cancel_requests["so-1"] = [{"id": 5, "status": "REQUESTED", "reason": "OTHER"}]

    resp = await client.post("/api/seller/store-orders/so-1/cancel-requests/approve", headers=store_headers)

    assert resp.status_code == 200
    assert resp.json()["items"][0]["status"] == "APPROVED"


@pytest.mark.asyncio
async def test_seller_rejects_with_note(client, backend, store_headers):
    backend.cancel_requests["so-1"] = [{"id": 5, "status": "REQUESTED", "reason": "OTHER"}]

    resp = await client.post(
        "/api/seller/store-orders/so-1/cancel-requests/reject",
        json={"note": "Parcel already handed to carrier"},
        headers=store_headers,
    )

    assert resp.json()["items"][0]["note"] == "Parcel already handed to carrier"


@pytest.mark.asyncio
async def test_seller_cannot_approve_without_pending_request(client, backend, store_headers):
    backend.cancel_requests["so-1"] = [{"id": 5, "status": "REJECTED"}]

    resp = await client.post("/api/seller/store-orders/so-1/cancel-requests/approve", headers=store_headers)

    assert resp.status_code == 400


@pytest.mark.asyncio
async def test_shipment_records_are_not_visible_to_other_customers(client, backend, customer_headers):
    backend.add_order(grouped_order())
    backend.shipments["so-1"] = {"orderCode": "GHN-001", "toAddress": "12 Elm Street"}
    await client.get("/api/orders", headers=customer_headers)

    other = {"Authorization": f"Bearer {make_token(sub='cust-2')}"}
    resp = await client.get("/api/orders/shipments", params={"store_order_id": "so-1"}, headers=other)

    assert resp.status_code == 200
    assert resp.json() == {"items": {}}

    resp = await client.get("/api/orders/shipments", params={"store_order_id": "so-1"}, headers=customer_headers)
    assert resp.json()["items"]["so-1"]["orderCode"] == "GHN-001"
