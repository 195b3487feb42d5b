from models.order import CustomerOrder, OrderPage
from models.requests import CANCEL_REASON_LABELS, CancelRequestRecord
from utils.order_status import (
    can_cancel_store_order,
    can_confirm_store_order,
    get_status_config,
    order_actions,
)


def serialize_order(order: CustomerOrder) -> dict:
    body = order.model_dump(by_alias=True, mode="json")

    body["statusLabel"] = get_status_config(order.status)["label"]
    body["actions"] = order_actions(order.status)

    for store_body, store_order in zip(body["storeOrders"], order.store_orders):
        store_body["statusLabel"] = get_status_config(store_order.status, "store")["label"]
        store_body["actions"] = {
            "canConfirm": can_confirm_store_order(store_order.status),
            "canCancel": can_cancel_store_order(store_order.status),
        }

    return body


def serialize_order_page(result: OrderPage) -> dict:
    return {
        "items": [serialize_order(order) for order in result.items],
        "total": result.total,
        "totalPages": result.total_pages,
        # back to the storefront's 1-based numbering
        "page": result.page + 1,
        "size": result.size,
    }


def serialize_cancel_request(record: CancelRequestRecord) -> dict:
    body = record.model_dump(by_alias=True, mode="json")
    body["reasonLabel"] = CANCEL_REASON_LABELS.get(record.reason or "", record.reason)
    return body
