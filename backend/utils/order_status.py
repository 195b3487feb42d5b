"""
Order status rules shared by every screen: which client actions a status
allows, and the static label/color tables used to display it.

Transitions themselves happen server-side; this module only derives what
the client may offer from the current status.
"""

from config.constants import CANCEL_MODE_IMMEDIATE, CANCEL_MODE_REQUEST
from models.order import OrderStatus
from utils.guards import clean_text

CANCELLABLE_STATUSES = {
    OrderStatus.UNPAID,
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.AWAITING_SHIPMENT,
}

# Store may already be preparing the parcel, so cancelling needs its approval.
REQUEST_CANCEL_STATUSES = {OrderStatus.AWAITING_SHIPMENT}

RETURN_REQUEST_STATUSES = {OrderStatus.DELIVERY_SUCCESS, OrderStatus.COMPLETED}

INACTIVE_STATUSES = {OrderStatus.CANCELLED, OrderStatus.RETURNED}

STORE_CANCELLABLE_STATUSES = {
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.AWAITING_SHIPMENT,
}


def _status(value) -> str:
    return (clean_text(value) or "").upper()


# ======================================================
# CUSTOMER PREDICATES
# ======================================================

def can_cancel_order(status) -> bool:
    return _status(status) in CANCELLABLE_STATUSES


def can_request_return(status) -> bool:
    return _status(status) == OrderStatus.COMPLETED


def can_open_return_request(status) -> bool:
    """
    Gate of the return-request workflow. Wider than ``can_request_return``:
    the storefront also offers it right after a successful delivery.
    """
    return _status(status) in RETURN_REQUEST_STATUSES


def is_active_order(status) -> bool:
    return _status(status) not in INACTIVE_STATUSES


def cancel_mode(status) -> str | None:
    """
    Same eligibility as ``can_cancel_order``; the exact status then picks
    immediate cancel or a store-approved cancellation request.
    """
    if not can_cancel_order(status):
        return None
    if _status(status) in REQUEST_CANCEL_STATUSES:
        return CANCEL_MODE_REQUEST
    return CANCEL_MODE_IMMEDIATE


def order_actions(status) -> dict:
    mode = cancel_mode(status)
    return {
        "canCancel": mode is not None,
        "cancelMode": mode,
        "canRequestReturn": can_request_return(status),
        "canOpenReturnRequest": can_open_return_request(status),
        "isActive": is_active_order(status),
    }


# ======================================================
# STORE PREDICATES
# ======================================================

def can_confirm_store_order(status) -> bool:
    return _status(status) == OrderStatus.PENDING


def can_cancel_store_order(status) -> bool:
    return _status(status) in STORE_CANCELLABLE_STATUSES


# ======================================================
# LABELS / COLORS
# ======================================================

UNKNOWN_STATUS_CONFIG = {
    "label": "Unknown",
    "color": "#666666",
    "bg_color": "#F5F5F5",
}

ORDER_STATUS_CONFIG = {
    OrderStatus.UNPAID: {"label": "Awaiting payment", "color": "#EA580C", "bg_color": "#FFF7ED"},
    OrderStatus.PENDING: {"label": "Pending", "color": "#FFA73A", "bg_color": "#FFF4EC"},
    OrderStatus.CONFIRMED: {"label": "Confirmed", "color": "#2563EB", "bg_color": "#EFF6FF"},
    OrderStatus.AWAITING_SHIPMENT: {"label": "Awaiting pickup", "color": "#CA8A04", "bg_color": "#FEFCE8"},
    OrderStatus.READY_FOR_PICKUP: {"label": "Warehouse preparing", "color": "#FFA73A", "bg_color": "#FFF4EC"},
    OrderStatus.READY_FOR_DELIVERY: {"label": "Awaiting delivery", "color": "#2D9CDB", "bg_color": "#E6F4FF"},
    OrderStatus.OUT_FOR_DELIVERY: {"label": "Out for delivery", "color": "#2D9CDB", "bg_color": "#E6F4FF"},
    OrderStatus.SHIPPING: {"label": "Shipping", "color": "#2D9CDB", "bg_color": "#E6F4FF"},
    OrderStatus.DELIVERED_WAITING_CONFIRM: {"label": "Awaiting delivery confirmation", "color": "#2D9CDB", "bg_color": "#E6F4FF"},
    OrderStatus.DELIVERY_SUCCESS: {"label": "Completed", "color": "#27AE60", "bg_color": "#E6F8F0"},
    OrderStatus.DELIVERY_DENIED: {"label": "Delivery refused", "color": "#EB5757", "bg_color": "#FFEBEB"},
    OrderStatus.DELIVERY_FAIL: {"label": "Delivery failed", "color": "#EB5757", "bg_color": "#FFEBEB"},
    OrderStatus.EXCEPTION: {"label": "Processing error", "color": "#92400E", "bg_color": "#FEF3C7"},
    OrderStatus.COMPLETED: {"label": "Completed", "color": "#27AE60", "bg_color": "#E6F8F0"},
    OrderStatus.CANCELLED: {"label": "Cancelled", "color": "#EB5757", "bg_color": "#FFEBEB"},
    OrderStatus.RETURN_REQUESTED: {"label": "Return requested", "color": "#EA580C", "bg_color": "#FFF7ED"},
    OrderStatus.RETURNED: {"label": "Returned", "color": "#4B5563", "bg_color": "#F9FAFB"},
}

# Seller back-office wording differs for a few statuses.
STORE_ORDER_STATUS_CONFIG = {
    **ORDER_STATUS_CONFIG,
    OrderStatus.PENDING: {"label": "Pending", "color": "#4B5563", "bg_color": "#F9FAFB"},
    OrderStatus.READY_FOR_PICKUP: {"label": "Warehouse preparing", "color": "#D97706", "bg_color": "#FFFBEB"},
    OrderStatus.READY_FOR_DELIVERY: {"label": "Awaiting delivery", "color": "#4F46E5", "bg_color": "#EEF2FF"},
    OrderStatus.SHIPPING: {"label": "Shipping", "color": "#9333EA", "bg_color": "#FAF5FF"},
    OrderStatus.OUT_FOR_DELIVERY: {"label": "Out for delivery", "color": "#9333EA", "bg_color": "#FAF5FF"},
    OrderStatus.DELIVERED_WAITING_CONFIRM: {"label": "Awaiting delivery confirmation", "color": "#0891B2", "bg_color": "#ECFEFF"},
    OrderStatus.DELIVERY_SUCCESS: {"label": "Delivered successfully", "color": "#16A34A", "bg_color": "#F0FDF4"},
    OrderStatus.DELIVERY_DENIED: {"label": "Delivery failed", "color": "#DC2626", "bg_color": "#FEF2F2"},
    OrderStatus.COMPLETED: {"label": "Delivered", "color": "#16A34A", "bg_color": "#F0FDF4"},
}

STATUS_TABLES = {
    "customer": ORDER_STATUS_CONFIG,
    "store": STORE_ORDER_STATUS_CONFIG,
}


def get_status_config(status, scope: str = "customer") -> dict:
    """
    Unknown statuses keep their raw value as label and get neutral colors.
    """
    table = STATUS_TABLES.get(scope, ORDER_STATUS_CONFIG)
    key = _status(status)
    try:
        return dict(table[OrderStatus(key)])
    except ValueError:
        return {**UNKNOWN_STATUS_CONFIG, "label": key or UNKNOWN_STATUS_CONFIG["label"]}


def get_status_label(status, scope: str = "customer") -> str:
    return get_status_config(status, scope)["label"]


def status_tables() -> dict:
    return {
        scope: {status.value: dict(config) for status, config in table.items()}
        for scope, table in STATUS_TABLES.items()
    }
