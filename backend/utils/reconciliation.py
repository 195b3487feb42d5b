"""
Reconciliation of commerce API order payloads into the canonical
CustomerOrder -> StoreOrder -> OrderItem model.

The commerce API answers in three shapes:

- pre-grouped: ``storeOrders[].items[]`` already populated
- mixed: ``storeOrders[]`` without items, root ``items[]`` carrying ``storeOrderId``
- flat (legacy): root ``items[]`` only

``normalize_order`` is the single entry point and always returns the grouped
shape. Only a missing order id raises; every other gap falls back to a default.
"""

import math
import re

from config.constants import (
    DEFAULT_ITEM_NAME,
    DEFAULT_STORE_LABEL,
    STATUS_UNKNOWN,
    STORE_LABEL_ID_CHARS,
    SYNTHESIZED_STORE_MARKER,
    UNKNOWN_STORE_ID,
)
from models.order import CustomerOrder, ItemType, OrderItem, OrderPage, StoreOrder
from utils.errors import MissingIdentifierError
from utils.guards import clean_text, require_identifier

VARIANT_IMAGE_KEYS = ("variantUrl", "variantThumbnail", "variantImage", "variantPicture")
BASE_IMAGE_KEYS = ("image", "thumbnail", "productImage", "picture")

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


# ======================================================
# FIELD ACCESS
# ======================================================

def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def _get(raw: dict, key: str):
    # camelCase from the wire, snake_case from our own dumps
    value = raw.get(key)
    if value is None:
        value = raw.get(_snake(key))
    return value


def _text(raw: dict, *keys: str) -> str | None:
    for key in keys:
        value = clean_text(_get(raw, key))
        if value:
            return value
    return None


def _number(value, default=None):
    if value is None or isinstance(value, bool):
        return default

    if isinstance(value, (int, float)):
        number = value
    else:
        try:
            number = float(str(value).strip())
        except ValueError:
            return default

    if isinstance(number, float):
        if math.isnan(number) or math.isinf(number):
            return default
        if number.is_integer():
            number = int(number)
    return number


def _quantity(value) -> int:
    number = _number(value)
    if number is None:
        return 1
    number = int(number)
    return number if number > 0 else 1


def _dicts(value) -> list[dict]:
    if not isinstance(value, list):
        return []
    return [entry for entry in value if isinstance(entry, dict)]


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def parse_status(value, default: str = STATUS_UNKNOWN) -> str:
    text = clean_text(value)
    if not text:
        return default
    return text.upper()


def store_label(store_id: str) -> str:
    if store_id and store_id != UNKNOWN_STORE_ID:
        return f"{DEFAULT_STORE_LABEL} {store_id[:STORE_LABEL_ID_CHARS]}"
    return DEFAULT_STORE_LABEL


def unwrap_envelope(payload):
    """
    Strip a ``{"status", "message", "data": ...}`` wrapper if present.
    """
    if (
        isinstance(payload, dict)
        and "id" not in payload
        and isinstance(payload.get("data"), (dict, list))
    ):
        return payload["data"]
    return payload


# ======================================================
# ITEMS
# ======================================================

def resolve_item_image(raw: dict) -> str | None:
    """
    Variant lines prefer the variant image; plain lines prefer the base
    product image. Either falls back to the other.
    """
    variant_image = _text(raw, *VARIANT_IMAGE_KEYS)
    base_image = _text(raw, *BASE_IMAGE_KEYS)

    if _text(raw, "variantId"):
        return variant_image or base_image
    return base_image or variant_image


def _item_type(value) -> ItemType:
    text = clean_text(value)
    try:
        return ItemType(text.upper()) if text else ItemType.PRODUCT
    except ValueError:
        return ItemType.PRODUCT


def normalize_item(
    raw: dict,
    *,
    order_id: str,
    index: int,
    store_id: str | None = None,
    store_order_id: str | None = None,
    store_name: str | None = None,
) -> OrderItem:
    quantity = _quantity(_get(raw, "quantity"))
    unit_price = max(_number(_get(raw, "unitPrice"), 0), 0)

    line_total = _number(_get(raw, "lineTotal"))
    if line_total is None:
        line_total = unit_price * quantity

    return OrderItem(
        id=_text(raw, "id") or f"{order_id}-item-{index}",
        type=_item_type(_get(raw, "type")),
        ref_id=_text(raw, "refId", "productId", "id") or f"{order_id}-ref-{index}",
        name=_text(raw, "name") or DEFAULT_ITEM_NAME,
        quantity=quantity,
        unit_price=unit_price,
        line_total=line_total,
        image=resolve_item_image(raw),
        store_id=_text(raw, "storeId") or store_id,
        store_order_id=_text(raw, "storeOrderId") or store_order_id,
        store_name=_text(raw, "storeName", "storeDisplayName") or store_name,
        variant_id=_text(raw, "variantId"),
        variant_option_name=_text(raw, "variantOptionName"),
        variant_option_value=_text(raw, "variantOptionValue"),
        variant_url=_text(raw, "variantUrl"),
    )


# ======================================================
# PRE-GROUPED / MIXED SHAPE
# ======================================================

def _store_identity(raw: dict, order_id: str, position: int) -> tuple[str, str, str]:
    store_order_id = _text(raw, "id") or f"{order_id}{SYNTHESIZED_STORE_MARKER}{position}"
    store_id = _text(raw, "storeId") or UNKNOWN_STORE_ID
    store_name = _text(raw, "storeName", "storeDisplayName") or store_label(store_id)
    return store_order_id, store_id, store_name


def attach_root_items(
    order_id: str,
    store_orders: list[dict],
    root_items: list[dict],
    parent: dict,
) -> list[StoreOrder]:
    """
    Store orders that already carry items keep them and root items are
    ignored. Only when no store order has items are root items distributed
    by ``storeOrderId``; a root item matching no store order is dropped.
    """
    pre_grouped = any(_dicts(_get(raw, "items")) for raw in store_orders)

    result = []
    counter = 0
    for position, raw in enumerate(store_orders, start=1):
        store_order_id, store_id, store_name = _store_identity(raw, order_id, position)

        if pre_grouped:
            indexed = []
            for item in _dicts(_get(raw, "items")):
                counter += 1
                indexed.append((counter, item))
        else:
            # numbered by position in the whole root list, not per store
            # order: per-store numbering repeats ids across store orders
            indexed = [
                (index, item)
                for index, item in enumerate(root_items, start=1)
                if _text(item, "storeOrderId") == store_order_id
            ]

        items = [
            normalize_item(
                item,
                order_id=order_id,
                index=index,
                store_id=store_id,
                store_order_id=store_order_id,
                store_name=store_name,
            )
            for index, item in indexed
        ]

        total_amount = _number(_get(raw, "totalAmount"))
        if total_amount is None:
            total_amount = sum(item.line_total for item in items)
        discount_total = _number(_get(raw, "discountTotal"), 0)
        shipping_fee = _number(_get(raw, "shippingFee"), 0)
        grand_total = _number(_get(raw, "grandTotal"))
        if grand_total is None:
            grand_total = total_amount - discount_total + shipping_fee

        result.append(StoreOrder(
            id=store_order_id,
            order_code=_text(raw, "orderCode"),
            store_id=store_id,
            store_name=store_name,
            status=parse_status(_get(raw, "status"), parent["status"]),
            created_at=_text(raw, "createdAt") or parent["created_at"],
            total_amount=total_amount,
            discount_total=discount_total,
            shipping_fee=shipping_fee,
            grand_total=grand_total,
            items=items,
        ))

    return result


# ======================================================
# FLAT (LEGACY) SHAPE
# ======================================================

def allocation_ratio(subtotal, total_line_amount, group_count: int) -> float:
    if total_line_amount > 0:
        return subtotal / total_line_amount
    return 1 / max(1, group_count)


def allocate(global_value, ratio: float) -> int:
    # per-group rounding; the sum may drift from the global value
    return round_half_up(global_value * ratio)


def synthesize_store_orders(
    order_id: str,
    root_items: list[dict],
    parent: dict,
    *,
    shipping_fee_total=0,
    discount_total=0,
) -> list[StoreOrder]:
    groups: dict[str, dict] = {}

    for index, raw in enumerate(root_items, start=1):
        store_id = _text(raw, "storeId") or UNKNOWN_STORE_ID
        store_name = _text(raw, "storeName", "storeDisplayName") or store_label(store_id)

        group = groups.setdefault(store_id, {"store_name": store_name, "items": []})
        group["items"].append(normalize_item(
            raw,
            order_id=order_id,
            index=index,
            store_id=store_id,
            store_name=store_name,
        ))

    subtotals = {
        store_id: sum(item.line_total for item in group["items"])
        for store_id, group in groups.items()
    }
    total_line_amount = sum(subtotals.values())

    store_orders = []
    for position, (store_id, group) in enumerate(groups.items(), start=1):
        subtotal = subtotals[store_id]
        ratio = allocation_ratio(subtotal, total_line_amount, len(groups))
        shipping_fee = allocate(shipping_fee_total, ratio)
        discount = allocate(discount_total, ratio)
        store_order_id = f"{order_id}{SYNTHESIZED_STORE_MARKER}{position}"
        for item in group["items"]:
            item.store_order_id = item.store_order_id or store_order_id

        store_orders.append(StoreOrder(
            id=store_order_id,
            order_code=parent["order_code"],
            store_id=store_id,
            store_name=group["store_name"],
            status=parent["status"],
            created_at=parent["created_at"],
            total_amount=subtotal,
            discount_total=discount,
            shipping_fee=shipping_fee,
            grand_total=subtotal - discount + shipping_fee,
            items=group["items"],
        ))

    return store_orders


# ======================================================
# ENTRY POINTS
# ======================================================

def normalize_order(payload) -> CustomerOrder:
    raw = unwrap_envelope(payload)
    if not isinstance(raw, dict):
        raise MissingIdentifierError("Missing order id")

    order_id = require_identifier(clean_text(_get(raw, "id")), "order id")

    parent = {
        "status": parse_status(_get(raw, "status")),
        "created_at": _text(raw, "createdAt"),
        "order_code": _text(raw, "orderCode"),
    }

    root_items = _dicts(_get(raw, "items"))
    raw_store_orders = _dicts(_get(raw, "storeOrders"))
    shipping_fee_total = _number(_get(raw, "shippingFeeTotal"), 0)
    discount_total = _number(_get(raw, "discountTotal"), 0)

    if raw_store_orders:
        store_orders = attach_root_items(order_id, raw_store_orders, root_items, parent)
    else:
        store_orders = synthesize_store_orders(
            order_id,
            root_items,
            parent,
            shipping_fee_total=shipping_fee_total,
            discount_total=discount_total,
        )

    total_amount = _number(_get(raw, "totalAmount"))
    if total_amount is None:
        total_amount = sum(store_order.total_amount for store_order in store_orders)
    grand_total = _number(_get(raw, "grandTotal"))
    if grand_total is None:
        grand_total = total_amount - discount_total + shipping_fee_total

    return CustomerOrder(
        id=order_id,
        order_code=parent["order_code"],
        external_order_code=_text(raw, "externalOrderCode"),
        status=parent["status"],
        message=_text(raw, "message"),
        created_at=parent["created_at"],
        total_amount=total_amount,
        discount_total=discount_total,
        shipping_fee_total=shipping_fee_total,
        grand_total=grand_total,
        receiver_name=_text(raw, "receiverName"),
        phone_number=_text(raw, "phoneNumber"),
        street=_text(raw, "street"),
        address_line=_text(raw, "addressLine"),
        ward=_text(raw, "ward"),
        district=_text(raw, "district"),
        province=_text(raw, "province"),
        country=_text(raw, "country"),
        postal_code=_text(raw, "postalCode"),
        note=_text(raw, "note"),
        store_orders=store_orders,
    )


def normalize_order_page(payload, *, page: int, size: int) -> OrderPage:
    """
    Accepts both ``{items, totalElements, totalPages, page, size}`` and a
    Spring page ``{content, totalElements, totalPages, number, size}``.
    """
    body = unwrap_envelope(payload)
    if isinstance(body, list):
        body = {"items": body}
    if not isinstance(body, dict):
        body = {}

    source = body.get("items")
    if not isinstance(source, list):
        source = body.get("content")
    source = _dicts(source)

    total = _number(body.get("totalElements"))
    current_page = _number(body.get("page"))
    if current_page is None:
        current_page = _number(body.get("number"), page)

    return OrderPage(
        items=[normalize_order(order) for order in source],
        total=int(total) if total is not None else len(source),
        total_pages=int(_number(body.get("totalPages"), 0)),
        page=int(current_page),
        size=int(_number(body.get("size"), size)),
    )
