from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import List, Optional, Union
from enum import Enum

Amount = Union[int, float]


class OrderStatus(str, Enum):
    UNPAID = "UNPAID"
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    AWAITING_SHIPMENT = "AWAITING_SHIPMENT"
    READY_FOR_PICKUP = "READY_FOR_PICKUP"
    READY_FOR_DELIVERY = "READY_FOR_DELIVERY"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    SHIPPING = "SHIPPING"
    DELIVERED_WAITING_CONFIRM = "DELIVERED_WAITING_CONFIRM"
    DELIVERY_SUCCESS = "DELIVERY_SUCCESS"
    DELIVERY_DENIED = "DELIVERY_DENIED"
    DELIVERY_FAIL = "DELIVERY_FAIL"
    EXCEPTION = "EXCEPTION"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    RETURN_REQUESTED = "RETURN_REQUESTED"
    RETURNED = "RETURNED"


class ItemType(str, Enum):
    PRODUCT = "PRODUCT"
    COMBO = "COMBO"


class ApiModel(BaseModel):
    """
    Python side uses snake_case, the wire uses the commerce API's camelCase.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class OrderItem(ApiModel):
    id: str
    type: ItemType = ItemType.PRODUCT
    ref_id: str
    name: str

    quantity: int = Field(1, gt=0)
    unit_price: Amount = Field(0, ge=0)
    line_total: Amount = 0

    # resolved display image
    image: Optional[str] = None

    store_id: Optional[str] = None
    store_order_id: Optional[str] = None
    store_name: Optional[str] = None

    variant_id: Optional[str] = None
    variant_option_name: Optional[str] = None
    variant_option_value: Optional[str] = None
    variant_url: Optional[str] = None


class StoreOrder(ApiModel):
    id: str
    order_code: Optional[str] = None
    store_id: str
    store_name: str

    # may lag or diverge from the parent order
    status: str
    created_at: Optional[str] = None

    total_amount: Amount = 0
    discount_total: Amount = 0
    shipping_fee: Amount = 0
    grand_total: Amount = 0

    items: List[OrderItem] = Field(default_factory=list)


class CustomerOrder(ApiModel):
    id: str
    order_code: Optional[str] = None
    external_order_code: Optional[str] = None

    status: str
    message: Optional[str] = None
    created_at: Optional[str] = None

    total_amount: Amount = 0
    discount_total: Amount = 0
    shipping_fee_total: Amount = 0
    grand_total: Amount = 0

    # shipping snapshot (immutable once placed)
    receiver_name: Optional[str] = None
    phone_number: Optional[str] = None
    street: Optional[str] = None
    address_line: Optional[str] = None
    ward: Optional[str] = None
    district: Optional[str] = None
    province: Optional[str] = None
    country: Optional[str] = None
    postal_code: Optional[str] = None
    note: Optional[str] = None

    store_orders: List[StoreOrder] = Field(default_factory=list)

    def all_items(self) -> List[OrderItem]:
        return [item for store_order in self.store_orders for item in store_order.items]


class OrderPage(ApiModel):
    items: List[CustomerOrder] = Field(default_factory=list)
    total: int = 0
    total_pages: int = 0
    page: int = 0
    size: int = 0
