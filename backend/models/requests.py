from pydantic import ConfigDict, Field
from typing import List, Optional
from enum import Enum

from models.order import Amount, ApiModel


class ReturnReasonType(str, Enum):
    CUSTOMER_FAULT = "CUSTOMER_FAULT"
    SHOP_FAULT = "SHOP_FAULT"


class CancelReason(str, Enum):
    CHANGE_OF_MIND = "CHANGE_OF_MIND"
    FOUND_BETTER_PRICE = "FOUND_BETTER_PRICE"
    WRONG_INFO_OR_ADDRESS = "WRONG_INFO_OR_ADDRESS"
    ORDERED_BY_ACCIDENT = "ORDERED_BY_ACCIDENT"
    OTHER = "OTHER"


class CancelRequestStatus(str, Enum):
    REQUESTED = "REQUESTED"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


# Reason labels shown on the store side; includes reasons the store
# receives from older clients.
CANCEL_REASON_LABELS = {
    "CHANGE_OF_MIND": "Changed my mind",
    "FOUND_BETTER_PRICE": "Found a better price",
    "WRONG_INFO_OR_ADDRESS": "Wrong information or address",
    "ORDERED_BY_ACCIDENT": "Ordered by accident",
    "WRONG_ITEM": "Wrong item",
    "DELIVERY_ISSUE": "Delivery issue",
    "OTHER": "Other",
}


# -------------------------------------------------
# OUTGOING (COMMERCE API)
# -------------------------------------------------

class CreateReturnRequest(ApiModel):
    order_item_id: str
    product_id: str
    item_price: Amount
    reason_type: ReturnReasonType
    reason: str
    customer_video_url: Optional[str] = None
    customer_image_urls: Optional[List[str]] = None


class ReturnRequestResponse(ApiModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    order_item_id: Optional[str] = None
    product_id: Optional[str] = None
    item_price: Optional[Amount] = None
    reason_type: Optional[str] = None
    reason: Optional[str] = None
    status: Optional[str] = None
    created_at: Optional[str] = None


class CancelRequestRecord(ApiModel):
    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    id: Optional[str] = None
    status: str
    reason: Optional[str] = None
    note: Optional[str] = None
    requested_at: Optional[str] = None
    processed_at: Optional[str] = None


# -------------------------------------------------
# INCOMING (STOREFRONT)
# -------------------------------------------------

class CancelOrderBody(ApiModel):
    reason: CancelReason = CancelReason.CHANGE_OF_MIND
    note: Optional[str] = None


class ReturnRequestBody(ApiModel):
    order_item_id: Optional[str] = None
    reason_type: ReturnReasonType = ReturnReasonType.CUSTOMER_FAULT
    # emptiness is checked by the workflow, not the schema
    reason: str = ""
    customer_video_url: Optional[str] = None
    customer_image_urls: List[str] = Field(default_factory=list)


class RejectCancelBody(ApiModel):
    note: Optional[str] = None
