# backend/config/constants.py

# -----------------------------
# RECONCILIATION DEFAULTS
# -----------------------------

UNKNOWN_STORE_ID = "unknown-store"
DEFAULT_STORE_LABEL = "Store"
STORE_LABEL_ID_CHARS = 6             # chars of store id shown in fallback label
DEFAULT_ITEM_NAME = "Product"
STATUS_UNKNOWN = "UNKNOWN"

# Synthesized store order ids look like "{orderId}-store-{n}"
SYNTHESIZED_STORE_MARKER = "-store-"

# -----------------------------
# CANCELLATION
# -----------------------------

CANCEL_MODE_IMMEDIATE = "immediate"
CANCEL_MODE_REQUEST = "request"

DEFAULT_CANCEL_REASON = "CHANGE_OF_MIND"

# -----------------------------
# LOOKUPS
# -----------------------------

RECENT_ORDERS_LOOKUP_SIZE = 100      # page scanned when searching by external code

# Shipment lookups answering with these codes mean "no carrier record yet"
SHIPMENT_NOT_FOUND_STATUSES = {404, 500}

# -----------------------------
# FALLBACK ERROR MESSAGES
# -----------------------------

MSG_LIST_FAILED = "Unable to load orders"
MSG_DETAIL_FAILED = "Unable to load order details"
MSG_CANCEL_FAILED = "Unable to cancel order"
MSG_CANCEL_REQUEST_FAILED = "Unable to send cancellation request"
MSG_RETURN_FAILED = "Unable to submit return request"
MSG_CANCEL_REQUESTS_FAILED = "Unable to load cancellation requests"
MSG_APPROVE_FAILED = "Unable to approve cancellation request"
MSG_REJECT_FAILED = "Unable to reject cancellation request"
MSG_SHIPMENT_FAILED = "Unable to load shipment record"
