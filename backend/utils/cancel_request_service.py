import logging

from models.requests import CancelRequestRecord, CancelRequestStatus
from utils.commerce_api import CommerceApi
from utils.errors import OrderValidationError
from utils.guards import clean_text, require_identifier

logger = logging.getLogger(__name__)


# -------------------------------------------------
# STATE MACHINE
# -------------------------------------------------

# REQUESTED -> APPROVED | REJECTED; both outcomes are terminal
CANCEL_REQUEST_TRANSITIONS = {
    CancelRequestStatus.REQUESTED: {
        CancelRequestStatus.APPROVED,
        CancelRequestStatus.REJECTED,
    },
    CancelRequestStatus.APPROVED: set(),
    CancelRequestStatus.REJECTED: set(),
}


def _status_of(record: CancelRequestRecord) -> CancelRequestStatus | None:
    try:
        return CancelRequestStatus(str(record.status).upper())
    except ValueError:
        return None


def ensure_transition(current, target: CancelRequestStatus) -> None:
    allowed = CANCEL_REQUEST_TRANSITIONS.get(current, set())
    if target not in allowed:
        current_label = current.value if isinstance(current, CancelRequestStatus) else "NONE"
        raise OrderValidationError(
            f"Cancellation request cannot move from {current_label} to {target.value}"
        )


def pending_request(records: list[CancelRequestRecord]) -> CancelRequestRecord | None:
    """
    The open request, newest last as the commerce API lists them.
    """
    pending = [r for r in records if _status_of(r) == CancelRequestStatus.REQUESTED]
    return pending[-1] if pending else None


# -------------------------------------------------
# WORKFLOWS
# -------------------------------------------------

async def list_cancel_requests(
    api: CommerceApi,
    store_id: str,
    store_order_id: str,
) -> list[CancelRequestRecord]:
    store_id = require_identifier(store_id, "store id")
    store_order_id = require_identifier(store_order_id, "store order id")

    raw = await api.get_cancel_requests(store_id, store_order_id)

    records = []
    for entry in raw:
        if not isinstance(entry, dict) or not entry.get("status"):
            continue
        records.append(CancelRequestRecord.model_validate(entry))
    return records


async def _resolve(
    api: CommerceApi,
    store_id: str,
    store_order_id: str,
    target: CancelRequestStatus,
) -> CancelRequestRecord:
    records = await list_cancel_requests(api, store_id, store_order_id)

    pending = pending_request(records)
    if pending is None:
        latest = _status_of(records[-1]) if records else None
        ensure_transition(latest, target)

    return pending


async def approve_cancel_request(
    api: CommerceApi,
    store_id: str,
    store_order_id: str,
) -> list[CancelRequestRecord]:
    await _resolve(api, store_id, store_order_id, CancelRequestStatus.APPROVED)

    await api.approve_cancel_request(store_id, store_order_id)
    logger.info("CANCEL_REQUEST_APPROVED store=%s store_order=%s", store_id, store_order_id)

    return await list_cancel_requests(api, store_id, store_order_id)


async def reject_cancel_request(
    api: CommerceApi,
    store_id: str,
    store_order_id: str,
    note: str | None = None,
) -> list[CancelRequestRecord]:
    await _resolve(api, store_id, store_order_id, CancelRequestStatus.REJECTED)

    await api.reject_cancel_request(store_id, store_order_id, clean_text(note))
    logger.info("CANCEL_REQUEST_REJECTED store=%s store_order=%s", store_id, store_order_id)

    return await list_cancel_requests(api, store_id, store_order_id)
