import logging
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from django.db import transaction

from institutes.services import find_institute

from . import store
from .callbacks import normalize_callback
from .checksum import verify
from .config import PaytmConfig
from .exceptions import (
    ConcurrencyError,
    GatewayError,
    NotFoundError,
    SignatureError,
    ValidationError,
)
from .integrations import paytm
from .integrations.paytm import PaytmError
from .models import Order
from .utils import generate_order_id

logger = logging.getLogger(__name__)

SUCCESS_CODES = {"TXN_SUCCESS", "SUCCESS"}
PENDING_CODES = {"PENDING", "OPEN"}
MAX_AMOUNT = Decimal("9999999999.99")
MAX_CAS_ATTEMPTS = 5


@dataclass(frozen=True)
class Buyer:
    name: str
    email: str
    phone: str
    city: str = ""
    notes: str = ""


def parse_amount(value) -> Decimal:
    if isinstance(value, bool) or value is None:
        raise ValidationError("Invalid amount")
    try:
        amount = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise ValidationError("Invalid amount")
    if not amount.is_finite() or amount <= 0 or amount > MAX_AMOUNT:
        raise ValidationError("Invalid amount")
    if amount != amount.quantize(Decimal("0.01")):
        raise ValidationError("Amount can have at most 2 decimal places")
    return amount.quantize(Decimal("0.01"))


def gateway_outcome(code) -> str:
    """Map a Paytm transaction status onto our order status."""
    code = str(code or "").strip().upper()
    if code in SUCCESS_CODES:
        return Order.PAID
    if code in PENDING_CODES:
        return Order.PENDING
    return Order.FAILED


def next_status(current: str, outcome: str) -> str:
    # paid and failed are final; later results only add metadata
    if current in Order.TERMINAL_STATUSES:
        return current
    return outcome


def _settled_outcome(order: Order, code, txn_amount) -> str:
    outcome = gateway_outcome(code)
    if outcome == Order.PAID and txn_amount:
        try:
            paid = Decimal(str(txn_amount).strip())
        except InvalidOperation:
            paid = None
        if paid != order.amount:
            logger.error(
                "Paytm amount mismatch for order_id=%s: expected=%s received=%s",
                order.order_id,
                order.amount,
                txn_amount,
            )
            return Order.FAILED
    return outcome


def _apply(order_id: str, decide):
    """Read-modify-write one order under a per-order compare-and-set.

    ``decide(order)`` returns ``(new_status, patch)``.  Returns
    ``(order, changed)``; ``changed`` is ``False`` when the result would not
    alter the stored record, in which case nothing is written.
    """

    for _ in range(MAX_CAS_ATTEMPTS):
        with transaction.atomic():
            order = store.lock_order(order_id)
            if order is None:
                raise NotFoundError("Payment not found")
            new_status, patch = decide(order)
            merged = store.merge_details(order.gateway_details, patch)
            if new_status == order.status and merged == (order.gateway_details or {}):
                return order, False
            if store.update_status_and_merge(order, new_status, patch):
                return order, True
        logger.info("Order %s changed while updating, retrying", order_id)
    raise ConcurrencyError()


def _fail_initiated(order_id: str, error: str):
    # an initiated order without a token can never be settled
    _apply(order_id, lambda o: (Order.FAILED if o.status == Order.INITIATED else o.status, {"error": error}))


def create_order(config: PaytmConfig, *, institute_id, course_id, course_title, amount, buyer: Buyer) -> dict:
    """Create an order for a course purchase and obtain a Paytm transaction token.

    The order is stored as ``initiated`` before the gateway call.  If the
    gateway does not hand out a token the order is closed as ``failed`` so no
    ``initiated`` order is ever left without a token.
    """

    config.ensure_ready()
    amount = parse_amount(amount)

    institute = find_institute(institute_id)
    if institute is None:
        raise NotFoundError("Institute not found")
    if not institute.paytm_enabled:
        raise ValidationError("Paytm not enabled")

    order = store.insert_order(
        order_id=generate_order_id(config.order_prefix),
        institute_id=institute.institute_id,
        course_id=str(course_id),
        course_title=str(course_title),
        amount=amount,
        student_name=buyer.name,
        student_email=buyer.email,
        student_phone=buyer.phone,
        city=buyer.city or "",
        notes=buyer.notes or "",
        status=Order.INITIATED,
    )
    logger.info(
        "Order %s initiated: institute=%s course=%s amount=%s",
        order.order_id,
        order.institute_id,
        order.course_id,
        order.amount,
    )

    try:
        result = paytm.initiate_transaction(
            config,
            order_id=order.order_id,
            amount=order.amount,
            customer_id=buyer.email or buyer.phone or buyer.name,
            email=buyer.email,
            mobile=buyer.phone,
        )
    except PaytmError as e:
        logger.error("Paytm initiateTransaction failed for order_id=%s: %s", order.order_id, e)
        _fail_initiated(order.order_id, str(e))
        raise GatewayError(str(e) or None)
    except Exception as e:
        logger.exception("Paytm initiateTransaction crashed for order_id=%s", order.order_id)
        _fail_initiated(order.order_id, f"{type(e).__name__}: {e}")
        raise

    order, _ = _apply(order.order_id, lambda o: (o.status, {"txnToken": result["token"]}))
    return {
        "orderId": order.order_id,
        "token": result["token"],
        "mid": config.merchant_id,
        "amount": f"{order.amount:.2f}",
        "callbackUrl": config.callback_url_for(order.order_id),
    }


def _settle(order_id: str, code, txn_amount, patch: dict):
    def decide(order):
        outcome = _settled_outcome(order, code, txn_amount)
        new_status = next_status(order.status, outcome)
        if order.status == Order.FAILED and outcome == Order.PAID:
            logger.error("Success reported for failed order_id=%s; needs manual reconciliation", order_id)
        elif order.is_terminal:
            logger.info("Order %s already %s; merging gateway metadata only", order_id, order.status)
        return new_status, patch

    order, changed = _apply(order_id, decide)
    if changed:
        logger.info("Order %s is now %s", order.order_id, order.status)
    return order, changed


def process_callback(config: PaytmConfig, payload):
    """Verify a Paytm callback and move the matching order along.

    Safe to call repeatedly with the same payload.  Returns ``(order, changed)``.
    """

    config.ensure_ready()
    record = normalize_callback(payload)
    if not verify(record.fields, config.merchant_key, record.checksum):
        logger.warning(
            "Paytm checksum mismatch for order_id=%s keys=%s",
            record.order_id,
            sorted(record.fields),
        )
        raise SignatureError()

    patch = {
        "txnId": record.get("TXNID"),
        "bankTxnId": record.get("BANKTXNID"),
        "respCode": record.get("RESPCODE"),
        "respMsg": record.get("RESPMSG"),
        "result": dict(record.fields),
    }
    code = record.get("STATUS") or record.get("RESULTSTATUS")
    return _settle(record.order_id, code, record.get("TXNAMOUNT"), patch)


def reconcile_order(config: PaytmConfig, order: Order):
    """Poll Paytm for ``order`` and apply whatever it reports."""
    config.ensure_ready()
    try:
        body = paytm.fetch_order_status(config, order.order_id)
    except PaytmError as e:
        raise GatewayError(str(e) or None)

    info = body.get("resultInfo") or {}
    patch = {
        "txnId": body.get("txnId"),
        "bankTxnId": body.get("bankTxnId"),
        "respCode": info.get("resultCode"),
        "respMsg": info.get("resultMsg"),
        "statusCheck": body,
    }
    return _settle(order.order_id, info.get("resultStatus"), body.get("txnAmount"), patch)


def order_summary(order: Order) -> dict:
    return {"orderId": order.order_id, "status": order.status, "courseTitle": order.course_title}


def order_detail(order: Order) -> dict:
    return {
        "orderId": order.order_id,
        "instituteId": order.institute_id,
        "courseId": order.course_id,
        "courseTitle": order.course_title,
        "amount": f"{order.amount:.2f}",
        "studentName": order.student_name,
        "studentEmail": order.student_email,
        "studentPhone": order.student_phone,
        "city": order.city,
        "notes": order.notes,
        "paymentMode": order.payment_mode,
        "status": order.status,
        "gatewayDetails": order.gateway_details,
        "createdAt": order.created_at.isoformat() if order.created_at else None,
        "updatedAt": order.updated_at.isoformat() if order.updated_at else None,
    }
