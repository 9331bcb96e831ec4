import json
import logging
from decimal import Decimal, ROUND_HALF_UP

import requests
from requests import RequestException

from ..checksum import generate_signature
from ..config import PaytmConfig

logger = logging.getLogger(__name__)

COMMON_HEADERS = {"Content-Type": "application/json", "Accept": "application/json"}


class PaytmError(Exception):
    def __init__(self, message, *, response=None):
        super().__init__(message)
        self.response = response


def _amount_str(amount) -> str:
    try:
        return format(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP), "f")
    except Exception:
        raise PaytmError("Invalid amount value")


def _signed_request(config: PaytmConfig, body: dict) -> str:
    # the signature covers these exact body bytes
    body_json = json.dumps(body, separators=(",", ":"))
    signature = generate_signature(body_json, config.merchant_key)
    return json.dumps({"body": body, "head": {"signature": signature}}, separators=(",", ":"))


def _post(config: PaytmConfig, url: str, body: dict) -> dict:
    try:
        resp = requests.post(url, data=_signed_request(config, body), headers=COMMON_HEADERS, timeout=config.timeout)
    except RequestException as e:
        raise PaytmError(f"Gateway request failed: {e}")
    try:
        data = resp.json()
    except ValueError:
        data = {"raw": resp.text[:800]}
    if not 200 <= resp.status_code < 300:
        raise PaytmError(f"HTTP {resp.status_code}. Response: {json.dumps(data)[:800]}", response=data)
    return data if isinstance(data, dict) else {"raw": data}


def initiate_transaction(config: PaytmConfig, *, order_id, amount, customer_id, email="", mobile="") -> dict:
    """Ask Paytm for a transaction token for ``order_id``.

    Returns ``{"token": ..., "result_code": ..., "result_msg": ..., "data": <raw response>}``.
    Raises :class:`PaytmError` on transport errors, non-2xx responses, a
    result status other than ``S`` or a missing token.
    """

    body = {
        "requestType": "Payment",
        "mid": config.merchant_id,
        "websiteName": config.website,
        "orderId": order_id,
        "callbackUrl": config.callback_url_for(order_id),
        "txnAmount": {"value": _amount_str(amount), "currency": "INR"},
        "userInfo": {"custId": customer_id, "mobile": mobile, "email": email},
    }
    url = f"{config.host}/theia/api/v1/initiateTransaction?mid={config.merchant_id}&orderId={order_id}"
    data = _post(config, url, body)

    result_body = data.get("body")
    info = result_body.get("resultInfo") if isinstance(result_body, dict) else None
    if not isinstance(info, dict):
        raise PaytmError("Malformed initiateTransaction response", response=data)
    token = result_body.get("txnToken") or ""
    if info.get("resultStatus") != "S" or not token:
        msg = info.get("resultMsg") or "Paytm order failed"
        raise PaytmError(msg, response=data)
    return {
        "token": token,
        "result_code": str(info.get("resultCode") or ""),
        "result_msg": str(info.get("resultMsg") or ""),
        "data": data,
    }


def fetch_order_status(config: PaytmConfig, order_id: str) -> dict:
    """Return the ``body`` of Paytm's order status response for ``order_id``."""
    body = {"mid": config.merchant_id, "orderId": order_id}
    data = _post(config, f"{config.host}/v3/order/status", body)
    result_body = data.get("body")
    if not isinstance(result_body, dict):
        raise PaytmError("Order status response missing body", response=data)
    if not isinstance(result_body.get("resultInfo"), dict):
        raise PaytmError("Malformed order status response", response=data)
    return result_body
