"""Reduce Paytm callback payloads to one canonical record.

Paytm posts settlement callbacks in several shapes depending on the
integration environment:

* a JSON envelope ``{"head": {"signature": ...}, "body": {...}}``
* the same envelope string-encoded inside a form field or as the raw body
* a flat form post with (usually) upper-case keys and ``CHECKSUMHASH``

Key casing varies between environments, so every lookup here is
case-insensitive and the record handed on always carries upper-case keys.
"""

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field

from .exceptions import NormalizationError

logger = logging.getLogger(__name__)

ORDER_ID_FIELD = "ORDERID"
CHECKSUM_FIELD = "CHECKSUMHASH"
SIGNATURE_KEYS = ("SIGNATURE", CHECKSUM_FIELD)


@dataclass(frozen=True)
class CallbackRecord:
    order_id: str
    checksum: str
    fields: dict = field(default_factory=dict)

    def get(self, name, default=""):
        return self.fields.get(name.upper(), default)


def _stringify(value) -> str:
    if value is None:
        return ""
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_plain_mapping(payload):
    # QueryDict.dict() keeps the last value of each key
    if hasattr(payload, "dict") and callable(payload.dict):
        return payload.dict()
    return payload


def _upper_keys(mapping: Mapping) -> dict:
    """Upper-case every key; keys that collide with different values are ambiguous."""
    out = {}
    for key, value in mapping.items():
        norm = str(key).upper()
        if norm in out and out[norm] != value:
            raise NormalizationError(f"Ambiguous callback field {norm!r}")
        out[norm] = value
    return out


def _decode_json(value):
    if not isinstance(value, (str, bytes)):
        return None
    text = value.decode("utf-8", "replace") if isinstance(value, bytes) else value
    text = text.strip()
    if not text.startswith("{"):
        return None
    try:
        decoded = json.loads(text)
    except ValueError:
        return None
    return decoded if isinstance(decoded, Mapping) else None


def _from_envelope(mapping: Mapping):
    keys = _upper_keys(mapping)
    head, body = keys.get("HEAD"), keys.get("BODY")
    if isinstance(body, (str, bytes)):
        body = _decode_json(body)
    if not isinstance(head, Mapping) or not isinstance(body, Mapping):
        return None

    head = _upper_keys(head)
    checksum = next((head[k] for k in SIGNATURE_KEYS if head.get(k)), "")
    if not checksum:
        return None

    fields = {k: _stringify(v) for k, v in _upper_keys(body).items() if k != CHECKSUM_FIELD}
    return _build(fields, checksum)


def _from_flat(mapping: Mapping):
    keys = _upper_keys(mapping)
    if ORDER_ID_FIELD not in keys or CHECKSUM_FIELD not in keys:
        return None
    checksum = keys.pop(CHECKSUM_FIELD)
    fields = {k: _stringify(v) for k, v in keys.items()}
    return _build(fields, checksum)


def _build(fields: dict, checksum) -> CallbackRecord:
    order_id = fields.get(ORDER_ID_FIELD, "").strip()
    checksum = _stringify(checksum).strip()
    if not order_id:
        raise NormalizationError("Callback is missing the order id")
    if not checksum:
        raise NormalizationError("Callback is missing the checksum")
    return CallbackRecord(order_id=order_id, checksum=checksum, fields=fields)


def _match(payload: Mapping):
    record = _from_envelope(payload)
    if record is not None:
        return record

    for value in payload.values():
        decoded = _decode_json(value)
        if decoded is None:
            continue
        record = _from_envelope(decoded)
        if record is not None:
            return record

    return _from_flat(payload)


def normalize_callback(payload) -> CallbackRecord:
    """Return the canonical :class:`CallbackRecord` for a raw callback payload.

    Shapes are tried in order (envelope, string-encoded envelope, flat form)
    and the first match wins.  Raises :class:`NormalizationError` when the
    payload matches none of them.
    """

    raw = _as_plain_mapping(payload)
    mapping = raw if isinstance(raw, Mapping) else _decode_json(raw)
    if mapping is None:
        logger.warning("Unrecognized Paytm callback payload of type %s", type(raw).__name__)
        raise NormalizationError()

    keys = sorted(str(k) for k in mapping.keys())
    try:
        record = _match(mapping)
    except NormalizationError as e:
        logger.warning("Rejected Paytm callback (%s), keys=%s", e.message, keys)
        raise
    if record is None:
        logger.warning("Unrecognized Paytm callback payload, keys=%s", keys)
        raise NormalizationError()
    return record
