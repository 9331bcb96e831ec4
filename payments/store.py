"""Persistence for payment orders.

Orders are created once and afterwards only changed through
:func:`update_status_and_merge`, a compare-and-set on ``version`` so two
callbacks for the same order can never overwrite each other's data.
"""

from django.db import transaction
from django.db.models import F
from django.utils import timezone

from .models import Order


def insert_order(**fields) -> Order:
    return Order.objects.create(**fields)


def find_order(order_id: str):
    return Order.objects.filter(order_id=order_id).first()


def lock_order(order_id: str):
    """Fetch the order for a read-modify-write; call inside ``transaction.atomic``."""
    return Order.objects.select_for_update().filter(order_id=order_id).first()


def merge_details(current: dict, patch: dict) -> dict:
    """Merge ``patch`` into ``current`` without ever dropping data.

    Empty values in the patch are ignored; the nested ``result`` mapping is
    merged key by key with newer values winning.
    """

    merged = dict(current or {})
    for key, value in (patch or {}).items():
        if value is None or value == "":
            continue
        if key == "result" and isinstance(value, dict):
            merged[key] = {**(merged.get(key) or {}), **value}
        else:
            merged[key] = value
    return merged


def update_status_and_merge(order: Order, new_status: str, patch: dict) -> bool:
    """Apply ``new_status`` and ``patch`` if nobody changed ``order`` since it was read.

    Returns ``False`` when the stored version moved on; the caller should
    re-read and recompute.  On success ``order`` is updated in place.
    """

    details = merge_details(order.gateway_details, patch)
    now = timezone.now()
    with transaction.atomic():
        updated = Order.objects.filter(pk=order.pk, version=order.version).update(
            status=new_status,
            gateway_details=details,
            version=F("version") + 1,
            updated_at=now,
        )
    if not updated:
        return False
    order.status = new_status
    order.gateway_details = details
    order.version += 1
    order.updated_at = now
    return True


def list_orders(institute_id=None):
    """Newest first, optionally for one institute."""
    qs = Order.objects.order_by("-created_at")
    if institute_id is not None:
        qs = qs.filter(institute_id=institute_id)
    return qs
