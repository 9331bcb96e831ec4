import json
import logging

from django.apps import apps
from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_POST

from mobishaala.auth import jwt_required

from . import store
from .exceptions import PaymentError
from .forms import OrderCreateForm
from .services import Buyer, create_order, order_detail, order_summary, process_callback

logger = logging.getLogger(__name__)


def _paytm_config():
    return apps.get_app_config("payments").paytm


def _json_body(request):
    try:
        body = json.loads(request.body.decode("utf-8"))
    except (UnicodeDecodeError, ValueError):
        return None
    return body if isinstance(body, dict) else None


def _error(exc: PaymentError) -> JsonResponse:
    payload = {"success": False, "message": exc.message}
    if exc.errors:
        payload["errors"] = exc.errors
    return JsonResponse(payload, status=exc.status_code)


def _form_errors(form) -> dict:
    return {field: [e["message"] for e in errs] for field, errs in form.errors.get_json_data().items()}


def _server_error(message) -> JsonResponse:
    return JsonResponse({"success": False, "message": message}, status=500)


def _callback_payload(request):
    if request.content_type == "application/json":
        return _json_body(request)
    data = request.POST.dict()
    if data:
        return data
    # some gateway environments post a raw JSON string without a content type
    return request.body.decode("utf-8", "replace") or None


@csrf_exempt
@require_POST
def create_order_view(request):
    body = _json_body(request)
    if body is None:
        return JsonResponse({"success": False, "message": "Invalid JSON body"}, status=400)

    form = OrderCreateForm.from_payload(body)
    if not form.is_valid():
        return JsonResponse(
            {"success": False, "message": "Missing or invalid fields", "errors": _form_errors(form)},
            status=400,
        )

    data = form.cleaned_data
    buyer = Buyer(
        name=data["name"],
        email=data["email"],
        phone=data["phone"],
        city=data.get("city", ""),
        notes=data.get("notes", ""),
    )
    try:
        result = create_order(
            _paytm_config(),
            institute_id=data["institute_id"],
            course_id=data["course_id"],
            course_title=data["course_title"],
            amount=data["amount"],
            buyer=buyer,
        )
    except PaymentError as e:
        return _error(e)
    except Exception:
        logger.exception("Paytm order creation crashed for institute=%s", data.get("institute_id"))
        return _server_error("Order error")
    return JsonResponse({"success": True, "data": result}, status=201)


@csrf_exempt
@require_POST
def paytm_callback_view(request):
    """Paytm posts the settlement result here, JSON or form-encoded."""
    payload = _callback_payload(request)
    if payload is None:
        return JsonResponse({"success": False, "message": "Invalid callback payload"}, status=400)
    try:
        order, changed = process_callback(_paytm_config(), payload)
    except PaymentError as e:
        return _error(e)
    except Exception:
        logger.exception("Paytm callback processing crashed")
        return _server_error("Callback processing error")
    return JsonResponse({"success": True, "status": order.status, "updated": changed})


@require_GET
def order_status_view(request, order_id: str):
    order = store.find_order(order_id)
    if order is None:
        return JsonResponse({"success": False, "message": "Payment not found"}, status=404)
    return JsonResponse({"success": True, "data": order_summary(order)})


@require_GET
@jwt_required
def order_list_view(request):
    orders = store.list_orders()
    return JsonResponse({"success": True, "data": [order_detail(o) for o in orders]})


@require_GET
@jwt_required
def institute_orders_view(request, institute_id: str):
    orders = store.list_orders(institute_id.strip().upper())
    return JsonResponse({"success": True, "data": [order_detail(o) for o in orders]})
