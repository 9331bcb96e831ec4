import json
from unittest.mock import patch

import jwt
from django.conf import settings
from django.test import TestCase
from django.urls import reverse

from institutes.models import Institute
from payments.checksum import sign
from payments.models import Order

from .helpers import KEY, FakeResponse, callback_fields, flat_callback, token_response

ORDER_BODY = {
    "tenantId": "T1",
    "courseId": "C1",
    "courseTitle": "Course One",
    "amount": "499.00",
    "buyer": {"name": "Asha", "email": "a@x.com", "phone": "9999999999"},
}


class PaymentApiTestCase(TestCase):
    def setUp(self):
        Institute.objects.create(institute_id="T1", business_name="Tenant One", paytm_enabled=True)
        Institute.objects.create(institute_id="T2", business_name="Tenant Two", paytm_enabled=False)

    def post_json(self, url, body):
        return self.client.post(url, data=json.dumps(body), content_type="application/json")

    def create_order(self, **overrides):
        body = {**ORDER_BODY, **overrides}
        with patch("payments.integrations.paytm.requests.post", return_value=token_response()):
            return self.post_json(reverse("payments:create_order"), body)


class CreateOrderViewTests(PaymentApiTestCase):
    def test_creates_order(self):
        resp = self.create_order()
        self.assertEqual(resp.status_code, 201)
        data = resp.json()["data"]
        self.assertRegex(data["orderId"], r"^MSH-\d+-\d+$")
        self.assertEqual(data["token"], "TXNTOKEN123")
        self.assertEqual(data["amount"], "499.00")

        order = Order.objects.get(order_id=data["orderId"])
        self.assertEqual(order.status, Order.INITIATED)
        self.assertEqual(order.institute_id, "T1")
        self.assertEqual(order.student_email, "a@x.com")

    def test_accepts_legacy_field_names(self):
        body = {k: v for k, v in ORDER_BODY.items() if k not in ("tenantId", "buyer")}
        body["instituteId"] = "t1"
        body["student"] = {"fullName": "Asha", "email": "A@X.com", "phone": "+91 99999 99999"}
        with patch("payments.integrations.paytm.requests.post", return_value=token_response()):
            resp = self.post_json(reverse("payments:create_order"), body)
        self.assertEqual(resp.status_code, 201)
        order = Order.objects.get()
        self.assertEqual(order.student_email, "a@x.com")
        self.assertEqual(order.student_phone, "+919999999999")

    def test_missing_fields(self):
        resp = self.create_order(courseId="", buyer={"name": "Asha"})
        self.assertEqual(resp.status_code, 400)
        errors = resp.json()["errors"]
        self.assertIn("course_id", errors)
        self.assertIn("email", errors)
        self.assertFalse(Order.objects.exists())

    def test_bad_amounts(self):
        for amount in ("0", "-1", "abc", "1.999"):
            resp = self.create_order(amount=amount)
            self.assertEqual(resp.status_code, 400, amount)
        self.assertFalse(Order.objects.exists())

    def test_invalid_json(self):
        resp = self.client.post(reverse("payments:create_order"), data="{oops", content_type="application/json")
        self.assertEqual(resp.status_code, 400)

    def test_unknown_tenant(self):
        resp = self.create_order(tenantId="NOPE")
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(resp.json()["message"], "Institute not found")

    def test_tenant_without_paytm(self):
        resp = self.create_order(tenantId="T2")
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Paytm not enabled")
        self.assertFalse(Order.objects.exists())

    def test_gateway_failure(self):
        with patch(
            "payments.integrations.paytm.requests.post",
            return_value=FakeResponse(None, 503, "unavailable"),
        ):
            resp = self.post_json(reverse("payments:create_order"), ORDER_BODY)
        self.assertEqual(resp.status_code, 502)
        self.assertFalse(resp.json()["success"])
        self.assertEqual(Order.objects.get().status, Order.FAILED)

    def test_malformed_gateway_reply(self):
        with patch(
            "payments.integrations.paytm.requests.post",
            return_value=FakeResponse({"body": "Invalid request"}),
        ):
            resp = self.post_json(reverse("payments:create_order"), ORDER_BODY)
        self.assertEqual(resp.status_code, 502)
        self.assertEqual(Order.objects.get().status, Order.FAILED)

    def test_unexpected_error_returns_500(self):
        with patch("payments.views.create_order", side_effect=RuntimeError("boom")):
            with self.assertLogs("payments.views", level="ERROR"):
                resp = self.post_json(reverse("payments:create_order"), ORDER_BODY)
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"success": False, "message": "Order error"})

    def test_get_not_allowed(self):
        resp = self.client.get(reverse("payments:create_order"))
        self.assertEqual(resp.status_code, 405)


class CallbackViewTests(PaymentApiTestCase):
    def setUp(self):
        super().setUp()
        self.order_id = self.create_order().json()["data"]["orderId"]

    def status(self):
        return Order.objects.get(order_id=self.order_id).status

    def envelope(self, **kwargs):
        fields = callback_fields(self.order_id, **kwargs)
        return {"head": {"signature": sign(fields, KEY)}, "body": fields}

    def test_success_then_duplicate(self):
        url = reverse("payments:paytm_callback")
        resp = self.post_json(url, self.envelope())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True, "status": "paid", "updated": True})

        resp = self.post_json(url, self.envelope())
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json(), {"success": True, "status": "paid", "updated": False})
        self.assertEqual(self.status(), Order.PAID)

    def test_form_encoded_callback(self):
        resp = self.client.post(reverse("payments:callback"), data=flat_callback(self.order_id, status="PENDING"))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.status(), Order.PENDING)

    def test_string_encoded_envelope(self):
        resp = self.client.post(
            reverse("payments:callback"),
            data={"response": json.dumps(self.envelope(status="TXN_FAILURE"))},
        )
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(self.status(), Order.FAILED)

    def test_invalid_signature(self):
        body = self.envelope()
        body["head"]["signature"] = "bm90LWEtcmVhbC1zaWduYXR1cmU="
        resp = self.post_json(reverse("payments:paytm_callback"), body)
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Checksum mismatch")
        self.assertEqual(self.status(), Order.INITIATED)

    def test_unknown_order(self):
        resp = self.post_json(reverse("payments:paytm_callback"), flat_callback("MSH-0-0"))
        self.assertEqual(resp.status_code, 404)
        self.assertEqual(self.status(), Order.INITIATED)

    def test_unrecognized_payload(self):
        resp = self.post_json(reverse("payments:paytm_callback"), {"hello": "world"})
        self.assertEqual(resp.status_code, 400)
        self.assertEqual(resp.json()["message"], "Invalid callback payload")

    def test_empty_body(self):
        resp = self.client.post(reverse("payments:paytm_callback"), data="", content_type="text/plain")
        self.assertEqual(resp.status_code, 400)


class OrderStatusViewTests(PaymentApiTestCase):
    def test_status_has_no_buyer_details(self):
        order_id = self.create_order().json()["data"]["orderId"]
        resp = self.client.get(reverse("payments:order_status", args=[order_id]))
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(
            resp.json()["data"],
            {"orderId": order_id, "status": "initiated", "courseTitle": "Course One"},
        )
        self.assertNotIn("a@x.com", resp.content.decode())

    def test_unknown_order(self):
        resp = self.client.get(reverse("payments:order_status", args=["MSH-0-0"]))
        self.assertEqual(resp.status_code, 404)

    def test_lookup_goes_through_store(self):
        order_id = self.create_order().json()["data"]["orderId"]
        with patch("payments.store.find_order", return_value=None) as find:
            resp = self.client.get(reverse("payments:order_status", args=[order_id]))
        find.assert_called_once_with(order_id)
        self.assertEqual(resp.status_code, 404)


class OrderListViewTests(PaymentApiTestCase):
    def setUp(self):
        super().setUp()
        self.order_id = self.create_order().json()["data"]["orderId"]

    def auth(self, secret=None):
        token = jwt.encode({"sub": "admin"}, secret or settings.JWT_SECRET, algorithm="HS256")
        return {"HTTP_AUTHORIZATION": f"Bearer {token}"}

    def test_requires_token(self):
        resp = self.client.get(reverse("payments:order_list"))
        self.assertEqual(resp.status_code, 401)

    def test_rejects_bad_token(self):
        resp = self.client.get(reverse("payments:order_list"), **self.auth("wrong-secret-0123456789abcdef0123"))
        self.assertEqual(resp.status_code, 403)

    def test_lists_orders(self):
        resp = self.client.get(reverse("payments:order_list"), **self.auth())
        self.assertEqual(resp.status_code, 200)
        data = resp.json()["data"]
        self.assertEqual(len(data), 1)
        self.assertEqual(data[0]["orderId"], self.order_id)
        self.assertEqual(data[0]["studentEmail"], "a@x.com")
        self.assertEqual(data[0]["gatewayDetails"], {"txnToken": "TXNTOKEN123"})

    def test_institute_orders(self):
        resp = self.client.get(reverse("payments:institute_orders", args=["t1"]), **self.auth())
        self.assertEqual([o["orderId"] for o in resp.json()["data"]], [self.order_id])

        resp = self.client.get(reverse("payments:institute_orders", args=["T2"]), **self.auth())
        self.assertEqual(resp.json()["data"], [])
