from decimal import Decimal

from django import forms


class OrderCreateForm(forms.Form):
    """Validate a course purchase request before any order is created."""

    institute_id = forms.CharField(max_length=32)
    course_id = forms.CharField(max_length=64)
    course_title = forms.CharField(max_length=255)
    amount = forms.DecimalField(max_digits=12, decimal_places=2, min_value=Decimal("0.01"))
    name = forms.CharField(max_length=128)
    email = forms.EmailField()
    phone = forms.CharField(max_length=20)
    city = forms.CharField(max_length=64, required=False)
    notes = forms.CharField(required=False)

    @classmethod
    def from_payload(cls, body: dict) -> "OrderCreateForm":
        """Build the form from the JSON body; ``tenantId``/``buyer`` and the older
        ``instituteId``/``student`` spellings are both accepted."""
        buyer = body.get("buyer") or body.get("student") or {}
        if not isinstance(buyer, dict):
            buyer = {}
        data = {
            "institute_id": body.get("tenantId") or body.get("instituteId"),
            "course_id": body.get("courseId"),
            "course_title": body.get("courseTitle"),
            "amount": body.get("amount"),
            "name": buyer.get("name") or buyer.get("fullName"),
            "email": buyer.get("email"),
            "phone": buyer.get("phone"),
            "city": buyer.get("city") or "",
            "notes": buyer.get("notes") or "",
        }
        return cls(data={k: ("" if v is None else str(v)) for k, v in data.items()})

    def clean_phone(self):
        phone = self.cleaned_data["phone"].strip()
        phone_norm = "".join(ch for ch in phone if ch.isdigit() or ch == "+")
        if not phone_norm:
            raise forms.ValidationError("Enter a valid phone number.")
        return phone_norm

    def clean_email(self):
        return self.cleaned_data["email"].strip().lower()
