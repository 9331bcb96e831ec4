from django.db import models


class Order(models.Model):
    INITIATED = "initiated"
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    STATUS_CHOICES = [
        (INITIATED, "Initiated"),
        (PENDING, "Pending"),
        (PAID, "Paid"),
        (FAILED, "Failed"),
    ]
    TERMINAL_STATUSES = (PAID, FAILED)

    order_id = models.CharField(max_length=50, unique=True)
    institute_id = models.CharField(max_length=32, db_index=True)
    course_id = models.CharField(max_length=64)
    course_title = models.CharField(max_length=255)
    amount = models.DecimalField(max_digits=12, decimal_places=2)

    student_name = models.CharField(max_length=128)
    student_email = models.EmailField()
    student_phone = models.CharField(max_length=20)
    city = models.CharField(max_length=64, blank=True, default="")
    notes = models.TextField(blank=True, default="")

    payment_mode = models.CharField(max_length=16, default="paytm")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default=INITIATED, db_index=True)
    # txnToken at creation; txnId, bankTxnId, respCode, respMsg, result after callbacks
    gateway_details = models.JSONField(default=dict, blank=True)
    version = models.PositiveIntegerField(default=0)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    @property
    def is_terminal(self) -> bool:
        return self.status in self.TERMINAL_STATUSES

    def __str__(self):
        return f"{self.order_id} ({self.status})"
