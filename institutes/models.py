from django.db import models


class Institute(models.Model):
    STATUS_CHOICES = [
        ("Draft", "Draft"),
        ("Active", "Active"),
        ("Archived", "Archived"),
    ]
    institute_id = models.CharField(max_length=12, unique=True)
    business_name = models.CharField(max_length=255)
    business_email = models.EmailField(blank=True, default="")
    city = models.CharField(max_length=64, blank=True, default="")
    status = models.CharField(max_length=16, choices=STATUS_CHOICES, default="Draft")
    paytm_enabled = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ("-created_at",)

    def __str__(self):
        return f"{self.institute_id} - {self.business_name}"

    def save(self, *args, **kwargs):
        self.institute_id = (self.institute_id or "").strip().upper()
        super().save(*args, **kwargs)
