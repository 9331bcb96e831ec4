import time
from datetime import timedelta

from django.apps import apps
from django.core.management.base import BaseCommand
from django.utils import timezone

from payments.exceptions import PaymentError
from payments.models import Order
from payments.services import reconcile_order


class Command(BaseCommand):
    help = "Poll Paytm Order Status for initiated/pending orders and update local DB"

    def add_arguments(self, parser):
        parser.add_argument("--max", type=int, default=50)
        parser.add_argument("--sleep", type=float, default=0.5)
        parser.add_argument("--older-than-minutes", type=int, default=30)

    def handle(self, *args, **opts):
        config = apps.get_app_config("payments").paytm
        cutoff = timezone.now() - timedelta(minutes=opts["older_than_minutes"])
        qs = (
            Order.objects.filter(status__in=[Order.INITIATED, Order.PENDING], updated_at__lt=cutoff)
            .order_by("updated_at")[: opts["max"]]
        )

        orders = list(qs)
        if not orders:
            self.stdout.write(self.style.SUCCESS("No pending orders to reconcile."))
            return

        for o in orders:
            try:
                order, changed = reconcile_order(config, o)
                if changed:
                    self.stdout.write(self.style.SUCCESS(f"Updated {order.order_id} -> {order.status}"))
                else:
                    self.stdout.write(f"{order.order_id}: unchanged ({order.status})")
            except PaymentError as e:
                self.stdout.write(self.style.WARNING(f"{o.order_id}: {e.message}"))
            if opts["sleep"]:
                time.sleep(opts["sleep"])
