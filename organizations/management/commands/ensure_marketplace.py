from django.conf import settings
from django.core.management.base import BaseCommand

from organizations.models import Organization


class Command(BaseCommand):
    help = "Create the public marketplace organization if it is missing"

    def handle(self, *args, **options):
        existing = Organization.objects.marketplace_id()
        marketplace = Organization.objects.marketplace()

        if existing:
            self.stdout.write(f"Marketplace already present (id={marketplace.pk})")
            return

        self.stdout.write(
            self.style.SUCCESS(
                f"Created marketplace '{settings.LMS_MARKETPLACE_SLUG}' (id={marketplace.pk})"
            )
        )
