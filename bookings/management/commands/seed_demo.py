"""Management command that creates a demo DJ account with one client and one gig."""
from datetime import timedelta
from decimal import Decimal

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from bookings.services import ClientService, GigService, ProfileService
from bookings.utils import today_utc

DEMO_PROFILE = {
    "stage_name": "DJ Blaze",
    "phone": "(555) 123-4567",
    "location": "Los Angeles, CA",
    "business_name": "Blaze Entertainment LLC",
    "tax_id": "XX-XXXXXXX",
    "business_address": "123 Music Lane, Los Angeles, CA 90001",
    "website": "https://djblaze.com",
    "payment_terms": "Net 14 days",
    "payment_method": "Bank Transfer",
    "payment_instructions": (
        "Please transfer the full amount to:\n"
        "Account Name: Blaze Entertainment LLC\n"
        "Bank: First National Bank\n"
        "Account: XXXX-XXXX-XXXX-1234\n"
        "Routing: XXXXXXXXX"
    ),
}


def next_friday(today):
    """The coming Friday; today when today is a Friday."""
    return today + timedelta(days=(4 - today.weekday()) % 7)


class Command(BaseCommand):
    help = "Create the demo DJ account (skipped when it already exists)"

    def add_arguments(self, parser):
        parser.add_argument("--email", default="test@example.com")
        parser.add_argument("--password", default="gigpro-demo")

    @transaction.atomic
    def handle(self, *args, **options):
        User = get_user_model()
        email = options["email"].strip().lower()

        if User.objects.filter(email__iexact=email).exists():
            self.stdout.write(self.style.WARNING(f"Demo user {email} already exists, skipping seed."))
            return

        user = User.objects.create_user(username=email, email=email, password=options["password"])
        ProfileService.get_or_create_profile(user, **DEMO_PROFILE)
        self.stdout.write(f"  User: {self.style.SUCCESS(email)}")

        client = ClientService.create_client(user, {
            "name": "Groove Lounge",
            "email": "bookings@groovelounge.com",
            "phone": "(555) 987-6543",
            "type": "Nightclub",
            "notes": "Regular weekly gig every Friday. Contact manager Lucy for setup details.",
            "tags": ["nightclub", "regular", "friday"],
        })
        self.stdout.write(f"  Client: {self.style.SUCCESS(client.name)}")

        gig = GigService.create_gig(user, {
            "client_id": client.id,
            "title": "Friday Night at Groove Lounge",
            "date": next_friday(today_utc()),
            "start_time": "21:00",
            "end_time": "02:00",
            "location": "123 Beat Street, Downtown",
            "fee": Decimal("350.00"),
            "notes": "Bring extra controller. VIP event - dress code is black attire.",
            "reminder_set": True,
        })
        self.stdout.write(f"  Gig: {self.style.SUCCESS(f'{gig.title} on {gig.date.isoformat()}')}")
        self.stdout.write(self.style.SUCCESS("Demo data created."))
