from datetime import timedelta
from decimal import Decimal

import factory
from django.contrib.auth import get_user_model

from bookings.models import Client, DJProfile, Gig, Invoice
from bookings.utils import today_utc


class UserFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = get_user_model()

    email = factory.Sequence(lambda n: f"dj{n}@example.com")
    username = factory.LazyAttribute(lambda o: o.email)
    first_name = "Sam"
    last_name = "Rivera"
    password = factory.django.Password("TestPass123!")


class DJProfileFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = DJProfile

    user = factory.SubFactory(UserFactory)
    stage_name = "DJ Blaze"
    business_name = "Blaze Entertainment LLC"
    website = "https://djblaze.com"
    business_address = "123 Music Lane, Los Angeles, CA 90001"
    tax_id = "XX-XXXXXXX"


class ClientFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Client

    user = factory.SubFactory(UserFactory)
    name = factory.Sequence(lambda n: f"Venue {n}")
    email = factory.LazyAttribute(lambda o: f"bookings@{o.name.lower().replace(' ', '')}.com")
    phone = "(555) 987-6543"
    type = "Nightclub"
    tags = factory.LazyFunction(lambda: ["nightclub"])


class GigFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Gig

    user = factory.SubFactory(UserFactory)
    client = factory.SubFactory(ClientFactory, user=factory.SelfAttribute("..user"))
    title = factory.Sequence(lambda n: f"Friday Night #{n}")
    date = factory.LazyFunction(lambda: today_utc() + timedelta(days=7))
    start_time = "21:00"
    end_time = "02:00"
    location = "123 Beat Street, Downtown"
    fee = Decimal("350.00")


class InvoiceFactory(factory.django.DjangoModelFactory):
    class Meta:
        model = Invoice

    user = factory.SubFactory(UserFactory)
    client = factory.SubFactory(ClientFactory, user=factory.SelfAttribute("..user"))
    gig = None
    invoice_number = factory.Sequence(lambda n: f"INV-TEST-{n:04d}")
    status = Invoice.Status.DRAFT
    issued_date = factory.LazyFunction(today_utc)
    due_date = factory.LazyFunction(lambda: today_utc() + timedelta(days=14))
    amount = Decimal("500.00")
    items = factory.LazyFunction(list)
