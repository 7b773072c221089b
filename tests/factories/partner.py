"""
Partner test factory.

Generates partner creation payloads for the superadmin API.
"""

import factory
from faker import Faker

fake = Faker()


class PartnerFactory(factory.Factory):
    """
    Factory for generating PartnerCreate payloads.

    Usage:
        payload = PartnerFactory()
        payload = PartnerFactory(partner_code="RIO01", can_edit_pricing=True)
    """

    class Meta:
        model = dict

    partner_code = factory.Sequence(lambda n: f"PTR{n:03d}")
    company_name = factory.LazyFunction(fake.company)
    contact_name = factory.LazyFunction(fake.name)
    contact_email = factory.LazyFunction(lambda: fake.email().lower())
    contact_phone = factory.LazyFunction(lambda: fake.phone_number()[:20])
    display_website = factory.LazyFunction(fake.url)
    is_active = True
    can_create_quotes = True
    can_edit_pricing = False


class InactivePartnerFactory(PartnerFactory):
    is_active = False
